"""Tests for the fact types and the vectorised deduction rules."""

import numpy as np
import pytest

from shitler_game.errors import BadPlayerID
from shitler_game.information import (
    AtLeastOneFascist,
    ConfirmedNotHitler,
    FascistInvestigation,
    HardFact,
    LiberalInvestigation,
    PolicyConflict,
    valid_role_assignments,
)
from shitler_game.policy import SecretRole

# Seat 1 Hitler, seat 3 fascist, everybody else liberal
HITLER_FIRST = np.array([[2, 0, 1, 0, 0]], dtype=np.int8)
# Seat 1 fascist, seat 2 Hitler
FASCISTS_FIRST = np.array([[1, 2, 0, 0, 0]], dtype=np.int8)


def _valid(assignments, facts, strict=False):
    return valid_role_assignments(assignments, facts, strict, strict)


def test_conflict_needs_a_fascist():
    liberals = np.array([[0, 0, 1, 2, 0]], dtype=np.int8)
    assert not _valid(liberals, [PolicyConflict(1, 2)])[0]
    assert _valid(HITLER_FIRST, [PolicyConflict(1, 2)])[0]


def test_hitler_stays_out_of_conflicts_under_strict_rules():
    assert not _valid(HITLER_FIRST, [PolicyConflict(1, 2)], strict=True)[0]
    assert not valid_role_assignments(HITLER_FIRST, [PolicyConflict(1, 2)], True, False)[0]
    assert valid_role_assignments(HITLER_FIRST, [PolicyConflict(1, 2)], False, True)[0]


def test_fascists_do_not_fight_each_other_under_strict_rules():
    conflict = [PolicyConflict(1, 3)]
    fascist_pair = np.array([[1, 0, 1, 2, 0]], dtype=np.int8)
    assert _valid(fascist_pair, conflict)[0]
    assert not valid_role_assignments(fascist_pair, conflict, False, True)[0]


def test_liberal_investigation():
    fact = [LiberalInvestigation(investigator=2, investigatee=3)]
    # Liberal seat 2 truthfully reporting a fascist as liberal is impossible
    assert not _valid(HITLER_FIRST, fact)[0]
    # A fascist covering for a fascist is fine
    assert _valid(np.array([[0, 1, 2, 0, 0]], dtype=np.int8), fact)[0]


def test_fascist_investigation():
    fact = [FascistInvestigation(investigator=2, investigatee=4)]
    assert not _valid(HITLER_FIRST, fact)[0]
    assert _valid(FASCISTS_FIRST, fact)[0]
    # Hitler never accuses anybody under strict rules
    assert not valid_role_assignments(FASCISTS_FIRST, fact, True, False)[0]


def test_hard_facts_and_confirmations():
    assert _valid(HITLER_FIRST, [HardFact(1, SecretRole.HITLER)])[0]
    assert not _valid(HITLER_FIRST, [ConfirmedNotHitler(1)])[0]
    assert _valid(HITLER_FIRST, [AtLeastOneFascist([2, 3])])[0]
    assert not _valid(HITLER_FIRST, [AtLeastOneFascist([2, 4, 5])])[0]


def test_rules_work_on_whole_populations():
    population = np.vstack([HITLER_FIRST, FASCISTS_FIRST])
    mask = _valid(population, [ConfirmedNotHitler(1)])
    assert mask.tolist() == [False, True]
    assert _valid(population, []).all()


def test_unknown_seat_is_an_error():
    with pytest.raises(BadPlayerID):
        _valid(HITLER_FIRST, [ConfirmedNotHitler(6)])
    with pytest.raises(BadPlayerID):
        _valid(HITLER_FIRST, [PolicyConflict(0, 1)])


def test_facts_are_hashable_values():
    assert AtLeastOneFascist([1, 2]) == AtLeastOneFascist((1, 2))
    assert len({PolicyConflict(1, 2), PolicyConflict(1, 2)}) == 1
    assert HardFact(3, SecretRole.HITLER).describe() == "Player 3 is known to be Hitler."
    assert PolicyConflict(1, 2).players() == (1, 2)
