"""Tests for role filtering and the seat queries."""

import pytest

from deduction.filter_engine import (
    confirmed_liberals,
    filter_assignments,
    hitler_snipe,
    histogram,
    impossible_fascist_teams,
    liberal_percent,
)
from deduction.role_assignments import generate_role_assignments
from shitler_game.errors import LogicalInconsistency
from shitler_game.information import ConfirmedNotHitler, HardFact, PolicyConflict
from shitler_game.policy import SecretRole

POPULATION = generate_role_assignments(5, 1)


def _loose(facts):
    return filter_assignments(POPULATION, facts, True, True)


def test_empty_facts_keep_everything():
    assert len(_loose([])) == 20
    assert len(filter_assignments(POPULATION, [])) == 20


def test_hard_fact_hitler():
    filtered = _loose([HardFact(3, SecretRole.HITLER)])
    assert len(filtered) == 4
    assert (filtered[:, 2] == SecretRole.HITLER).all()


def test_hitler_conflict_filtered_by_default():
    facts = [PolicyConflict(1, 2), HardFact(1, SecretRole.HITLER), HardFact(2, SecretRole.LIBERAL)]
    assert len(_loose(facts)) > 0
    with pytest.raises(LogicalInconsistency):
        filter_assignments(POPULATION, facts)


def test_contradiction_raises():
    with pytest.raises(LogicalInconsistency):
        _loose([HardFact(1, SecretRole.LIBERAL), HardFact(1, SecretRole.HITLER)])


def test_duplicate_facts_are_harmless():
    once = _loose([PolicyConflict(1, 2)])
    twice = _loose([PolicyConflict(1, 2), PolicyConflict(1, 2)])
    assert len(once) == len(twice)


def test_histogram_conservation():
    filtered = _loose([PolicyConflict(1, 2)])
    role_histogram = histogram(filtered)
    assert sorted(role_histogram) == [1, 2, 3, 4, 5]
    for roles in role_histogram.values():
        assert set(roles) == set(SecretRole)
        assert sum(r.num_matching for r in roles.values()) == len(filtered)
        assert all(r.num_checked == len(filtered) for r in roles.values())


def test_hitler_snipe_orders_by_probability_then_seat():
    ranking = hitler_snipe(histogram(_loose([ConfirmedNotHitler(1)])))
    assert [seat for seat, _ in ranking] == [2, 3, 4, 5, 1]
    assert ranking[0][1].probability() == 0.25
    assert ranking[-1][1].num_matching == 0


def test_liberal_percent_and_confirmed_liberals():
    role_histogram = histogram(_loose([HardFact(2, SecretRole.LIBERAL)]))
    percentages = liberal_percent(role_histogram)
    assert [seat for seat, _ in percentages] == [1, 2, 3, 4, 5]
    assert percentages[1][1].probability() == 1.0
    assert confirmed_liberals(role_histogram) == [2]


def test_impossible_single_seat():
    filtered = _loose([HardFact(1, SecretRole.LIBERAL)])
    assert impossible_fascist_teams(filtered, 2) == [(1,)]


def test_impossible_teams_from_strict_conflict():
    filtered = filter_assignments(POPULATION, [PolicyConflict(2, 3)])
    assert impossible_fascist_teams(filtered, 2) == [(1, 4), (1, 5), (2, 3), (4, 5)]
