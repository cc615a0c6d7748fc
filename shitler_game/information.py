"""Facts about the secret roles and the rules that test assignments against them.

Every rule works on a whole matrix of role assignments at once (one row per
assignment, column ``i`` holding the role code of seat ``i + 1``) and returns a
boolean mask with one entry per row.
"""

import dataclasses

import numpy as np

from .errors import BadPlayerID
from .policy import SecretRole


@dataclasses.dataclass(frozen=True)
class Information:
    """Base class for all facts. Facts are immutable and never edited in place."""

    def players(self):
        raise NotImplementedError

    def describe(self, format_name=str):
        """Human-readable description for display."""
        raise NotImplementedError


@dataclasses.dataclass(frozen=True)
class ConfirmedNotHitler(Information):
    player: int

    def players(self):
        return (self.player,)

    def describe(self, format_name=str):
        return f"Player {format_name(self.player)} is confirmed to not be Hitler."


@dataclasses.dataclass(frozen=True)
class PolicyConflict(Information):
    left: int
    right: int

    def players(self):
        return (self.left, self.right)

    def describe(self, format_name=str):
        return (
            f"Player {format_name(self.left)} is in a policy-based conflict "
            f"with player {format_name(self.right)}."
        )


@dataclasses.dataclass(frozen=True)
class LiberalInvestigation(Information):
    investigator: int
    investigatee: int

    def players(self):
        return (self.investigator, self.investigatee)

    def describe(self, format_name=str):
        return (
            f"Player {format_name(self.investigator)} investigated player "
            f"{format_name(self.investigatee)} and claimed to have found a liberal."
        )


@dataclasses.dataclass(frozen=True)
class FascistInvestigation(Information):
    investigator: int
    investigatee: int

    def players(self):
        return (self.investigator, self.investigatee)

    def describe(self, format_name=str):
        return (
            f"Player {format_name(self.investigator)} investigated player "
            f"{format_name(self.investigatee)} and claimed to have found a fascist."
        )


@dataclasses.dataclass(frozen=True)
class HardFact(Information):
    player: int
    role: SecretRole

    def players(self):
        return (self.player,)

    def describe(self, format_name=str):
        return f"Player {format_name(self.player)} is known to be {self.role!s}."


@dataclasses.dataclass(frozen=True)
class AtLeastOneFascist(Information):
    suspects: tuple

    def __post_init__(self):
        # Accept any iterable but store a tuple so the fact stays hashable
        object.__setattr__(self, "suspects", tuple(self.suspects))

    def players(self):
        return self.suspects

    def describe(self, format_name=str):
        names = ", ".join(f"Player {format_name(p)}" for p in self.suspects)
        return f"At least one of {names} is a confirmed fascist."


# =============================================================================
# Deduction rules
# =============================================================================

def _column(assignments, player):
    """Role codes of ``player`` across all assignments."""
    if not isinstance(player, (int, np.integer)) or not 1 <= player <= assignments.shape[1]:
        raise BadPlayerID(player)
    return assignments[:, player - 1]


def _fascist(assignments, player):
    return _column(assignments, player) != SecretRole.LIBERAL


def _hitler(assignments, player):
    return _column(assignments, player) == SecretRole.HITLER


def universally_deducible(assignments, information):
    """Mask of assignments compatible with the fact under any honesty assumption."""
    if isinstance(information, ConfirmedNotHitler):
        return ~_hitler(assignments, information.player)

    if isinstance(information, PolicyConflict):
        return _fascist(assignments, information.left) | _fascist(assignments, information.right)

    if isinstance(information, LiberalInvestigation):
        # A fascist investigator may cover for a fascist investigatee
        investigatee_liberal = _column(assignments, information.investigatee) == SecretRole.LIBERAL
        both_fascist = (
            _fascist(assignments, information.investigator)
            & _fascist(assignments, information.investigatee)
        )
        return investigatee_liberal | both_fascist

    if isinstance(information, FascistInvestigation):
        return (
            _fascist(assignments, information.investigator)
            | _fascist(assignments, information.investigatee)
        )

    if isinstance(information, HardFact):
        return _column(assignments, information.player) == information.role

    if isinstance(information, AtLeastOneFascist):
        mask = np.zeros(assignments.shape[0], dtype=bool)
        for player in information.suspects:
            mask |= _fascist(assignments, player)
        return mask

    raise TypeError(f"Unknown information type {type(information).__name__}")


def no_aggressive_hitler(assignments, information):
    """Mask excluding assignments where Hitler starts a conflict or accuses someone."""
    if isinstance(information, PolicyConflict):
        return ~_hitler(assignments, information.left) & ~_hitler(assignments, information.right)

    if isinstance(information, FascistInvestigation):
        return ~_hitler(assignments, information.investigator)

    return np.ones(assignments.shape[0], dtype=bool)


def no_fascist_fascist_conflict(assignments, information):
    """Mask excluding assignments where two fascists fight each other."""
    if isinstance(information, PolicyConflict):
        return _fascist(assignments, information.left) != _fascist(assignments, information.right)

    if isinstance(information, FascistInvestigation):
        return (
            _fascist(assignments, information.investigator)
            != _fascist(assignments, information.investigatee)
        )

    return np.ones(assignments.shape[0], dtype=bool)


def valid_role_assignments(assignments, information, no_aggressive_hitler_rule, no_fascist_fascist_conflict_rule):
    """Mask of assignments consistent with every fact.

    Args:
        assignments: (num_assignments, table_size) matrix of role codes,
            a single assignment row is accepted too
        information: Iterable of Information facts
        no_aggressive_hitler_rule: Also apply ``no_aggressive_hitler``
        no_fascist_fascist_conflict_rule: Also apply ``no_fascist_fascist_conflict``

    Returns:
        Boolean array with one entry per assignment
    """
    assignments = np.atleast_2d(assignments)
    mask = np.ones(assignments.shape[0], dtype=bool)
    for info in information:
        mask &= universally_deducible(assignments, info)
        if no_aggressive_hitler_rule:
            mask &= no_aggressive_hitler(assignments, info)
        if no_fascist_fascist_conflict_rule:
            mask &= no_fascist_fascist_conflict(assignments, info)
    return mask
