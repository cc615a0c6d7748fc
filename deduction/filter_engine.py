"""Filtering role assignments against facts, and the queries built on the result."""

from itertools import combinations

import numpy as np
from tqdm import tqdm

from shitler_game.errors import LogicalInconsistency
from shitler_game.information import valid_role_assignments
from shitler_game.policy import SecretRole

from .deck import FilterResult


def filter_assignments(population, facts, allow_aggressive_hitler=False,
                       allow_fascist_fascist_conflict=False):
    """Keep the assignments consistent with every fact.

    With both switches on only the universally deducible rules apply. Turning
    a switch off additionally assumes Hitler never fights (``allow_aggressive_hitler``)
    or that fascists never fight each other (``allow_fascist_fascist_conflict``).

    Raises:
        LogicalInconsistency: No assignment survives
    """
    mask = valid_role_assignments(
        population, facts,
        not allow_aggressive_hitler,
        not allow_fascist_fascist_conflict,
    )
    if not mask.any():
        raise LogicalInconsistency()
    return population[mask]


def histogram(filtered):
    """Per seat, per role, how many surviving assignments give that seat that role.

    Returns:
        Dict seat -> {SecretRole: FilterResult}, every role present
    """
    total = len(filtered)
    result = {}
    for seat in range(1, filtered.shape[1] + 1):
        counts = np.bincount(filtered[:, seat - 1], minlength=len(SecretRole))
        result[seat] = {role: FilterResult(int(counts[role]), total) for role in SecretRole}
    return result


def hitler_snipe(role_histogram):
    """Seats ordered by descending chance of being Hitler, ties by seat."""
    ranked = sorted(
        role_histogram.items(),
        key=lambda item: (-item[1][SecretRole.HITLER].probability(), item[0]),
    )
    return [(seat, roles[SecretRole.HITLER]) for seat, roles in ranked]


def liberal_percent(role_histogram):
    return [(seat, role_histogram[seat][SecretRole.LIBERAL]) for seat in sorted(role_histogram)]


def confirmed_liberals(role_histogram):
    """Seats that are liberal in every surviving assignment."""
    confirmed = []
    for seat, roles in sorted(role_histogram.items()):
        liberal = roles[SecretRole.LIBERAL]
        if liberal.num_matching == liberal.num_checked:
            confirmed.append(seat)
    return confirmed


def impossible_fascist_teams(filtered, num_fascists, verbose=False):
    """Minimal groups of seats that cannot all be fascist at once.

    Team sizes are tried in increasing order and supersets of teams already
    found impossible are skipped.

    Args:
        filtered: Surviving role assignments
        num_fascists: Fascists at the table, Hitler included
        verbose: Show a progress bar per team size

    Returns:
        List of seat tuples, smallest teams first
    """
    is_fascist = filtered != SecretRole.LIBERAL
    seats = range(1, filtered.shape[1] + 1)
    impossible = []

    for size in tqdm(range(1, num_fascists + 1), desc="Team sizes", disable=not verbose, ncols=80):
        for team in combinations(seats, size):
            if any(set(found) <= set(team) for found in impossible):
                continue
            columns = [seat - 1 for seat in team]
            if not is_fascist[:, columns].all(axis=1).any():
                impossible.append(team)

    if verbose:
        print(f"Found {len(impossible)} impossible fascist teams")
    return impossible
