"""Role assignment enumeration for Secret Hitler tables of any size."""

from itertools import combinations

import numpy as np

from shitler_game.policy import SecretRole


_ASSIGNMENT_CACHE = {}


def generate_role_assignments(table_size, num_regular_fascists):
    """Enumerate every role assignment for a table.

    For each choice of regular fascist slots among ``table_size - 1`` positions
    and each Hitler seat, slots at or after the Hitler seat shift by one.

    Returns read-only array of shape (C(table_size - 1, num_regular_fascists) * table_size,
    table_size) with values 0 = liberal, 1 = fascist, 2 = hitler
    """
    key = (table_size, num_regular_fascists)
    if key in _ASSIGNMENT_CACHE:
        return _ASSIGNMENT_CACHE[key]

    assignments = []
    for slots in combinations(range(table_size - 1), num_regular_fascists):
        for hitler_idx in range(table_size):
            assignment = np.zeros(table_size, dtype=np.int8)
            for slot in slots:
                assignment[slot + 1 if slot >= hitler_idx else slot] = SecretRole.REGULAR_FASCIST
            assignment[hitler_idx] = SecretRole.HITLER
            assignments.append(assignment)

    population = np.array(assignments, dtype=np.int8).reshape(-1, table_size)
    population.setflags(write=False)
    _ASSIGNMENT_CACHE[key] = population
    return population


def clear_cache():
    _ASSIGNMENT_CACHE.clear()

