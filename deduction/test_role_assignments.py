"""Tests for role assignment enumeration."""

from math import comb

import numpy as np

from deduction.role_assignments import clear_cache, generate_role_assignments
from shitler_game.policy import SecretRole


def test_population_sizes():
    for table_size, num_regular_fascists in [(5, 1), (6, 1), (7, 2), (8, 2), (9, 3), (10, 3)]:
        population = generate_role_assignments(table_size, num_regular_fascists)
        assert population.shape == (comb(table_size - 1, num_regular_fascists) * table_size, table_size)


def test_every_assignment_is_well_formed():
    population = generate_role_assignments(7, 2)
    assert ((population == SecretRole.HITLER).sum(axis=1) == 1).all()
    assert ((population == SecretRole.REGULAR_FASCIST).sum(axis=1) == 2).all()
    assert len(np.unique(population, axis=0)) == len(population)


def test_population_is_cached_and_read_only():
    population = generate_role_assignments(5, 1)
    assert generate_role_assignments(5, 1) is population
    assert not population.flags.writeable



def test_enumeration_order():
    population = generate_role_assignments(5, 1)
    # Fascist slot 0 with Hitler in seat 1 shifts the fascist to seat 2
    assert population[0].tolist() == [2, 1, 0, 0, 0]
    assert population[1].tolist() == [1, 2, 0, 0, 0]
    assert population[4].tolist() == [1, 0, 0, 0, 2]


def test_clear_cache():
    population = generate_role_assignments(6, 1)
    clear_cache()
    fresh = generate_role_assignments(6, 1)
    assert fresh is not population
    assert (fresh == population).all()
