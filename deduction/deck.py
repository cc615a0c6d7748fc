"""Deck populations and the card counters built on them.

A deck population holds every distinct ordering of a shuffle's policies as one
row of an int8 matrix (0 = fascist, 1 = liberal), so the number of liberals in
any window of every deck is a single slice-and-sum.
"""

import dataclasses
import math
from itertools import combinations

import numpy as np

from shitler_game.elections import ElectedGovernment
from shitler_game.errors import TooLongPatternError
from shitler_game.policy import Policy, claim_pattern_from_blues, parse_pattern


_DECK_CACHE = {}
_HARD_FACT_CACHE = {}
_NEXT_BLUES_CACHE = {}


@dataclasses.dataclass(frozen=True)
class FilterResult:
    """Exact, unreduced fraction of matching out of checked candidates."""

    num_matching: int
    num_checked: int

    @classmethod
    def none(cls, out_of):
        return cls(0, out_of)

    def probability(self):
        if self.num_checked == 0:
            return math.nan
        return self.num_matching / self.num_checked

    def __str__(self):
        return f"{self.probability() * 100:.1f}% ({self.num_matching}/{self.num_checked})"


def generate_deck_population(num_liberal, num_fascist):
    """All C(n, num_liberal) decks of ``num_liberal + num_fascist`` cards.

    Returns read-only array of shape (C(n, num_liberal), n)
    """
    key = (num_liberal, num_fascist)
    if key in _DECK_CACHE:
        return _DECK_CACHE[key]

    num_cards = num_liberal + num_fascist
    liberal_positions = np.array(list(combinations(range(num_cards), num_liberal)), dtype=np.intp)
    population = np.full((len(liberal_positions), num_cards), Policy.FASCIST, dtype=np.int8)
    rows = np.arange(len(liberal_positions))[:, None]
    population[rows, liberal_positions] = Policy.LIBERAL

    population.setflags(write=False)
    _DECK_CACHE[key] = population
    return population


def count_window(deck, offset, window_size, policy):
    """Occurrences of ``policy`` in ``deck[offset:offset + window_size]``.

    ``deck`` may be a single deck or a whole population, counts are taken
    along the last axis.
    """
    window = np.asarray(deck, dtype=np.int8)[..., offset:offset + window_size]
    blues = window.sum(axis=-1)
    if policy == Policy.LIBERAL:
        return blues
    return window.shape[-1] - blues


def window_histogram(num_liberal, num_fascist, window_size):
    """Distribution of liberals among the first ``window_size`` cards.

    Returns dict mapping liberal count -> FilterResult over the whole population
    """
    num_cards = num_liberal + num_fascist
    if window_size > num_cards:
        raise TooLongPatternError(num_cards, window_size)

    population = generate_deck_population(num_liberal, num_fascist)
    blues = count_window(population, 0, window_size, Policy.LIBERAL)
    values, counts = np.unique(blues, return_counts=True)
    return {
        int(value): FilterResult(int(count), len(population))
        for value, count in zip(values, counts)
    }


def format_window_histogram(histogram, window_size):
    lines = []
    for blues, result in sorted(histogram.items()):
        lines.append(f"{claim_pattern_from_blues(blues, window_size)}: {result}")
    return "\n".join(lines)


def next_blues_count(num_liberal, num_fascist, window_size, desired_blues,
                     guaranteed_blues=0, guaranteed_reds=0):
    """Chance that the next ``window_size`` cards hold exactly ``desired_blues`` liberals.

    Only decks whose window holds at least ``guaranteed_blues`` liberals and
    ``guaranteed_reds`` fascists are considered.
    """
    key = (num_liberal, num_fascist, window_size, desired_blues, guaranteed_blues, guaranteed_reds)
    if key in _NEXT_BLUES_CACHE:
        return _NEXT_BLUES_CACHE[key]

    num_cards = num_liberal + num_fascist
    if window_size > num_cards:
        raise TooLongPatternError(num_cards, window_size)

    population = generate_deck_population(num_liberal, num_fascist)
    blues = count_window(population, 0, window_size, Policy.LIBERAL)
    reds = window_size - blues
    candidates = (blues >= guaranteed_blues) & (reds >= guaranteed_reds)

    result = FilterResult(
        num_matching=int(np.count_nonzero(candidates & (blues == desired_blues))),
        num_checked=int(np.count_nonzero(candidates)),
    )
    _NEXT_BLUES_CACHE[key] = result
    return result


def next_pattern_probability(num_liberal, num_fascist, pattern):
    """Chance that a claim pattern such as "rrb" matches the next cards of a fresh deck."""
    num_pattern_liberal, length, _ = parse_pattern(pattern, num_liberal + num_fascist, 0)
    return next_blues_count(num_liberal, num_fascist, length, num_pattern_liberal)


# =============================================================================
# Complex card counter
# =============================================================================

def _windows(population, election_results):
    """Yield (result, blues, reds) for the consecutive draw windows of a shuffle."""
    num_cards = population.shape[1]
    offset = 0
    for result in election_results:
        drawn = result.cards_drawn_discarded()[0]
        if offset + drawn > num_cards:
            raise TooLongPatternError(num_cards, offset + drawn)
        blues = population[:, offset:offset + drawn].sum(axis=1)
        yield result, blues, drawn - blues
        offset += drawn


def _honest_liberals(result, blues, reds, liberals):
    """Mask of decks where the liberals of this government told the truth."""
    mask = np.ones(len(blues), dtype=bool)
    if not isinstance(result, ElectedGovernment):
        return mask
    if result.president in liberals:
        # seen_blues accounts for a burned peek card
        mask &= blues == result.seen_blues()
    if result.chancellor in liberals:
        mask &= blues >= result.chancellor_claimed_blues
        mask &= reds >= 2 - result.chancellor_claimed_blues
    return mask


def _hard_facted_population(num_liberal, num_fascist, hard_facts, hard_confirmed_libs):
    key = (num_liberal, num_fascist, hard_facts, hard_confirmed_libs)
    if key in _HARD_FACT_CACHE:
        return _HARD_FACT_CACHE[key]

    population = generate_deck_population(num_liberal, num_fascist)
    mask = np.ones(len(population), dtype=bool)
    for result, blues, reds in _windows(population, hard_facts):
        passed = result.passed_blues()
        # The enacted policy was in the window
        mask &= (blues >= passed) & (reds >= 1 - passed)
        mask &= _honest_liberals(result, blues, reds, hard_confirmed_libs)

    filtered = population[mask]
    filtered.setflags(write=False)
    _HARD_FACT_CACHE[key] = filtered
    return filtered


def complex_card_counter(total_lib, total_fasc, hard_facts, hypotheses, legal_follow_on_sets,
                         hard_confirmed_libs, path_assumed_libs, new_hypothesis):
    """Count decks of a shuffle that agree with a hypothesised draw.

    Args:
        total_lib: Liberal policies in the shuffle
        total_fasc: Fascist policies in the shuffle
        hard_facts: Logged election results of the shuffle, in draw order
        hypotheses: Hypothesised results for a prefix of the shuffle, matched exactly
        legal_follow_on_sets: Per hard fact index, the set of liberal counts its
            window may hold, or None for no restriction
        hard_confirmed_libs: Seats known to be liberal under the session facts
        path_assumed_libs: Seats liberal in every assignment left on the current path
        new_hypothesis: Result whose window follows the hypotheses

    Returns:
        FilterResult of decks matching ``new_hypothesis`` out of those left
        after the hard facts and hypotheses
    """
    population = _hard_facted_population(
        total_lib, total_fasc, tuple(hard_facts), frozenset(hard_confirmed_libs)
    )

    mask = np.ones(len(population), dtype=bool)
    path_assumed_libs = frozenset(path_assumed_libs)
    for idx, (result, blues, reds) in enumerate(_windows(population, hard_facts)):
        if idx < len(legal_follow_on_sets) and legal_follow_on_sets[idx] is not None:
            mask &= np.isin(blues, sorted(legal_follow_on_sets[idx]))
        mask &= _honest_liberals(result, blues, reds, path_assumed_libs)

    target_offset = 0
    for result, blues, _ in _windows(population, hypotheses):
        mask &= blues == result.seen_blues()
        target_offset += result.cards_drawn_discarded()[0]

    surviving = population[mask]
    window_size = new_hypothesis.cards_drawn_discarded()[0]
    if target_offset + window_size > population.shape[1]:
        raise TooLongPatternError(population.shape[1], target_offset + window_size)

    blues = count_window(surviving, target_offset, window_size, Policy.LIBERAL)
    return FilterResult(
        num_matching=int(np.count_nonzero(blues == new_hypothesis.seen_blues())),
        num_checked=len(surviving),
    )


def clear_caches():
    _DECK_CACHE.clear()
    _HARD_FACT_CACHE.clear()
    _NEXT_BLUES_CACHE.clear()
