"""The session aggregate: configuration, manual facts, election history and names.

Every mutating method validates before it touches any state, returns a Change
describing what happened, re-checks the session invariant and then notifies
subscribed observers. Everything else is a query recomputed from the current
state.
"""

import dataclasses
import enum
import functools

from shitler_game.config import GameConfiguration
from shitler_game.errors import BadFactIndex, BadPlayerID, LogicalInconsistency, NoResultToRemove
from shitler_game.history import GameHistory
from shitler_game.information import (
    ConfirmedNotHitler,
    FascistInvestigation,
    HardFact,
    LiberalInvestigation,
    PolicyConflict,
    valid_role_assignments,
)
from shitler_game.policy import SecretRole, parse_pattern

from . import filter_engine
from .deck import clear_caches, next_blues_count
from .graph import government_overview, probability_forest_graph
from .role_assignments import clear_cache, generate_role_assignments
from .tree import build_probability_forest


class ChangeKind(enum.Enum):
    CONFIGURATION = "configuration"
    FACTS = "facts"
    HISTORY = "history"
    NAMES = "names"


@dataclasses.dataclass(frozen=True)
class Change:
    kind: ChangeKind
    description: str


def mutation(method):
    """Assert the session invariant after ``method`` and notify observers."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        change = method(self, *args, **kwargs)
        assert self.invariant(), f"{method.__name__} left the session in an invalid state"
        for observer in list(self._observers):
            observer(change)
        return change
    return wrapper


class Session:
    """Everything known about one game at one table."""

    def __init__(self, config=None):
        self.config = config or GameConfiguration()
        self.facts = []
        self.history = GameHistory(self.config)
        self.names = {}
        self._observers = []

    # -------------------------------------------------------------------------
    # Observers and invariant
    # -------------------------------------------------------------------------

    def subscribe(self, callback):
        self._observers.append(callback)

    def unsubscribe(self, callback):
        self._observers.remove(callback)

    def invariant(self):
        return (
            self.config.is_valid()
            and self.history.config is self.config
            and self.history.is_consistent()
            and all(self.player_exists(p) for fact in self.facts for p in fact.players())
            and all(self.player_exists(seat) for seat in self.names)
        )

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    def player_exists(self, seat):
        return isinstance(seat, int) and 1 <= seat <= self.config.table_size

    def format_name(self, seat):
        if seat in self.names:
            return f"{self.names[seat]} ({seat})"
        return str(seat)

    def _check_player(self, seat):
        if not self.player_exists(seat):
            raise BadPlayerID(seat)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @mutation
    def reconfigure(self, config=None, **changes):
        """Switch to another configuration and start a fresh game.

        Either pass a whole GameConfiguration or edit fields of the current one.
        Names of seats that still exist are kept.
        """
        new_config = dataclasses.replace(config or self.config, **changes)
        if new_config != self.config:
            # Populations of the old table are not needed any more
            clear_cache()
            clear_caches()
        self.config = new_config
        self.facts = []
        self.history = GameHistory(new_config)
        self.names = {seat: name for seat, name in self.names.items() if self.player_exists(seat)}
        return Change(ChangeKind.CONFIGURATION, f"Configured a {new_config.table_size}-player table.")

    @mutation
    def reset(self):
        """Forget facts and history, keep configuration and names."""
        self.facts = []
        self.history = GameHistory(self.config)
        return Change(ChangeKind.HISTORY, "Started a new game.")

    @mutation
    def name_player(self, seat, name):
        self._check_player(seat)
        self.names[seat] = name
        return Change(ChangeKind.NAMES, f"Player {seat} is now called {name}.")

    @mutation
    def add_fact(self, fact):
        for seat in fact.players():
            self._check_player(seat)
        if not self.is_consistent([fact]):
            raise LogicalInconsistency()
        self.facts.append(fact)
        return Change(ChangeKind.FACTS, fact.describe(self.format_name))

    def add_hard_fact(self, seat, role):
        if isinstance(role, str):
            role = SecretRole.parse(role)
        return self.add_fact(HardFact(seat, SecretRole(role)))

    def add_conflict(self, left, right):
        return self.add_fact(PolicyConflict(left, right))

    def confirm_not_hitler(self, seat):
        return self.add_fact(ConfirmedNotHitler(seat))

    def add_liberal_investigation(self, investigator, investigatee):
        return self.add_fact(LiberalInvestigation(investigator, investigatee))

    def add_fascist_investigation(self, investigator, investigatee):
        return self.add_fact(FascistInvestigation(investigator, investigatee))

    @mutation
    def remove_fact(self, index):
        """Remove the manual fact at 1-based ``index``."""
        if not isinstance(index, int) or not 1 <= index <= len(self.facts):
            raise BadFactIndex(index)
        fact = self.facts.pop(index - 1)
        return Change(ChangeKind.FACTS, f"Removed: {fact.describe(self.format_name)}")

    def _append_result(self, result):
        trial = GameHistory(self.config, self.history.results + [result])
        facts = self.facts + trial.derive_information()
        if not valid_role_assignments(self.role_population(), facts, False, False).any():
            raise LogicalInconsistency()
        self.history.append(result)

    @mutation
    def add_government(self, president, chancellor, president_claim, chancellor_claim, **action):
        """Log an elected government.

        Args:
            president: Seat of the president
            chancellor: Seat of the chancellor
            president_claim: Three-letter claim, e.g. "rrb"
            chancellor_claim: Two-letter claim, e.g. "rb"
            **action: Presidential action parameters and ``failed_elections``,
                see GameHistory.prepare_government
        """
        result = self.history.prepare_government(
            president, chancellor, president_claim, chancellor_claim, **action
        )
        self._append_result(result)
        description = (
            f"Government #{len(self.history)}: President {self.format_name(president)} "
            f"and Chancellor {self.format_name(chancellor)} passed a {result.policy.name.lower()} policy."
        )
        return Change(ChangeKind.HISTORY, description)

    @mutation
    def add_top_deck(self, policy):
        result = self.history.prepare_top_deck(policy)
        self._append_result(result)
        return Change(
            ChangeKind.HISTORY,
            f"Government #{len(self.history)}: A {result.policy.name.lower()} policy was top-decked.",
        )

    @mutation
    def pop_government(self):
        if not self.history.results:
            raise NoResultToRemove()
        self.history.pop()
        return Change(ChangeKind.HISTORY, f"Removed government #{len(self.history) + 1}.")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def role_population(self):
        return generate_role_assignments(self.config.table_size, self.config.num_regular_fascists)

    def collect_information(self):
        """Manual facts followed by everything derived from the history."""
        return list(self.facts) + self.history.derive_information()

    def is_consistent(self, extra_facts=()):
        """True if the universally deducible rules still admit some assignment."""
        facts = self.collect_information() + list(extra_facts)
        return bool(valid_role_assignments(self.role_population(), facts, False, False).any())

    def filtered_assignments(self, extra_facts=(), allow_aggressive_hitler=False,
                             allow_fascist_fascist_conflict=False):
        return filter_engine.filter_assignments(
            self.role_population(),
            self.collect_information() + list(extra_facts),
            allow_aggressive_hitler,
            allow_fascist_fascist_conflict,
        )

    def histogram(self, extra_facts=(), allow_aggressive_hitler=False,
                  allow_fascist_fascist_conflict=False):
        filtered = self.filtered_assignments(
            extra_facts, allow_aggressive_hitler, allow_fascist_fascist_conflict
        )
        return filter_engine.histogram(filtered)

    def hitler_snipe(self, allow_aggressive_hitler=False, allow_fascist_fascist_conflict=False):
        return filter_engine.hitler_snipe(
            self.histogram((), allow_aggressive_hitler, allow_fascist_fascist_conflict)
        )

    def liberal_percent(self, allow_aggressive_hitler=False, allow_fascist_fascist_conflict=False):
        return filter_engine.liberal_percent(
            self.histogram((), allow_aggressive_hitler, allow_fascist_fascist_conflict)
        )

    def confirmed_liberals(self, extra_facts=()):
        """Seats liberal in every assignment allowed by the universally deducible rules."""
        return filter_engine.confirmed_liberals(self.histogram(extra_facts, True, True))

    def impossible_teams(self, allow_aggressive_hitler=False, allow_fascist_fascist_conflict=False,
                         verbose=False):
        filtered = self.filtered_assignments((), allow_aggressive_hitler, allow_fascist_fascist_conflict)
        return filter_engine.impossible_fascist_teams(
            filtered, self.config.num_regular_fascists + 1, verbose=verbose
        )

    def next_draw_probability(self, pattern):
        """Chance that the next cards of the current shuffle match a claim pattern.

        The undrawn part of the shuffle is taken from the claims made so far.
        """
        shuffle = self.history.current_shuffle()
        num_liberal, num_fascist = shuffle.leftover_liberal, shuffle.leftover_fascist
        blues, length, _ = parse_pattern(pattern, num_liberal + num_fascist, 0)
        return next_blues_count(num_liberal, num_fascist, length, blues)

    def probability_forest(self, verbose=False):
        return build_probability_forest(self, verbose=verbose)

    def government_graph(self):
        return government_overview(self)

    def probability_graph(self, verbose=False):
        return probability_forest_graph(self.probability_forest(verbose=verbose), self)
