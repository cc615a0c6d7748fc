"""Election history of a game and everything derived from it.

The history is an append-only log of election results. All derived state
(card contexts, board counts, dead players, presidential rotation, term
limits, deduced facts, shuffle boundaries) is recomputed from the log on every
call rather than patched incrementally.
"""

import dataclasses

from .actions import (
    ActionKind,
    Investigation,
    Kill,
    PeekAndBurn,
    RevealParty,
    SpecialElection,
    TopDeckPeek,
    build_action,
)
from .elections import RESHUFFLE_THRESHOLD, CardContext, ElectedGovernment, TopDeck
from .errors import BadPlayerID, EligibilityError
from .information import (
    AtLeastOneFascist,
    ConfirmedNotHitler,
    FascistInvestigation,
    LiberalInvestigation,
    PolicyConflict,
)
from .policy import Policy, parse_pattern


LIBERAL_POLICIES_TO_WIN = 5
FASCIST_POLICIES_TO_WIN = 6
# Term limits on the last president are lifted at this many living players
SMALL_TABLE = 5
MAX_FAILED_ELECTIONS = 2


@dataclasses.dataclass
class Timeline:
    """Game state after replaying a prefix of the election log."""

    table_size: int
    deck_context: CardContext
    liberal_policies: int
    fascist_policies: int
    dead: set = dataclasses.field(default_factory=set)
    last_regular_president: int = None
    special_election: int = None
    last_government: ElectedGovernment = None

    def alive(self):
        return [p for p in range(1, self.table_size + 1) if p not in self.dead]

    def is_alive(self, player):
        return player not in self.dead

    def winner(self):
        if self.liberal_policies >= LIBERAL_POLICIES_TO_WIN:
            return "liberals"
        if self.fascist_policies >= FASCIST_POLICIES_TO_WIN:
            return "fascists"
        return None

    def next_alive_after(self, seat):
        for step in range(1, self.table_size + 1):
            candidate = (seat - 1 + step) % self.table_size + 1
            if candidate not in self.dead:
                return candidate
        return None

    def skip_presidencies(self, count):
        """Consume ``count`` presidencies that did not lead to a government."""
        for _ in range(count):
            if self.special_election is not None:
                self.special_election = None
            elif self.last_regular_president is not None:
                self.last_regular_president = self.next_alive_after(self.last_regular_president)

    def expected_president(self):
        """Seat due for the presidency, or None while the rotation is unknown."""
        if self.special_election is not None:
            return self.special_election
        if self.last_regular_president is None:
            return None
        return self.next_alive_after(self.last_regular_president)

    def apply(self, result):
        """Advance this timeline by one election result."""
        drawn, discarded = result.cards_drawn_discarded()

        if isinstance(result, TopDeck):
            # Three failed elections precede every top-deck
            self.skip_presidencies(3)
            self.last_government = None
        else:
            self.skip_presidencies(result.failed_elections)
            if self.special_election is not None and result.president == self.special_election:
                self.special_election = None
            else:
                self.last_regular_president = result.president

            action = result.presidential_action
            if isinstance(action, Kill):
                self.dead.add(action.player)
            elif isinstance(action, SpecialElection):
                self.special_election = action.player
            self.last_government = result

        if result.policy == Policy.LIBERAL:
            self.liberal_policies += 1
        else:
            self.fascist_policies += 1

        self.deck_context = result.deck_context.atomic_draw(drawn, discarded)


@dataclasses.dataclass(frozen=True)
class ShuffleAnalysis:
    """Election results drawn from one deck between two reshuffles.

    The leftover counts assume every claim in the shuffle was truthful.
    """

    shuffle_index: int
    initial_deck_liberal: int
    initial_deck_fascist: int
    election_results: tuple
    leftover_liberal: int
    leftover_fascist: int

    def cards_drawn(self):
        return sum(er.cards_drawn_discarded()[0] for er in self.election_results)

    def claimed_blues(self):
        return sum(er.seen_blues() for er in self.election_results)

    def presidents(self):
        seen = []
        for er in self.election_results:
            if isinstance(er, ElectedGovernment) and er.president not in seen:
                seen.append(er.president)
        return seen


class GameHistory:
    """Append-only election log for one configured table."""

    def __init__(self, config, results=()):
        self.config = config
        self.results = list(results)

    def __len__(self):
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def initial_timeline(self):
        return Timeline(
            table_size=self.config.table_size,
            deck_context=CardContext(self.config.initial_deck_size, 0, 0),
            liberal_policies=self.config.initial_placed_liberal_policies,
            fascist_policies=self.config.initial_placed_fascist_policies,
        )

    def timeline(self, upto=None):
        """Replay the first ``upto`` results (all of them by default)."""
        timeline = self.initial_timeline()
        for result in self.results[:upto]:
            timeline.apply(result)
        return timeline

    def alive_players(self):
        return self.timeline().alive()

    def winner(self):
        """Winning side once a policy track is full, else None."""
        return self.timeline().winner()

    def game_over(self):
        return self.winner() is not None

    def is_consistent(self):
        """True if every stored card context matches a replay of the log."""
        timeline = self.initial_timeline()
        for result in self.results:
            if result.deck_context != timeline.deck_context:
                return False
            timeline.apply(result)
        return True

    # -------------------------------------------------------------------------
    # Validation and construction of new results
    # -------------------------------------------------------------------------

    def _check_player(self, player):
        if not isinstance(player, int) or not 1 <= player <= self.config.table_size:
            raise BadPlayerID(player)

    def _check_not_over(self, timeline):
        winner = timeline.winner()
        if winner is not None:
            raise EligibilityError(f"The game is already over, the {winner} won.")

    def eligible_presidents(self, failed_elections=0, timeline=None):
        """Seats that may hold the next presidency."""
        timeline = timeline or self.timeline()
        timeline = dataclasses.replace(timeline, dead=set(timeline.dead))
        timeline.skip_presidencies(failed_elections)
        expected = timeline.expected_president()
        if expected is None:
            return timeline.alive()
        return [expected]

    def eligible_chancellors(self, president, timeline=None):
        """Seats that ``president`` may nominate as chancellor."""
        timeline = timeline or self.timeline()
        alive = timeline.alive()
        last = timeline.last_government
        nominees = []
        for seat in alive:
            if seat == president:
                continue
            if last is not None:
                if seat == last.chancellor:
                    continue
                if len(alive) > SMALL_TABLE and seat == last.president:
                    continue
            nominees.append(seat)
        return nominees

    def prepare_top_deck(self, policy):
        """Build (but do not append) the top-deck result for the next draw."""
        if isinstance(policy, str):
            policy = Policy.parse(policy)
        timeline = self.timeline()
        self._check_not_over(timeline)
        return TopDeck(Policy(policy), timeline.deck_context)

    def prepare_government(
        self,
        president,
        chancellor,
        president_claim,
        chancellor_claim,
        target=None,
        claim=None,
        peek=None,
        discarded=None,
        failed_elections=0,
    ):
        """Validate and build (but do not append) the next elected government.

        Args:
            president: Seat of the president
            chancellor: Seat of the chancellor
            president_claim: Three-letter claim pattern, e.g. "rrb"
            chancellor_claim: Two-letter claim pattern, e.g. "rb"
            target: Seat targeted by the presidential action, if any
            claim: Claimed policy of an investigation, reveal or peek and burn
            peek: Three-letter claim of a top deck peek
            discarded: Whether a peek and burn discarded the card
            failed_elections: Failed elections since the previous result (0-2)

        Returns:
            ElectedGovernment ready to append
        """
        self._check_player(president)
        self._check_player(chancellor)
        president_blues = parse_pattern(president_claim, 3, 3)[0]
        chancellor_blues = parse_pattern(chancellor_claim, 2, 2)[0]

        timeline = self.timeline()
        self._check_not_over(timeline)

        if not 0 <= failed_elections <= MAX_FAILED_ELECTIONS:
            raise EligibilityError(
                f"Between 0 and {MAX_FAILED_ELECTIONS} failed elections can precede a government, "
                f"got {failed_elections}."
            )
        for seat, office in ((president, "President"), (chancellor, "Chancellor")):
            if not timeline.is_alive(seat):
                raise EligibilityError(f"{office} {seat} is dead.")
        if president == chancellor:
            raise EligibilityError("The president cannot be their own chancellor.")

        presidents = self.eligible_presidents(failed_elections, timeline)
        if president not in presidents:
            raise EligibilityError(
                f"Player {president} is not due for the presidency, expected one of {presidents}."
            )
        if chancellor not in self.eligible_chancellors(president, timeline):
            raise EligibilityError(f"Player {chancellor} is term-limited and cannot be chancellor.")

        conflict = president_blues > 0 and chancellor_blues == 0
        if (conflict and president_blues > 0) or president_blues == 0:
            policy_passed = Policy.FASCIST
        else:
            policy_passed = Policy.LIBERAL

        kind = ActionKind.NO_ACTION
        if policy_passed == Policy.FASCIST:
            # A full board means this policy ends the game
            kind = self.config.board_action(timeline.fascist_policies) or ActionKind.NO_ACTION

        if isinstance(claim, str):
            claim = Policy.parse(claim)
        if isinstance(peek, str):
            peek = parse_pattern(peek, 3, 3)[2]

        action = build_action(
            kind,
            target=target,
            claim=claim,
            peek=peek,
            discarded=discarded,
            deck_context=timeline.deck_context.atomic_draw(3, 2),
        )
        action_target = action.target()
        if action_target is not None:
            self._check_player(action_target)
            if not timeline.is_alive(action_target):
                raise EligibilityError(f"The action target {action_target} is dead.")
            if action_target == president:
                raise EligibilityError("The president cannot target themselves.")

        return ElectedGovernment(
            president=president,
            chancellor=chancellor,
            president_claimed_blues=president_blues,
            chancellor_claimed_blues=chancellor_blues,
            conflict=conflict,
            policy_passed=policy_passed,
            presidential_action=action,
            deck_context=timeline.deck_context,
            chancellor_confirmed_not_hitler=(
                timeline.fascist_policies >= self.config.hitler_zone_passed_fascist_policies
            ),
            failed_elections=failed_elections,
        )

    def append(self, result):
        self.results.append(result)

    def pop(self):
        """Remove and return the newest result, or None if the log is empty."""
        if not self.results:
            return None
        return self.results.pop()

    # -------------------------------------------------------------------------
    # Derived information
    # -------------------------------------------------------------------------

    def shuffle_analyses(self):
        """Group the log into shuffles and work out each shuffle's deck.

        Boundaries are recomputed from the physical deck: a shuffle holds the
        configured deck minus every policy enacted before it, and the discards
        are shuffled back in once fewer than three cards remain or the next
        draw needs more cards than are left.
        The card contexts stored on the results are not consulted.
        """
        analyses = []
        deck_liberal = self.config.initial_liberal_deck_policies
        deck_fascist = self.config.initial_fascist_deck_policies
        group = []
        for result in self.results:
            if group and not _fits(deck_liberal + deck_fascist, group, result):
                analyses.append(_analyse(len(analyses), deck_liberal, deck_fascist, group))
                passed = sum(er.passed_blues() for er in group)
                deck_liberal -= passed
                deck_fascist -= len(group) - passed
                group = []
            group.append(result)
        if group:
            analyses.append(_analyse(len(analyses), deck_liberal, deck_fascist, group))
        return analyses

    def current_shuffle(self):
        """Deck composition of the shuffle the next draw comes from."""
        analyses = self.shuffle_analyses()
        if analyses:
            last = analyses[-1]
            deck_size = last.initial_deck_liberal + last.initial_deck_fascist
            if deck_size - last.cards_drawn() >= RESHUFFLE_THRESHOLD:
                return last
        timeline = self.timeline()
        liberal_passed = timeline.liberal_policies - self.config.initial_placed_liberal_policies
        fascist_passed = timeline.fascist_policies - self.config.initial_placed_fascist_policies
        return _analyse(
            len(analyses),
            self.config.initial_liberal_deck_policies - liberal_passed,
            self.config.initial_fascist_deck_policies - fascist_passed,
            [],
        )

    def derive_information(self):
        """Facts implied by the log. A pure function of the current results."""
        facts = []
        for index, result in enumerate(self.results):
            if not isinstance(result, ElectedGovernment):
                continue
            president = result.president
            if result.conflict:
                facts.append(PolicyConflict(president, result.chancellor))
            if result.chancellor_confirmed_not_hitler:
                facts.append(ConfirmedNotHitler(result.chancellor))

            action = result.presidential_action
            following = self.results[index + 1] if index + 1 < len(self.results) else None
            if isinstance(action, Kill):
                facts.append(ConfirmedNotHitler(action.player))
            elif isinstance(action, Investigation):
                facts.append(_investigation(president, action.player, action.claim))
            elif isinstance(action, RevealParty):
                facts.append(_investigation(action.player, president, action.claim))
            elif isinstance(action, TopDeckPeek) and following is not None:
                facts.extend(_peek_conflicts(president, action.claimed_blues(), 3, following))
            elif isinstance(action, PeekAndBurn) and not action.discarded and following is not None:
                blues = 1 if action.claim == Policy.LIBERAL else 0
                facts.extend(_peek_conflicts(president, blues, 1, following))

        for shuffle in self.shuffle_analyses():
            facts.extend(_card_count_deductions(shuffle))
        return facts


def _investigation(investigator, investigatee, claim):
    if claim == Policy.LIBERAL:
        return LiberalInvestigation(investigator, investigatee)
    return FascistInvestigation(investigator, investigatee)


def _peek_conflicts(peeker, claimed_blues, peeked_cards, following):
    """Compare a peek at the top ``peeked_cards`` with the draw that followed it."""
    if isinstance(following, TopDeck):
        top_is_blue = following.policy == Policy.LIBERAL
        if (top_is_blue and claimed_blues == 0) or (not top_is_blue and claimed_blues == peeked_cards):
            return [AtLeastOneFascist((peeker,))]
        return []

    drawn_blues = following.president_claimed_blues
    if peeked_cards == 3:
        contradiction = drawn_blues != claimed_blues
    else:
        # One known card out of the next three
        contradiction = (claimed_blues == 1 and drawn_blues == 0) or (claimed_blues == 0 and drawn_blues == 3)
    if not contradiction:
        return []
    if following.president == peeker:
        return [AtLeastOneFascist((peeker,))]
    return [PolicyConflict(peeker, following.president)]


def _card_count_deductions(shuffle):
    """A shuffle whose claims don't fit the deck means some president lied."""
    presidents = shuffle.presidents()
    if not presidents:
        return []
    drawn = shuffle.cards_drawn()
    if drawn > shuffle.initial_deck_liberal + shuffle.initial_deck_fascist:
        return []
    claimed = shuffle.claimed_blues()
    lowest = max(0, drawn - shuffle.initial_deck_fascist)
    highest = min(shuffle.initial_deck_liberal, drawn)
    if lowest <= claimed <= highest:
        return []
    return [AtLeastOneFascist(tuple(presidents))]


def _fits(deck_size, group, result):
    """True if ``result`` is still drawn from the shuffle holding ``group``."""
    remaining = deck_size - sum(er.cards_drawn_discarded()[0] for er in group)
    return remaining >= max(RESHUFFLE_THRESHOLD, result.cards_drawn_discarded()[0])


def _analyse(shuffle_index, deck_liberal, deck_fascist, group):
    drawn = sum(er.cards_drawn_discarded()[0] for er in group)
    blues = sum(er.seen_blues() for er in group)
    return ShuffleAnalysis(
        shuffle_index=shuffle_index,
        initial_deck_liberal=deck_liberal,
        initial_deck_fascist=deck_fascist,
        election_results=tuple(group),
        leftover_liberal=max(0, deck_liberal - blues),
        leftover_fascist=max(0, deck_fascist - (drawn - blues)),
    )
