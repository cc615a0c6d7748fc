"""Presidential actions unlocked by fascist policies."""

import dataclasses
import enum

from .errors import MissingActionParameter
from .policy import Policy


class ActionKind(enum.Enum):
    """What a fascist board slot grants. Used by the game configuration."""

    NO_ACTION = "no_action"
    KILL = "kill"
    INVESTIGATION = "investigation"
    REVEAL_PARTY = "reveal_party"
    TOP_DECK_PEEK = "top_deck_peek"
    SPECIAL_ELECTION = "special_election"
    PEEK_AND_BURN = "peek_and_burn"


@dataclasses.dataclass(frozen=True)
class PresidentialAction:
    """Base class for the action a president carried out after their policy."""

    kind = ActionKind.NO_ACTION

    def target(self):
        """Seat the action was aimed at, or None."""
        return None


@dataclasses.dataclass(frozen=True)
class NoAction(PresidentialAction):
    kind = ActionKind.NO_ACTION


@dataclasses.dataclass(frozen=True)
class Kill(PresidentialAction):
    kind = ActionKind.KILL
    player: int

    def target(self):
        return self.player


@dataclasses.dataclass(frozen=True)
class Investigation(PresidentialAction):
    """The president looked at ``player``'s party card and claimed ``claim``."""

    kind = ActionKind.INVESTIGATION
    player: int
    claim: Policy

    def target(self):
        return self.player


@dataclasses.dataclass(frozen=True)
class RevealParty(PresidentialAction):
    """The president showed their party card to ``player``, who claimed ``claim``."""

    kind = ActionKind.REVEAL_PARTY
    player: int
    claim: Policy

    def target(self):
        return self.player


@dataclasses.dataclass(frozen=True)
class TopDeckPeek(PresidentialAction):
    """Claimed content of the next three cards, sorted Fascist first."""

    kind = ActionKind.TOP_DECK_PEEK
    claim: tuple

    def claimed_blues(self):
        return sum(1 for p in self.claim if p == Policy.LIBERAL)


@dataclasses.dataclass(frozen=True)
class SpecialElection(PresidentialAction):
    kind = ActionKind.SPECIAL_ELECTION
    player: int

    def target(self):
        return self.player


@dataclasses.dataclass(frozen=True)
class PeekAndBurn(PresidentialAction):
    """The president peeked at the top card and either left it or discarded it.

    ``deck_context`` is the card context at the time of the peek.
    """

    kind = ActionKind.PEEK_AND_BURN
    claim: Policy
    discarded: bool
    deck_context: object = None


def build_action(kind, target=None, claim=None, peek=None, discarded=None, deck_context=None):
    """Build the action for a board slot from the parameters the caller collected.

    Args:
        kind: ActionKind of the board slot
        target: Seat for kill / investigation / reveal party / special election
        claim: Claimed Policy for investigation / reveal party / peek and burn
        peek: Sorted tuple of three Policy for a top deck peek
        discarded: Whether a peek and burn discarded the card
        deck_context: CardContext at the time of a peek and burn

    Returns:
        The PresidentialAction instance
    """
    def need(value, name):
        if value is None:
            raise MissingActionParameter(kind.value, name)
        return value

    if kind == ActionKind.NO_ACTION:
        return NoAction()
    if kind == ActionKind.KILL:
        return Kill(need(target, "target"))
    if kind == ActionKind.INVESTIGATION:
        return Investigation(need(target, "target"), need(claim, "claim"))
    if kind == ActionKind.REVEAL_PARTY:
        return RevealParty(need(target, "target"), need(claim, "claim"))
    if kind == ActionKind.TOP_DECK_PEEK:
        return TopDeckPeek(tuple(sorted(need(peek, "peek"))))
    if kind == ActionKind.SPECIAL_ELECTION:
        return SpecialElection(need(target, "target"))
    if kind == ActionKind.PEEK_AND_BURN:
        return PeekAndBurn(need(claim, "claim"), bool(need(discarded, "discard decision")), deck_context)
    raise ValueError(f"Unknown action kind {kind}")
