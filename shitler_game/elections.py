"""Election results and the card context they were drawn from."""

import dataclasses

from .actions import NoAction, PeekAndBurn
from .policy import Policy


# Fewer cards than this in the draw pile forces a reshuffle
RESHUFFLE_THRESHOLD = 3


@dataclasses.dataclass(frozen=True)
class CardContext:
    """Draw pile state right before a draw.

    Attributes:
        cards_left: Cards remaining in the current shuffle's draw pile
        cards_discarded: Cards discarded since the last reshuffle
        shuffle_index: Number of reshuffles so far
    """

    cards_left: int
    cards_discarded: int = 0
    shuffle_index: int = 0

    def atomic_draw(self, draw_count, discard_count):
        """Context after drawing ``draw_count`` cards and discarding ``discard_count``."""
        if self.cards_left - draw_count < RESHUFFLE_THRESHOLD:
            return CardContext(
                cards_left=self.cards_left + self.cards_discarded,
                cards_discarded=0,
                shuffle_index=self.shuffle_index + 1,
            )
        return CardContext(
            cards_left=self.cards_left - draw_count,
            cards_discarded=self.cards_discarded + discard_count,
            shuffle_index=self.shuffle_index,
        )


@dataclasses.dataclass(frozen=True)
class ElectionResult:
    """Base class for entries of the election history."""

    def cards_drawn_discarded(self):
        raise NotImplementedError

    def passed_blues(self):
        """1 if a liberal policy was enacted, else 0."""
        return 1 if self.policy == Policy.LIBERAL else 0

    def seen_blues(self):
        raise NotImplementedError


@dataclasses.dataclass(frozen=True)
class TopDeck(ElectionResult):
    """The top card was enacted after three failed elections."""

    policy: Policy
    deck_context: CardContext

    def cards_drawn_discarded(self):
        return 1, 0

    def seen_blues(self):
        return self.passed_blues()


@dataclasses.dataclass(frozen=True)
class ElectedGovernment(ElectionResult):
    """A government that drew three cards and enacted one of them.

    ``deck_context`` is the state before this government's draw.
    """

    president: int
    chancellor: int
    president_claimed_blues: int
    chancellor_claimed_blues: int
    conflict: bool
    policy_passed: Policy
    presidential_action: object = NoAction()
    deck_context: CardContext = CardContext(0)
    chancellor_confirmed_not_hitler: bool = False
    # Failed elections between the previous result and this government
    failed_elections: int = 0

    @property
    def policy(self):
        return self.policy_passed

    def burned_card(self):
        """True if a peek and burn removed an extra card from this government's window."""
        action = self.presidential_action
        return isinstance(action, PeekAndBurn) and action.discarded

    def cards_drawn_discarded(self):
        if self.burned_card():
            return 4, 3
        return 3, 2

    def seen_blues(self):
        blues = self.president_claimed_blues
        if self.burned_card() and self.presidential_action.claim == Policy.LIBERAL:
            blues += 1
        return blues
