"""Game configuration: table size, deck contents and the fascist board."""

import dataclasses
import json
from pathlib import Path

from .actions import ActionKind
from .errors import BadPlayerCount, ConfigurationError


SMALL_BOARD = (
    ActionKind.NO_ACTION,
    ActionKind.NO_ACTION,
    ActionKind.TOP_DECK_PEEK,
    ActionKind.KILL,
    ActionKind.KILL,
)
MEDIUM_BOARD = (
    ActionKind.NO_ACTION,
    ActionKind.INVESTIGATION,
    ActionKind.SPECIAL_ELECTION,
    ActionKind.KILL,
    ActionKind.KILL,
)
LARGE_BOARD = (
    ActionKind.INVESTIGATION,
    ActionKind.INVESTIGATION,
    ActionKind.SPECIAL_ELECTION,
    ActionKind.KILL,
    ActionKind.KILL,
)

# Bounds mirror what the common online implementation allows
TABLE_SIZES = range(5, 11)
LIBERAL_DECK_POLICIES = range(5, 9)
FASCIST_DECK_POLICIES = range(10, 20)
PLACED_POLICIES = range(0, 3)
ZONE_THRESHOLDS = range(1, 6)
BOARD_SLOTS = 5


@dataclasses.dataclass(frozen=True)
class GameConfiguration:
    """Immutable description of a table. Validated on construction.

    Use ``dataclasses.replace`` to derive an edited configuration, the copy is
    validated again.
    """

    table_size: int = 7
    num_regular_fascists: int = 2
    initial_liberal_deck_policies: int = 6
    initial_fascist_deck_policies: int = 11
    initial_placed_liberal_policies: int = 0
    initial_placed_fascist_policies: int = 0
    fascist_board_configuration: tuple = MEDIUM_BOARD
    hitler_zone_passed_fascist_policies: int = 3
    veto_zone_passed_fascist_policies: int = 5

    def __post_init__(self):
        try:
            board = tuple(ActionKind(kind) for kind in self.fascist_board_configuration)
        except ValueError as e:
            raise ConfigurationError(f"Unknown board action: {e}") from e
        object.__setattr__(self, "fascist_board_configuration", board)
        problem = self.invariant_violation()
        if problem is not None:
            raise ConfigurationError(problem)

    @classmethod
    def standard(cls, table_size, rebalanced=False):
        """Official setup for ``table_size`` players.

        Rebalanced games remove a fascist policy from the deck for 6, 7 and 9
        players and start 6-player games with one fascist policy on the board.
        """
        if table_size in (5, 6):
            board = SMALL_BOARD
        elif table_size in (7, 8):
            board = MEDIUM_BOARD
        elif table_size in (9, 10):
            board = LARGE_BOARD
        else:
            raise BadPlayerCount(table_size)

        return cls(
            table_size=table_size,
            num_regular_fascists=(table_size - 1) // 2 - 1,
            initial_liberal_deck_policies=6,
            initial_fascist_deck_policies=10 if rebalanced and table_size in (6, 7, 9) else 11,
            initial_placed_liberal_policies=0,
            initial_placed_fascist_policies=1 if rebalanced and table_size == 6 else 0,
            fascist_board_configuration=board,
            hitler_zone_passed_fascist_policies=3,
            veto_zone_passed_fascist_policies=5,
        )

    def invariant_violation(self):
        """Description of the first violated bound, or None."""
        if self.table_size not in TABLE_SIZES:
            return f"table_size must be within 5-10, got {self.table_size}"
        if not 1 <= self.num_regular_fascists or not self.num_regular_fascists < self.table_size / 2:
            return (
                f"num_regular_fascists must be at least 1 and below half the table, "
                f"got {self.num_regular_fascists}"
            )
        if self.initial_liberal_deck_policies not in LIBERAL_DECK_POLICIES:
            return f"initial_liberal_deck_policies must be within 5-8, got {self.initial_liberal_deck_policies}"
        if self.initial_fascist_deck_policies not in FASCIST_DECK_POLICIES:
            return f"initial_fascist_deck_policies must be within 10-19, got {self.initial_fascist_deck_policies}"
        if self.initial_placed_liberal_policies not in PLACED_POLICIES:
            return f"initial_placed_liberal_policies must be within 0-2, got {self.initial_placed_liberal_policies}"
        if self.initial_placed_fascist_policies not in PLACED_POLICIES:
            return f"initial_placed_fascist_policies must be within 0-2, got {self.initial_placed_fascist_policies}"
        if self.hitler_zone_passed_fascist_policies not in ZONE_THRESHOLDS:
            return f"hitler_zone_passed_fascist_policies must be within 1-5, got {self.hitler_zone_passed_fascist_policies}"
        if self.veto_zone_passed_fascist_policies not in ZONE_THRESHOLDS:
            return f"veto_zone_passed_fascist_policies must be within 1-5, got {self.veto_zone_passed_fascist_policies}"
        if len(self.fascist_board_configuration) != BOARD_SLOTS:
            return f"the fascist board needs {BOARD_SLOTS} slots, got {len(self.fascist_board_configuration)}"
        return None

    def is_valid(self):
        return self.invariant_violation() is None

    @property
    def num_liberals(self):
        return self.table_size - self.num_regular_fascists - 1

    @property
    def initial_deck_size(self):
        return self.initial_liberal_deck_policies + self.initial_fascist_deck_policies

    def players(self):
        """Seats are numbered from 1."""
        return list(range(1, self.table_size + 1))

    def board_action(self, fascist_policies_on_board):
        """Action granted by the next fascist policy, None once the board is full."""
        if fascist_policies_on_board >= BOARD_SLOTS:
            return None
        return self.fascist_board_configuration[fascist_policies_on_board]

    def to_dict(self):
        data = dataclasses.asdict(self)
        data["fascist_board_configuration"] = [kind.value for kind in self.fascist_board_configuration]
        return data

    @classmethod
    def from_dict(cls, data):
        fields = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - fields
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Malformed configuration: {e}") from e

    def save(self, path):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path):
        with open(Path(path)) as f:
            return cls.from_dict(json.load(f))
