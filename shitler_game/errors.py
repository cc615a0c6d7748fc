"""Errors raised by the game model and the deduction engine."""


class DeductionError(ValueError):
    """Base class for every caller-correctable failure."""


class ParsePolicyError(DeductionError):
    def __init__(self, token):
        self.token = token
        super().__init__(f"Failed to parse single-letter policy name, found {token} instead.")


class ParseRoleError(DeductionError):
    def __init__(self, token):
        self.token = token
        super().__init__(f"Failed to parse role name, found {token} instead.")


class TooLongPatternError(DeductionError):
    def __init__(self, have, requested):
        self.have = have
        self.requested = requested
        super().__init__(
            f"Requested a pattern of length {requested} but only had {have} cards available."
        )


class TooShortPatternError(DeductionError):
    def __init__(self, have, requested):
        self.have = have
        self.requested = requested
        super().__init__(
            f"Presented a pattern of length {requested} but the required pattern length is {have}."
        )


class BadPlayerID(DeductionError):
    def __init__(self, player):
        self.player = player
        super().__init__(f"Failed to recognize player {player}.")


class BadFactIndex(DeductionError):
    def __init__(self, index):
        self.index = index
        super().__init__(f"Fact #{index} does not exist.")


class NoResultToRemove(DeductionError):
    def __init__(self):
        super().__init__("There is no election result to remove.")


class BadPlayerCount(DeductionError):
    def __init__(self, table_size):
        self.table_size = table_size
        super().__init__(f"There is no standard board for {table_size} players.")


class ConfigurationError(DeductionError):
    """The game configuration violates its bounds."""


class EligibilityError(DeductionError):
    """A proposed government or action target is not legal in the current game state."""


class MissingActionParameter(DeductionError):
    def __init__(self, kind, parameter):
        self.kind = kind
        self.parameter = parameter
        super().__init__(f"The presidential action {kind} requires a {parameter}.")


class LogicalInconsistency(DeductionError):
    def __init__(self):
        super().__init__("Detected a logical inconsistency, check your fact database to debug it.")
