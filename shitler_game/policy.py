"""Policy cards and secret roles."""

import enum

from .errors import ParsePolicyError, ParseRoleError, TooLongPatternError, TooShortPatternError


class Policy(enum.IntEnum):
    """A policy card. Encoded so that a deck row sums to its liberal count."""

    FASCIST = 0
    LIBERAL = 1

    @classmethod
    def parse(cls, token):
        lowered = token.lower()
        if lowered in ("f", "r"):
            return cls.FASCIST
        if lowered in ("l", "b"):
            return cls.LIBERAL
        raise ParsePolicyError(token)

    def letter(self):
        return "B" if self is Policy.LIBERAL else "R"

    def __str__(self):
        return self.letter()


class SecretRole(enum.IntEnum):
    """Secret role of a seat. Codes match the role-assignment matrices."""

    LIBERAL = 0
    REGULAR_FASCIST = 1
    HITLER = 2

    @classmethod
    def parse(cls, token):
        lowered = token.lower()
        if lowered in ("h", "hitler"):
            return cls.HITLER
        if lowered in ("f", "fascist"):
            return cls.REGULAR_FASCIST
        if lowered in ("l", "b", "lib", "blue", "liberal"):
            return cls.LIBERAL
        raise ParseRoleError(token)

    def is_fascist(self):
        return self is not SecretRole.LIBERAL

    def __str__(self):
        return {
            SecretRole.LIBERAL: "Liberal",
            SecretRole.REGULAR_FASCIST: "Fascist",
            SecretRole.HITLER: "Hitler",
        }[self]


def parse_pattern(pattern, max_length, min_length):
    """Parse a claim pattern such as "rbb" into a canonical sorted multiset.

    Args:
        pattern: One policy token per character, case-insensitive
        max_length: Longest acceptable pattern
        min_length: Shortest acceptable pattern

    Returns:
        (num_liberal, length, policies) with policies sorted Fascist first
    """
    policies = sorted(Policy.parse(token) for token in pattern)
    length = len(policies)

    if length > max_length:
        raise TooLongPatternError(max_length, length)
    if length < min_length:
        raise TooShortPatternError(max_length, length)

    num_liberal = sum(1 for p in policies if p == Policy.LIBERAL)
    return num_liberal, length, policies


def claim_pattern_from_blues(blues, length=3):
    """Canonical claim string for a number of blues, e.g. 1 of 3 -> "RRB"."""
    if not 0 <= blues <= length:
        raise ValueError(f"Cannot claim {blues} blues in a window of {length}")
    return Policy.FASCIST.letter() * (length - blues) + Policy.LIBERAL.letter() * blues
