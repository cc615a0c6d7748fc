"""Deduction engine for Secret Hitler: deck counting, role filtering and probability trees."""

from .deck import FilterResult
from .session import Change, ChangeKind, Session

__all__ = ['FilterResult', 'Change', 'ChangeKind', 'Session']
