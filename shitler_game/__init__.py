"""Game model for Secret Hitler deduction: cards, roles, facts and election history."""

from .config import GameConfiguration
from .elections import CardContext, ElectedGovernment, TopDeck
from .history import GameHistory, ShuffleAnalysis
from .information import (
    AtLeastOneFascist,
    ConfirmedNotHitler,
    FascistInvestigation,
    HardFact,
    LiberalInvestigation,
    PolicyConflict,
)
from .policy import Policy, SecretRole

__all__ = [
    'GameConfiguration', 'CardContext', 'ElectedGovernment', 'TopDeck',
    'GameHistory', 'ShuffleAnalysis', 'AtLeastOneFascist', 'ConfirmedNotHitler',
    'FascistInvestigation', 'HardFact', 'LiberalInvestigation', 'PolicyConflict',
    'Policy', 'SecretRole',
]
