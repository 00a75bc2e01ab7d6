"""
Ship Core
Grid model, threat geometry, routing and move scoring for the ship agent.
"""

from .field_model import Cell, CellKind, Grid, MalformedGridError, MissingPlayerError, parse
from .geometry import Direction
from .pipeline import Decision, DecisionPipeline
from .scorer import Command, MoveOption, MoveScorer
from .session import MoveHistory, SessionStore

__all__ = [
    'Cell',
    'CellKind',
    'Command',
    'Decision',
    'DecisionPipeline',
    'Direction',
    'Grid',
    'MalformedGridError',
    'MissingPlayerError',
    'MoveHistory',
    'MoveOption',
    'MoveScorer',
    'SessionStore',
    'parse',
]
