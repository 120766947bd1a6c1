"""Definition - Loading and validating game definition files."""

from .game_definition import GameDefinition, PlayerCountRange
from .loader import load_definition, parse_definition
from .validation import ValidationResult, validate_definition

__all__ = [
    "GameDefinition",
    "PlayerCountRange",
    "load_definition",
    "parse_definition",
    "ValidationResult",
    "validate_definition",
]
