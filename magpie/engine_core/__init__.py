"""
Engine Core - Variables, expressions and game state.

The core is what every flow block builds on:
1. The variable model (values, containers, locations)
2. The MXL expression evaluator and its function library
3. GameState, the snapshot expressions are evaluated against
"""

from .variables import (
    CollectionLocation,
    ComponentLocation,
    Location,
    Variable,
    get_variable,
    is_collection_location,
    is_component_location,
)
from .expression import ExpressionContext, ExpressionEvaluator, evaluate, evaluate_formula
from .functions import FUNCTIONS
from .state import GameState
from .utils import map_keys_deep, shift_array

__all__ = [
    "CollectionLocation",
    "ComponentLocation",
    "Location",
    "Variable",
    "get_variable",
    "is_collection_location",
    "is_component_location",
    "ExpressionContext",
    "ExpressionEvaluator",
    "evaluate",
    "evaluate_formula",
    "FUNCTIONS",
    "GameState",
    "map_keys_deep",
    "shift_array",
]
