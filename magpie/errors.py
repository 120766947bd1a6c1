"""
Engine errors.

Everything the engine raises derives from MagpieError so callers can
catch engine failures without catching unrelated bugs. End-of-phase and
end-of-game are not errors; see magpie.flow.result.
"""

from __future__ import annotations


class MagpieError(Exception):
    """Base class for all engine errors."""


class ParseError(MagpieError):
    """Raised when an expression does not match the MXL grammar."""

    def __init__(self, expression: str, message: str = "Invalid expression."):
        self.expression = expression
        super().__init__(message)


class EvaluationError(MagpieError):
    """Raised for semantic failures while evaluating expressions or blocks."""


class DefinitionError(MagpieError):
    """Raised when a game definition fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Game definition is invalid with {len(errors)} error(s)")


class InputError(MagpieError):
    """Raised when collected answers do not fit the requested form."""


class IterationLimitError(MagpieError):
    """Raised when a phase loops more often than the configured limit."""
