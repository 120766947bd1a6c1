"""
Expression Evaluator for MXL (Magpie Expression Language).

Evaluates formulas used by flow blocks for conditions, assignments,
locations, winners, etc.

Supports:
- Literals: numbers, strings, null/none/nan/na, true/yes, false/no
- Variables and property access: current.hand, card.Suit
- 1-based indexing: players[1], [9, 8, 7][2]
- Comparisons: =, ==, !=, <>, <, >, <=, >=
- Arithmetic: +, -, *, /, %, ^ (or **), unary minus
- List literals: [1, 2, 3]
- Function calls: count(hand), filter(hand, c => c.suit == "hearts")
- Single-parameter lambdas: x => x * 2
- eval(expr, newThis): evaluate another formula with `this` rebound

Formulas are parsed with lark into a tree which is then walked against an
ExpressionContext. Names are case-insensitive everywhere.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable
import math

from lark import Lark, Tree
from lark.exceptions import LarkError

from ..errors import EvaluationError, ParseError
from .functions import FUNCTIONS
from .variables import (
    get_variable,
    normalize_name,
    resolve_location,
    type_name,
    values_equal,
)


MXL_GRAMMAR = r"""
?start: expr

?expr: lambda_exp
     | comparison

lambda_exp: NAME "=>" expr

?comparison: sum
           | sum "<" comparison   -> lt
           | sum "<=" comparison  -> lte
           | sum "=" comparison   -> eq
           | sum "==" comparison  -> eq
           | sum "!=" comparison  -> ne
           | sum "<>" comparison  -> ne
           | sum ">=" comparison  -> gte
           | sum ">" comparison   -> gt

?sum: product
    | sum "+" product  -> add
    | sum "-" product  -> subtract

?product: unary
        | product "*" unary  -> multiply
        | product "/" unary  -> divide
        | product "%" unary  -> modulo

?unary: power
      | "-" unary  -> negate

?power: operand
      | operand "^" unary   -> power
      | operand "**" unary  -> power

?operand: member
        | literal

?member: NAME                  -> variable
       | member PROPERTY       -> property
       | member "[" expr "]"   -> index
       | "(" expr ")"
       | list_exp
       | call

list_exp: "[" [arguments] "]"
call: NAME "(" [arguments] ")"
arguments: expr ("," expr)*

?literal: NUMBER  -> number
        | STRING  -> string
        | TRUE    -> true
        | FALSE   -> false
        | NULL    -> null

PROPERTY: /\.[A-Za-z_][A-Za-z0-9_]*/
NUMBER: /\d+(\.\d+)?/
STRING: /"[^"]*"/ | /'[^']*'/
TRUE.2: /(true|yes)\b/i
FALSE.2: /(false|no)\b/i
NULL.2: /(null|none|nan|na)\b/i
NAME: /[A-Za-z_][A-Za-z0-9_]*/

%import common.WS
%ignore WS
"""

_PARSER = Lark(MXL_GRAMMAR, start="start", parser="lalr")


@lru_cache(maxsize=1024)
def parse_formula(text: str) -> Tree:
    """Parse formula text into a tree, raising ParseError on bad syntax."""
    try:
        return _PARSER.parse(text)
    except LarkError as exc:
        raise ParseError(text) from exc


@dataclass
class ExpressionContext:
    """
    Context for evaluating expressions.

    Provides access to the variable container expressions read from.
    Keys are expected to be lowercase.
    """
    variables: dict[str, Any] = field(default_factory=dict)

    def get_variable(self, name: str, resolve_locations: bool = True) -> Any:
        """Get a variable value."""
        return get_variable(self.variables, name, resolve_locations)

    def bind(self, name: str, value: Any) -> ExpressionContext:
        """Return a new context with one extra variable."""
        return ExpressionContext(
            variables={**self.variables, normalize_name(name): value}
        )


ContextLike = ExpressionContext | dict[str, Any] | None


def _as_context(context: ContextLike) -> ExpressionContext:
    if context is None:
        return ExpressionContext()
    if isinstance(context, ExpressionContext):
        return context
    return ExpressionContext(variables=context)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ExpressionEvaluator:
    """
    Walks a parsed MXL tree.

    One evaluator is bound to one context. Lambdas and eval() create new
    evaluators over extended contexts.
    """

    def __init__(self, context: ContextLike = None, resolve_locations: bool = True):
        self.context = _as_context(context)
        self.resolve_locations = resolve_locations

    def evaluate_formula(self, text: str) -> Any:
        """Parse and evaluate formula text (without a leading '=')."""
        return self.evaluate_tree(parse_formula(text))

    def evaluate_tree(self, node: Tree) -> Any:
        handler = getattr(self, f"_eval_{node.data}", None)
        if handler is None:
            raise EvaluationError(f"Unsupported expression node: {node.data}")
        return handler(node)

    # -- literals ----------------------------------------------------------

    def _eval_number(self, node: Tree) -> int | float:
        text = str(node.children[0])
        return float(text) if "." in text else int(text)

    def _eval_string(self, node: Tree) -> str:
        return str(node.children[0])[1:-1]

    def _eval_true(self, node: Tree) -> bool:
        return True

    def _eval_false(self, node: Tree) -> bool:
        return False

    def _eval_null(self, node: Tree) -> None:
        return None

    def _eval_list_exp(self, node: Tree) -> list:
        return self._evaluate_arguments(node.children[0])

    def _evaluate_arguments(self, arguments: Tree | None) -> list:
        if arguments is None:
            return []
        return [self.evaluate_tree(child) for child in arguments.children]

    # -- variables and members --------------------------------------------

    def _eval_variable(self, node: Tree) -> Any:
        return self.context.get_variable(str(node.children[0]), self.resolve_locations)

    def _eval_property(self, node: Tree) -> Any:
        container_node, property_token = node.children
        container = resolve_location(self.evaluate_tree(container_node))
        return get_variable(container, str(property_token)[1:], self.resolve_locations)

    def _eval_index(self, node: Tree) -> Any:
        items = resolve_location(self.evaluate_tree(node.children[0]))
        index = self.evaluate_tree(node.children[1])

        if not isinstance(items, list):
            raise EvaluationError(f"{type_name(items)} type cannot be indexed.")
        if isinstance(index, bool):
            index = int(index)
        if not _is_number(index):
            raise EvaluationError(f"{type_name(index)} type cannot be used as index.")
        if isinstance(index, float):
            if not index.is_integer():
                raise EvaluationError(f"index {index} is not a whole number.")
            index = int(index)
        if index < 1 or index > len(items):
            raise EvaluationError(
                f"index {index} is out of bounds for list of size {len(items)}."
            )
        return items[index - 1]

    # -- functions and lambdas --------------------------------------------

    def _eval_lambda_exp(self, node: Tree) -> Callable[[Any], Any]:
        parameter, body = node.children
        context = self.context
        resolve_locations = self.resolve_locations

        def mxl_lambda(value: Any) -> Any:
            evaluator = ExpressionEvaluator(
                context.bind(str(parameter), value), resolve_locations
            )
            return evaluator.evaluate_tree(body)

        return mxl_lambda

    def _eval_call(self, node: Tree) -> Any:
        name_token, arguments = node.children
        user_provided_name = str(name_token)
        func_name = normalize_name(user_provided_name)
        args = self._evaluate_arguments(arguments)

        if func_name == "eval":
            return self._call_eval(args)

        func = FUNCTIONS.get(func_name)
        if func is None:
            raise EvaluationError(f"{user_provided_name} is not a supported function.")
        try:
            return func(*args)
        except TypeError as exc:
            raise EvaluationError(f"{user_provided_name}: {exc}") from exc

    def _call_eval(self, args: list) -> Any:
        """eval(expr, newThis) - evaluate expr with `this` bound to newThis."""
        if len(args) != 2:
            raise EvaluationError("eval expects an expression and a value for this.")
        expression, new_this = args
        if not isinstance(expression, str):
            raise EvaluationError(
                f"eval expects a string expression, got {type_name(expression)}."
            )
        return evaluate(
            expression, self.context.bind("this", new_this), self.resolve_locations
        )

    # -- operators ---------------------------------------------------------

    def _operands(self, node: Tree) -> tuple[Any, Any]:
        return self.evaluate_tree(node.children[0]), self.evaluate_tree(node.children[1])

    def _eval_eq(self, node: Tree) -> bool:
        return values_equal(*self._operands(node))

    def _eval_ne(self, node: Tree) -> bool:
        return not values_equal(*self._operands(node))

    def _eval_lt(self, node: Tree) -> bool:
        return self._compare(*self._operands(node), "<")

    def _eval_lte(self, node: Tree) -> bool:
        return self._compare(*self._operands(node), "<=")

    def _eval_gt(self, node: Tree) -> bool:
        return self._compare(*self._operands(node), ">")

    def _eval_gte(self, node: Tree) -> bool:
        return self._compare(*self._operands(node), ">=")

    def _eval_add(self, node: Tree) -> Any:
        left, right = self._operands(node)
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        return self._arithmetic(left, right, "+")

    def _eval_subtract(self, node: Tree) -> Any:
        return self._arithmetic(*self._operands(node), "-")

    def _eval_multiply(self, node: Tree) -> Any:
        return self._arithmetic(*self._operands(node), "*")

    def _eval_divide(self, node: Tree) -> Any:
        return self._arithmetic(*self._operands(node), "/")

    def _eval_modulo(self, node: Tree) -> Any:
        return self._arithmetic(*self._operands(node), "%")

    def _eval_power(self, node: Tree) -> Any:
        return self._arithmetic(*self._operands(node), "^")

    def _eval_negate(self, node: Tree) -> Any:
        value = self.evaluate_tree(node.children[0])
        if not _is_number(value):
            raise EvaluationError(f"{type_name(value)} type cannot be negated.")
        return -value

    def _compare(self, left: Any, right: Any, op: str) -> bool:
        """Perform an ordering comparison."""
        try:
            if op == "<":
                return left < right
            elif op == "<=":
                return left <= right
            elif op == ">":
                return left > right
            elif op == ">=":
                return left >= right
        except TypeError as exc:
            raise EvaluationError(
                f"Cannot compare {type_name(left)} and {type_name(right)} with {op}."
            ) from exc
        raise EvaluationError(f"Unknown comparison operator {op}.")

    def _arithmetic(self, left: Any, right: Any, op: str) -> Any:
        """Perform a numeric operation."""
        if not (_is_number(left) and _is_number(right)):
            raise EvaluationError(
                f"Cannot apply {op} to {type_name(left)} and {type_name(right)}."
            )
        try:
            if op == "+":
                return left + right
            elif op == "-":
                return left - right
            elif op == "*":
                return left * right
            elif op == "/":
                if isinstance(left, int) and isinstance(right, int) and right and left % right == 0:
                    return left // right
                return left / right
            elif op == "%":
                # Remainder takes the sign of the dividend.
                result = math.fmod(left, right)
                if isinstance(left, int) and isinstance(right, int):
                    return int(result)
                return result
            elif op == "^":
                result = left ** right
                if isinstance(result, complex):
                    raise EvaluationError(f"Cannot compute {left} {op} {right}: result is not a real number.")
                return result
        except (ZeroDivisionError, ValueError, OverflowError) as exc:
            raise EvaluationError(f"Cannot compute {left} {op} {right}: {exc}") from exc
        raise EvaluationError(f"Unknown arithmetic operator {op}.")


def evaluate_formula(
    text: str,
    context: ContextLike = None,
    resolve_locations: bool = True,
) -> Any:
    """
    Evaluate formula text in a context.

    Args:
        text: Formula without a leading '='
        context: ExpressionContext or plain variable mapping
        resolve_locations: Unwrap locations on variable lookup

    Returns:
        Evaluated value
    """
    return ExpressionEvaluator(context, resolve_locations).evaluate_formula(text)


def evaluate(
    expression: Any,
    context: ContextLike = None,
    resolve_locations: bool = True,
) -> Any:
    """
    Evaluate a definition value.

    Strings starting with '=' are formulas; anything else is returned
    unchanged.
    """
    if isinstance(expression, str) and expression.startswith("="):
        return evaluate_formula(expression[1:], context, resolve_locations)
    return expression
