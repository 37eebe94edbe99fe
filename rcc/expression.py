"""Arithmetic expression evaluation for rcc.

SymPy's parser turns the expression into an unevaluated tree (no exact
arithmetic runs while parsing), and the tree is then evaluated in IEEE
double precision with numpy, so overflow, signed infinities and NaN follow
ordinary float rules.
"""

from __future__ import annotations

import ast
import re
from decimal import Decimal
from functools import reduce
from tokenize import TokenError

import numpy as np
import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    EvaluateFalseTransformer,
    convert_xor,
    eval_expr,
    standard_transformations,
    stringify_expr,
)


class ExpressionError(ValueError):
    """The expression could not be parsed or evaluated."""


def _round_half_away(x):
    """round() that sends halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return np.copysign(np.floor(np.abs(x) + 0.5), x)


def _signum(x):
    # 1 for +0.0, -1 for -0.0, NaN stays NaN
    return x if np.isnan(x) else np.copysign(1.0, x)


# name -> (implementation, arity); None means one or more arguments.
_FUNCTIONS = {
    "sqrt": (np.sqrt, 1),
    "cbrt": (np.cbrt, 1),
    "exp": (np.exp, 1),
    "ln": (np.log, 1),
    "log": (np.log, 1),
    "log10": (np.log10, 1),
    "log2": (np.log2, 1),
    "abs": (np.abs, 1),
    "sin": (np.sin, 1),
    "cos": (np.cos, 1),
    "tan": (np.tan, 1),
    "asin": (np.arcsin, 1),
    "acos": (np.arccos, 1),
    "atan": (np.arctan, 1),
    "atan2": (np.arctan2, 2),
    "sinh": (np.sinh, 1),
    "cosh": (np.cosh, 1),
    "tanh": (np.tanh, 1),
    "asinh": (np.arcsinh, 1),
    "acosh": (np.arccosh, 1),
    "atanh": (np.arctanh, 1),
    "floor": (np.floor, 1),
    "ceil": (np.ceil, 1),
    "round": (_round_half_away, 1),
    "signum": (_signum, 1),
    "max": (lambda *xs: reduce(np.fmax, xs), None),
    "min": (lambda *xs: reduce(np.fmin, xs), None),
}

_CONSTANTS = {"pi": sp.pi, "e": sp.E}

NAMES = frozenset(_FUNCTIONS) | frozenset(_CONSTANTS)

_TRANSFORMATIONS = standard_transformations + (convert_xor,)

_GLOBALS: dict = {}
exec("from sympy import *", _GLOBALS)

_ALLOWED_CHARS = re.compile(r"[0-9A-Za-z_.+\-*/^%(),\s]")

# Numbers are matched first so exponent literals (1e5) are not read as names.
_TOKEN = re.compile(
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)|(?P<name>[A-Za-z_]\w*)"
)

# 007 -> 7, 00.5 -> 0.5; digits after a name, digit, dot or exponent are left alone.
_LEADING_ZEROS = re.compile(r"(?<![\w.])0+(?=\d)")


def _local_names() -> dict:
    names = {name: sp.Function(name) for name in _FUNCTIONS}
    names.update(_CONSTANTS)
    return names


class _UnevaluatedTree(EvaluateFalseTransformer):
    """Rewrites the parsed code so every operator and call builds an
    unevaluated SymPy node, including % and unary minus."""

    operators = {**EvaluateFalseTransformer.operators, ast.Mod: "Mod"}

    def visit_UnaryOp(self, node):
        operand = self.visit(node.operand)
        if isinstance(node.op, ast.UAdd):
            return operand
        if isinstance(node.op, ast.USub):
            minus_one = ast.Call(
                func=ast.Name(id="Integer", ctx=ast.Load()),
                args=[ast.Constant(value=-1)],
                keywords=[],
            )
            return ast.Call(
                func=ast.Name(id="Mul", ctx=ast.Load()),
                args=[minus_one, operand],
                keywords=[ast.keyword(arg="evaluate", value=ast.Constant(value=False))],
            )
        node.operand = operand
        return node

    def visit_Call(self, node):
        node = self.generic_visit(node)
        if isinstance(node.func, ast.Name) and node.func.id in _FUNCTIONS:
            node.keywords.append(
                ast.keyword(arg="evaluate", value=ast.Constant(value=False))
            )
        return node


def _check_tokens(expression: str) -> None:
    for ch in expression:
        if not _ALLOWED_CHARS.fullmatch(ch):
            raise ExpressionError(f"unexpected character `{ch}`")
    for match in _TOKEN.finditer(expression):
        name = match.group("name")
        if name is not None and name not in NAMES:
            raise ExpressionError(f"unknown identifier `{name}`")


def _describe(exc: Exception) -> str:
    """Pull a readable message out of a parser exception."""
    if isinstance(exc, SyntaxError):
        return exc.msg or "invalid syntax"
    if isinstance(exc, TokenError) and exc.args:
        return str(exc.args[0])
    return str(exc) or type(exc).__name__


def _parse(expression: str) -> sp.Basic:
    local_dict = _local_names()
    try:
        code = stringify_expr(expression, local_dict, _GLOBALS, _TRANSFORMATIONS)
        tree = _UnevaluatedTree().visit(ast.parse(code, mode="eval"))
        compiled = compile(ast.fix_missing_locations(tree), "<expression>", "eval")
        parsed = eval_expr(compiled, local_dict, _GLOBALS)
    except (SyntaxError, TokenError, TypeError, ValueError, ArithmeticError) as exc:
        raise ExpressionError(_describe(exc)) from exc
    if not isinstance(parsed, sp.Basic):
        raise ExpressionError("expression does not evaluate to a single number")
    return parsed


def _number(node: sp.Basic) -> np.float64:
    try:
        return np.float64(float(node))
    except OverflowError:
        return np.float64(-np.inf if node < 0 else np.inf)
    except TypeError as exc:
        raise ExpressionError(f"cannot reduce `{node}` to a number") from exc


def _numeric(node: sp.Basic) -> np.float64:
    """Evaluate an unevaluated SymPy tree in float64."""
    if isinstance(node, AppliedUndef):
        name = node.func.__name__
        func, arity = _FUNCTIONS[name]
        if arity is not None and len(node.args) != arity:
            raise ExpressionError(
                f"`{name}` takes {arity} argument(s), got {len(node.args)}"
            )
        if not node.args:
            raise ExpressionError(f"`{name}` needs at least one argument")
        return np.float64(func(*(_numeric(arg) for arg in node.args)))
    if node.is_Number or node.is_NumberSymbol:
        return _number(node)
    if node.is_Add:
        return reduce(np.add, (_numeric(arg) for arg in node.args))
    if node.is_Mul:
        return reduce(np.multiply, (_numeric(arg) for arg in node.args))
    if node.is_Pow:
        base, exponent = node.args
        return np.power(_numeric(base), _numeric(exponent))
    if isinstance(node, sp.Mod):
        # truncated remainder: the result takes the dividend's sign
        dividend, divisor = node.args
        return np.fmod(_numeric(dividend), _numeric(divisor))
    raise ExpressionError(f"cannot evaluate `{node}`")


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression string to a float.

    Supports + - * / % ^ (or **), parentheses, unary signs, the constants
    pi and e, and the common math functions listed in _FUNCTIONS.

    Raises:
        ExpressionError: on empty input, unknown characters or names, syntax
            errors, wrong argument counts, or a result that is not a single
            number.
    """
    if not expression.strip():
        raise ExpressionError("empty expression")
    _check_tokens(expression)

    parsed = _parse(_LEADING_ZEROS.sub("", expression))
    with np.errstate(all="ignore"):
        return float(_numeric(parsed))


def format_number(value: float) -> str:
    """Format a float for display.

    Integral values drop the fractional part, everything else is written in
    positional notation (no exponent), and non-finite values print as
    inf / -inf / NaN.
    """
    if np.isnan(value):
        return "NaN"
    if np.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0 and np.signbit(value):
            return "-0"
        return str(int(value))
    return format(Decimal(repr(value)), "f")
