"""
Compile-time Constant Evaluator for durlint.

Lint rules that compare an operand against a known value need that operand
as a number, whether it was written `1_000`, `NANOS_PER_MICRO` or
`1_000 * 1_000`. This module resolves such expressions to exact integers.

Features:
- Integer literals, with or without a type suffix
- Named constants, resolved through their declarations
- Parentheses, unary negation and `as` casts to integer types
- Checked `+ - * / %` with the host's integer semantics, inside the
  initializer of a named constant

Arithmetic written directly in the expression being evaluated is not folded:
`1000 + 0` is not the constant 1000 here, while `const N: u32 = 1000 * 1000`
makes `N` the constant 1_000_000.

Anything that could have side effects or depends on runtime values (calls,
method calls, field reads, locals) is not a constant. A fold that leaves the
range of its integer type is not a constant either: a wrapped value would
make rules fire on the wrong number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from durlint.compiler.ast_nodes import (
    BinaryExpression,
    BinaryOperator,
    CastExpression,
    ConstDeclaration,
    Expression,
    Identifier,
    IntegerLiteral,
    ParenExpression,
    UnaryExpression,
    UnaryOperator,
)
from durlint.compiler.host_types import I128, INTEGER_TYPES, IntegerType, Type, integer_type
from durlint.utils.diagnostics import SourceSpan


class ConstEvalError(Exception):
    """Raised when an expression cannot be evaluated at compile time."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
    ) -> None:
        self.message = message
        self.span = span
        super().__init__(message)


# =============================================================================
# Resolved Constants
# =============================================================================


@dataclass(frozen=True, slots=True)
class IntegerValue:
    """An expression that resolved to an exact integer."""

    value: int


class NotConstant:
    """An expression that is not a compile-time integer constant."""

    _instance: Optional["NotConstant"] = None

    def __new__(cls) -> "NotConstant":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_CONSTANT"

    def __bool__(self) -> bool:
        return False


NOT_CONSTANT = NotConstant()

ResolvedConstant = Union[IntegerValue, NotConstant]


# =============================================================================
# Integer Semantics
# =============================================================================


def truncating_div(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def truncating_rem(left: int, right: int) -> int:
    """Remainder whose sign follows the dividend."""
    return left - right * truncating_div(left, right)


class ConstEvaluator:
    """
    Evaluates integer constant expressions at compile time.

    This class handles:
    - Integer literals (the suffix, when present, fixes the type)
    - Named constants from registered declarations
    - Parenthesized expressions, unary negation, integer casts
    - Checked arithmetic operators within constant initializers

    Usage:
        evaluator = ConstEvaluator({"NANOS_PER_MICRO": decl})
        evaluator.evaluate_constant(expr)  # IntegerValue(1000) or NOT_CONSTANT
    """

    def __init__(self, constants: Optional[Mapping[str, ConstDeclaration]] = None) -> None:
        self.constants: dict[str, ConstDeclaration] = dict(constants or {})
        self._evaluating: set[str] = set()  # Track circular dependencies

    def add_declaration(self, decl: ConstDeclaration) -> None:
        """Register a named constant so later references resolve through it."""
        self.constants[decl.name] = decl

    def evaluate_constant(self, expr: Expression) -> ResolvedConstant:
        """
        Resolve an expression to an integer, or report that it is not one.

        Never raises: every failure is NOT_CONSTANT.
        """
        try:
            return IntegerValue(self.evaluate(expr))
        except ConstEvalError:
            return NOT_CONSTANT

    def is_const_expr(self, expr: Expression) -> bool:
        """Check if an expression can be evaluated at compile time."""
        return isinstance(self.evaluate_constant(expr), IntegerValue)

    def evaluate(self, expr: Expression) -> int:
        """
        Evaluate an integer constant expression.

        Args:
            expr: The expression to evaluate

        Returns:
            The exact integer value

        Raises:
            ConstEvalError: If the expression is not an integer constant
        """
        if isinstance(expr, IntegerLiteral):
            return self._evaluate_literal(expr)

        if isinstance(expr, ParenExpression):
            return self.evaluate(expr.inner)

        if isinstance(expr, Identifier):
            return self._evaluate_identifier(expr)

        if isinstance(expr, UnaryExpression):
            return self._evaluate_unary(expr)

        if isinstance(expr, BinaryExpression):
            return self._evaluate_binary(expr)

        if isinstance(expr, CastExpression):
            return self._evaluate_cast(expr)

        raise ConstEvalError(
            f"Expression of type {type(expr).__name__} cannot be evaluated at compile time",
            expr.span,
        )

    def _evaluate_literal(self, expr: IntegerLiteral) -> int:
        if isinstance(expr.value, bool) or not isinstance(expr.value, int):
            raise ConstEvalError("Integer literal holds a non-integer value", expr.span)
        if expr.suffix is not None:
            literal_type: Optional[Type] = INTEGER_TYPES.get(expr.suffix)
            if literal_type is None:
                raise ConstEvalError(f"Unknown integer suffix '{expr.suffix}'", expr.span)
        else:
            literal_type = expr.ty
        return self._checked(expr.value, literal_type, expr)

    def _evaluate_identifier(self, expr: Identifier) -> int:
        """Evaluate a reference to a named constant."""
        name = expr.name

        if name in self._evaluating:
            raise ConstEvalError(f"Circular dependency in constant '{name}'", expr.span)

        decl = self.constants.get(name)
        if decl is None:
            raise ConstEvalError(f"'{name}' is not a compile-time constant", expr.span)

        self._evaluating.add(name)
        try:
            value = self.evaluate(decl.value)
        finally:
            self._evaluating.discard(name)
        return self._checked(value, decl.ty, expr)

    def _evaluate_unary(self, expr: UnaryExpression) -> int:
        if expr.operator != UnaryOperator.NEG:
            raise ConstEvalError(
                f"Unary operator {expr.operator} cannot be evaluated at compile time",
                expr.span,
            )
        operand = self.evaluate(expr.operand)
        return self._checked(-operand, expr.ty or expr.operand.ty, expr)

    def _evaluate_binary(self, expr: BinaryExpression) -> int:
        # Only a named constant's initializer is folded
        if not self._evaluating:
            raise ConstEvalError(
                "Arithmetic outside a constant initializer is not folded",
                expr.span,
            )

        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        op = expr.operator
        if op == BinaryOperator.ADD:
            result = left + right
        elif op == BinaryOperator.SUB:
            result = left - right
        elif op == BinaryOperator.MUL:
            result = left * right
        elif op == BinaryOperator.DIV:
            if right == 0:
                raise ConstEvalError("Division by zero", expr.span)
            result = truncating_div(left, right)
        elif op == BinaryOperator.MOD:
            if right == 0:
                raise ConstEvalError("Remainder by zero", expr.span)
            result = truncating_rem(left, right)
        else:
            raise ConstEvalError(
                f"Operator {op} does not produce an integer constant",
                expr.span,
            )

        return self._checked(result, expr.ty or expr.left.ty, expr)

    def _evaluate_cast(self, expr: CastExpression) -> int:
        target = integer_type(expr.target)
        if target is None:
            raise ConstEvalError(f"Cast to non-integer type {expr.target}", expr.span)
        return self._checked(self.evaluate(expr.operand), target, expr)

    def _checked(self, value: int, ty: Optional[Type], expr: Expression) -> int:
        """Reject values that do not fit the expression's integer type."""
        bound: IntegerType = integer_type(ty) or I128
        if not bound.contains(value):
            raise ConstEvalError(f"Value {value} overflows {bound}", expr.span)
        return value


def evaluate_constant(
    expr: Expression,
    constants: Optional[Mapping[str, ConstDeclaration]] = None,
) -> ResolvedConstant:
    """
    Convenience function to resolve an expression to an integer constant.

    Args:
        expr: The expression to evaluate
        constants: Named constant declarations visible to the expression

    Returns:
        IntegerValue on success, NOT_CONSTANT otherwise
    """
    return ConstEvaluator(constants).evaluate_constant(expr)


def is_const_expr(
    expr: Expression,
    constants: Optional[Mapping[str, ConstDeclaration]] = None,
) -> bool:
    """Convenience function to check if an expression is an integer constant."""
    return ConstEvaluator(constants).is_const_expr(expr)


__all__ = [
    "ConstEvalError",
    "IntegerValue",
    "NotConstant",
    "NOT_CONSTANT",
    "ResolvedConstant",
    "ConstEvaluator",
    "truncating_div",
    "truncating_rem",
    "evaluate_constant",
    "is_const_expr",
]
