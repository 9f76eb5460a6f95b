"""
Structural matching of accessor divisions.

`match_division` recognizes `<receiver>.<accessor>() / <divisor>` where the
receiver's static type is the duration type. It only inspects the node it is
given; it never evaluates the divisor and never guesses a type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from durlint.compiler.ast_nodes import (
    BinaryExpression,
    BinaryOperator,
    Expression,
    MethodCall,
    ParenExpression,
)
from durlint.compiler.host_types import TypeOracle


@dataclass(frozen=True, slots=True)
class AccessorDivision:
    """
    A matched `<receiver>.<accessor>() / <divisor>` expression.

    Attributes:
        expression: The whole division expression
        receiver: The value the accessor is called on
        accessor: The accessor's name
        divisor: The right-hand operand, not yet evaluated
    """

    expression: BinaryExpression
    receiver: Expression
    accessor: str
    divisor: Expression


def strip_parens(expr: Expression) -> Expression:
    """Look through any number of redundant parentheses."""
    while isinstance(expr, ParenExpression):
        expr = expr.inner
    return expr


def match_division(expr: Expression, oracle: TypeOracle) -> Optional[AccessorDivision]:
    """
    Match a division of a zero-argument duration accessor.

    Args:
        expr: Any expression node
        oracle: Answers whether the receiver's type is the duration type

    Returns:
        The matched parts, or None if the node does not have the shape
    """
    if not isinstance(expr, BinaryExpression) or expr.operator != BinaryOperator.DIV:
        return None

    call = strip_parens(expr.left)
    if not isinstance(call, MethodCall) or call.arguments:
        return None

    if not oracle.is_duration_type(call.receiver.ty):
        return None

    return AccessorDivision(
        expression=expr,
        receiver=call.receiver,
        accessor=call.method,
        divisor=expr.right,
    )


__all__ = ["AccessorDivision", "strip_parens", "match_division"]
