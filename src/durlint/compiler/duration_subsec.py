"""
The duration-subsec lint.

Detects sub-second quantities recomputed by hand from a coarser accessor:

    let micros = d.subsec_nanos() / 1_000;
    let millis = d.subsec_nanos() / 1_000_000;

and suggests the accessor that returns them directly:

    let micros = d.subsec_micros();
    let millis = d.subsec_millis();

The check is a straight pipeline over one division node: match the shape,
resolve the divisor, look the pair up, emit the fix. The first step that
fails ends the check silently.
"""

from __future__ import annotations

import logging
from typing import Optional

from durlint.compiler.ast_nodes import (
    BinaryExpression,
    CastExpression,
    Expression,
    UnaryExpression,
)
from durlint.compiler.const_evaluator import ConstEvaluator, IntegerValue
from durlint.compiler.host_types import TypeOracle
from durlint.compiler.pattern_matcher import match_division
from durlint.compiler.rewrite_table import SUBSEC_TABLE, RewriteTable
from durlint.utils.diagnostics import (
    Applicability,
    Diagnostic,
    DiagnosticLevel,
    DiagnosticSink,
    SourceSpan,
    Suggestion,
)
from durlint.utils.errors import SourceMapError
from durlint.utils.source_map import SourceMap

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATE = "calling `{}()` is more concise than this calculation"
HELP_MESSAGE = "try"

# Receivers that bind looser than a method call
_LOOSE_RECEIVERS = (BinaryExpression, UnaryExpression, CastExpression)


# =============================================================================
# Diagnostic Emitter
# =============================================================================


def receiver_snippet(receiver: Expression, source_map: SourceMap) -> Optional[str]:
    """
    Recover the receiver exactly as written.

    Returns None when the text cannot be recovered; the caller must then
    emit nothing rather than a guessed replacement.
    """
    if receiver.span is None:
        return None
    try:
        text = source_map.text_of(receiver.span)
    except SourceMapError:
        return None
    if not text:
        return None
    # Parenthesized receivers arrive as ParenExpression nodes
    if isinstance(receiver, _LOOSE_RECEIVERS):
        return f"({text})"
    return text


def emit(
    receiver_text: str,
    target_accessor: str,
    span: SourceSpan,
    original_text: str,
) -> Suggestion:
    """Build the machine-applicable replacement `<receiver>.<target>()`."""
    return Suggestion(
        span=span,
        original=original_text,
        replacement=f"{receiver_text}.{target_accessor}()",
        message=HELP_MESSAGE,
        applicability=Applicability.MACHINE_APPLICABLE,
    )


# =============================================================================
# Check
# =============================================================================


def check_duration_subsec(
    expr: Expression,
    *,
    oracle: TypeOracle,
    evaluator: ConstEvaluator,
    source_map: SourceMap,
    sink: DiagnosticSink,
    table: RewriteTable = SUBSEC_TABLE,
    code: str = "",
    level: DiagnosticLevel = DiagnosticLevel.WARNING,
) -> Optional[Diagnostic]:
    """
    Run the duration-subsec check on a single expression node.

    Args:
        expr: The node to check; anything but a division is ignored
        oracle: Recognizes the duration type
        evaluator: Resolves the divisor to an integer
        source_map: Provides the receiver's source text
        sink: Receives the finding
        table: The (accessor, divisor) -> accessor rewrites
        code: Diagnostic code to report under
        level: Diagnostic level to report at

    Returns:
        The reported diagnostic, or None if nothing was reported
    """
    matched = match_division(expr, oracle)
    if matched is None:
        return None

    divisor = evaluator.evaluate_constant(matched.divisor)
    if not isinstance(divisor, IntegerValue):
        return None

    target = table.lookup(matched.accessor, divisor.value)
    if target is None:
        logger.debug(
            "no rewrite for %s() / %d at %s", matched.accessor, divisor.value, expr.span
        )
        return None

    if expr.span is None:
        return None
    receiver_text = receiver_snippet(matched.receiver, source_map)
    if receiver_text is None:
        return None
    try:
        original_text = source_map.text_of(expr.span)
    except SourceMapError:
        return None

    suggestion = emit(receiver_text, target, expr.span, original_text)
    logger.debug("%s: %r -> %r", expr.span, original_text, suggestion.replacement)
    return sink.report(
        expr.span,
        MESSAGE_TEMPLATE.format(target),
        suggestion,
        code=code,
        level=level,
    )


__all__ = [
    "MESSAGE_TEMPLATE",
    "HELP_MESSAGE",
    "receiver_snippet",
    "emit",
    "check_duration_subsec",
]
