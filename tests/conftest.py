"""
Pytest configuration and shared fixtures for durlint tests.

durlint consumes trees built by a host front end, so the fixtures here play
that part: a TreeBuilder creates typed nodes whose spans point at real text
in a source string.
"""

import re
from dataclasses import dataclass
from typing import Optional

import pytest

from durlint.compiler.ast_nodes import (
    BinaryExpression,
    BinaryOperator,
    CastExpression,
    ConstDeclaration,
    Expression,
    ExpressionStatement,
    Identifier,
    IntegerLiteral,
    LetStatement,
    MemberAccess,
    MethodCall,
    ParenExpression,
    Program,
    Statement,
    UnaryExpression,
    UnaryOperator,
)
from durlint.compiler.host_types import DURATION, U32, Type
from durlint.compiler.linter import LintConfiguration, Linter
from durlint.utils.diagnostics import Diagnostic, DiagnosticEmitter, SourceSpan
from durlint.utils.source_map import SourceMap

_LITERAL = re.compile(r"(\d[\d_]*)((?:[iu](?:8|16|32|64|128|size)))?")


class TreeBuilder:
    """
    Builds typed AST nodes with spans located in `source`.

    Nodes are located by searching for their text; `occurrence` picks the
    n-th match when the same text appears more than once.
    """

    def __init__(self, source: str, filename: str = "main.rs") -> None:
        self.source = source
        self.source_map = SourceMap(source, filename)

    def at(self, text: str, occurrence: int = 0) -> SourceSpan:
        return self.source_map.find(text, occurrence=occurrence)

    def _join(self, first: SourceSpan, last: SourceSpan) -> SourceSpan:
        start, _ = self.source_map.offsets(first)
        _, end = self.source_map.offsets(last)
        return self.source_map.span(start, end)

    def _after(self, node: Expression, text: str) -> SourceSpan:
        _, end = self.source_map.offsets(node.span)
        return self.source_map.find(text, start=end)

    # Leaves

    def _locate(self, text: str, occurrence: int, after: Optional[Expression]) -> SourceSpan:
        if after is not None:
            return self._after(after, text)
        return self.at(text, occurrence)

    def ident(
        self,
        name: str,
        ty: Optional[Type] = None,
        occurrence: int = 0,
        after: Optional[Expression] = None,
    ) -> Identifier:
        return Identifier(name, span=self._locate(name, occurrence, after), ty=ty)

    def ident_in(self, name: str, context: str, ty: Optional[Type] = None) -> Identifier:
        """The first `name` at or after the start of `context`."""
        start, _ = self.source_map.offsets(self.at(context))
        return Identifier(name, span=self.source_map.find(name, start=start), ty=ty)

    def literal(
        self,
        text: str,
        ty: Optional[Type] = None,
        occurrence: int = 0,
        after: Optional[Expression] = None,
    ) -> IntegerLiteral:
        match = _LITERAL.fullmatch(text)
        assert match, f"not an integer literal: {text}"
        return IntegerLiteral(
            int(match.group(1).replace("_", "")),
            suffix=match.group(2),
            span=self._locate(text, occurrence, after),
            ty=ty,
        )

    # Composite expressions

    def call(self, receiver: Expression, method: str, ty: Optional[Type] = U32) -> MethodCall:
        end = self._after(receiver, f"{method}()")
        return MethodCall(receiver, method, span=self._join(receiver.span, end), ty=ty)

    def field(self, obj: Expression, member: str, ty: Optional[Type] = None) -> MemberAccess:
        end = self._after(obj, member)
        return MemberAccess(obj, member, span=self._join(obj.span, end), ty=ty)

    def paren(self, inner: Expression) -> ParenExpression:
        start, end = self.source_map.offsets(inner.span)
        open_at = self.source.rindex("(", 0, start)
        close_at = self.source.index(")", end)
        return ParenExpression(
            inner, span=self.source_map.span(open_at, close_at + 1), ty=inner.ty
        )

    def binary(
        self,
        left: Expression,
        operator: BinaryOperator,
        right: Expression,
        ty: Optional[Type] = None,
    ) -> BinaryExpression:
        return BinaryExpression(
            left,
            operator,
            right,
            span=self._join(left.span, right.span),
            ty=ty if ty is not None else left.ty,
        )

    def div(self, left: Expression, right: Expression, ty: Optional[Type] = None) -> BinaryExpression:
        return self.binary(left, BinaryOperator.DIV, right, ty)

    def deref(self, operand: Expression, ty: Optional[Type] = None) -> UnaryExpression:
        start, _ = self.source_map.offsets(operand.span)
        star_at = self.source.rindex("*", 0, start)
        _, end = self.source_map.offsets(operand.span)
        return UnaryExpression(
            UnaryOperator.DEREF, operand, span=self.source_map.span(star_at, end), ty=ty
        )

    def cast(self, operand: Expression, target: Type) -> CastExpression:
        end = self._after(operand, str(target))
        return CastExpression(operand, target, span=self._join(operand.span, end), ty=target)

    # Statements

    def const(self, name: str, value: Expression, ty: Optional[Type] = None) -> ConstDeclaration:
        return ConstDeclaration(name, value, ty=ty, span=self.at(f"const {name}"))

    def let(self, name: str, value: Expression) -> LetStatement:
        return LetStatement(name, value, span=self.at(f"let {name}"))

    def program(self, *items: object) -> Program:
        statements: list[Statement] = []
        for item in items:
            if isinstance(item, Expression):
                statements.append(ExpressionStatement(item, span=item.span))
            else:
                statements.append(item)
        return Program(tuple(statements))

    # Common shapes

    def subsec_division(
        self,
        receiver: Expression,
        accessor: str,
        divisor: str,
    ) -> BinaryExpression:
        """`<receiver>.<accessor>() / <divisor literal>` with the divisor found after the call."""
        call = self.call(receiver, accessor)
        return self.div(call, self.literal(divisor, after=call))


@dataclass
class LintRun:
    """Everything one lint run produced."""

    builder: TreeBuilder
    emitter: DiagnosticEmitter
    diagnostics: list[Diagnostic]

    @property
    def replacements(self) -> list[str]:
        return [s.replacement for s in self.emitter.suggestions]

    def fixed_source(self) -> str:
        return self.builder.source_map.apply_suggestions(self.emitter.suggestions)


@pytest.fixture
def tree_factory():
    """Factory fixture for creating tree builders over a source string."""

    def _create(source: str, filename: str = "main.rs") -> TreeBuilder:
        return TreeBuilder(source, filename)

    return _create


@pytest.fixture
def run_lint():
    """Fixture that lints a program built by a TreeBuilder."""

    def _run(
        builder: TreeBuilder,
        program: Program,
        config: Optional[LintConfiguration] = None,
    ) -> LintRun:
        emitter = DiagnosticEmitter(builder.source, builder.source_map.filename)
        diagnostics = Linter(builder.source_map, config).lint(program, emitter)
        return LintRun(builder, emitter, diagnostics)

    return _run


@pytest.fixture
def lint_division(tree_factory, run_lint):
    """
    Lint `let x = <receiver>.<accessor>() / <divisor>;` with `receiver` a
    duration-typed identifier.
    """

    def _lint(
        accessor: str,
        divisor: str,
        receiver: str = "d",
        receiver_type: Optional[Type] = DURATION,
    ) -> LintRun:
        builder = tree_factory(f"let x = {receiver}.{accessor}() / {divisor};")
        expr = builder.subsec_division(
            builder.ident(receiver, receiver_type), accessor, divisor
        )
        return run_lint(builder, builder.program(builder.let("x", expr)))

    return _lint


# =============================================================================
# Reference Duration Model
# =============================================================================


@dataclass(frozen=True)
class ReferenceDuration:
    """Whole seconds plus a nanosecond remainder below one second."""

    secs: int
    nanos: int

    def __post_init__(self) -> None:
        assert 0 <= self.nanos < 1_000_000_000

    def subsec_nanos(self) -> int:
        return self.nanos

    def subsec_micros(self) -> int:
        return self.nanos // 1_000

    def subsec_millis(self) -> int:
        return self.nanos // 1_000_000

    def accessor(self, name: str) -> int:
        return getattr(self, name)()


@pytest.fixture
def sample_durations() -> list[ReferenceDuration]:
    """Durations covering unit boundaries of every sub-second accessor."""
    nanos = [
        0,
        1,
        999,
        1_000,
        1_001,
        999_999,
        1_000_000,
        1_000_001,
        123_456_789,
        500_000_000,
        999_999_000,
        999_999_999,
    ]
    return [ReferenceDuration(secs, n) for secs in (0, 1, 86_400) for n in nanos]
