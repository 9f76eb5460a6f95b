"""
durlint Linter - rule registry, lint levels and the lint traversal.

The linter walks a typed program once, top-down, and hands every division it
meets to the duration-subsec check. A divisor written as `NANOS_PER_MICRO`
resolves like the literal it names when that const is in scope there.

Lint levels follow the familiar allow/warn/deny scheme and can be set
programmatically or with in-source directives:

    #![allow(duration-subsec)]
    #![deny(W0201)]

Example:
    source_map = SourceMap(source, "main.rs")
    emitter = DiagnosticEmitter(source, "main.rs")
    diagnostics = Linter(source_map).lint(program, emitter)
    for d in diagnostics:
        print(d.render(source))
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from durlint.compiler.ast_nodes import (
    BaseASTVisitor,
    BinaryExpression,
    BinaryOperator,
    Block,
    ConstDeclaration,
    FunctionDef,
    Identifier,
    IntegerLiteral,
    LetStatement,
    Program,
    Statement,
)
from durlint.compiler.const_evaluator import ConstEvaluator, IntegerValue, ResolvedConstant
from durlint.compiler.duration_subsec import MESSAGE_TEMPLATE, check_duration_subsec
from durlint.compiler.host_types import DurationTypeOracle, TypeOracle
from durlint.compiler.rewrite_table import SUBSEC_TABLE, RewriteTable
from durlint.utils.diagnostics import (
    Diagnostic,
    DiagnosticEmitter,
    DiagnosticLevel,
    DiagnosticSink,
    ErrorCode,
)
from durlint.utils.source_map import SourceMap

logger = logging.getLogger(__name__)


# =============================================================================
# Lint Rule Configuration
# =============================================================================


class LintLevel(Enum):
    """
    Severity level for lint rules.

    ALLOW: Rule is disabled, no diagnostic produced
    WARN: Rule produces a warning
    DENY: Rule produces an error
    """

    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"

    def diagnostic_level(self) -> Optional[DiagnosticLevel]:
        """The diagnostic level findings are reported at, or None if disabled."""
        if self is LintLevel.DENY:
            return DiagnosticLevel.ERROR
        if self is LintLevel.WARN:
            return DiagnosticLevel.WARNING
        return None


class LintCategory(Enum):
    """
    Categories of lint rules for organization and filtering.
    """

    COMPLEXITY = "complexity"      # Expressions with a simpler equivalent


@dataclass(frozen=True)
class LintRule:
    """
    Definition of a single lint rule.

    Attributes:
        code: Unique rule identifier (e.g., "W0201")
        name: Human-readable rule name (e.g., "duration-subsec")
        category: The category this rule belongs to
        message: Template message for the finding (use {} for placeholders)
        level: Default severity level
    """

    code: str
    name: str
    category: LintCategory
    message: str
    level: LintLevel = LintLevel.WARN

    def __str__(self) -> str:
        return f"{self.code} ({self.name})"


# =============================================================================
# Lint Rules - Complexity
# =============================================================================

DURATION_SUBSEC = LintRule(
    code=ErrorCode.W0201,
    name="duration-subsec",
    category=LintCategory.COMPLEXITY,
    message=MESSAGE_TEMPLATE,
    level=LintLevel.WARN,
)


# =============================================================================
# Rule Registry
# =============================================================================

ALL_RULES: dict[str, LintRule] = {
    rule.code: rule
    for rule in [
        DURATION_SUBSEC,
    ]
}

RULES_BY_NAME: dict[str, LintRule] = {rule.name: rule for rule in ALL_RULES.values()}


# =============================================================================
# Lint Configuration
# =============================================================================

_DIRECTIVE_PATTERN = re.compile(r"#!\[(allow|warn|deny)\(([a-zA-Z0-9_:-]+)\)\]")


@dataclass
class LintConfiguration:
    """
    Configuration for the linter specifying rule levels.

    Example:
        config = LintConfiguration()
        config.set_level("duration-subsec", LintLevel.ALLOW)
        config.set_level_by_category(LintCategory.COMPLEXITY, LintLevel.DENY)
    """

    rule_levels: dict[str, LintLevel] = field(default_factory=dict)

    def get_level(self, rule: LintRule) -> LintLevel:
        """Get the effective level for a rule."""
        # Check by code first, then by name
        if rule.code in self.rule_levels:
            return self.rule_levels[rule.code]
        if rule.name in self.rule_levels:
            return self.rule_levels[rule.name]
        return rule.level

    def set_level(self, rule_id: str, level: LintLevel) -> None:
        """Set the level for a rule by code or name."""
        self.rule_levels[rule_id] = level

    def set_level_by_category(self, category: LintCategory, level: LintLevel) -> None:
        """Set the level for all rules in a category."""
        for rule in ALL_RULES.values():
            if rule.category == category:
                self.rule_levels[rule.code] = level

    def allow(self, rule_id: str) -> None:
        """Disable a rule."""
        self.set_level(rule_id, LintLevel.ALLOW)

    def warn(self, rule_id: str) -> None:
        """Set a rule to warning level."""
        self.set_level(rule_id, LintLevel.WARN)

    def deny(self, rule_id: str) -> None:
        """Set a rule to error level."""
        self.set_level(rule_id, LintLevel.DENY)

    def allow_all(self) -> None:
        """Disable all rules."""
        for rule in ALL_RULES.values():
            self.rule_levels[rule.code] = LintLevel.ALLOW

    def deny_all(self) -> None:
        """Set all rules to error level."""
        for rule in ALL_RULES.values():
            self.rule_levels[rule.code] = LintLevel.DENY

    @classmethod
    def parse_directive(cls, directive: str) -> tuple[str, str, LintLevel]:
        """
        Parse a lint directive from source code.

        Formats:
            #![allow(rule-name)]
            #![warn(rule-name)]
            #![deny(rule-name)]

        Returns:
            Tuple of (action, rule_name, level)

        Raises:
            ValueError: If directive format is invalid
        """
        match = _DIRECTIVE_PATTERN.fullmatch(directive.strip())
        if not match:
            raise ValueError(f"Invalid lint directive: {directive}")

        action = match.group(1)
        return action, match.group(2), LintLevel(action)

    def apply_directive(self, directive: str) -> None:
        """Parse a directive and set the level it names."""
        _, rule_name, level = self.parse_directive(directive)
        self.set_level(rule_name, level)

    def apply_source_directives(self, source: str) -> int:
        """
        Apply every `#![...]` directive line found in a source file.

        Returns:
            The number of directives applied

        Raises:
            ValueError: If a directive line is malformed
        """
        count = 0
        for line in source.splitlines():
            if line.lstrip().startswith("#!["):
                self.apply_directive(line)
                count += 1
        return count


# =============================================================================
# Main Linter Implementation
# =============================================================================


@dataclass
class _Scope:
    """
    Names bound in one lexical scope.

    `constants` maps a const item to its declaration with the initializer
    already resolved, or to None when the initializer is not a constant.
    `bindings` holds parameters and `let` names bound so far.
    """

    constants: dict[str, Optional[ConstDeclaration]] = field(default_factory=dict)
    bindings: set[str] = field(default_factory=set)
    function: bool = False


class Linter(BaseASTVisitor):
    """
    Runs the lint rules over one typed program.

    The linter walks the program once, top-down, keeping a stack of lexical
    scopes. Each division is checked against the constants visible where it
    is written: a parameter or `let` binding hides a const of the same name,
    and a const declared inside another function is never visible.

    Example:
        linter = Linter(SourceMap(source))
        diagnostics = linter.lint(program, DiagnosticEmitter(source))
    """

    def __init__(
        self,
        source_map: SourceMap,
        config: Optional[LintConfiguration] = None,
        oracle: Optional[TypeOracle] = None,
        table: RewriteTable = SUBSEC_TABLE,
    ) -> None:
        """
        Initialize the linter.

        Args:
            source_map: Text of the file the program was built from
            config: Optional lint configuration for customizing rule levels
            oracle: Recognizes the duration type; defaults to the std paths
            table: The accessor rewrites to apply
        """
        self.source_map = source_map
        self.config = config or LintConfiguration()
        self.oracle: TypeOracle = oracle or DurationTypeOracle()
        self.table = table
        self.diagnostics: list[Diagnostic] = []

        self._sink: Optional[DiagnosticSink] = None
        self._scopes: list[_Scope] = []
        self._subsec_level: Optional[DiagnosticLevel] = None

    def lint(self, program: Program, sink: DiagnosticSink) -> list[Diagnostic]:
        """
        Run all lint checks on a program.

        Args:
            program: The typed AST to analyze
            sink: Receives every finding

        Returns:
            The diagnostics reported during this run
        """
        self._reset_state(sink)

        # The gate is consulted once per run
        self._subsec_level = self.config.get_level(DURATION_SUBSEC).diagnostic_level()
        if self._subsec_level is None:
            logger.debug("%s is allowed, skipping", DURATION_SUBSEC)
            return self.diagnostics

        self.visit(program)

        logger.debug(
            "linted %s: %d diagnostic(s)", self.source_map.filename, len(self.diagnostics)
        )
        return self.diagnostics

    def _reset_state(self, sink: DiagnosticSink) -> None:
        """Reset all internal state for a new lint run."""
        self.diagnostics = []
        self._sink = sink
        self._scopes = []
        self._subsec_level = None

    # =========================================================================
    # Scopes
    # =========================================================================

    def visit_program(self, node: Program) -> None:
        self._enter_scope(_Scope(), node.statements)
        try:
            super().visit_program(node)
        finally:
            self._scopes.pop()

    def visit_function_def(self, node: FunctionDef) -> None:
        params = _Scope(bindings={param.name for param in node.parameters}, function=True)
        self._scopes.append(params)
        try:
            super().visit_function_def(node)
        finally:
            self._scopes.pop()

    def visit_block(self, node: Block) -> None:
        self._enter_scope(_Scope(), node.statements)
        try:
            super().visit_block(node)
        finally:
            self._scopes.pop()

    def visit_let_statement(self, node: LetStatement) -> None:
        # The initializer is evaluated before the name is bound
        super().visit_let_statement(node)
        if self._scopes:
            self._scopes[-1].bindings.add(node.name)

    def _enter_scope(self, scope: _Scope, statements: tuple[Statement, ...]) -> None:
        """
        Push a scope and resolve the const items declared directly in it.

        Const items are visible throughout their block. Their initializers
        see other const items only, never locals, so they are resolved once
        here against the items in scope at the declaration.
        """
        self._scopes.append(scope)
        decls = [stmt for stmt in statements if isinstance(stmt, ConstDeclaration)]
        if not decls:
            return

        items = self._visible_constants(items_only=True)
        items.update((decl.name, decl) for decl in decls)
        evaluator = ConstEvaluator(items)
        for decl in decls:
            value = evaluator.evaluate_constant(Identifier(decl.name, span=decl.span))
            scope.constants[decl.name] = _resolved(decl, value)

    def _visible_constants(self, items_only: bool = False) -> dict[str, ConstDeclaration]:
        """
        The named constants visible from the innermost scope.

        A binding hides every const of the same name in its own and outer
        scopes. Bindings of an enclosing function are not visible inside a
        nested function.
        """
        visible: dict[str, Optional[ConstDeclaration]] = {}
        hidden: set[str] = set()
        locals_visible = not items_only
        for scope in reversed(self._scopes):
            if locals_visible:
                hidden |= scope.bindings
            for name, decl in scope.constants.items():
                if name not in hidden and name not in visible:
                    visible[name] = decl
            if scope.function:
                locals_visible = False
        return {name: decl for name, decl in visible.items() if decl is not None}

    # =========================================================================
    # Checks
    # =========================================================================

    def visit_binary_expression(self, node: BinaryExpression) -> None:
        if node.operator == BinaryOperator.DIV:
            self._check_duration_subsec(node)
        super().visit_binary_expression(node)

    def _check_duration_subsec(self, node: BinaryExpression) -> None:
        if self._sink is None or self._subsec_level is None:
            raise RuntimeError("Linter visited a program outside of lint()")
        diagnostic = check_duration_subsec(
            node,
            oracle=self.oracle,
            evaluator=ConstEvaluator(self._visible_constants()),
            source_map=self.source_map,
            sink=self._sink,
            table=self.table,
            code=DURATION_SUBSEC.code,
            level=self._subsec_level,
        )
        if diagnostic is not None:
            self.diagnostics.append(diagnostic)


def _resolved(decl: ConstDeclaration, value: ResolvedConstant) -> Optional[ConstDeclaration]:
    """A copy of `decl` whose initializer is its folded value."""
    if not isinstance(value, IntegerValue):
        return None
    literal = IntegerLiteral(value.value, span=decl.value.span, ty=decl.ty)
    return ConstDeclaration(decl.name, literal, ty=decl.ty, span=decl.span)


# =============================================================================
# Convenience Functions
# =============================================================================


def lint_program(
    program: Program,
    source_map: SourceMap,
    config: Optional[LintConfiguration] = None,
    sink: Optional[DiagnosticSink] = None,
) -> list[Diagnostic]:
    """
    Lint an already-built program.

    In-source directives are applied on top of `config`.

    Args:
        program: Typed AST
        source_map: Text of the file the program was built from
        config: Optional lint configuration
        sink: Where findings go; a fresh DiagnosticEmitter if omitted

    Returns:
        List of diagnostics reported
    """
    config = LintConfiguration(dict(config.rule_levels)) if config else LintConfiguration()
    config.apply_source_directives(source_map.source)
    if sink is None:
        sink = DiagnosticEmitter(source_map.source, source_map.filename)
    return Linter(source_map, config).lint(program, sink)


def get_rule_by_name(name: str) -> Optional[LintRule]:
    """Get a lint rule by its name."""
    return RULES_BY_NAME.get(name)


def get_rule_by_code(code: str) -> Optional[LintRule]:
    """Get a lint rule by its code."""
    return ALL_RULES.get(code)


def get_rules_by_category(category: LintCategory) -> list[LintRule]:
    """Get all lint rules in a category."""
    return [rule for rule in ALL_RULES.values() if rule.category == category]


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    # Enums
    "LintLevel",
    "LintCategory",
    # Data classes
    "LintRule",
    "LintConfiguration",
    # Main linter
    "Linter",
    # Utility functions
    "lint_program",
    "get_rule_by_name",
    "get_rule_by_code",
    "get_rules_by_category",
    # Rule registry
    "ALL_RULES",
    "RULES_BY_NAME",
    # Individual rules
    "DURATION_SUBSEC",
]
