"""
Abstract Syntax Tree (AST) node definitions consumed by durlint.

These nodes model the part of a host front end's typed expression tree that
lint rules look at. The host builds them; durlint only reads them. Each node
is immutable and carries an optional source span, and each expression carries
the static type the host inferred for it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from durlint.compiler.host_types import Type
from durlint.utils.diagnostics import SourceSpan


class ASTNode(ABC):
    """Base class for all AST nodes."""

    span: Optional[SourceSpan]

    @abstractmethod
    def accept(self, visitor: "ASTVisitor") -> Any:
        """Accept a visitor for tree traversal."""
        pass


class ASTVisitor(ABC):
    """
    Visitor pattern base class for AST traversal.

    Implement this to create custom tree processors (linters, evaluators).
    """

    def visit(self, node: ASTNode) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


class Expression(ASTNode):
    """Base class for all expressions."""

    ty: Optional[Type]


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    """
    A path or local variable reference.

    Example:
        d, NANOS_PER_MICRO, elapsed
    """

    name: str
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_identifier(self)


@dataclass(frozen=True, slots=True)
class IntegerLiteral(Expression):
    """
    An integer literal, with its type suffix if one was written.

    Example:
        1000, 1_000_000, 1_000u32
    """

    value: int
    suffix: Optional[str] = None
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_integer_literal(self)


@dataclass(frozen=True, slots=True)
class FloatLiteral(Expression):
    """A floating-point literal."""

    value: float
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_float_literal(self)


class BinaryOperator(Enum):
    """Binary operator types."""

    # Arithmetic
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()

    # Comparison
    EQ = auto()
    NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()


class UnaryOperator(Enum):
    """Unary operator types."""

    NEG = auto()      # -
    NOT = auto()      # !
    DEREF = auto()    # *


@dataclass(frozen=True, slots=True)
class BinaryExpression(Expression):
    """
    A binary operation expression.

    Example:
        d.subsec_nanos() / 1_000, a + b
    """

    left: Expression
    operator: BinaryOperator
    right: Expression
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_binary_expression(self)


@dataclass(frozen=True, slots=True)
class UnaryExpression(Expression):
    """
    A unary operation expression.

    Example:
        -x, !flag, *duration_ref
    """

    operator: UnaryOperator
    operand: Expression
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_unary_expression(self)


@dataclass(frozen=True, slots=True)
class ParenExpression(Expression):
    """
    A parenthesized expression. The span includes the parentheses.

    Example:
        (start - end)
    """

    inner: Expression
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_paren_expression(self)


@dataclass(frozen=True, slots=True)
class MethodCall(Expression):
    """
    A method call on a receiver.

    Example:
        d.subsec_nanos(), timer.elapsed(), v.push(x)
    """

    receiver: Expression
    method: str
    arguments: tuple[Expression, ...] = ()
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_method_call(self)


@dataclass(frozen=True, slots=True)
class CallExpression(Expression):
    """
    A free function or associated function call.

    Example:
        Duration::from_millis(5), compute(x)
    """

    callee: Expression
    arguments: tuple[Expression, ...] = ()
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_call_expression(self)


@dataclass(frozen=True, slots=True)
class MemberAccess(Expression):
    """
    A field access expression.

    Example:
        stats.elapsed, self.timeout
    """

    object: Expression
    member: str
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_member_access(self)


@dataclass(frozen=True, slots=True)
class CastExpression(Expression):
    """
    A primitive `as` cast.

    Example:
        1000 as u32
    """

    operand: Expression
    target: Type
    span: Optional[SourceSpan] = None
    ty: Optional[Type] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_cast_expression(self)


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


class Statement(ASTNode):
    """Base class for all statements."""

    pass


@dataclass(frozen=True, slots=True)
class ExpressionStatement(Statement):
    """An expression used as a statement."""

    expression: Expression
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_expression_statement(self)


@dataclass(frozen=True, slots=True)
class LetStatement(Statement):
    """
    A local variable binding.

    Example:
        let micros: u32 = d.subsec_nanos() / 1_000;
    """

    name: str
    value: Optional[Expression] = None
    type_annotation: Optional[Type] = None
    mutable: bool = False
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_let_statement(self)


@dataclass(frozen=True, slots=True)
class ConstDeclaration(Statement):
    """
    A compile-time constant item.

    Example:
        const NANOS_PER_MICRO: u32 = 1_000;
    """

    name: str
    value: Expression
    ty: Optional[Type] = None
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_const_declaration(self)


@dataclass(frozen=True, slots=True)
class Block(ASTNode):
    """
    A block of statements with an optional trailing expression.

    Example:
        { let x = 1; x + 1 }
    """

    statements: tuple[Statement, ...]
    tail: Optional[Expression] = None
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_block(self)


@dataclass(frozen=True, slots=True)
class Parameter:
    """A function parameter: `d: &Duration`."""

    name: str
    ty: Optional[Type] = None
    span: Optional[SourceSpan] = None


@dataclass(frozen=True, slots=True)
class FunctionDef(Statement):
    """
    A function item.

    Example:
        fn micros(d: Duration) -> u32 { d.subsec_nanos() / 1_000 }
    """

    name: str
    parameters: tuple[Parameter, ...]
    body: Block
    return_type: Optional[Type] = None
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_function_def(self)


# -----------------------------------------------------------------------------
# Program (Root Node)
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Program(ASTNode):
    """
    The root node of one source file.

    Contains all top-level items.
    """

    statements: tuple[Statement, ...]
    span: Optional[SourceSpan] = None

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_program(self)


# -----------------------------------------------------------------------------
# Visitor with default implementations
# -----------------------------------------------------------------------------


class BaseASTVisitor(ASTVisitor):
    """
    Base visitor with default implementations that traverse children.

    Subclass this and override specific visit_* methods as needed.
    Traversal is top-down: a node is visited before its children.
    """

    def visit_program(self, node: Program) -> Any:
        for stmt in node.statements:
            self.visit(stmt)

    def visit_block(self, node: Block) -> Any:
        for stmt in node.statements:
            self.visit(stmt)
        if node.tail is not None:
            self.visit(node.tail)

    # Leaves
    def visit_identifier(self, node: Identifier) -> Any:
        pass

    def visit_integer_literal(self, node: IntegerLiteral) -> Any:
        pass

    def visit_float_literal(self, node: FloatLiteral) -> Any:
        pass

    # Expressions
    def visit_binary_expression(self, node: BinaryExpression) -> Any:
        self.visit(node.left)
        self.visit(node.right)

    def visit_unary_expression(self, node: UnaryExpression) -> Any:
        self.visit(node.operand)

    def visit_paren_expression(self, node: ParenExpression) -> Any:
        self.visit(node.inner)

    def visit_method_call(self, node: MethodCall) -> Any:
        self.visit(node.receiver)
        for arg in node.arguments:
            self.visit(arg)

    def visit_call_expression(self, node: CallExpression) -> Any:
        self.visit(node.callee)
        for arg in node.arguments:
            self.visit(arg)

    def visit_member_access(self, node: MemberAccess) -> Any:
        self.visit(node.object)

    def visit_cast_expression(self, node: CastExpression) -> Any:
        self.visit(node.operand)

    # Statements
    def visit_expression_statement(self, node: ExpressionStatement) -> Any:
        self.visit(node.expression)

    def visit_let_statement(self, node: LetStatement) -> Any:
        if node.value is not None:
            self.visit(node.value)

    def visit_const_declaration(self, node: ConstDeclaration) -> Any:
        self.visit(node.value)

    def visit_function_def(self, node: FunctionDef) -> Any:
        self.visit(node.body)
