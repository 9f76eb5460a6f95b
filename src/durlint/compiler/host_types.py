"""
Host type handles and the duration type oracle.

durlint does not infer types. The host front end annotates expressions with
the handles defined here, and lint rules only ask questions about them:
"is this an integer type, and what is its range", "is this the duration
type". The answers never guess: an unresolved type is never a duration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol


# =============================================================================
# Type System Representation
# =============================================================================


class Type(ABC):
    """
    Base class for all host type handles.

    Types are immutable and compare structurally.
    """

    @abstractmethod
    def __str__(self) -> str:
        """Return a human-readable string representation of the type."""
        pass

    def is_resolved(self) -> bool:
        """Whether the host has fully determined this type."""
        return True


@dataclass(frozen=True)
class IntegerType(Type):
    """
    A fixed-width integer type.

    Examples: u32, i64, usize
    """

    name: str
    bits: int
    signed: bool

    def __str__(self) -> str:
        return self.name

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        """Check that a value is representable in this type."""
        return self.min_value <= value <= self.max_value


@dataclass(frozen=True)
class PrimitiveType(Type):
    """
    A non-integer scalar type.

    Examples: f64, bool, str
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PathType(Type):
    """
    A nominal type identified by its canonical path.

    Examples: std::time::Duration, std::vec::Vec<u8>
    """

    path: str
    type_args: tuple[Type, ...] = ()

    def __str__(self) -> str:
        if self.type_args:
            args_str = ", ".join(str(arg) for arg in self.type_args)
            return f"{self.path}<{args_str}>"
        return self.path

    @property
    def name(self) -> str:
        """The last path segment."""
        return self.path.rsplit("::", 1)[-1]

    def is_resolved(self) -> bool:
        return all(arg.is_resolved() for arg in self.type_args)


@dataclass(frozen=True)
class ReferenceType(Type):
    """
    A borrowed reference to another type.

    Examples: &Duration, &mut Duration
    """

    referent: Type
    mutable: bool = False

    def __str__(self) -> str:
        prefix = "&mut " if self.mutable else "&"
        return f"{prefix}{self.referent}"

    def is_resolved(self) -> bool:
        return self.referent.is_resolved()


@dataclass(frozen=True)
class TypeVariable(Type):
    """
    A generic type parameter the host has not instantiated.

    Examples: T in fn elapsed<T>(t: T)
    """

    name: str

    def __str__(self) -> str:
        return self.name

    def is_resolved(self) -> bool:
        return False


@dataclass(frozen=True)
class UnknownType(Type):
    """A type the host could not infer."""

    def __str__(self) -> str:
        return "?"

    def is_resolved(self) -> bool:
        return False


I8 = IntegerType("i8", 8, True)
I16 = IntegerType("i16", 16, True)
I32 = IntegerType("i32", 32, True)
I64 = IntegerType("i64", 64, True)
I128 = IntegerType("i128", 128, True)
ISIZE = IntegerType("isize", 64, True)
U8 = IntegerType("u8", 8, False)
U16 = IntegerType("u16", 16, False)
U32 = IntegerType("u32", 32, False)
U64 = IntegerType("u64", 64, False)
U128 = IntegerType("u128", 128, False)
USIZE = IntegerType("usize", 64, False)

INTEGER_TYPES: dict[str, IntegerType] = {
    t.name: t for t in (I8, I16, I32, I64, I128, ISIZE, U8, U16, U32, U64, U128, USIZE)
}

F64 = PrimitiveType("f64")
BOOL = PrimitiveType("bool")

DURATION_PATHS: tuple[str, ...] = ("std::time::Duration", "core::time::Duration")
DURATION = PathType("std::time::Duration")


def peel_refs(ty: Type) -> Type:
    """Strip any number of reference layers: &&Duration -> Duration."""
    while isinstance(ty, ReferenceType):
        ty = ty.referent
    return ty


def integer_type(ty: Optional[Type]) -> Optional[IntegerType]:
    """Return the integer type behind a handle, or None if it is not one."""
    if ty is None:
        return None
    ty = peel_refs(ty)
    return ty if isinstance(ty, IntegerType) else None


# =============================================================================
# Type Oracle
# =============================================================================


class TypeOracle(Protocol):
    """The one question duration lints ask of the host type system."""

    def is_duration_type(self, ty: Optional[Type]) -> bool: ...


class DurationTypeOracle:
    """
    Recognizes the duration type by canonical path.

    References are peeled first, so `&Duration` counts. A missing or
    unresolved type is never a duration.

    Example:
        oracle = DurationTypeOracle()
        oracle.is_duration_type(ReferenceType(DURATION))  # True
        oracle.is_duration_type(TypeVariable("T"))        # False
    """

    def __init__(self, paths: Iterable[str] = DURATION_PATHS) -> None:
        self.paths = frozenset(paths)

    def is_duration_type(self, ty: Optional[Type]) -> bool:
        if ty is None:
            return False
        ty = peel_refs(ty)
        if not ty.is_resolved():
            return False
        return isinstance(ty, PathType) and ty.path in self.paths


__all__ = [
    "Type",
    "IntegerType",
    "PrimitiveType",
    "PathType",
    "ReferenceType",
    "TypeVariable",
    "UnknownType",
    "INTEGER_TYPES",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "ISIZE",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "USIZE",
    "F64",
    "BOOL",
    "DURATION",
    "DURATION_PATHS",
    "peel_refs",
    "integer_type",
    "TypeOracle",
    "DurationTypeOracle",
]
