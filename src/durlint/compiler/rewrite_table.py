"""
Rewrite tables: which (accessor, divisor) pairs have a direct accessor.

A table is a plain immutable mapping keyed by (source accessor, divisor).
Rule order never matters; a key that maps to two different targets is
rejected when the table is built. When the units of the accessors are known,
every rule is also checked to be exact: dividing the source accessor by the
divisor must give the target accessor for every value, with no rounding
difference.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from durlint.utils.errors import RewriteTableError


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """
    `<receiver>.<source_accessor>() / <divisor>` is `<receiver>.<target_accessor>()`.

    Attributes:
        source_accessor: The accessor called in the original expression
        divisor: The exact integer the accessor's result is divided by
        target_accessor: The accessor that returns the quotient directly
    """

    source_accessor: str
    divisor: int
    target_accessor: str

    @property
    def key(self) -> tuple[str, int]:
        return (self.source_accessor, self.divisor)

    def __str__(self) -> str:
        return f"{self.source_accessor}() / {self.divisor} -> {self.target_accessor}()"


class RewriteTable:
    """
    Immutable lookup from (accessor, divisor) to a replacement accessor.

    Args:
        rules: The rule set; duplicates with the same target are harmless
        units: Optional units-per-second of each accessor, used to verify
            that every rule is exact

    Raises:
        RewriteTableError: If two rules share a key with different targets,
            or a rule is not exact for the given units
    """

    def __init__(
        self,
        rules: Iterable[RewriteRule],
        units: Optional[Mapping[str, int]] = None,
    ) -> None:
        entries: dict[tuple[str, int], RewriteRule] = {}
        for rule in rules:
            existing = entries.get(rule.key)
            if existing is not None and existing.target_accessor != rule.target_accessor:
                raise RewriteTableError(
                    f"conflicting rewrite rules for {rule.source_accessor}() / {rule.divisor}",
                    conflicting=[str(existing), str(rule)],
                )
            if units is not None:
                self._check_exact(rule, units)
            entries[rule.key] = rule
        self._entries = MappingProxyType(entries)

    @staticmethod
    def _check_exact(rule: RewriteRule, units: Mapping[str, int]) -> None:
        source_units = units.get(rule.source_accessor)
        target_units = units.get(rule.target_accessor)
        if source_units is None or target_units is None:
            raise RewriteTableError(f"unknown accessor units for rule {rule}")
        if target_units * rule.divisor != source_units:
            raise RewriteTableError(
                f"rule {rule} is not exact: {source_units} / {rule.divisor} != {target_units}"
            )

    def lookup(self, accessor: str, divisor: int) -> Optional[str]:
        """Return the replacement accessor, or None when no rule applies."""
        rule = self._entries.get((accessor, divisor))
        return rule.target_accessor if rule is not None else None

    @property
    def rules(self) -> tuple[RewriteRule, ...]:
        return tuple(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[RewriteRule]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Duration Sub-second Accessors
# =============================================================================


SUBSEC_NANOS = "subsec_nanos"
SUBSEC_MICROS = "subsec_micros"
SUBSEC_MILLIS = "subsec_millis"

# How many of each accessor's unit fit in one second
SUBSEC_UNITS_PER_SECOND: dict[str, int] = {
    SUBSEC_NANOS: 1_000_000_000,
    SUBSEC_MICROS: 1_000_000,
    SUBSEC_MILLIS: 1_000,
}

SUBSEC_RULES: tuple[RewriteRule, ...] = (
    RewriteRule(SUBSEC_NANOS, 1_000, SUBSEC_MICROS),
    RewriteRule(SUBSEC_NANOS, 1_000_000, SUBSEC_MILLIS),
    RewriteRule(SUBSEC_MICROS, 1_000, SUBSEC_MILLIS),
)

SUBSEC_TABLE = RewriteTable(SUBSEC_RULES, units=SUBSEC_UNITS_PER_SECOND)


def lookup(accessor: str, divisor: int) -> Optional[str]:
    """Look up a sub-second accessor rewrite in the canonical table."""
    return SUBSEC_TABLE.lookup(accessor, divisor)


__all__ = [
    "RewriteRule",
    "RewriteTable",
    "SUBSEC_NANOS",
    "SUBSEC_MICROS",
    "SUBSEC_MILLIS",
    "SUBSEC_UNITS_PER_SECOND",
    "SUBSEC_RULES",
    "SUBSEC_TABLE",
    "lookup",
]
