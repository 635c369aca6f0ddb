"""
Interval abstract interpretation over symbolic programs.

Each variable is assigned a conservative closed interval `[lo, hi]` that
contains every value it can take for inputs in 1..9, or `Unknown` when no
useful bound is available. The analysis is a single forward walk over the
arena: operands always precede their uses, so their ranges are known.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from aluopt.compiler.operators import Op
from aluopt.compiler.ssa import BinOp, Const, Input, SymbolicProgram, VarId
from aluopt.utils.errors import StaticModuloViolation


@dataclass(frozen=True, slots=True)
class Interval:
    """A closed integer range, lo..=hi."""

    lo: int
    hi: int

    @property
    def is_singleton(self) -> bool:
        return self.lo == self.hi

    def disjoint(self, other: Interval) -> bool:
        return self.hi < other.lo or other.hi < self.lo

    def __contains__(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def __str__(self) -> str:
        return f"[{self.lo}, {self.hi}]"


@dataclass(frozen=True, slots=True)
class Unknown:
    """No information available."""

    def __str__(self) -> str:
        return "?"


UNKNOWN = Unknown()

ValueRange = Union[Interval, Unknown]

# Inputs are the digits of a model number, never zero.
INPUT_RANGE = Interval(1, 9)


def binop_range(op: Op, a: ValueRange, b: ValueRange, var_id: VarId = -1) -> ValueRange:
    """
    Compute the range of `a op b`.

    Raises:
        StaticModuloViolation: If `op` is a modulo whose divisor range is
            entirely <= 0
    """
    if op is Op.ADD:
        if isinstance(a, Unknown) or isinstance(b, Unknown):
            return UNKNOWN
        return Interval(a.lo + b.lo, a.hi + b.hi)

    if op is Op.MUL:
        if isinstance(a, Unknown) or isinstance(b, Unknown):
            return UNKNOWN
        corners = (a.lo * b.lo, a.lo * b.hi, a.hi * b.lo, a.hi * b.hi)
        return Interval(min(corners), max(corners))

    if op is Op.DIV:
        # A non-negative dividend smaller than every divisor truncates to 0.
        if isinstance(a, Interval) and isinstance(b, Interval) and a.lo >= 0 and a.hi < b.lo:
            return Interval(0, 0)
        return UNKNOWN

    if op is Op.MOD:
        if isinstance(b, Unknown):
            return UNKNOWN
        if b.hi <= 0:
            raise StaticModuloViolation(var_id, b.hi)
        if isinstance(a, Unknown):
            return Interval(0, b.hi - 1)
        return Interval(0, min(max(a.hi, 0), b.hi - 1))

    if op is Op.EQL:
        if isinstance(a, Interval) and isinstance(b, Interval):
            if a.disjoint(b):
                return Interval(0, 0)
            if a.is_singleton and a == b:
                return Interval(1, 1)
        return Interval(0, 1)

    raise ValueError(f"Unknown operator: {op}")


def compute_value_ranges(program: SymbolicProgram) -> list[ValueRange]:
    """
    Compute the value range of every variable of a program.

    Returns:
        One range per variable, indexed by VarId

    Raises:
        StaticModuloViolation: If a modulo is guaranteed to fail
    """
    ranges: list[ValueRange] = []

    for var_id, expr in enumerate(program.vars):
        if isinstance(expr, Const):
            ranges.append(Interval(expr.value, expr.value))
        elif isinstance(expr, Input):
            ranges.append(INPUT_RANGE)
        elif isinstance(expr, BinOp):
            ranges.append(binop_range(expr.op, ranges[expr.a], ranges[expr.b], var_id))

    return ranges


__all__ = [
    "Interval",
    "Unknown",
    "UNKNOWN",
    "ValueRange",
    "INPUT_RANGE",
    "binop_range",
    "compute_value_ranges",
]
