"""
The five binary operators of the ALU.

Each operator maps to:
- The mnemonic used in program listings (e.g., "add")
- The infix symbol used when rendering symbolic programs (e.g., "+")
- Its concrete semantics, shared by the interpreter, the symbolic
  evaluator and the constant folder
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from aluopt.utils.errors import DivideByZero, ExecutionError, NegativeOrInvalidModulo


class Op(Enum):
    """Binary operator types."""

    ADD = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    EQL = auto()

    @property
    def mnemonic(self) -> str:
        return OPERATORS[self].mnemonic

    @property
    def symbol(self) -> str:
        return OPERATORS[self].symbol

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class OperatorInfo:
    """
    Information about an ALU operator.

    Attributes:
        mnemonic: The instruction name in program listings
        symbol: Infix symbol for symbolic listings
        commutative: Whether operands may be swapped
    """
    mnemonic: str
    symbol: str
    commutative: bool


OPERATORS: dict[Op, OperatorInfo] = {
    Op.ADD: OperatorInfo(mnemonic="add", symbol="+", commutative=True),
    Op.MUL: OperatorInfo(mnemonic="mul", symbol="*", commutative=True),
    Op.DIV: OperatorInfo(mnemonic="div", symbol="/", commutative=False),
    Op.MOD: OperatorInfo(mnemonic="mod", symbol="%", commutative=False),
    Op.EQL: OperatorInfo(mnemonic="eql", symbol="==", commutative=True),
}

# Reverse lookup used by the parser
MNEMONICS: dict[str, Op] = {info.mnemonic: op for op, info in OPERATORS.items()}


def truncating_div(lhs: int, rhs: int) -> int:
    """Integer division rounding toward zero. `rhs` must be non-zero."""
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs >= 0) == (rhs > 0) else -quotient


def apply_op(op: Op, lhs: int, rhs: int) -> int:
    """
    Evaluate `lhs op rhs` with the machine's semantics.

    Raises:
        DivideByZero: `div` with a zero divisor
        NegativeOrInvalidModulo: `mod` with lhs < 0 or rhs <= 0
    """
    if op is Op.ADD:
        return lhs + rhs
    if op is Op.MUL:
        return lhs * rhs
    if op is Op.DIV:
        if rhs == 0:
            raise DivideByZero(lhs)
        return truncating_div(lhs, rhs)
    if op is Op.MOD:
        if lhs < 0 or rhs <= 0:
            raise NegativeOrInvalidModulo(lhs, rhs)
        return lhs % rhs
    if op is Op.EQL:
        return 1 if lhs == rhs else 0
    raise ValueError(f"Unknown operator: {op}")


def try_apply_op(op: Op, lhs: int, rhs: int) -> Optional[int]:
    """Like `apply_op`, but returns None instead of raising."""
    try:
        return apply_op(op, lhs, rhs)
    except ExecutionError:
        return None


__all__ = [
    "Op",
    "OperatorInfo",
    "OPERATORS",
    "MNEMONICS",
    "truncating_div",
    "apply_op",
    "try_apply_op",
]
