"""
Concrete evaluation of symbolic programs.

Evaluating a `SymbolicProgram` walks the arena in order, so every operand is
already computed when a binary operation is reached. The scalar evaluator
mirrors the interpreter in `aluopt.compiler.program`; the batch evaluator
runs the same walk over numpy arrays, evaluating one program against many
input assignments at once. Both are used to cross-check SSA construction
and the optimization passes.
"""

from typing import Sequence

import numpy as np

from aluopt.compiler.operators import Op, apply_op
from aluopt.compiler.ssa import BinOp, Const, Input, SymbolicProgram
from aluopt.utils.errors import DivideByZero, InvalidInputCount, NegativeOrInvalidModulo


def _required_inputs(program: SymbolicProgram) -> int:
    indices = program.input_indices()
    return indices[-1] + 1 if indices else 0


def evaluate_all(program: SymbolicProgram, inputs: Sequence[int]) -> list[int]:
    """
    Evaluate every variable of a symbolic program.

    Args:
        program: The program to evaluate
        inputs: Input values; `Input(k)` reads `inputs[k]`. Substituted
            inputs may still be supplied, they are ignored.

    Returns:
        The value of each variable, indexed by VarId

    Raises:
        InvalidInputCount: If an input index is out of range
        DivideByZero, NegativeOrInvalidModulo: On invalid arithmetic
    """
    required = _required_inputs(program)
    if len(inputs) < required:
        raise InvalidInputCount(required, len(inputs))

    values: list[int] = []
    for expr in program.vars:
        if isinstance(expr, Const):
            values.append(expr.value)
        elif isinstance(expr, Input):
            values.append(int(inputs[expr.index]))
        else:
            values.append(apply_op(expr.op, values[expr.a], values[expr.b]))
    return values


def evaluate(program: SymbolicProgram, inputs: Sequence[int]) -> int:
    """Evaluate a symbolic program and return its result (the last variable)."""
    return evaluate_all(program, inputs)[-1]


def evaluate_batch(program: SymbolicProgram, digits: np.ndarray) -> np.ndarray:
    """
    Evaluate a symbolic program against many input assignments.

    Args:
        program: The program to evaluate
        digits: Integer array of shape (n_rows, n_inputs); row `r` is one
            input assignment

    Returns:
        int64 array of shape (n_rows,) with the result for each row

    Raises:
        InvalidInputCount: If `digits` has too few columns
        DivideByZero, NegativeOrInvalidModulo: If any row hits invalid
            arithmetic
    """
    digits = np.atleast_2d(np.asarray(digits, dtype=np.int64))
    n_rows, n_cols = digits.shape
    required = _required_inputs(program)
    if n_cols < required:
        raise InvalidInputCount(required, n_cols)

    values: list[np.ndarray] = []
    for expr in program.vars:
        if isinstance(expr, Const):
            values.append(np.full(n_rows, expr.value, dtype=np.int64))
        elif isinstance(expr, Input):
            values.append(digits[:, expr.index])
        else:
            values.append(_apply_vectorized(expr, values[expr.a], values[expr.b]))
    return values[-1]


def _apply_vectorized(expr: BinOp, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    if expr.op is Op.ADD:
        return a + b
    if expr.op is Op.MUL:
        return a * b
    if expr.op is Op.DIV:
        zero = b == 0
        if zero.any():
            raise DivideByZero(int(a[np.argmax(zero)]))
        quotient = np.abs(a) // np.abs(b)
        return np.where((a >= 0) == (b > 0), quotient, -quotient)
    if expr.op is Op.MOD:
        invalid = (a < 0) | (b <= 0)
        if invalid.any():
            row = int(np.argmax(invalid))
            raise NegativeOrInvalidModulo(int(a[row]), int(b[row]))
        return a % b
    if expr.op is Op.EQL:
        return (a == b).astype(np.int64)
    raise ValueError(f"Unknown operator: {expr.op}")


__all__ = ["evaluate", "evaluate_all", "evaluate_batch"]
