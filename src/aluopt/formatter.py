"""
Text rendering of ALU programs and their analyses.

Usage:
    aluopt ssa monad.alu
    aluopt deps monad.alu
"""

from __future__ import annotations

from typing import Optional

from aluopt.compiler.dependency import dependency_masks
from aluopt.compiler.ssa import BinOp, Const, Input, SymbolicExpr, SymbolicProgram

# Expanded expressions longer than this are elided as "..." in the parent.
MAX_EXPANDED_WIDTH = 150


def format_expr(expr: SymbolicExpr) -> str:
    """Render one variable definition, e.g. `v3 * v6` or `input[2]`."""
    if isinstance(expr, Const):
        return str(expr.value)
    if isinstance(expr, Input):
        return f"input[{expr.index}]"
    return f"v{expr.a} {expr.op.symbol} v{expr.b}"


def format_symbolic_program(program: SymbolicProgram) -> str:
    """
    Render a symbolic program, one variable per line.

    Example:
        SymbolicProgram
        +--- Variables
        | v0 = 0
        | v1 = input[0]
        | v2 = v1 * v0
        +---
    """
    lines = ["SymbolicProgram", "+--- Variables"]
    for var_id, expr in enumerate(program.vars):
        lines.append(f"| v{var_id} = {format_expr(expr)}")
    lines.append("+---")
    return "\n".join(lines)


def format_mask(mask: int, num_inputs: int) -> str:
    """Render a dependency mask as one `#` (depends) or `.` per input."""
    return "".join("#" if (mask >> index) & 1 else "." for index in range(num_inputs))


def expand_expressions(program: SymbolicProgram) -> list[str]:
    """
    Fully expand each variable in terms of constants and inputs.

    Sub-expressions whose expansion exceeds `MAX_EXPANDED_WIDTH`
    characters are shown as "...".
    """
    expanded: list[str] = []
    for expr in program.vars:
        if not isinstance(expr, BinOp):
            expanded.append(format_expr(expr).replace("input", "in"))
            continue
        operands = []
        for var_id in (expr.a, expr.b):
            text = expanded[var_id]
            if len(text) > MAX_EXPANDED_WIDTH:
                text = "..."
            elif isinstance(program.vars[var_id], BinOp):
                text = f"({text})"
            operands.append(text)
        expanded.append(f"{operands[0]} {expr.op.symbol} {operands[1]}")
    return expanded


def format_dependency_table(program: SymbolicProgram, num_inputs: Optional[int] = None) -> str:
    """
    Render which input digits affect which variables.

    Args:
        program: The program to describe
        num_inputs: Number of mask columns; defaults to the highest input
            index still read, plus one

    Returns:
        A table with, per variable, its definition, its dependency mask
        and its fully expanded expression
    """
    masks = dependency_masks(program)
    if num_inputs is None:
        indices = program.input_indices()
        num_inputs = indices[-1] + 1 if indices else 0

    lines = ["Which vars depend on which input digits?"]
    for var_id, (expr, mask, expanded) in enumerate(
        zip(program.vars, masks, expand_expressions(program))
    ):
        lhs = f"v{var_id}"
        lines.append(
            f"| {lhs:>4} = {format_expr(expr):<16} {format_mask(mask, num_inputs):<14}  {expanded}"
        )
    lines.append("+---")
    return "\n".join(lines)


__all__ = [
    "MAX_EXPANDED_WIDTH",
    "format_expr",
    "format_symbolic_program",
    "format_mask",
    "expand_expressions",
    "format_dependency_table",
]
