"""
Input dependency (taint) analysis for symbolic programs.

For each variable, computes the set of input digits that can influence its
value, as a bitmask: bit k is set when input k flows into the variable.
The analysis is purely diagnostic. It tells which input digits jointly
constrain an expression, e.g. which pairs of digits must satisfy a
relation for the result to be zero.
"""

from aluopt.compiler.ssa import BinOp, Const, Input, SymbolicProgram


def dependency_masks(program: SymbolicProgram) -> list[int]:
    """
    Compute the input dependency mask of every variable.

    - A constant depends on no input
    - `input[k]` depends on input k only
    - A binary operation depends on the union of its operands' inputs

    Returns:
        One mask per variable, indexed by VarId
    """
    masks: list[int] = []
    for expr in program.vars:
        if isinstance(expr, Const):
            masks.append(0)
        elif isinstance(expr, Input):
            masks.append(1 << expr.index)
        elif isinstance(expr, BinOp):
            masks.append(masks[expr.a] | masks[expr.b])
    return masks


def inputs_in_mask(mask: int) -> list[int]:
    """List the input indices set in a dependency mask, ascending."""
    indices = []
    index = 0
    while mask:
        if mask & 1:
            indices.append(index)
        mask >>= 1
        index += 1
    return indices


def result_dependencies(program: SymbolicProgram) -> list[int]:
    """Input indices the program's result depends on."""
    return inputs_in_mask(dependency_masks(program)[-1])


__all__ = ["dependency_masks", "inputs_in_mask", "result_dependencies"]
