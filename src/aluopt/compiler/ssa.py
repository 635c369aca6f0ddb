"""
Static Single Assignment form for ALU programs.

Symbolic execution of a `Program` turns every register write into a fresh
variable. Instead of "add x 2" mutating `x`, it appends a new variable
`v = x + 2` and makes register `x` point to `v`. The resulting dataflow graph
is stored as an arena: an ordered tuple of expressions where a variable is
identified by its position (its VarId), and a binary operation only ever
references variables with a smaller VarId. The graph is therefore acyclic
and topologically sorted by construction.

The last variable of a `SymbolicProgram` always holds the value of the
result register. Every optimization pass relies on this.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

from aluopt.compiler.operators import Op
from aluopt.compiler.program import (
    NUM_REGISTERS,
    BinaryInstruction,
    InputInstruction,
    Literal,
    Program,
    Register,
)
from aluopt.utils.errors import SSAInvariantError

# A symbolic program variable, identified by its index in `SymbolicProgram.vars`.
VarId = int


# -----------------------------------------------------------------------------
# Symbolic Expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Const:
    """A known integer value."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Input:
    """The input digit with the given index (0-based, in reading order)."""

    index: int

    def __str__(self) -> str:
        return f"input[{self.index}]"


@dataclass(frozen=True, slots=True)
class BinOp:
    """A binary operation on two earlier variables."""

    op: Op
    a: VarId
    b: VarId

    def __str__(self) -> str:
        return f"v{self.a} {self.op.symbol} v{self.b}"


SymbolicExpr = Union[Const, Input, BinOp]


@dataclass(frozen=True, slots=True)
class SymbolicRegisterState:
    """For each register, the variable it currently points to."""

    vars: tuple[VarId, VarId, VarId, VarId]

    def get(self, register: Register) -> VarId:
        return self.vars[register.value]

    def set(self, register: Register, var: VarId) -> SymbolicRegisterState:
        new_vars = list(self.vars)
        new_vars[register.value] = var
        return SymbolicRegisterState(tuple(new_vars))


# -----------------------------------------------------------------------------
# Symbolic Program
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SymbolicProgram:
    """
    A program where all register assignments are in SSA form.

    Attributes:
        vars: The variables the original program defines (implicitly).
            Variables holding binary operations depend on earlier
            variables, forming a dataflow graph. The last variable holds
            the value of the result register.
    """

    vars: tuple[SymbolicExpr, ...]

    def __len__(self) -> int:
        return len(self.vars)

    def __getitem__(self, var_id: VarId) -> SymbolicExpr:
        return self.vars[var_id]

    @property
    def num_vars(self) -> int:
        return len(self.vars)

    @property
    def num_constants(self) -> int:
        return sum(1 for expr in self.vars if isinstance(expr, Const))

    @property
    def num_inputs(self) -> int:
        """Number of distinct inputs the program still reads."""
        return len({expr.index for expr in self.vars if isinstance(expr, Input)})

    @property
    def result_var(self) -> VarId:
        return len(self.vars) - 1

    def input_indices(self) -> list[int]:
        """Sorted indices of the inputs the program still reads."""
        return sorted({expr.index for expr in self.vars if isinstance(expr, Input)})

    def is_well_formed(self) -> bool:
        """Check that every binary operation only references earlier variables."""
        if not self.vars:
            return False
        return all(
            not isinstance(expr, BinOp) or (0 <= expr.a < i and 0 <= expr.b < i)
            for i, expr in enumerate(self.vars)
        )

    def substitute_input(self, input_index: int, value: int) -> SymbolicProgram:
        return substitute_input(self, input_index, value)

    def __str__(self) -> str:
        from aluopt.formatter import format_symbolic_program

        return format_symbolic_program(self)


# -----------------------------------------------------------------------------
# SSA Construction
# -----------------------------------------------------------------------------


def build_ssa_with_states(
    program: Program,
    result_register: Register = Register.Z,
) -> tuple[SymbolicProgram, list[SymbolicRegisterState]]:
    """
    Perform symbolic execution of a program.

    Args:
        program: The program to convert
        result_register: The register whose final value is the result

    Returns:
        The program in SSA form, and the register -> variable mapping
        before the first and after each instruction

    Raises:
        SSAInvariantError: If the last variable defined is not the final
            value of `result_register` (e.g., trailing instructions that
            write other registers)
    """
    # The first variables are the initial, all-zero register contents.
    arena: list[SymbolicExpr] = [Const(0)] * NUM_REGISTERS
    state = SymbolicRegisterState(tuple(range(NUM_REGISTERS)))
    states = [state]
    next_input = 0

    def push(expr: SymbolicExpr) -> VarId:
        arena.append(expr)
        return len(arena) - 1

    for instr in program.instructions:
        if isinstance(instr, InputInstruction):
            state = state.set(instr.register, push(Input(next_input)))
            next_input += 1
        elif isinstance(instr, BinaryInstruction):
            a = state.get(instr.a)
            if isinstance(instr.b, Literal):
                b = push(Const(instr.b.value))
            else:
                b = state.get(instr.b.register)
            state = state.set(instr.a, push(BinOp(instr.op, a, b)))
        states.append(state)

    result_var = state.get(result_register)
    if result_var != len(arena) - 1:
        raise SSAInvariantError(
            f"Register {result_register} is last written by v{result_var}, "
            f"but the program defines {len(arena)} variables; "
            "the result must be the last definition"
        )

    return SymbolicProgram(tuple(arena)), states


def build_ssa(program: Program, result_register: Register = Register.Z) -> SymbolicProgram:
    """
    Convert a program to SSA form.

    The returned program's last variable holds the final value of
    `result_register`.
    """
    sym_prog, _states = build_ssa_with_states(program, result_register)
    return sym_prog


# -----------------------------------------------------------------------------
# Input Substitution
# -----------------------------------------------------------------------------


def substitute_input(program: SymbolicProgram, input_index: int, value: int) -> SymbolicProgram:
    """
    Replace every read of input `input_index` by the constant `value`.

    All other variables, and all operand indices, are left untouched.
    """
    return SymbolicProgram(
        tuple(
            Const(value) if isinstance(expr, Input) and expr.index == input_index else expr
            for expr in program.vars
        )
    )


def substitute_inputs(program: SymbolicProgram, values: Mapping[int, int]) -> SymbolicProgram:
    """Substitute several inputs at once (input index -> value)."""
    return SymbolicProgram(
        tuple(
            Const(values[expr.index]) if isinstance(expr, Input) and expr.index in values else expr
            for expr in program.vars
        )
    )


__all__ = [
    "VarId",
    "Const",
    "Input",
    "BinOp",
    "SymbolicExpr",
    "SymbolicRegisterState",
    "SymbolicProgram",
    "build_ssa",
    "build_ssa_with_states",
    "substitute_input",
    "substitute_inputs",
]
