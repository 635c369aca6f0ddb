"""
ALU program model and concrete interpreter.

This module defines the instruction set of the four-register arithmetic
machine and a reference interpreter for it. Programs, instructions and
register states are immutable: executing an instruction is a pure
`(state, instruction) -> state` transition, and the interpreter threads the
state explicitly from one instruction to the next.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from aluopt.compiler.operators import Op, apply_op
from aluopt.utils.errors import InvalidInputCount


class Register(Enum):
    """The four registers of the ALU. The value is the register's slot index."""

    W = 0
    X = 1
    Y = 2
    Z = 3

    @classmethod
    def from_name(cls, name: str) -> "Register":
        """Look up a register by its listing name ("w", "x", "y" or "z")."""
        if name not in _REGISTER_NAMES:
            raise ValueError(f"Invalid register: {name!r}")
        return cls[name.upper()]

    def __str__(self) -> str:
        return self.name.lower()


NUM_REGISTERS = len(Register)

# Listings name registers in lowercase only.
_REGISTER_NAMES = frozenset(str(reg) for reg in Register)


# -----------------------------------------------------------------------------
# Operands and Instructions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Literal:
    """An integer literal operand."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class RegisterRef:
    """An operand reading the current contents of a register."""

    register: Register

    def __str__(self) -> str:
        return str(self.register)


Value = Union[Literal, RegisterRef]


@dataclass(frozen=True, slots=True)
class InputInstruction:
    """
    Read the next input digit into a register.

    Example:
        inp w
    """

    register: Register

    def __str__(self) -> str:
        return f"inp {self.register}"


@dataclass(frozen=True, slots=True)
class BinaryInstruction:
    """
    Compute `op(a, b)` and store the result back into register `a`.

    Examples:
        add x w
        mod y 26
    """

    op: Op
    a: Register
    b: Value

    def __str__(self) -> str:
        return f"{self.op.mnemonic} {self.a} {self.b}"


Instruction = Union[InputInstruction, BinaryInstruction]


@dataclass(frozen=True, slots=True)
class Program:
    """An ordered sequence of ALU instructions."""

    instructions: tuple[Instruction, ...] = ()

    @property
    def num_inputs(self) -> int:
        """Number of inputs the program consumes."""
        return sum(1 for instr in self.instructions if isinstance(instr, InputInstruction))

    def __len__(self) -> int:
        return len(self.instructions)

    def __str__(self) -> str:
        return "\n".join(str(instr) for instr in self.instructions)


# -----------------------------------------------------------------------------
# Register State
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RegisterState:
    """The contents of the four registers at one point in execution."""

    values: tuple[int, int, int, int] = (0, 0, 0, 0)

    def get(self, register: Register) -> int:
        return self.values[register.value]

    def set(self, register: Register, value: int) -> RegisterState:
        """Return a new state with `register` holding `value`."""
        values = list(self.values)
        values[register.value] = value
        return RegisterState(tuple(values))

    def resolve(self, operand: Value) -> int:
        """Evaluate an operand against this state."""
        if isinstance(operand, Literal):
            return operand.value
        return self.get(operand.register)

    def __str__(self) -> str:
        return " ".join(f"{reg}={self.get(reg)}" for reg in Register)


# -----------------------------------------------------------------------------
# Interpreter
# -----------------------------------------------------------------------------


def step(
    state: RegisterState,
    instruction: Instruction,
    input_value: Optional[int] = None,
) -> RegisterState:
    """
    Execute a single instruction.

    Args:
        state: The register state before the instruction
        instruction: The instruction to execute
        input_value: The value consumed by an `inp` instruction

    Returns:
        The register state after the instruction

    Raises:
        DivideByZero, NegativeOrInvalidModulo: On invalid arithmetic
    """
    if isinstance(instruction, InputInstruction):
        if input_value is None:
            raise ValueError("An input instruction requires an input value")
        return state.set(instruction.register, input_value)

    a = state.get(instruction.a)
    b = state.resolve(instruction.b)
    return state.set(instruction.a, apply_op(instruction.op, a, b))


def execute_with_logging(program: Program, inputs: Sequence[int]) -> list[RegisterState]:
    """
    Run a program, recording the register state around every instruction.

    Args:
        program: The program to run
        inputs: The input values, consumed in order by `inp` instructions

    Returns:
        The initial all-zero state followed by the state after each
        instruction (one more entry than there are instructions)

    Raises:
        InvalidInputCount: If `len(inputs)` differs from `program.num_inputs`
        DivideByZero, NegativeOrInvalidModulo: On invalid arithmetic
    """
    if len(inputs) != program.num_inputs:
        raise InvalidInputCount(program.num_inputs, len(inputs))

    state = RegisterState()
    states = [state]
    remaining = iter(inputs)

    for instr in program.instructions:
        value = next(remaining) if isinstance(instr, InputInstruction) else None
        state = step(state, instr, value)
        states.append(state)

    return states


def execute(
    program: Program,
    inputs: Sequence[int],
    result_register: Register = Register.Z,
) -> int:
    """
    Run a program and return the final contents of `result_register`.

    Raises:
        InvalidInputCount: If `len(inputs)` differs from `program.num_inputs`
        DivideByZero, NegativeOrInvalidModulo: On invalid arithmetic
    """
    if len(inputs) != program.num_inputs:
        raise InvalidInputCount(program.num_inputs, len(inputs))

    state = RegisterState()
    remaining = iter(inputs)
    for instr in program.instructions:
        value = next(remaining) if isinstance(instr, InputInstruction) else None
        state = step(state, instr, value)

    return state.get(result_register)


__all__ = [
    "Register",
    "NUM_REGISTERS",
    "Literal",
    "RegisterRef",
    "Value",
    "InputInstruction",
    "BinaryInstruction",
    "Instruction",
    "Program",
    "RegisterState",
    "step",
    "execute",
    "execute_with_logging",
]
