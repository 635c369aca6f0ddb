"""
Unit tests for the ALU program model and concrete interpreter.

Tests cover:
- Operator semantics (truncating division, strict modulo, equality)
- Single-step transitions
- Full execution with and without state logging
- Execution errors
"""

import pytest

from aluopt.compiler.operators import MNEMONICS, Op, apply_op, truncating_div, try_apply_op
from aluopt.compiler.program import (
    BinaryInstruction,
    InputInstruction,
    Literal,
    Program,
    Register,
    RegisterRef,
    RegisterState,
    execute,
    execute_with_logging,
    step,
)
from aluopt.utils.errors import (
    DivideByZero,
    ExecutionError,
    InvalidInputCount,
    NegativeOrInvalidModulo,
)


class TestOperators:
    """Tests for operator semantics."""

    def test_add_and_mul(self):
        """Test ordinary signed arithmetic."""
        assert apply_op(Op.ADD, 5, -7) == -2
        assert apply_op(Op.MUL, -4, 6) == -24

    def test_division_truncates_toward_zero(self):
        """Test that division rounds toward zero, not down."""
        assert truncating_div(7, 2) == 3
        assert truncating_div(-7, 2) == -3
        assert truncating_div(7, -2) == -3
        assert truncating_div(-7, -2) == 3
        assert apply_op(Op.DIV, -1, 26) == 0

    def test_division_by_zero(self):
        """Test that a zero divisor raises DivideByZero."""
        with pytest.raises(DivideByZero):
            apply_op(Op.DIV, 5, 0)

    def test_modulo(self):
        """Test modulo with a valid dividend and divisor."""
        assert apply_op(Op.MOD, 27, 26) == 1
        assert apply_op(Op.MOD, 0, 26) == 0

    def test_modulo_rejects_negative_dividend(self):
        """Test that a negative dividend is rejected, unlike Python's %."""
        with pytest.raises(NegativeOrInvalidModulo):
            apply_op(Op.MOD, -1, 26)

    def test_modulo_rejects_non_positive_divisor(self):
        """Test that a divisor <= 0 is rejected."""
        with pytest.raises(NegativeOrInvalidModulo):
            apply_op(Op.MOD, 5, 0)
        with pytest.raises(NegativeOrInvalidModulo):
            apply_op(Op.MOD, 5, -3)

    def test_eql(self):
        """Test equality yields 1 or 0."""
        assert apply_op(Op.EQL, 3, 3) == 1
        assert apply_op(Op.EQL, 3, 4) == 0

    def test_try_apply_op(self):
        """Test the non-raising variant."""
        assert try_apply_op(Op.DIV, 9, 3) == 3
        assert try_apply_op(Op.DIV, 9, 0) is None
        assert try_apply_op(Op.MOD, -9, 3) is None

    def test_mnemonics(self):
        """Test the mnemonic lookup table."""
        assert MNEMONICS == {
            "add": Op.ADD,
            "mul": Op.MUL,
            "div": Op.DIV,
            "mod": Op.MOD,
            "eql": Op.EQL,
        }
        assert str(Op.EQL) == "=="

    def test_execution_errors_share_base_class(self):
        """Test the error hierarchy."""
        assert issubclass(DivideByZero, ExecutionError)
        assert issubclass(NegativeOrInvalidModulo, ExecutionError)
        assert issubclass(InvalidInputCount, ExecutionError)


class TestRegisterState:
    """Tests for the immutable register state."""

    def test_initial_state_is_zero(self):
        """Test the default state."""
        state = RegisterState()
        assert all(state.get(reg) == 0 for reg in Register)

    def test_set_returns_new_state(self):
        """Test that set does not modify the original state."""
        state = RegisterState()
        new_state = state.set(Register.Y, 42)
        assert state.get(Register.Y) == 0
        assert new_state.get(Register.Y) == 42
        assert new_state.values == (0, 0, 42, 0)

    def test_resolve(self):
        """Test resolving literal and register operands."""
        state = RegisterState((1, 2, 3, 4))
        assert state.resolve(Literal(-5)) == -5
        assert state.resolve(RegisterRef(Register.Z)) == 4


class TestStep:
    """Tests for single-instruction transitions."""

    def test_input_step(self):
        """Test that inp stores the input value."""
        state = step(RegisterState(), InputInstruction(Register.W), 7)
        assert state.values == (7, 0, 0, 0)

    def test_input_step_requires_value(self):
        """Test that inp without a value is rejected."""
        with pytest.raises(ValueError):
            step(RegisterState(), InputInstruction(Register.W))

    def test_binary_step_with_register(self):
        """Test a binary instruction reading another register."""
        state = RegisterState((3, 4, 0, 0))
        instr = BinaryInstruction(Op.MUL, Register.X, RegisterRef(Register.W))
        assert step(state, instr).values == (3, 12, 0, 0)

    def test_step_is_pure(self):
        """Test that stepping does not modify the input state."""
        state = RegisterState((3, 4, 0, 0))
        step(state, BinaryInstruction(Op.ADD, Register.W, Literal(1)))
        assert state.values == (3, 4, 0, 0)


class TestExecute:
    """Tests for whole-program execution."""

    def test_negate(self, parse):
        """Test inp x / mul x -1."""
        program = parse("inp x\nmul x -1")
        assert execute(program, [123], Register.X) == -123

        states = execute_with_logging(program, [123])
        assert states[-1] == RegisterState((0, -123, 0, 0))

    def test_is_triple(self, parse):
        """Test a program checking whether the second input is 3x the first."""
        program = parse("inp z\ninp x\nmul z 3\neql z x")
        assert execute(program, [22, 66]) == 1
        assert execute(program, [22, 65]) == 0

        assert execute_with_logging(program, [22, 66])[-1] == RegisterState((0, 66, 0, 1))
        assert execute_with_logging(program, [22, 65])[-1] == RegisterState((0, 65, 0, 0))

    def test_decompose_into_bits(self, parse):
        """Test a program splitting its input into four bits."""
        program = parse(
            """
            inp w
            add z w
            mod z 2
            div w 2
            add y w
            mod y 2
            div w 2
            add x w
            mod x 2
            div w 2
            mod w 2
            """
        )
        states = execute_with_logging(program, [0b1010])
        assert states[-1] == RegisterState((1, 0, 1, 0))

    def test_logging_records_every_instruction(self, parse):
        """Test that the log holds the initial state plus one per instruction."""
        program = parse("inp w\nadd w 2\nmul w w")
        states = execute_with_logging(program, [3])
        assert len(states) == len(program) + 1
        assert [s.get(Register.W) for s in states] == [0, 3, 5, 25]

    def test_missing_inputs(self, parse):
        """Test that too few inputs are rejected up front."""
        program = parse("inp x\nmul x -1")
        with pytest.raises(InvalidInputCount) as exc_info:
            execute_with_logging(program, [])
        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 0

    def test_extra_inputs(self, parse):
        """Test that too many inputs are rejected up front."""
        program = parse("inp x")
        with pytest.raises(InvalidInputCount):
            execute(program, [1, 2])

    def test_runtime_division_by_zero(self, parse):
        """Test that division by a zero register fails at run time."""
        program = parse("inp w\ndiv w x")
        with pytest.raises(DivideByZero):
            execute(program, [5])

    def test_runtime_invalid_modulo(self, parse):
        """Test that the strict modulo rejects negative register contents."""
        program = parse("inp w\nmul w -1\nmod w 3")
        with pytest.raises(NegativeOrInvalidModulo):
            execute(program, [5])

    def test_num_inputs(self, parse):
        """Test counting input instructions."""
        assert parse("inp w\nadd w 1\ninp x").num_inputs == 2
        assert Program().num_inputs == 0

    def test_valid_model_numbers(self, monad_program, highest_model, lowest_model):
        """Test that known valid model numbers leave z at 0."""
        assert execute(monad_program, highest_model) == 0
        assert execute(monad_program, lowest_model) == 0

    def test_invalid_model_number(self, monad_program):
        """Test that a model number violating a digit relation fails the check."""
        assert execute(monad_program, [9] * 14) != 0
