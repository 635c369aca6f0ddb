"""
Pytest configuration and shared fixtures for aluopt tests.
"""

import numpy as np
import pytest

from aluopt.compiler.parser import parse_program
from aluopt.compiler.program import Program
from aluopt.compiler.ssa import SymbolicProgram, build_ssa


# =============================================================================
# Model number checker
# =============================================================================

# One block per input digit: (divide z by, add to x, add to y).
# Blocks dividing by 1 push `digit + y_offset` onto a base-26 stack held in z,
# blocks dividing by 26 pop it and only leave z unchanged when
# `popped + x_offset == digit`. A model number is valid when z ends at 0.
MONAD_BLOCKS: list[tuple[int, int, int]] = [
    (1, 12, 2),
    (1, 11, 4),
    (1, 13, 8),
    (1, 10, 3),
    (1, 14, 6),
    (26, -8, 5),   # in[5] == in[4] - 2
    (26, 4, 9),    # in[6] == in[3] + 7
    (1, 12, 14),
    (26, -10, 1),  # in[8] == in[7] + 4
    (1, 11, 6),
    (26, -12, 7),  # in[10] == in[9] - 6
    (26, -3, 2),   # in[11] == in[2] + 5
    (26, -11, 11),  # in[12] == in[1] - 7
    (26, -2, 3),   # in[13] == in[0]
]

HIGHEST_MODEL_NUMBER = "99429795993929"
LOWEST_MODEL_NUMBER = "18113181571611"

MONAD_BLOCK_TEMPLATE = """\
inp w
mul x 0
add x z
mod x 26
div z {div}
add x {x_offset}
eql x w
eql x 0
mul y 0
add y 25
mul y x
add y 1
mul z y
mul y 0
add y w
add y {y_offset}
mul y x
add z y
"""


def make_monad_source(blocks: list[tuple[int, int, int]] = MONAD_BLOCKS) -> str:
    """Build a model number checker listing from block parameters."""
    return "".join(
        MONAD_BLOCK_TEMPLATE.format(div=div, x_offset=x_offset, y_offset=y_offset)
        for div, x_offset, y_offset in blocks
    )


def digits_of(model_number: str) -> list[int]:
    return [int(d) for d in model_number]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def parse():
    """Fixture to parse a program listing."""

    def _parse(source: str) -> Program:
        return parse_program(source)

    return _parse


@pytest.fixture
def to_ssa(parse):
    """Fixture to parse a listing and convert it to SSA form."""

    def _to_ssa(source: str) -> SymbolicProgram:
        return build_ssa(parse(source))

    return _to_ssa


@pytest.fixture(scope="session")
def monad_source() -> str:
    """Listing of the 14-digit model number checker."""
    return make_monad_source()


@pytest.fixture(scope="session")
def monad_program(monad_source) -> Program:
    return parse_program(monad_source)


@pytest.fixture(scope="session")
def monad_ssa(monad_program) -> SymbolicProgram:
    return build_ssa(monad_program)


@pytest.fixture
def highest_model() -> list[int]:
    return digits_of(HIGHEST_MODEL_NUMBER)


@pytest.fixture
def lowest_model() -> list[int]:
    return digits_of(LOWEST_MODEL_NUMBER)


@pytest.fixture
def random_digits():
    """Factory for reproducible matrices of input digits in 1..9."""

    def _random_digits(rows: int = 256, columns: int = 14, seed: int = 2021) -> np.ndarray:
        rng = np.random.default_rng(seed)
        return rng.integers(1, 10, size=(rows, columns), dtype=np.int64)

    return _random_digits
