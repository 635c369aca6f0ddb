"""
Parser for ALU program listings.

A listing holds one instruction per line:

    inp w
    add x -12
    eql x w

Tokens are whitespace-delimited and blank lines are skipped. A line whose
first non-blank character is `#` is a comment.
"""

import re
from typing import Optional

from aluopt.compiler.operators import MNEMONICS
from aluopt.compiler.program import (
    BinaryInstruction,
    InputInstruction,
    Instruction,
    Literal,
    Program,
    Register,
    RegisterRef,
    Value,
)
from aluopt.utils.errors import ParserError, SourceLocation

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_TOKEN_RE = re.compile(r"\S+")


class Parser:
    """
    Line-oriented parser producing a `Program`.

    Example:
        program = Parser("inp x\\nmul x -1").parse()
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        self.source = source
        self.filename = filename
        self._lines = source.splitlines()
        self._line_no = 0

    def parse(self) -> Program:
        """Parse the whole listing."""
        instructions: list[Instruction] = []

        for line_no, line in enumerate(self._lines, start=1):
            self._line_no = line_no
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            instructions.append(self._parse_instruction(line))

        return Program(tuple(instructions))

    def _parse_instruction(self, line: str) -> Instruction:
        tokens = [(m.group(), m.start() + 1) for m in _TOKEN_RE.finditer(line)]
        mnemonic, column = tokens[0]

        if mnemonic == "inp":
            self._expect_operands(tokens, 1)
            return InputInstruction(self._parse_register(*tokens[1]))

        op = MNEMONICS.get(mnemonic)
        if op is None:
            raise self._error(f"Unknown instruction '{mnemonic}'", column)

        self._expect_operands(tokens, 2)
        a = self._parse_register(*tokens[1])
        b = self._parse_value(*tokens[2])
        return BinaryInstruction(op=op, a=a, b=b)

    def _expect_operands(self, tokens: list[tuple[str, int]], count: int) -> None:
        mnemonic, column = tokens[0]
        if len(tokens) - 1 < count:
            raise self._error(
                f"'{mnemonic}' expects {count} operand(s), got {len(tokens) - 1}",
                column,
            )
        if len(tokens) - 1 > count:
            _, extra_column = tokens[count + 1]
            raise self._error(f"Unexpected operand after '{mnemonic}'", extra_column)

    def _parse_register(self, text: str, column: int) -> Register:
        try:
            return Register.from_name(text)
        except ValueError:
            raise self._error(f"Expected a register (w, x, y, z), got '{text}'", column) from None

    def _parse_value(self, text: str, column: int) -> Value:
        if _INTEGER_RE.match(text):
            return Literal(int(text))
        return RegisterRef(self._parse_register(text, column))

    def _error(self, message: str, column: int) -> ParserError:
        location = SourceLocation(self._line_no, column, self.filename)
        return ParserError(message, location, self._lines[self._line_no - 1])


def parse_program(source: str, filename: Optional[str] = None) -> Program:
    """
    Convenience function to parse a program listing.

    Args:
        source: The listing text
        filename: Optional filename used in error messages

    Returns:
        The parsed program

    Raises:
        ParserError: On a malformed line
    """
    return Parser(source, filename).parse()


__all__ = ["Parser", "parse_program"]
