"""
Error types and source location tracking for the aluopt toolchain.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in an ALU program listing.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class AluError(Exception):
    """Base exception for all aluopt errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.location:
            return self.message

        text = f"[{self.location}] {self.message}"
        if self.source_line:
            # Caret under the offending column
            padding = " " * (4 + self.location.column - 1)
            text += f"\n    {self.source_line}\n{padding}^"
        return text


class ParserError(AluError):
    """Raised when a program listing contains a malformed instruction."""

    pass


# -----------------------------------------------------------------------------
# Concrete execution errors (recoverable at the call site)
# -----------------------------------------------------------------------------


class ExecutionError(AluError):
    """Raised when a program or symbolic program cannot be evaluated."""

    pass


class InvalidInputCount(ExecutionError):
    """Raised when the number of supplied inputs does not match the program."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Program expects {expected} inputs, got {actual}")


class DivideByZero(ExecutionError):
    """Raised when a `div` instruction has a zero divisor."""

    def __init__(self, dividend: int) -> None:
        self.dividend = dividend
        super().__init__(f"Division by zero ({dividend} / 0)")


class NegativeOrInvalidModulo(ExecutionError):
    """Raised when `mod` is applied to a negative dividend or a divisor <= 0."""

    def __init__(self, dividend: int, divisor: int) -> None:
        self.dividend = dividend
        self.divisor = divisor
        super().__init__(f"Invalid modulo ({dividend} % {divisor})")


# -----------------------------------------------------------------------------
# Optimizer errors (fatal: the symbolic program itself is malformed)
# -----------------------------------------------------------------------------


class OptimizationError(AluError):
    """Raised when the optimization pipeline meets an invalid symbolic program."""

    pass


class StaticModuloViolation(OptimizationError):
    """
    Raised when value-range analysis proves that a modulo divisor is always <= 0.

    Every execution reaching the variable would fail, so the program violates
    the machine's domain precondition.
    """

    def __init__(self, var_id: int, divisor_high: int) -> None:
        self.var_id = var_id
        self.divisor_high = divisor_high
        super().__init__(
            f"v{var_id}: modulo divisor is at most {divisor_high}, "
            "every execution reaching it fails"
        )


class SSAInvariantError(OptimizationError):
    """Raised when the final variable of a symbolic program is not its result."""

    pass
