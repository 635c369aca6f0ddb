"""
Optimization passes over symbolic ALU programs.

This module provides the rewrite passes of the SSA middle-end:
- Constant Folding: Evaluate operations on known values, apply identities
- Value Ranges: Replace variables whose interval collapses to one value
- Common Subexpression Elimination: Hash-cons identical operations
- Dead Code Elimination: Drop variables the result does not depend on
- Modulo Rewrite: (a * 26 + b) % 26 -> b % 26
- Division Rewrite: (a * 26 + b) / 26 -> a + b / 26

and a fixed-point driver that repeats them, in that order, until a full
round leaves the program unchanged.

Every pass is a pure function: it returns a new `SymbolicProgram` and never
modifies its input. Every pass preserves the invariant that the last
variable of the program holds the result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from aluopt.compiler.operators import Op, try_apply_op
from aluopt.compiler.ssa import BinOp, Const, SymbolicExpr, SymbolicProgram, VarId
from aluopt.compiler.value_range import compute_value_ranges, Interval
from aluopt.utils.errors import SSAInvariantError

logger = logging.getLogger(__name__)

# The machine's programs keep a stack of digits in a base-26 number.
DEFAULT_RADIX = 26

# Convergence is empirical; puzzle programs settle in well under a dozen rounds.
DEFAULT_MAX_ROUNDS = 64


# =============================================================================
# Optimizer Pass Interface
# =============================================================================


class OptimizerPass(ABC):
    """
    Abstract base class for optimization passes.

    Each optimizer pass implements a specific rewrite and returns a new
    (potentially modified) symbolic program.
    """

    @abstractmethod
    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        """
        Apply the optimization pass to a program.

        Args:
            program: The input symbolic program

        Returns:
            A new symbolic program with the rewrite applied
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the optimization pass."""
        pass


def _is_const(expr: SymbolicExpr, value: int) -> bool:
    return isinstance(expr, Const) and expr.value == value


# =============================================================================
# 1. Constant Folder
# =============================================================================


class ConstantFolder(OptimizerPass):
    """
    Fold operations on constants and simplify algebraic identities.

    Identities applied:
    - x + 0 -> x, 0 + x -> x
    - x * 0 -> 0, 0 * x -> 0
    - x * 1 -> x, 1 * x -> x
    - x / 1 -> x, 0 / x -> 0
    - x % 1 -> 0
    - x == x -> 1

    Operations that would fail at run time (division by zero, invalid
    modulo) are never folded. Variables keep their VarId: only the
    definition of a variable changes, and a simplification to "x" copies
    the definition of x.
    """

    @property
    def name(self) -> str:
        return "Constant Folding"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        """Apply constant folding to the entire program."""
        return self.fold(program)

    def fold(self, program: SymbolicProgram) -> SymbolicProgram:
        folded: list[SymbolicExpr] = []
        for expr in program.vars:
            # Operands precede their uses, so they are already folded.
            folded.append(self._simplify(folded, expr) if isinstance(expr, BinOp) else expr)
        return SymbolicProgram(tuple(folded))

    def _simplify(self, vars: list[SymbolicExpr], binop: BinOp) -> SymbolicExpr:
        lhs = vars[binop.a]
        rhs = vars[binop.b]

        if isinstance(lhs, Const) and isinstance(rhs, Const):
            result = try_apply_op(binop.op, lhs.value, rhs.value)
            return binop if result is None else Const(result)

        op = binop.op
        if op is Op.ADD:
            if _is_const(lhs, 0):
                return rhs
            if _is_const(rhs, 0):
                return lhs
        elif op is Op.MUL:
            if _is_const(lhs, 0) or _is_const(rhs, 0):
                return Const(0)
            if _is_const(lhs, 1):
                return rhs
            if _is_const(rhs, 1):
                return lhs
        elif op is Op.DIV:
            if _is_const(rhs, 1) or _is_const(lhs, 0):
                return lhs
        elif op is Op.MOD:
            if _is_const(rhs, 1):
                return Const(0)
        elif op is Op.EQL:
            if binop.a == binop.b:
                return Const(1)

        return binop


# =============================================================================
# 2. Value Range Optimizer
# =============================================================================


class ValueRangeOptimizer(OptimizerPass):
    """
    Replace operations whose value range is a single value by constants.

    Ranges are computed by `compute_value_ranges`, assuming every input is
    a digit in 1..9. For example `input[0] == 10` is always 0, and
    `(input[0] % 26) / 26` is always 0.

    Raises:
        StaticModuloViolation: If a modulo divisor is provably <= 0
    """

    @property
    def name(self) -> str:
        return "Value Ranges"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        ranges = compute_value_ranges(program)

        new_vars = []
        for expr, value_range in zip(program.vars, ranges):
            if (
                isinstance(expr, BinOp)
                and isinstance(value_range, Interval)
                and value_range.is_singleton
            ):
                new_vars.append(Const(value_range.lo))
            else:
                new_vars.append(expr)

        return SymbolicProgram(tuple(new_vars))


# =============================================================================
# 3. Common Subexpression Eliminator
# =============================================================================


class CSEliminator(OptimizerPass):
    """
    Merge structurally identical operations.

    A single forward pass keys every operation on `(op, a, b)`, with the
    operands already renumbered, and maps later duplicates onto the first
    occurrence. Constants and inputs are copied as they are.

    Example:
        v6 = v4 * v5
        v7 = v4 * v5
        v8 = v6 + v7

    Becomes:
        v6 = v4 * v5
        v7 = v6 + v6

    Variables defined after the result's representative cannot contribute
    to the result and are dropped, so the last variable remains the result.
    """

    @property
    def name(self) -> str:
        return "Common Subexpression Elimination"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        return self.eliminate(program)

    def eliminate(self, program: SymbolicProgram) -> SymbolicProgram:
        new_vars: list[SymbolicExpr] = []
        old_to_new: list[VarId] = []
        first_seen: dict[BinOp, VarId] = {}

        for expr in program.vars:
            if isinstance(expr, BinOp):
                key = BinOp(expr.op, old_to_new[expr.a], old_to_new[expr.b])
                new_id = first_seen.get(key)
                if new_id is None:
                    new_vars.append(key)
                    new_id = len(new_vars) - 1
                    first_seen[key] = new_id
            else:
                new_vars.append(expr)
                new_id = len(new_vars) - 1
            old_to_new.append(new_id)

        if not old_to_new:
            return program

        result_var = old_to_new[-1]
        return SymbolicProgram(tuple(new_vars[: result_var + 1]))


# =============================================================================
# 4. Dead Code Eliminator
# =============================================================================


class DeadCodeEliminator(OptimizerPass):
    """
    Remove variables the result does not depend on.

    Starting from the result variable, a worklist walks operand edges to
    find the live variables. Dead ones are dropped and the survivors are
    renumbered, keeping their relative order.
    """

    @property
    def name(self) -> str:
        return "Dead Code Elimination"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        return self.eliminate(program)

    def eliminate(self, program: SymbolicProgram) -> SymbolicProgram:
        if not program.vars:
            raise SSAInvariantError("Cannot prune an empty symbolic program")

        result_var = program.result_var
        live = self.live_variables(program)

        old_to_new: dict[VarId, VarId] = {}
        new_vars: list[SymbolicExpr] = []
        for old_id, expr in enumerate(program.vars):
            if not live[old_id]:
                continue
            if isinstance(expr, BinOp):
                expr = BinOp(expr.op, old_to_new[expr.a], old_to_new[expr.b])
            old_to_new[old_id] = len(new_vars)
            new_vars.append(expr)

        if old_to_new[result_var] != len(new_vars) - 1:
            raise SSAInvariantError(
                f"Result v{result_var} was renumbered to v{old_to_new[result_var]}, "
                f"expected v{len(new_vars) - 1}"
            )

        return SymbolicProgram(tuple(new_vars))

    @staticmethod
    def live_variables(program: SymbolicProgram) -> list[bool]:
        """Mark every variable reachable from the result."""
        live = [False] * len(program.vars)
        to_visit = [program.result_var]

        while to_visit:
            var_id = to_visit.pop()
            if live[var_id]:
                continue
            live[var_id] = True
            expr = program.vars[var_id]
            if isinstance(expr, BinOp):
                to_visit.append(expr.a)
                to_visit.append(expr.b)

        return live


# =============================================================================
# 5. Base-26 Peephole Rewrites
# =============================================================================


class _RadixRewriter(OptimizerPass):
    """
    Shared matcher for `(k * radix + rest) <op> radix`.

    The puzzle's programs use a variable as a stack of base-26 digits:
    pushing multiplies by 26 and adds, popping divides by 26 and reading
    the top is a modulo 26. Both rewrites rely on the pushed digit `rest`
    staying in 0..radix-1, which the machine guarantees.
    """

    def __init__(self, radix: int = DEFAULT_RADIX) -> None:
        self.radix = radix

    def _multiplicand(self, program: SymbolicProgram, var_id: VarId) -> Optional[VarId]:
        """If `var_id` is `k * radix` (either way round), return k."""
        expr = program.vars[var_id]
        if not isinstance(expr, BinOp) or expr.op is not Op.MUL:
            return None
        if _is_const(program.vars[expr.b], self.radix):
            return expr.a
        if _is_const(program.vars[expr.a], self.radix):
            return expr.b
        return None

    def _match(self, program: SymbolicProgram, expr: BinOp) -> Optional[tuple[VarId, VarId]]:
        """Match `expr` against `(k * radix + rest) <op> radix`, returning (k, rest)."""
        if not _is_const(program.vars[expr.b], self.radix):
            return None

        dividend = program.vars[expr.a]
        if not isinstance(dividend, BinOp) or dividend.op is not Op.ADD:
            return None

        for product, rest in ((dividend.a, dividend.b), (dividend.b, dividend.a)):
            k = self._multiplicand(program, product)
            if k is not None:
                return k, rest
        return None


class ModuloRewriter(_RadixRewriter):
    """
    Rewrite `(a * 26 + b) % 26` into `b % 26`.

    The multiplied addend is discarded; VarIds are preserved.
    """

    @property
    def name(self) -> str:
        return "Modulo Rewrite"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        new_vars = list(program.vars)

        for var_id, expr in enumerate(program.vars):
            if not isinstance(expr, BinOp) or expr.op is not Op.MOD:
                continue
            match = self._match(program, expr)
            if match is not None:
                _k, rest = match
                new_vars[var_id] = BinOp(Op.MOD, rest, expr.b)

        return SymbolicProgram(tuple(new_vars))


class DivisionRewriter(_RadixRewriter):
    """
    Rewrite `(a * 26 + b) / 26` into `a + b / 26`.

    Each match needs two variables (`b / 26`, then the sum), so the program
    is rebuilt and later operands are renumbered.
    """

    @property
    def name(self) -> str:
        return "Division Rewrite"

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        new_vars: list[SymbolicExpr] = []
        old_to_new: list[VarId] = []

        def push(expr: SymbolicExpr) -> VarId:
            new_vars.append(expr)
            return len(new_vars) - 1

        for expr in program.vars:
            if not isinstance(expr, BinOp):
                old_to_new.append(push(expr))
                continue

            match = self._match(program, expr) if expr.op is Op.DIV else None
            if match is None:
                old_to_new.append(push(BinOp(expr.op, old_to_new[expr.a], old_to_new[expr.b])))
                continue

            k, rest = match
            quotient = push(BinOp(Op.DIV, old_to_new[rest], old_to_new[expr.b]))
            old_to_new.append(push(BinOp(Op.ADD, old_to_new[k], quotient)))

        return SymbolicProgram(tuple(new_vars))


# =============================================================================
# 6. Fixed-Point Driver
# =============================================================================


@dataclass(frozen=True)
class PassStats:
    """Size of the program before and after one pass application."""

    name: str
    round: int
    vars_before: int
    vars_after: int
    constants_before: int
    constants_after: int

    def __str__(self) -> str:
        return (
            f"[{self.name:>32}] variables: {self.vars_before} -> {self.vars_after}, "
            f"constants: {self.constants_before} -> {self.constants_after}"
        )


@dataclass
class OptimizationReport:
    """
    Outcome of a fixed-point optimization run.

    Attributes:
        program: The optimized program
        rounds: Number of rounds executed
        converged: False if the round limit was reached first
        passes: Statistics for every pass application, in order
    """

    program: SymbolicProgram
    rounds: int = 0
    converged: bool = False
    passes: list[PassStats] = field(default_factory=list)


class FixedPointOptimizer:
    """
    Run the optimization passes until the program stops changing.

    The pass order is fixed:
    1. Constant Folding
    2. Value Ranges
    3. Common Subexpression Elimination
    4. Dead Code Elimination
    5. Modulo Rewrite
    6. Division Rewrite

    One application of all enabled passes is a round. Rounds repeat until a
    round's output equals its input, or `max_rounds` is reached; the latter
    is logged as a warning and reported through `OptimizationReport`.

    Example:
        optimizer = FixedPointOptimizer(max_rounds=20)
        optimized = optimizer.optimize(build_ssa(program))
    """

    def __init__(
        self,
        fold_constants: bool = True,
        narrow_value_ranges: bool = True,
        eliminate_cse: bool = True,
        eliminate_dead_code: bool = True,
        rewrite_modulos: bool = True,
        rewrite_divisions: bool = True,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        radix: int = DEFAULT_RADIX,
    ) -> None:
        """
        Initialize the optimizer with configurable passes.

        Args:
            fold_constants: Enable constant folding
            narrow_value_ranges: Enable the value-range pass
            eliminate_cse: Enable common subexpression elimination
            eliminate_dead_code: Enable dead code elimination
            rewrite_modulos: Enable the base-`radix` modulo rewrite
            rewrite_divisions: Enable the base-`radix` division rewrite
            max_rounds: Maximum number of rounds before giving up
            radix: Base used by the peephole rewrites
        """
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")

        self.passes: list[OptimizerPass] = []
        self.max_rounds = max_rounds

        if fold_constants:
            self.passes.append(ConstantFolder())
        if narrow_value_ranges:
            self.passes.append(ValueRangeOptimizer())
        if eliminate_cse:
            self.passes.append(CSEliminator())
        if eliminate_dead_code:
            self.passes.append(DeadCodeEliminator())
        if rewrite_modulos:
            self.passes.append(ModuloRewriter(radix))
        if rewrite_divisions:
            self.passes.append(DivisionRewriter(radix))

    def optimize(self, program: SymbolicProgram) -> SymbolicProgram:
        """
        Run all optimization passes on the program until a fixed point.

        Raises:
            StaticModuloViolation: If the program contains a modulo that
                always fails
            SSAInvariantError: If the program is not well formed
        """
        return self.run(program).program

    def run(self, program: SymbolicProgram) -> OptimizationReport:
        """Like `optimize`, but also return per-pass statistics."""
        if not program.is_well_formed():
            raise SSAInvariantError("Operands must reference earlier variables")

        report = OptimizationReport(program=program)
        result = program

        for round_no in range(1, self.max_rounds + 1):
            previous = result

            for pass_ in self.passes:
                before = result
                result = pass_.optimize(result)
                stats = PassStats(
                    name=pass_.name,
                    round=round_no,
                    vars_before=before.num_vars,
                    vars_after=result.num_vars,
                    constants_before=before.num_constants,
                    constants_after=result.num_constants,
                )
                report.passes.append(stats)
                logger.debug("%s", stats)

            report.rounds = round_no
            if result == previous:
                report.converged = True
                break

        report.program = result
        if report.converged:
            logger.info(
                "Reached a fixed point after %d rounds: %d -> %d variables",
                report.rounds,
                program.num_vars,
                result.num_vars,
            )
        else:
            logger.warning(
                "No fixed point after %d rounds; returning the last program (%d variables)",
                self.max_rounds,
                result.num_vars,
            )
        return report

    def get_pass_names(self) -> list[str]:
        """Get the names of all enabled optimization passes, in order."""
        return [pass_.name for pass_ in self.passes]


# =============================================================================
# Convenience Functions
# =============================================================================


def fold_constants(program: SymbolicProgram) -> SymbolicProgram:
    """Convenience function to fold constants in a program."""
    return ConstantFolder().fold(program)


def narrow_value_ranges(program: SymbolicProgram) -> SymbolicProgram:
    """Convenience function to replace single-valued variables by constants."""
    return ValueRangeOptimizer().optimize(program)


def eliminate_cse(program: SymbolicProgram) -> SymbolicProgram:
    """Convenience function to eliminate common subexpressions."""
    return CSEliminator().eliminate(program)


def eliminate_dead_code(program: SymbolicProgram) -> SymbolicProgram:
    """Convenience function to eliminate dead variables."""
    return DeadCodeEliminator().eliminate(program)


def rewrite_modulos(program: SymbolicProgram, radix: int = DEFAULT_RADIX) -> SymbolicProgram:
    """Convenience function to apply the modulo rewrite."""
    return ModuloRewriter(radix).optimize(program)


def rewrite_divisions(program: SymbolicProgram, radix: int = DEFAULT_RADIX) -> SymbolicProgram:
    """Convenience function to apply the division rewrite."""
    return DivisionRewriter(radix).optimize(program)


def optimize(
    program: SymbolicProgram,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    radix: int = DEFAULT_RADIX,
) -> SymbolicProgram:
    """
    Convenience function to run the full fixed-point pipeline.

    Args:
        program: The symbolic program to optimize
        max_rounds: Maximum number of rounds
        radix: Base used by the peephole rewrites

    Returns:
        The optimized program
    """
    return FixedPointOptimizer(max_rounds=max_rounds, radix=radix).optimize(program)


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    # Core classes
    "OptimizerPass",
    "ConstantFolder",
    "ValueRangeOptimizer",
    "CSEliminator",
    "DeadCodeEliminator",
    "ModuloRewriter",
    "DivisionRewriter",
    "FixedPointOptimizer",
    # Reporting
    "PassStats",
    "OptimizationReport",
    # Constants
    "DEFAULT_RADIX",
    "DEFAULT_MAX_ROUNDS",
    # Convenience functions
    "fold_constants",
    "narrow_value_ranges",
    "eliminate_cse",
    "eliminate_dead_code",
    "rewrite_modulos",
    "rewrite_divisions",
    "optimize",
]
