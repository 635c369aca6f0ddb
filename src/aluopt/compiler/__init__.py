"""
aluopt Compiler Package.

This package contains the core components of the ALU middle-end:
- Program: Instruction set and concrete interpreter
- Parser: Produces a Program from a text listing
- SSA: Symbolic execution into a flat dataflow graph, input substitution
- Evaluator: Concrete (scalar and batch) evaluation of symbolic programs
- ValueRange: Interval analysis of symbolic programs
- Optimizer: Rewrite passes and the fixed-point driver
- Dependency: Which inputs influence which variables
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from aluopt.compiler.dependency import dependency_masks, inputs_in_mask, result_dependencies
from aluopt.compiler.evaluator import evaluate, evaluate_all, evaluate_batch
from aluopt.compiler.operators import Op, apply_op
from aluopt.compiler.optimizer import (
    CSEliminator,
    ConstantFolder,
    DeadCodeEliminator,
    DivisionRewriter,
    FixedPointOptimizer,
    ModuloRewriter,
    OptimizationReport,
    OptimizerPass,
    PassStats,
    ValueRangeOptimizer,
    eliminate_cse,
    eliminate_dead_code,
    fold_constants,
    narrow_value_ranges,
    optimize,
    rewrite_divisions,
    rewrite_modulos,
)
from aluopt.compiler.parser import Parser, parse_program
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
from aluopt.compiler.ssa import (
    BinOp,
    Const,
    Input,
    SymbolicProgram,
    build_ssa,
    build_ssa_with_states,
    substitute_input,
    substitute_inputs,
)
from aluopt.compiler.value_range import Interval, UNKNOWN, compute_value_ranges


def compile_source(
    source: str,
    result_register: Register = Register.Z,
    substitutions: Optional[Mapping[int, int]] = None,
    max_rounds: Optional[int] = None,
    filename: Optional[str] = None,
) -> OptimizationReport:
    """
    Parse, convert to SSA and optimize a program listing.

    Args:
        source: The program listing
        result_register: Register holding the program's result
        substitutions: Optional input index -> digit values fixed before
            optimizing
        max_rounds: Round limit for the fixed-point driver
        filename: Optional filename for error messages

    Returns:
        The optimization report; `report.program` is the optimized program
    """
    program = parse_program(source, filename)
    sym_prog = build_ssa(program, result_register)
    if substitutions:
        sym_prog = substitute_inputs(sym_prog, substitutions)

    if max_rounds is None:
        optimizer = FixedPointOptimizer()
    else:
        optimizer = FixedPointOptimizer(max_rounds=max_rounds)
    return optimizer.run(sym_prog)


def compile_file(
    filepath: Path | str,
    result_register: Register = Register.Z,
    substitutions: Optional[Mapping[int, int]] = None,
    max_rounds: Optional[int] = None,
) -> OptimizationReport:
    """Read a program listing from disk and compile it (see `compile_source`)."""
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")
    return compile_source(
        source,
        result_register=result_register,
        substitutions=substitutions,
        max_rounds=max_rounds,
        filename=str(path),
    )


__all__ = [
    # Pipeline
    "compile_source",
    "compile_file",
    # Program model
    "Op",
    "apply_op",
    "Register",
    "Literal",
    "RegisterRef",
    "InputInstruction",
    "BinaryInstruction",
    "Program",
    "RegisterState",
    "step",
    "execute",
    "execute_with_logging",
    "Parser",
    "parse_program",
    # SSA
    "Const",
    "Input",
    "BinOp",
    "SymbolicProgram",
    "build_ssa",
    "build_ssa_with_states",
    "substitute_input",
    "substitute_inputs",
    # Evaluation
    "evaluate",
    "evaluate_all",
    "evaluate_batch",
    # Analyses
    "Interval",
    "UNKNOWN",
    "compute_value_ranges",
    "dependency_masks",
    "inputs_in_mask",
    "result_dependencies",
    # Optimizer
    "OptimizerPass",
    "ConstantFolder",
    "ValueRangeOptimizer",
    "CSEliminator",
    "DeadCodeEliminator",
    "ModuloRewriter",
    "DivisionRewriter",
    "FixedPointOptimizer",
    "OptimizationReport",
    "PassStats",
    "fold_constants",
    "narrow_value_ranges",
    "eliminate_cse",
    "eliminate_dead_code",
    "rewrite_modulos",
    "rewrite_divisions",
    "optimize",
]
