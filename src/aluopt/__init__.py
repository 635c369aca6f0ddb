"""
aluopt - Symbolic execution and optimization for a four-register ALU.

aluopt converts programs of a tiny arithmetic machine (registers w, x, y, z;
instructions inp, add, mul, div, mod, eql) into static single assignment
form, and simplifies the resulting dataflow graph with constant folding,
interval analysis, common subexpression elimination, dead code elimination
and base-26 peephole rewrites until it reaches a fixed point.
"""

from aluopt.compiler import (
    build_ssa,
    compile_file,
    compile_source,
    dependency_masks,
    evaluate,
    evaluate_batch,
    execute,
    execute_with_logging,
    optimize,
    parse_program,
    substitute_input,
    substitute_inputs,
)
from aluopt.formatter import format_dependency_table, format_symbolic_program

__version__ = "0.1.0"
__all__ = [
    "compile_source",
    "compile_file",
    "parse_program",
    "execute",
    "execute_with_logging",
    "build_ssa",
    "optimize",
    "substitute_input",
    "substitute_inputs",
    "dependency_masks",
    "evaluate",
    "evaluate_batch",
    "format_symbolic_program",
    "format_dependency_table",
]
