"""
aluopt Command-Line Interface.

Provides commands to run, convert and optimize ALU programs.

Usage:
    aluopt run monad.alu 13579246899999       # Execute with input digits
    aluopt ssa monad.alu                      # Show the SSA form
    aluopt optimize monad.alu --set 0=9       # Optimize, fixing input 0
    aluopt deps monad.alu                     # Input dependency table
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from aluopt import __version__
from aluopt.compiler.optimizer import DEFAULT_MAX_ROUNDS, DEFAULT_RADIX, FixedPointOptimizer
from aluopt.compiler.parser import parse_program
from aluopt.compiler.program import Program, Register, execute
from aluopt.compiler.ssa import SymbolicProgram, build_ssa, substitute_inputs
from aluopt.formatter import format_dependency_table, format_symbolic_program
from aluopt.utils.errors import AluError

logger = logging.getLogger("aluopt")


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.CYAN = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    if not sys.stdout.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


_init_colors()


# =============================================================================
# Argument Parsing
# =============================================================================


def _substitution(text: str) -> tuple[int, int]:
    """Parse an `INDEX=VALUE` substitution."""
    index, sep, value = text.partition("=")
    try:
        if not sep:
            raise ValueError
        return int(index), int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected INDEX=VALUE, got '{text}'") from None


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{text}'") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _register(text: str) -> Register:
    try:
        return Register.from_name(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="aluopt",
        description="aluopt - symbolic execution and optimization of ALU programs",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging level (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Execute a program on input digits")
    run_parser.add_argument("input", type=Path, help="Program listing")
    run_parser.add_argument("digits", help="Input digits, e.g. 13579246899999")
    run_parser.add_argument(
        "-r",
        "--register",
        type=_register,
        default=Register.Z,
        help="Result register (default: z)",
    )

    # SSA command
    ssa_parser = subparsers.add_parser("ssa", help="Show a program in SSA form")
    ssa_parser.add_argument("input", type=Path, help="Program listing")
    ssa_parser.add_argument("-r", "--register", type=_register, default=Register.Z)

    # Optimize command
    opt_parser = subparsers.add_parser("optimize", aliases=["opt"], help="Optimize a program")
    opt_parser.add_argument("input", type=Path, help="Program listing")
    opt_parser.add_argument("-r", "--register", type=_register, default=Register.Z)
    opt_parser.add_argument(
        "-s",
        "--set",
        dest="substitutions",
        type=_substitution,
        action="append",
        default=[],
        metavar="INDEX=VALUE",
        help="Fix input INDEX to VALUE before optimizing (repeatable)",
    )
    opt_parser.add_argument(
        "--max-rounds",
        type=_positive_int,
        default=DEFAULT_MAX_ROUNDS,
        help=f"Round limit for the fixed-point driver (default: {DEFAULT_MAX_ROUNDS})",
    )
    opt_parser.add_argument(
        "--radix",
        type=int,
        default=DEFAULT_RADIX,
        help=f"Base of the peephole rewrites (default: {DEFAULT_RADIX})",
    )
    opt_parser.add_argument("--stats", action="store_true", help="Print per-pass statistics")
    opt_parser.add_argument("--deps", action="store_true", help="Print the dependency table")

    # Deps command
    deps_parser = subparsers.add_parser("deps", help="Show which inputs affect which variables")
    deps_parser.add_argument("input", type=Path, help="Program listing")
    deps_parser.add_argument("-r", "--register", type=_register, default=Register.Z)
    deps_parser.add_argument(
        "-s",
        "--set",
        dest="substitutions",
        type=_substitution,
        action="append",
        default=[],
        metavar="INDEX=VALUE",
    )

    return parser


# =============================================================================
# Commands
# =============================================================================


def _load_program(path: Path) -> Program:
    source = path.read_text(encoding="utf-8")
    return parse_program(source, str(path))


def _load_symbolic(args: argparse.Namespace) -> SymbolicProgram:
    sym_prog = build_ssa(_load_program(args.input), args.register)
    substitutions = dict(getattr(args, "substitutions", []))
    if substitutions:
        logger.info("Fixing inputs: %s", substitutions)
        sym_prog = substitute_inputs(sym_prog, substitutions)
    return sym_prog


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the run command."""
    if not (args.digits.isascii() and args.digits.isdigit()):
        print(f"{Colors.RED}Error:{Colors.RESET} digits must be decimal digits", file=sys.stderr)
        return 1

    program = _load_program(args.input)
    result = execute(program, [int(d) for d in args.digits], args.register)
    print(f"{args.register} = {result}")
    return 0


def cmd_ssa(args: argparse.Namespace) -> int:
    """Handle the ssa command."""
    print(format_symbolic_program(_load_symbolic(args)))
    return 0


def cmd_optimize(args: argparse.Namespace) -> int:
    """Handle the optimize command."""
    sym_prog = _load_symbolic(args)
    optimizer = FixedPointOptimizer(max_rounds=args.max_rounds, radix=args.radix)
    report = optimizer.run(sym_prog)

    if args.stats:
        for stats in report.passes:
            print(f"{Colors.GRAY}round {stats.round}{Colors.RESET} {stats}")

    print(format_symbolic_program(report.program))
    if args.deps:
        print(format_dependency_table(report.program))

    if report.converged:
        print(
            f"{Colors.GREEN}OK:{Colors.RESET} {sym_prog.num_vars} -> "
            f"{report.program.num_vars} variables in {report.rounds} rounds"
        )
    else:
        print(
            f"{Colors.YELLOW}Warning:{Colors.RESET} no fixed point after "
            f"{report.rounds} rounds",
            file=sys.stderr,
        )
    return 0


def cmd_deps(args: argparse.Namespace) -> int:
    """Handle the deps command."""
    print(format_dependency_table(_load_symbolic(args)))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "run": cmd_run,
        "ssa": cmd_ssa,
        "optimize": cmd_optimize,
        "opt": cmd_optimize,
        "deps": cmd_deps,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except FileNotFoundError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} File not found: {e.filename}", file=sys.stderr)
        return 1
    except AluError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
