"""
Unit tests for the aluopt command-line interface.
"""

import pytest

from aluopt.cli import create_parser, main


@pytest.fixture
def monad_file(tmp_path, monad_source):
    path = tmp_path / "monad.alu"
    path.write_text(monad_source, encoding="utf-8")
    return path


@pytest.fixture
def negate_file(tmp_path):
    path = tmp_path / "negate.alu"
    path.write_text("inp x\nmul x -1\n", encoding="utf-8")
    return path


class TestRunCommand:
    """Tests for `aluopt run`."""

    def test_valid_model_number(self, monad_file, capsys):
        """Test that a valid model number prints z = 0."""
        assert main(["run", str(monad_file), "99429795993929"]) == 0
        assert "z = 0" in capsys.readouterr().out

    def test_result_register(self, negate_file, capsys):
        """Test selecting the result register."""
        assert main(["run", str(negate_file), "5", "-r", "x"]) == 0
        assert "x = -5" in capsys.readouterr().out

    def test_non_digit_input(self, monad_file, capsys):
        """Test that non-digit input is rejected."""
        assert main(["run", str(monad_file), "12ab"]) == 1
        assert "digits must be decimal digits" in capsys.readouterr().err

    def test_non_ascii_digits(self, monad_file, capsys):
        """Test that Unicode digit characters are rejected without a traceback."""
        assert main(["run", str(monad_file), "\u00b2" * 14]) == 1
        assert "digits must be decimal digits" in capsys.readouterr().err

    def test_wrong_number_of_digits(self, monad_file, capsys):
        """Test that an input count mismatch is reported as an error."""
        assert main(["run", str(monad_file), "123"]) == 1
        assert "expects 14 inputs" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """Test that a missing listing is reported."""
        assert main(["run", str(tmp_path / "nope.alu"), "1"]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_parse_error(self, tmp_path, capsys):
        """Test that a malformed listing is reported with its location."""
        path = tmp_path / "bad.alu"
        path.write_text("inp w\nsub w 1\n", encoding="utf-8")
        assert main(["run", str(path), "1"]) == 1
        assert "bad.alu:2:1" in capsys.readouterr().err


class TestSsaCommand:
    """Tests for `aluopt ssa`."""

    def test_prints_program(self, negate_file, capsys):
        assert main(["ssa", str(negate_file), "-r", "x"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("SymbolicProgram")
        assert "| v6 = v4 * v5" in out

    def test_result_not_last(self, negate_file, capsys):
        """Test that a result register that is not written last is an error."""
        assert main(["ssa", str(negate_file)]) == 1
        assert "Error" in capsys.readouterr().err


class TestOptimizeCommand:
    """Tests for `aluopt optimize`."""

    def test_all_digits_fixed(self, monad_file, capsys):
        """Test that fixing every digit collapses the program to one constant."""
        argv = ["optimize", str(monad_file)]
        for index, digit in enumerate("99429795993929"):
            argv += ["--set", f"{index}={digit}"]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "| v0 = 0\n+---" in out
        assert "-> 1 variables" in out

    def test_alias_and_stats(self, monad_file, capsys):
        """Test the `opt` alias with per-pass statistics."""
        assert main(["opt", str(monad_file), "--stats", "--deps"]) == 0
        out = capsys.readouterr().out
        assert "round 1" in out
        assert "Constant Folding" in out
        assert "Which vars depend on which input digits?" in out

    def test_round_limit(self, monad_file, capsys):
        """Test that hitting the round limit is reported on stderr."""
        assert main(["optimize", str(monad_file), "--max-rounds", "1"]) == 0
        assert "no fixed point after 1 rounds" in capsys.readouterr().err

    @pytest.mark.parametrize("rounds", ["0", "-3", "many"])
    def test_invalid_round_limit(self, monad_file, rounds, capsys):
        """Test that a round limit below 1 is an argument error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["optimize", str(monad_file), "--max-rounds", rounds])
        assert exc_info.value.code == 2
        assert "--max-rounds" in capsys.readouterr().err

    def test_bad_substitution(self, monad_file):
        """Test that a malformed --set value is an argument error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["optimize", str(monad_file), "--set", "4"])
        assert exc_info.value.code == 2


class TestDepsCommand:
    """Tests for `aluopt deps`."""

    def test_table(self, monad_file, capsys):
        assert main(["deps", str(monad_file), "--set", "0=1"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Which vars depend on which input digits?")


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_defaults(self):
        args = create_parser().parse_args(["optimize", "prog.alu"])
        assert args.max_rounds == 64
        assert args.radix == 26
        assert args.substitutions == []
        assert str(args.register) == "z"

    def test_uppercase_register_rejected(self):
        """Test that register names are lowercase only."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["run", "p.alu", "1", "-r", "Z"])

    def test_substitutions(self):
        args = create_parser().parse_args(["opt", "p.alu", "-s", "4=9", "-s", "5=7"])
        assert args.substitutions == [(4, 9), (5, 7)]
