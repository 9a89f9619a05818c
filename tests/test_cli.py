"""
CLI tests for intcodevm.py.
"""

import logging

import pytest

from intcodevm import EXIT_OK, EXIT_VM_ERROR, main


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRun:
    def test_source_with_dump(self, capsys):
        assert main(["--source", "1,0,0,0,99", "--dump"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "0:  2  0  0  0 99" in out

    def test_scripted_input(self, capsys):
        assert main(["--source", "3,0,4,0,99", "-i", "7"]) == EXIT_OK
        assert "Output: 7" in capsys.readouterr().out

    def test_negative_input(self, capsys):
        assert main(["--source", "3,0,4,0,99", "-i", "-12"]) == EXIT_OK
        assert "Output: -12" in capsys.readouterr().out

    def test_program_file(self, tmp_path, capsys):
        program = tmp_path / "prog.txt"
        program.write_text("3,9,8,9,10,9,4,9,99,-1,8\n", encoding="utf-8")
        assert main([str(program), "-i", "8"]) == EXIT_OK
        assert "Output: 1" in capsys.readouterr().out

    def test_custom_delimiter(self, capsys):
        assert main(["--source", "104;5;99", "--delimiter", ";"]) == EXIT_OK
        assert "Output: 5" in capsys.readouterr().out

    def test_trace(self, capsys):
        assert main(["--source", "1,0,0,0,99", "--trace"]) == EXIT_OK
        err = capsys.readouterr().err
        assert "ADD" in err
        assert "HALT" in err

    def test_unused_inputs_warned(self, capsys):
        assert main(["--source", "3,0,4,0,99", "-i", "1", "-i", "2", "-i", "3"]) == EXIT_OK
        assert "2 scripted input value(s) not consumed" in capsys.readouterr().err


class TestFailures:
    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.txt")]) == EXIT_VM_ERROR
        assert "Error reading" in capsys.readouterr().err

    def test_unknown_opcode(self, capsys):
        assert main(["--source", "42"]) == EXIT_VM_ERROR
        assert "Unknown opcode error" in capsys.readouterr().err

    def test_malformed_program(self, capsys):
        assert main(["--source", "1,two,3"]) == EXIT_VM_ERROR
        assert "Malformed program error" in capsys.readouterr().err

    def test_out_of_bounds(self, capsys):
        assert main(["--source", "1,5,6,7"]) == EXIT_VM_ERROR
        assert "Address error" in capsys.readouterr().err

    def test_input_exhausted(self, capsys):
        assert main(["--source", "3,0,3,0,99", "-i", "1"]) == EXIT_VM_ERROR
        assert "Input error" in capsys.readouterr().err

    def test_dump_after_failure(self, capsys):
        """The tape is still dumped when the run fails part way."""
        assert main(["--source", "1,0,0,0", "--dump"]) == EXIT_VM_ERROR
        assert "0: 2 0 0 0" in capsys.readouterr().out

    def test_bad_delimiter_is_a_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--source", "1;;99", "--delimiter", ";;"])
        assert exc.value.code == 2
        err = capsys.readouterr().err
        assert "--delimiter" in err
        assert "Internal error" not in err
