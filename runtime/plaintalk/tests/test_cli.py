"""
Test suite for the plaintalk command line host
"""

import json
import pytest
import sys
import os

# Add grandparent directory to path for imports (to find plaintalk package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from plaintalk.cli import main, build_parser
from plaintalk.examples import EXAMPLE_SCRIPTS


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def program(tmp_path):
    """Write source to a temporary .pt file and return its path"""
    def _program(source):
        path = tmp_path / "program.pt"
        path.write_text(source, encoding="utf-8")
        return str(path)
    return _program


class TestRun:
    """Test 'plaintalk run'"""

    def test_run_prints_output(self, program, capsys):
        assert run_cli(["run", program('say "hello"\nsay 1 + 2')]) == 0
        assert capsys.readouterr().out == "hello\n3\n"

    def test_display_keeps_line(self, program, capsys):
        assert run_cli(["run", program('display "a"\nsay "b"')]) == 0
        assert capsys.readouterr().out == "ab\n"

    def test_runtime_fault_exit_code(self, program, capsys):
        assert run_cli(["run", program('say 1 / 0')]) == 1
        assert "Error: Division by zero at line 1" in capsys.readouterr().err

    def test_syntax_fault_exit_code(self, program, capsys):
        assert run_cli(["run", program('say "oops')]) == 1
        assert "Syntax Error: Unterminated string" in capsys.readouterr().err

    def test_trigger(self, program, capsys):
        path = program('when clicked:\n    say "clicked"')
        assert run_cli(["run", path, "--trigger", "clicked", "--trigger", "clicked"]) == 0
        assert capsys.readouterr().out == "clicked\nclicked\n"

    def test_timer_until_terminate(self, program, capsys):
        path = program('every 10 ms:\n    add 1 to global n\n    say n\n    if global n is 2:\n        terminate program')
        assert run_cli(["run", path]) == 0
        assert capsys.readouterr().out == "1\n2\n[SYSTEM] Execution completed.\n"

    def test_timeout_stops_timers(self, program, capsys):
        assert run_cli(["run", program('every 1 seconds:\n    say "tick"'), "--timeout", "0.05"]) == 0
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert run_cli(["run", str(tmp_path / "nope.pt")]) == 1
        assert "not found" in capsys.readouterr().err


class TestInspect:
    """Test 'plaintalk tokens' and 'plaintalk parse'"""

    def test_tokens(self, program, capsys):
        assert run_cli(["tokens", program('say 1')]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1:1\tSAY\t'say'"
        assert lines[1] == "1:5\tNUMBER\t1"
        assert lines[-1].split("\t")[1] == "EOF"

    def test_parse_dumps_json(self, program, capsys):
        assert run_cli(["parse", program('set x to 1')]) == 0
        tree = json.loads(capsys.readouterr().out)
        assert tree["type"] == "Program"
        assert tree["body"][0]["type"] == "SetStatement"
        assert tree["body"][0]["value"] == {"type": "Literal", "value": 1, "line": 1}

    def test_parse_error(self, program, capsys):
        assert run_cli(["parse", program('set x 1')]) == 1
        assert "Syntax Error:" in capsys.readouterr().err


class TestExamples:
    """Test 'plaintalk examples'"""

    def test_list(self, capsys):
        assert run_cli(["examples"]) == 0
        assert capsys.readouterr().out.splitlines() == list(EXAMPLE_SCRIPTS)

    def test_show(self, capsys):
        assert run_cli(["examples", "Hello World"]) == 0
        assert capsys.readouterr().out == EXAMPLE_SCRIPTS["Hello World"]

    def test_unknown(self, capsys):
        assert run_cli(["examples", "Nope"]) == 1
        assert "Unknown example" in capsys.readouterr().err


class TestArguments:
    """Test argument parsing"""

    def test_log_level(self):
        args = build_parser().parse_args(["--log-level", "DEBUG", "examples"])
        assert args.log_level == "DEBUG"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
