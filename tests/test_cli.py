"""
Tests for the interactive command-line interface
"""

import pytest

import matplotlib
matplotlib.use("Agg")

import sys
sys.path.insert(0, '..')

from phaseline.cli import PhaselineCLI, EXAMPLES

class TestPhaselineCLI:
    """Tests for PhaselineCLI driven through input()."""

    def _run(self, monkeypatch, lines):
        inputs = iter(lines)
        monkeypatch.setattr('builtins.input', lambda prompt='': next(inputs))
        cli = PhaselineCLI()
        cli.run()
        return cli

    def test_define_example_and_query(self, monkeypatch, capsys):
        cli = self._run(monkeypatch, ['define', '2', 'roots', 'sweep', 'quit'])
        out = capsys.readouterr().out

        assert cli.session.system.heading == EXAMPLES['2'][0]
        assert "System defined" in out
        assert "Equilibria at r = 1" in out
        assert "re-solved points" in out

    def test_set_parameter(self, monkeypatch):
        cli = self._run(monkeypatch, ['define', 'r + x**2', 'set', 'r', '-1', 'q'])

        assert cli.session.r == -1.0

    def test_export(self, monkeypatch, tmp_path):
        path = tmp_path / "sweep.csv"
        self._run(monkeypatch, ['define', 'r*x - x**2', 'export', str(path), 'q'])

        lines = path.read_text().splitlines()
        assert lines[0] == "r,branch,x,df/dx,stability"
        assert len(lines) == 1 + 2 * 101

    def test_invalid_expression(self, monkeypatch, capsys):
        cli = self._run(monkeypatch, ['define', 'r + 1', 'q'])

        assert not cli.session.is_loaded
        assert "Could not define system" in capsys.readouterr().out

    def test_commands_need_system(self, monkeypatch, capsys):
        self._run(monkeypatch, ['roots', 'trajectory', 'q'])

        assert "No system defined" in capsys.readouterr().out

    def test_unknown_command_and_eof(self, monkeypatch, capsys):
        inputs = iter(['bogus'])

        def fake_input(prompt=''):
            for line in inputs:
                return line
            raise EOFError

        monkeypatch.setattr('builtins.input', fake_input)
        PhaselineCLI().run()

        out = capsys.readouterr().out
        assert "Unknown command" in out
        assert "Bye!" in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
