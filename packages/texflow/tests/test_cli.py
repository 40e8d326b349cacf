"""Tests for texflow.cli"""
import json

from typer.testing import CliRunner

from texflow.cli import app
from texflow.rules import DEFAULT_RULES

runner = CliRunner()

ONE_RULE = '[{"trigger": "zz", "template": "Z", "options": "A"}]'


class TestTypeCommand:
    def test_raw_output(self):
        result = runner.invoke(app, ["type", "//", "--math", "--raw"])
        assert result.exit_code == 0
        assert result.output == "\\frac{}{}\n"

    def test_operand_fraction(self):
        result = runner.invoke(app, ["type", "x/", "--math", "--raw"])
        assert result.output == "\\frac{x}{}\n"

    def test_shows_caret(self):
        result = runner.invoke(app, ["type", "ab", "--text", "x"])
        assert result.exit_code == 0
        assert "xab│" in result.output
        assert "history" in result.output

    def test_initial_caret(self):
        result = runner.invoke(app, ["type", "<tab>", "--text", "f(x)", "--caret", "3", "--raw"])
        assert result.output == "f(x)\n"

    def test_bad_key_sequence(self):
        result = runner.invoke(app, ["type", "<x-a>"])
        assert result.exit_code == 2


class TestRulesCommands:
    def test_list(self):
        result = runner.invoke(app, ["rules", "list", "--mode", "text"])
        assert result.exit_code == 0
        assert "Rules (" in result.output

    def test_list_unknown_mode(self):
        assert runner.invoke(app, ["rules", "list", "--mode", "bogus"]).exit_code == 2

    def test_export_defaults(self):
        result = runner.invoke(app, ["rules", "export", "--defaults"])
        assert result.exit_code == 0
        assert len(json.loads(result.output)) == len(DEFAULT_RULES)

    def test_check(self, tmp_path):
        good = tmp_path / "good.json"
        good.write_text(ONE_RULE)
        bad = tmp_path / "bad.json"
        bad.write_text('[{"trigger": "(", "template": "x", "options": "r"}]')
        assert runner.invoke(app, ["rules", "check", str(good)]).exit_code == 0
        assert runner.invoke(app, ["rules", "check", str(bad)]).exit_code == 1

    def test_import_export_reset(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(ONE_RULE)
        assert runner.invoke(app, ["rules", "import", str(path)]).exit_code == 0

        result = runner.invoke(app, ["type", "zz", "--raw"])
        assert result.output == "Z\n"
        exported = json.loads(runner.invoke(app, ["rules", "export"]).output)
        assert exported == [{"trigger": "zz", "template": "Z", "options": "A"}]

        assert runner.invoke(app, ["rules", "reset"]).exit_code == 0
        exported = json.loads(runner.invoke(app, ["rules", "export"]).output)
        assert len(exported) == len(DEFAULT_RULES)

    def test_export_to_file(self, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(app, ["rules", "export", "--defaults", "-o", str(out)])
        assert result.exit_code == 0
        assert len(json.loads(out.read_text())) == len(DEFAULT_RULES)


class TestKeysCommands:
    def test_bind_and_list(self):
        assert runner.invoke(app, ["keys", "bind", "Ctrl+J", "deleteLine"]).exit_code == 0
        result = runner.invoke(app, ["keys", "list"])
        assert "ctrl+j" in result.output

    def test_bind_unknown_action(self):
        assert runner.invoke(app, ["keys", "bind", "ctrl+j", "explode"]).exit_code == 1

    def test_unbind_and_reset(self):
        result = runner.invoke(app, ["keys", "unbind", "ctrl+z"])
        assert "Unbound" in result.output
        result = runner.invoke(app, ["keys", "unbind", "ctrl+z"])
        assert "Nothing bound" in result.output
        assert runner.invoke(app, ["keys", "reset"]).exit_code == 0
        assert "ctrl+z" in runner.invoke(app, ["keys", "list"]).output

    def test_rebound_key_used_by_type(self):
        runner.invoke(app, ["keys", "bind", "ctrl+j", "deleteLine"])
        result = runner.invoke(app, ["type", "<c-j>", "--text", "one\ntwo", "--raw"])
        assert result.output == "one\n"


class TestMisc:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert "texflow 0.1.0" in result.output

    def test_where(self, texflow_home):
        result = runner.invoke(app, ["where"])
        assert "store.json" in result.output.replace("\n", "")

    def test_render(self):
        result = runner.invoke(app, ["render", "hello"])
        assert "<p>hello</p>" in result.output
