"""Unit tests for the rsml command line."""

import orjson
import pytest

from rsml import __version__
from rsml.cli.main import build_config, cli, create_parser
from tests.fixtures import BROKEN_MARKUP, BUTTON_CODE, COUNTER_CODE, COUNTER_MARKUP


@pytest.fixture
def counter_file(tmp_path):
    path = tmp_path / "counter.rsml"
    path.write_text(COUNTER_MARKUP)
    return path


class TestParser:
    """Tests for argument handling."""

    def test_no_command_prints_help(self, capsys):
        assert cli([]) == 0
        assert "usage: rsml" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli(["--version"])
        assert excinfo.value.code == 0
        assert f"rsml {__version__}" in capsys.readouterr().out

    def test_build_config_layers_flags(self, tmp_path, monkeypatch):
        settings = tmp_path / "rsml_config.py"
        settings.write_text('config = {"compiler": {"crate_path": "file_ui", "strict": True}}\n')
        monkeypatch.setenv("RSML_LOGGING__LEVEL", "info")

        args = create_parser().parse_args(
            ["compile", "x.rsml", "--config", str(settings), "--crate", "flag_ui", "--no-merge-text"]
        )
        config = build_config(args)

        assert config.get("compiler.crate_path") == "flag_ui"
        assert config.get("compiler.strict") is True
        assert config.get("compiler.merge_text") is False
        assert config.get("logging.level") == "info"


class TestCompile:
    """Tests for the compile command."""

    def test_stdout(self, counter_file, capsys):
        assert cli(["compile", str(counter_file)]) == 0
        assert capsys.readouterr().out == COUNTER_CODE + "\n"

    def test_output_file(self, counter_file, tmp_path, capsys):
        output = tmp_path / "out" / "counter.rs"
        assert cli(["compile", str(counter_file), "-o", str(output)]) == 0
        assert output.read_text() == COUNTER_CODE + "\n"
        assert capsys.readouterr().out == ""

    def test_crate_flag(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text("<container/>")
        assert cli(["compile", str(path), "--crate", "ui"]) == 0
        assert capsys.readouterr().out == "Box::new(ui::Container::new())\n"

    def test_crate_from_environment(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("RSML_COMPILER__CRATE_PATH", "env_ui")
        path = tmp_path / "a.rsml"
        path.write_text("<container/>")
        assert cli(["compile", str(path)]) == 0
        assert capsys.readouterr().out == "Box::new(env_ui::Container::new())\n"

    def test_strict_flag(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text("<a/><b/>")
        assert cli(["compile", str(path)]) == 0
        capsys.readouterr()

        assert cli(["compile", str(path), "--strict"]) == 1
        assert "Unexpected trailing content after <a>" in capsys.readouterr().err

    def test_syntax_error(self, tmp_path, capsys):
        path = tmp_path / "broken.rsml"
        path.write_text(BROKEN_MARKUP)
        assert cli(["compile", str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error: RSML parse error: ")

    def test_missing_file(self, tmp_path, capsys):
        assert cli(["compile", str(tmp_path / "missing.rsml")]) == 1
        assert "Markup file not found" in capsys.readouterr().err

    def test_info_logging(self, counter_file, capsys):
        assert cli(["compile", str(counter_file), "--log-level", "info"]) == 0
        err = capsys.readouterr().err
        assert "[INFO] rsml.cli: Compiled markup" in err

    def test_json_logging(self, counter_file, capsys):
        assert cli(["compile", str(counter_file), "--log-level", "info", "--log-format", "json"]) == 0
        records = [orjson.loads(line) for line in capsys.readouterr().err.splitlines()]
        assert records[-1]["message"] == "Compiled markup"
        assert records[-1]["context"]["file"] == str(counter_file)


class TestExpand:
    """Tests for the expand command."""

    def test_expand(self, tmp_path, capsys):
        path = tmp_path / "main.rs"
        path.write_text("fn root() -> Box<dyn Element> {\n    rsml! { <container/> }\n}\n")
        assert cli(["expand", str(path)]) == 0
        assert capsys.readouterr().out == (
            "fn root() -> Box<dyn Element> {\n    Box::new(hyprui::Container::new())\n}\n"
        )

    def test_error(self, tmp_path, capsys):
        path = tmp_path / "main.rs"
        path.write_text("rsml! { <a></b> }")
        assert cli(["expand", str(path)]) == 1
        assert f"Error: {path}:1: RSML parse error: " in capsys.readouterr().err


class TestCheck:
    """Tests for the check command."""

    def test_all_pass(self, markup_dir, capsys):
        assert cli(["check", str(markup_dir)]) == 0
        out = capsys.readouterr().out.splitlines()

        assert out[0] == f"Testing {markup_dir / 'counter.rsml'}: PASS"
        assert out[1] == f"  Output: {COUNTER_CODE}"
        assert f"Testing {markup_dir / 'nested' / 'button.rsml'}: PASS" in out
        assert f"  Output: {BUTTON_CODE}" in out
        assert out[-1] == "Results: 3/3 files passed"

    def test_failure(self, markup_dir, capsys):
        (markup_dir / "broken.rsml").write_text(BROKEN_MARKUP)

        assert cli(["check", str(markup_dir), "-q"]) == 1
        captured = capsys.readouterr()
        lines = captured.out.splitlines()

        assert lines[0].startswith(f"Testing {markup_dir / 'broken.rsml'}: FAIL (RSML parse error: ")
        assert not any(line.startswith("  Output:") for line in lines)
        assert lines[-1] == "Results: 3/4 files passed"
        assert "Markup failed to compile" in captured.err

    def test_pattern(self, markup_dir, capsys):
        (markup_dir / "ignored.txt").write_text(BROKEN_MARKUP)
        (markup_dir / "view.ui").write_text("<container/>")

        assert cli(["check", str(markup_dir), "--pattern", "*.ui", "-q"]) == 0
        assert capsys.readouterr().out.splitlines()[-1] == "Results: 1/1 files passed"

    def test_single_file(self, counter_file, capsys):
        assert cli(["check", str(counter_file), "-q"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            f"Testing {counter_file}: PASS",
            "Results: 1/1 files passed",
        ]

    def test_no_files(self, tmp_path, capsys):
        assert cli(["check", str(tmp_path)]) == 1
        assert capsys.readouterr().out == "No *.rsml files found\n"

    def test_missing_path(self, tmp_path, capsys):
        assert cli(["check", str(tmp_path / "nope")]) == 1
        assert "Path not found" in capsys.readouterr().err


class TestInspect:
    """Tests for the tokens and tree dumps."""

    def test_tokens(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text('<a x="1"/>')
        assert cli(["tokens", str(path)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "1:1\tTAG_OPEN\t<",
            "1:2\tIDENTIFIER\ta",
            "1:4\tIDENTIFIER\tx",
            "1:5\tEQUALS\t=",
            "1:6\tSTRING\t1",
            "1:9\tTAG_SELF_CLOSE\t/>",
            "1:11\tEOF\t",
        ]

    def test_tokens_json(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text("<a>{n}</a>")
        assert cli(["tokens", str(path), "--json"]) == 0
        tokens = orjson.loads(capsys.readouterr().out)
        assert tokens[3] == {"type": "EXPRESSION", "value": "n", "line": 1, "column": 4}
        assert tokens[-1]["type"] == "EOF"

    def test_tokens_strict(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text("<a>!</a>")
        assert cli(["tokens", str(path), "--strict"]) == 1
        assert "Unexpected character '!'" in capsys.readouterr().err

    def test_tree(self, tmp_path, capsys):
        path = tmp_path / "a.rsml"
        path.write_text("<text><container/></text>")
        assert cli(["tree", str(path)]) == 0
        tree = orjson.loads(capsys.readouterr().out)
        assert tree["tag"] == "text"
        assert tree["children"][0]["tag"] == "container"
        assert tree["children"][0]["self_closing"] is True
