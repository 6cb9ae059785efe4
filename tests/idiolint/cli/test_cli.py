"""Tests for the idiolint command line."""

import json

import pytest
from typer.testing import CliRunner

from idiolint import __version__
from idiolint.cli.main import app
from idiolint.core.logging import reset_logging

runner = CliRunner()

NARROW = "foo(x::Int) = x+1\n"
NULLABLE = "struct Box\n    value::Union{Nothing,Int}\nend\n"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    for name in ("IDIOLINT_CONFIG_PATH", "IDIOLINT_SELECT", "IDIOLINT_DISABLE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def sources(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "narrow.jl").write_text(NARROW)
    (src / "box.jl").write_text(NULLABLE)
    (src / "notes.txt").write_text("not source")
    return src


def _json(*args: str) -> list[dict]:
    result = runner.invoke(app, ["-q", "lint", *args, "--format", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_invalid_log_level(self, sources) -> None:
        result = runner.invoke(app, ["--log-level", "loud", "lint", str(sources)])
        assert result.exit_code == 2

    def test_invalid_log_format(self, sources) -> None:
        result = runner.invoke(app, ["--log-format", "xml", "lint", str(sources)])
        assert result.exit_code == 2


class TestLintCommand:
    def test_clean_file(self, tmp_path) -> None:
        path = tmp_path / "clean.jl"
        path.write_text("clean(x) = x\n")
        result = runner.invoke(app, ["lint", str(path)])
        assert result.exit_code == 0
        assert "No issues found" in result.stdout

    def test_warnings_exit_zero(self, sources) -> None:
        result = runner.invoke(app, ["-q", "lint", str(sources / "narrow.jl")])
        assert result.exit_code == 0
        assert "1 warning(s)" in result.stdout

    def test_json_rows(self, sources) -> None:
        rows = _json(str(sources))
        assert [(row["file"].rsplit("/", 1)[-1], row["ruleId"]) for row in rows] == [
            ("box.jl", "nullable-field"),
            ("narrow.jl", "narrow-argument-type"),
        ]
        assert set(rows[0]) == {
            "file",
            "ruleId",
            "category",
            "severity",
            "line",
            "column",
            "endLine",
            "endColumn",
            "message",
            "hasFix",
        }
        assert rows[1]["hasFix"] is True
        assert (rows[1]["line"], rows[1]["column"], rows[1]["endColumn"]) == (1, 8, 11)

    def test_category_filter(self, sources) -> None:
        rows = _json(str(sources), "--category", "safety")
        assert {row["ruleId"] for row in rows} == {"nullable-field"}

    def test_select_and_disable(self, sources) -> None:
        rows = _json(
            str(sources),
            "--select",
            "nullable-field,narrow-argument-type",
            "--disable",
            "nullable-field",
        )
        assert [row["ruleId"] for row in rows] == ["narrow-argument-type"]

    def test_parse_failure_exits_one(self, tmp_path) -> None:
        path = tmp_path / "broken.jl"
        path.write_text('s = "open\n')
        result = runner.invoke(app, ["-q", "lint", str(path), "--format", "json"])
        assert result.exit_code == 1
        (row,) = json.loads(result.stdout)
        assert row["ruleId"] == "parse-unavailable"
        assert row["category"] is None

    def test_fix_rewrites_file(self, sources) -> None:
        result = runner.invoke(app, ["-q", "lint", str(sources / "narrow.jl"), "--fix"])
        assert result.exit_code == 0
        assert (sources / "narrow.jl").read_text() == "foo(x::Integer) = x+1\n"

    @pytest.mark.parametrize(
        "args",
        [
            ["--select", "no-such-rule"],
            ["--category", "style"],
            ["--format", "xml"],
            ["--workers", "0"],
        ],
    )
    def test_usage_errors(self, sources, args: list[str]) -> None:
        result = runner.invoke(app, ["-q", "lint", str(sources), *args])
        assert result.exit_code == 2

    def test_missing_path(self, tmp_path) -> None:
        result = runner.invoke(app, ["lint", str(tmp_path / "nope.jl")])
        assert result.exit_code == 2

    def test_config_file(self, sources, tmp_path) -> None:
        config = tmp_path / "lint.yaml"
        config.write_text("kind: Config\nspec:\n  disable_rules: [nullable-field]\n")
        rows = _json(str(sources), "--config", str(config))
        assert [row["ruleId"] for row in rows] == ["narrow-argument-type"]

    def test_bad_config_file(self, sources, tmp_path) -> None:
        config = tmp_path / "lint.yaml"
        config.write_text("kind: Other\n")
        result = runner.invoke(app, ["-q", "lint", str(sources), "--config", str(config)])
        assert result.exit_code == 2


class TestRulesCommand:
    def test_json_catalogue(self) -> None:
        result = runner.invoke(app, ["rules", "--format", "json"])
        assert result.exit_code == 0
        catalogue = json.loads(result.stdout)
        assert len(catalogue) == 13
        assert catalogue[0]["category"] == "typing"
        assert all(entry["description"] for entry in catalogue)

    def test_category(self) -> None:
        result = runner.invoke(app, ["rules", "-c", "safety", "-f", "json"])
        ids = [entry["ruleId"] for entry in json.loads(result.stdout)]
        assert ids == ["nullable-field", "unsafe-interface"]

    def test_unknown_category(self) -> None:
        assert runner.invoke(app, ["rules", "-c", "style"]).exit_code == 2

    def test_table(self) -> None:
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "idiolint rules" in result.stdout
