from pathlib import Path

import pytest
from click.testing import CliRunner

from devflow.cli.main import cli

EXTENSION_SCRIPT = """\
if [ "$1" = "--discover" ]; then
  echo '["test", "fmt:check"]'
  exit 0
fi
if [ "$1" = "--build-action" ]; then
  cat > /dev/null
  echo '{"program": "sh", "args": ["-c", "echo ran > ran.txt"]}'
  exit 0
fi
exit 1
"""


@pytest.fixture
def project(tmp_path: Path, make_script, bin_on_path, monkeypatch: pytest.MonkeyPatch) -> Path:
    make_script("devflow-ext-python", EXTENSION_SCRIPT)
    (tmp_path / "devflow.toml").write_text(
        '[project]\nname = "demo"\nstack = ["python"]\n\n'
        '[targets]\npr = ["fmt:check", "test:unit"]\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IS_CONTAINER", raising=False)
    return tmp_path


def test_runs_command_through_subprocess_extension(project: Path) -> None:
    result = CliRunner().invoke(cli, ["test", "unit"])

    assert result.exit_code == 0, result.output
    assert "run test:unit" in result.output
    assert (project / "ran.txt").read_text(encoding="utf-8").strip() == "ran"


def test_check_prints_profile_plan(project: Path) -> None:
    result = CliRunner().invoke(cli, ["check"])

    assert result.exit_code == 0, result.output
    assert "check:pr" in result.output
    assert " - fmt:check" in result.output
    assert " - test:unit" in result.output
    assert not (project / "ran.txt").exists()


def test_verify_alias_maps_to_check(project: Path) -> None:
    result = CliRunner().invoke(cli, ["verify"])
    assert result.exit_code == 0, result.output
    assert "check:pr" in result.output


def test_unsupported_command_fails(project: Path) -> None:
    result = CliRunner().invoke(cli, ["build:release"])
    assert result.exit_code == 1
    assert "no extension exposes capability 'build:release'" in result.output


def test_unknown_primary_fails(project: Path) -> None:
    result = CliRunner().invoke(cli, ["deploy"])
    assert result.exit_code == 1
    assert "unknown primary command 'deploy'" in result.output


def test_missing_config_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["test"])
    assert result.exit_code == 1
    assert "failed to read config file" in result.output


def test_invalid_target_profile_fails_at_startup(project: Path) -> None:
    (project / "devflow.toml").write_text(
        '[project]\nname = "demo"\nstack = ["python"]\n\n[targets]\nmain = ["build:release"]\n',
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["test:unit"])
    assert result.exit_code == 1
    assert "target profile 'main'" in result.output


def test_bare_primary_runs_default_selector_on_builtin_stack(
    tmp_path: Path, make_script, bin_on_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    make_script("cargo", 'echo "$@" > cargo-args.txt\n')
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n', encoding="utf-8")
    (tmp_path / "devflow.toml").write_text(
        '[project]\nname = "demo"\nstack = ["rust"]\n\n[runtime]\nprofile = "host"\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IS_CONTAINER", raising=False)

    result = CliRunner().invoke(cli, ["fmt"])

    assert result.exit_code == 0, result.output
    assert "no extension exposes capability" not in result.output
    assert (tmp_path / "cargo-args.txt").read_text(encoding="utf-8").strip() == "fmt --all -- --check"
