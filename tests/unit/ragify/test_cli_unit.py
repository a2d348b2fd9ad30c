from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from ragify import __version__, cli
from ragify.exceptions import GitCommandError
from ragify.output_construction import OutputArtifact

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def _no_ambient_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("GITHUB_TOKEN", "RAGIFY_CLEANUP"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.mark.unit
def test_parse_args_reads_target_and_options() -> None:
    settings = cli.parse_args(["elysia", "--output-root", "build", "--cleanup", "--targets-file", "t.yaml"])

    assert settings.target == "elysia"
    assert settings.output_root == Path("build")
    assert settings.cleanup is True
    assert settings.targets_file == Path("t.yaml")


@pytest.mark.unit
def test_parse_args_cleanup_defaults_to_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert cli.parse_args(["elysia"]).cleanup is False

    monkeypatch.setenv("RAGIFY_CLEANUP", "1")

    assert cli.parse_args(["elysia"]).cleanup is True


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_main_without_target_fails(capsys: pytest.CaptureFixture[str], mocker: MockerFixture) -> None:
    combine = mocker.patch.object(cli, "combine_files_from_repo")

    assert cli.main([]) == 1
    assert "Please provide a target name." in capsys.readouterr().err
    combine.assert_not_called()


@pytest.mark.unit
def test_main_unknown_target_fails_without_writing(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    mocker: MockerFixture,
) -> None:
    combine = mocker.patch.object(cli, "combine_files_from_repo")
    root = tmp_path / "public"

    assert cli.main(["nope", "--output-root", str(root)]) == 1
    assert "No configuration found for target: nope" in capsys.readouterr().err
    combine.assert_not_called()
    assert not root.exists()


@pytest.mark.unit
def test_main_list_targets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    targets_file = tmp_path / "targets.yaml"
    targets_file.write_text("handbook:\n  repoUrl: https://github.com/acme/handbook\n", encoding="utf-8")

    assert cli.main(["--list-targets", "--targets-file", str(targets_file)]) == 0
    assert capsys.readouterr().out.split() == ["discord", "elysia", "handbook"]


@pytest.mark.unit
def test_main_invalid_targets_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    targets_file = tmp_path / "targets.yaml"
    targets_file.write_text("- nope\n", encoding="utf-8")

    assert cli.main(["elysia", "--targets-file", str(targets_file)]) == 1
    assert "Invalid targets file" in capsys.readouterr().err


@pytest.mark.unit
def test_main_success(tmp_path: Path, capsys: pytest.CaptureFixture[str], mocker: MockerFixture) -> None:
    artifact = OutputArtifact(path=tmp_path / "out" / "x.md", content="a", token_count=1)
    combine = mocker.patch.object(cli, "combine_files_from_repo", return_value=artifact)

    assert cli.main(["elysia"]) == 0

    options, settings = combine.call_args.args
    assert options.repo_url == "https://github.com/elysiajs/documentation"
    assert settings.target == "elysia"
    out = capsys.readouterr().out
    assert "x.md" in out
    assert "Operation completed successfully." in out


@pytest.mark.unit
def test_main_nothing_to_combine_succeeds(capsys: pytest.CaptureFixture[str], mocker: MockerFixture) -> None:
    mocker.patch.object(cli, "combine_files_from_repo", return_value=None)

    assert cli.main(["elysia"]) == 0
    out = capsys.readouterr().out
    assert "Combined file created" not in out
    assert "Operation completed successfully." in out


@pytest.mark.unit
def test_main_sync_failure_exits_non_zero(capsys: pytest.CaptureFixture[str], mocker: MockerFixture) -> None:
    mocker.patch.object(
        cli,
        "combine_files_from_repo",
        side_effect=GitCommandError(command="git pull", returncode=1, stdout="", stderr="fatal: boom"),
    )

    assert cli.main(["elysia"]) == 1
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "fatal: boom" in err


@pytest.mark.unit
def test_main_unknown_target_with_log_file_creates_nothing(
    tmp_path: Path,
    mocker: MockerFixture,
) -> None:
    combine = mocker.patch.object(cli, "combine_files_from_repo")
    log_file = tmp_path / "logs" / "run.log"
    log_file.parent.mkdir()

    assert cli.main(["nope", "--log-file", str(log_file)]) == 1
    assert not log_file.exists()
    combine.assert_not_called()
