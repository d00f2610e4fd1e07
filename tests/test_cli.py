import json
import os
from pathlib import Path

import pytest

from dotconverge.__main__ import cli
from dotconverge.stores import ShellProfileStore, default_profile_path


pytestmark = pytest.mark.skipif(
    os.name == "nt", reason="CLI tests write the shell profile store"
)


@pytest.fixture
def dotfiles(repo_root: Path, write_file) -> Path:
    write_file(repo_root / "shell" / "bashrc", "# bashrc\n")
    write_file(repo_root / "shell" / "init.sh", "# init\n")
    write_file(
        repo_root / "dotconverge.yaml",
        "actions:\n"
        "  - kind: link\n"
        "    source: shell/bashrc\n"
        "    destination: .bashrc\n"
        "  - kind: append\n"
        "    source: shell/init.sh\n"
        "    destination: .profile\n"
        "  - kind: link\n"
        "    source: private/ssh_config\n"
        "    destination: .ssh/config\n"
        "    optional: true\n"
        "  - kind: setUserPath\n"
        "    path: .local/bin\n"
        "  - kind: setUserEnv\n"
        "    name: EDITOR\n"
        "    value: nvim\n",
    )
    return repo_root


def test_apply_converges_and_exits_zero(
    dotfiles: Path, home: Path, cli_runner
) -> None:
    result = cli_runner.invoke(cli, ["--repo", str(dotfiles), "apply"])

    assert result.exit_code == 0, result.output
    assert (home / ".bashrc").is_symlink()
    assert (home / ".profile").read_text(encoding="utf-8") == (
        f"source {dotfiles / 'shell' / 'init.sh'}\n"
    )
    store = ShellProfileStore(default_profile_path(home))
    assert store.get_value("EDITOR") == "nvim"
    assert store.get_value("PATH") == str(home / ".local" / "bin")
    assert "convergence overview" in result.output
    assert "private/ssh_config" in result.output


def test_apply_twice_is_stable(dotfiles: Path, home: Path, cli_runner) -> None:
    first = cli_runner.invoke(cli, ["--repo", str(dotfiles), "apply"])
    second = cli_runner.invoke(
        cli, ["--repo", str(dotfiles), "apply", "--format", "json"]
    )

    assert first.exit_code == 0
    assert second.exit_code == 0, second.output
    payload = json.loads(second.output)
    assert payload["summary"]["failed"] == 0
    assert payload["summary"]["changed"] == 0
    assert payload["summary"]["skipped"] == 1
    assert (home / ".profile").read_text(encoding="utf-8").count("source ") == 1


def test_apply_exits_one_when_an_action_fails(
    dotfiles: Path, home: Path, cli_runner, write_file
) -> None:
    write_file(home / ".bashrc", "precious\n")

    result = cli_runner.invoke(cli, ["--repo", str(dotfiles), "apply"])

    assert result.exit_code == 1
    assert "needs manual resolution" in result.output
    assert "ConflictingEntry" in result.output
    assert (home / ".bashrc").read_text(encoding="utf-8") == "precious\n"
    assert (home / ".profile").exists()


def test_apply_with_invalid_manifest_runs_nothing(
    repo_root: Path, home: Path, cli_runner, write_file
) -> None:
    write_file(repo_root / "dotconverge.yaml", "actions:\n  - kind: mkdir\n")

    result = cli_runner.invoke(cli, ["--repo", str(repo_root), "apply"])

    assert result.exit_code == 1
    assert "Invalid manifest schema" in result.output


def test_apply_without_manifest(repo_root: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--repo", str(repo_root), "apply"])

    assert result.exit_code == 1
    assert "Missing action manifest" in result.output


def test_repo_can_come_from_environment(dotfiles: Path, home: Path, cli_runner) -> None:
    result = cli_runner.invoke(
        cli, ["apply"], env={"DOTCONVERGE_REPO": str(dotfiles)}
    )

    assert result.exit_code == 0, result.output
    assert (home / ".bashrc").is_symlink()


def test_list_shows_actions_without_applying(
    dotfiles: Path, home: Path, cli_runner
) -> None:
    result = cli_runner.invoke(cli, ["--repo", str(dotfiles), "list"])

    assert result.exit_code == 0, result.output
    assert "declared actions" in result.output
    assert "setUserEnv" in result.output
    assert not (home / ".bashrc").exists()
    assert not default_profile_path(home).exists()


def test_validate_reports_action_count(dotfiles: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--repo", str(dotfiles), "validate"])

    assert result.exit_code == 0
    assert "5 actions" in result.output


def test_explicit_manifest_option(
    repo_root: Path, tmp_path: Path, cli_runner, write_file
) -> None:
    manifest = write_file(
        tmp_path / "laptop.yaml",
        f"actions:\n  - kind: mkdir\n    path: {tmp_path / 'models'}\n    absolute: true\n",
    )

    result = cli_runner.invoke(
        cli, ["--repo", str(repo_root), "--manifest", str(manifest), "apply"]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "models").is_dir()
