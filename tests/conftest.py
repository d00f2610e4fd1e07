import sys
from pathlib import Path
from typing import Any, Optional

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from dotconverge.errors import PrivilegeError  # noqa: E402
from dotconverge.filesystem import LocalFilesystem  # noqa: E402
from dotconverge.handlers import ExecutionContext  # noqa: E402
from dotconverge.stores import IUserStore  # noqa: E402


class MemoryStore(IUserStore):
    def __init__(self, values: Optional[dict[str, str]] = None) -> None:
        self.values: dict[str, str] = dict(values or {})
        self.writes: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "memory"

    def get_value(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def set_value(self, name: str, value: str) -> None:
        self.writes.append((name, value))
        self.values[name] = value


class RecordingFilesystem(LocalFilesystem):
    def __init__(self) -> None:
        self.mutations: list[tuple[str, Path]] = []

    def create_directory(self, path: Path) -> None:
        self.mutations.append(("create_directory", path))
        super().create_directory(path)

    def create_symlink(self, path: Path, target: Path) -> None:
        self.mutations.append(("create_symlink", path))
        super().create_symlink(path, target)

    def create_junction(self, path: Path, target: Path) -> None:
        self.mutations.append(("create_junction", path))
        super().create_junction(path, target)

    def copy_file(self, source: Path, target: Path) -> None:
        self.mutations.append(("copy_file", target))
        super().copy_file(source, target)

    def append_line(self, path: Path, line: str) -> None:
        self.mutations.append(("append_line", path))
        super().append_line(path, line)


class UnreadableFilesystem(LocalFilesystem):
    """Raises on any lookup below `denied`, like a directory without search permission."""

    def __init__(self, denied: Path) -> None:
        self.denied = denied

    def exists(self, path: Path) -> bool:
        if path.is_relative_to(self.denied):
            raise PermissionError(13, "Permission denied", str(path))
        return super().exists(path)


class NoSymlinkFilesystem(RecordingFilesystem):
    """Refuses symlinks like an unprivileged Windows account; junctions still work."""

    def create_symlink(self, path: Path, target: Path) -> None:
        self.mutations.append(("create_symlink", path))
        raise PrivilegeError(path, "A required privilege is not held by the client")

    def create_junction(self, path: Path, target: Path) -> None:
        self.mutations.append(("create_junction", path))
        path.symlink_to(target, target_is_directory=True)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", lambda: home)
    for name in (
        "DOTCONVERGE_REPO",
        "DOTCONVERGE_HOME",
        "DOTCONVERGE_MANIFEST",
        "DOTCONVERGE_STORE",
        "DOTCONVERGE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def home(isolated_home: Path) -> Path:
    return isolated_home


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "dotfiles"
    root.mkdir()
    return root


@pytest.fixture
def write_file():
    def _write(path: Path, text: str = "content\n") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def filesystem() -> RecordingFilesystem:
    return RecordingFilesystem()


@pytest.fixture
def context(
    repo_root: Path, home: Path, filesystem: RecordingFilesystem, store: MemoryStore
) -> ExecutionContext:
    return ExecutionContext(
        repo_root=repo_root, home=home, filesystem=filesystem, store=store
    )


@pytest.fixture
def cli_runner(home: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(home))
            env.setdefault("DOTCONVERGE_HOME", str(home))
            env.setdefault("COLUMNS", "200")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
