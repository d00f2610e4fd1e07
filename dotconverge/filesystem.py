import errno
import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from dotconverge.constants import EXTENDED_PATH_PREFIX, WINDOWS_PRIVILEGE_NOT_HELD
from dotconverge.errors import PrivilegeError


logger = logging.getLogger(__name__)


class IFilesystem(ABC):
    @abstractmethod
    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_link_or_junction(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    def link_target(self, path: Path) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def create_directory(self, path: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def create_symlink(self, path: Path, target: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def create_junction(self, path: Path, target: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def copy_file(self, source: Path, target: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def read_lines(self, path: Path) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def append_line(self, path: Path, line: str) -> None:
        raise NotImplementedError


class LocalFilesystem(IFilesystem):
    def exists(self, path: Path) -> bool:
        return path.exists() or path.is_symlink()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def is_link_or_junction(self, path: Path) -> bool:
        return path.is_symlink() or os.path.isjunction(path)

    def link_target(self, path: Path) -> Optional[str]:
        if not self.is_link_or_junction(path):
            return None
        target = os.readlink(path)
        if target.startswith(EXTENDED_PATH_PREFIX):
            target = target[len(EXTENDED_PATH_PREFIX) :]
        return target

    def create_directory(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def create_symlink(self, path: Path, target: Path) -> None:
        try:
            os.symlink(
                str(target), str(path), target_is_directory=target.is_dir()
            )
        except OSError as exc:
            if _is_privilege_error(exc):
                raise PrivilegeError(path, exc.strerror or str(exc)) from exc
            raise

    def create_junction(self, path: Path, target: Path) -> None:
        if os.name != "nt":
            raise PrivilegeError(path, "junctions are only available on Windows")
        completed = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(path), str(target)],
            capture_output=True,
            text=True,
        )
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout).strip()
            raise OSError(f"mklink /J failed for {path}: {detail}")
        logger.debug("mklink /J %s -> %s", path, target)

    def copy_file(self, source: Path, target: Path) -> None:
        shutil.copy2(source, target)

    def read_lines(self, path: Path) -> list[str]:
        return path.read_text(encoding="utf-8").splitlines()

    def append_line(self, path: Path, line: str) -> None:
        prefix = ""
        if path.exists() and path.stat().st_size > 0:
            with path.open("rb") as handle:
                handle.seek(-1, os.SEEK_END)
                if handle.read(1) not in (b"\n", b"\r"):
                    prefix = "\n"
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{prefix}{line}\n")


def _is_privilege_error(exc: OSError) -> bool:
    if getattr(exc, "winerror", None) == WINDOWS_PRIVILEGE_NOT_HELD:
        return True
    return exc.errno == errno.EPERM
