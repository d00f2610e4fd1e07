import logging
import os
import re
import shlex
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from enum import Enum
from pathlib import Path
from typing import Optional

from dotconverge.constants import (
    APP_NAME,
    PROFILE_STORE_RELATIVE_PATH,
    REGISTRY_ENVIRONMENT_KEY,
)
from dotconverge.errors import StoreError


logger = logging.getLogger(__name__)


class StoreBackend(str, Enum):
    PROCESS = "process"
    USER = "user"


class IUserStore(ABC):
    """User-scoped key-value store for environment-like settings."""

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_value(self, name: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set_value(self, name: str, value: str) -> None:
        raise NotImplementedError


class ProcessEnvironmentStore(IUserStore):
    def __init__(self, environ: Optional[MutableMapping[str, str]] = None) -> None:
        self._environ = environ if environ is not None else os.environ

    @property
    def name(self) -> str:
        return "process environment"

    def get_value(self, name: str) -> Optional[str]:
        return self._environ.get(name)

    def set_value(self, name: str, value: str) -> None:
        self._environ[name] = value


class WindowsRegistryStore(IUserStore):
    """Persistent per-user variables under HKEY_CURRENT_USER\\Environment."""

    def __init__(self, key_path: str = REGISTRY_ENVIRONMENT_KEY) -> None:
        try:
            import winreg
        except ImportError as exc:
            raise StoreError("The registry store is only available on Windows") from exc
        self._winreg = winreg
        self._key_path = key_path

    @property
    def name(self) -> str:
        return f"HKCU\\{self._key_path}"

    def get_value(self, name: str) -> Optional[str]:
        winreg = self._winreg
        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self._key_path) as key:
                value, _ = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Cannot read {self.name}\\{name}: {exc}") from exc
        return str(value)

    def set_value(self, name: str, value: str) -> None:
        winreg = self._winreg
        value_type = winreg.REG_EXPAND_SZ if "%" in value else winreg.REG_SZ
        try:
            with winreg.CreateKeyEx(
                winreg.HKEY_CURRENT_USER, self._key_path, 0, winreg.KEY_SET_VALUE
            ) as key:
                winreg.SetValueEx(key, name, 0, value_type, value)
        except OSError as exc:
            raise StoreError(f"Cannot write {self.name}\\{name}: {exc}") from exc


_EXPORT_PATTERN = re.compile(r"^export\s+([A-Za-z_][A-Za-z0-9_]*)=(.*)$")
_INHERITED_PATH_SUFFIX = ':"$PATH"'


class ShellProfileStore(IUserStore):
    """Variables kept as ``export NAME='value'`` lines in a sourced shell file.

    ``PATH`` holds only the user's entries; it is written with an inherited
    ``$PATH`` suffix so sourcing the file prepends rather than replaces.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def name(self) -> str:
        return str(self.path)

    def get_value(self, name: str) -> Optional[str]:
        return self._load().get(name)

    def set_value(self, name: str, value: str) -> None:
        if "\n" in value or "\r" in value:
            raise StoreError(f"Cannot store multi-line value for {name} in {self.path}")
        values = self._load()
        values[name] = value
        self._save(values)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        values: dict[str, str] = {}
        for line in self.path.read_text(encoding="utf-8").splitlines():
            match = _EXPORT_PATTERN.match(line.strip())
            if match is None:
                continue
            name, raw = match.groups()
            if name == "PATH" and raw.endswith(_INHERITED_PATH_SUFFIX):
                raw = raw[: -len(_INHERITED_PATH_SUFFIX)]
            try:
                parts = shlex.split(raw)
            except ValueError as exc:
                raise StoreError(f"Cannot parse {self.path}: {line}") from exc
            values[name] = parts[0] if parts else ""
        return values

    def _save(self, values: dict[str, str]) -> None:
        lines = [f"# Managed by {APP_NAME}. Source this file from your shell profile."]
        for name, value in values.items():
            rendered = shlex.quote(value)
            if name == "PATH":
                rendered += _INHERITED_PATH_SUFFIX
            lines.append(f"export {name}={rendered}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def default_profile_path(home: Path) -> Path:
    return home.joinpath(*PROFILE_STORE_RELATIVE_PATH)


def create_store(backend: StoreBackend | str, home: Path) -> IUserStore:
    backend = StoreBackend(backend)
    if backend == StoreBackend.PROCESS:
        return ProcessEnvironmentStore()
    if os.name == "nt":
        return WindowsRegistryStore()
    store = ShellProfileStore(default_profile_path(home))
    logger.debug("Using shell profile store at %s", store.path)
    return store
