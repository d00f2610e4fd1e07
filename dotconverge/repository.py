from pathlib import Path
from typing import Optional

from dotconverge.constants import MANIFEST_FILENAMES
from dotconverge.manifest import load_manifest
from dotconverge.models import Action


class ConfigRepository:
    """The tracked configuration repository that actions are sourced from."""

    def __init__(self, root: Optional[Path] = None, manifest: Optional[Path] = None) -> None:
        self._root = (root or Path.cwd()).expanduser().absolute()
        self._manifest = manifest

    @property
    def root(self) -> Path:
        return self._root

    @property
    def manifest_path(self) -> Path:
        if self._manifest is not None:
            manifest = self._manifest.expanduser()
            return manifest if manifest.is_absolute() else self.root / manifest
        for name in MANIFEST_FILENAMES:
            candidate = self.root / name
            if candidate.exists():
                return candidate
        return self.root / MANIFEST_FILENAMES[0]

    def load_actions(self) -> list[Action]:
        return load_manifest(self.manifest_path)
