from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotconverge.executor import build_context
from dotconverge.filesystem import IFilesystem
from dotconverge.handlers import ExecutionContext
from dotconverge.repository import ConfigRepository
from dotconverge.stores import IUserStore, StoreBackend, create_store


@dataclass(frozen=True)
class Settings:
    repo_root: Path
    home: Path
    store_backend: StoreBackend = StoreBackend.USER
    manifest: Optional[Path] = None

    def repository(self) -> ConfigRepository:
        return ConfigRepository(self.repo_root, manifest=self.manifest)

    def store(self) -> IUserStore:
        return create_store(self.store_backend, self.home)

    def context(
        self,
        store: Optional[IUserStore] = None,
        filesystem: Optional[IFilesystem] = None,
    ) -> ExecutionContext:
        return build_context(
            repo_root=self.repository().root,
            home=self.home,
            store=store or self.store(),
            filesystem=filesystem,
        )
