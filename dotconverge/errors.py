from pathlib import Path


class DotConvergeError(Exception):
    """Base user-facing application error."""


class ManifestError(DotConvergeError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class MissingManifestError(ManifestError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Missing action manifest")


class InvalidManifestFormatError(ManifestError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid manifest format ({detail})")


class InvalidManifestSchemaError(ManifestError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid manifest schema ({detail})")


class PrivilegeError(DotConvergeError):
    """Raised when the platform refuses to create a link without elevation."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Link creation not permitted ({detail}): {path}")


class StoreError(DotConvergeError):
    """Raised when a user-scoped store cannot be read or written."""
