import os
from typing import Final


APP_NAME: Final[str] = "dotconverge"

MANIFEST_FILENAMES: Final[tuple[str, ...]] = (
    "dotconverge.yaml",
    "dotconverge.yml",
    "dotconverge.json",
)

DEFAULT_APPEND_KEYWORD: Final[str] = "source"

PATH_VARIABLE: Final[str] = "Path" if os.name == "nt" else "PATH"

PROFILE_STORE_RELATIVE_PATH: Final[tuple[str, ...]] = (".config", APP_NAME, "env.sh")

REGISTRY_ENVIRONMENT_KEY: Final[str] = "Environment"

WINDOWS_PRIVILEGE_NOT_HELD: Final[int] = 1314

EXTENDED_PATH_PREFIX: Final[str] = "\\\\?\\"
