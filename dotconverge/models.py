from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from dotconverge.constants import DEFAULT_APPEND_KEYWORD


class ActionKind(str, Enum):
    LINK = "link"
    COPY = "copy"
    APPEND = "append"
    MKDIR = "mkdir"
    SET_USER_PATH = "setUserPath"
    SET_USER_ENV = "setUserEnv"


class ResultStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class ErrorKind(str, Enum):
    SOURCE_MISSING = "SourceMissing"
    PRIVILEGE_REQUIRED = "PrivilegeRequired"
    CONFLICTING_LINK = "ConflictingLink"
    CONFLICTING_ENTRY = "ConflictingEntry"
    VALUE_CONFLICT = "ValueConflict"
    UNKNOWN_ACTION_KIND = "UnknownActionKind"
    IO_ERROR = "IOError"


# Report ordering: failures first so they stay visible at the top.
STATUS_ORDER: dict[ResultStatus, int] = {
    ResultStatus.FAILED: 0,
    ResultStatus.SUCCESS: 1,
}


@dataclass(frozen=True)
class LinkAction:
    KIND: ClassVar[ActionKind] = ActionKind.LINK

    source: str
    destination: str
    absolute: bool = False
    optional: bool = False

    @property
    def label(self) -> str:
        return self.source


@dataclass(frozen=True)
class CopyAction:
    KIND: ClassVar[ActionKind] = ActionKind.COPY

    source: str
    destination: str
    absolute: bool = False
    optional: bool = False

    @property
    def label(self) -> str:
        return self.source


@dataclass(frozen=True)
class AppendAction:
    KIND: ClassVar[ActionKind] = ActionKind.APPEND

    source: str
    destination: str
    keyword: str = DEFAULT_APPEND_KEYWORD
    absolute: bool = False
    optional: bool = False

    @property
    def label(self) -> str:
        return self.source


@dataclass(frozen=True)
class MkdirAction:
    KIND: ClassVar[ActionKind] = ActionKind.MKDIR

    path: str
    absolute: bool = False

    @property
    def label(self) -> str:
        return self.path


@dataclass(frozen=True)
class UserPathAction:
    KIND: ClassVar[ActionKind] = ActionKind.SET_USER_PATH

    path: str
    absolute: bool = False

    @property
    def label(self) -> str:
        return self.path


@dataclass(frozen=True)
class UserEnvAction:
    KIND: ClassVar[ActionKind] = ActionKind.SET_USER_ENV

    name: str
    value: str
    allow_override: bool = False

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnknownAction:
    """A declared entry whose kind has no executor."""

    kind: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def label(self) -> str:
        return self.kind


Action = Union[
    LinkAction,
    CopyAction,
    AppendAction,
    MkdirAction,
    UserPathAction,
    UserEnvAction,
    UnknownAction,
]

SourceAction = Union[LinkAction, CopyAction, AppendAction]


def action_method(action: Action) -> str:
    if isinstance(action, UnknownAction):
        return action.kind
    return action.KIND.value


@dataclass(frozen=True)
class Outcome:
    success: bool
    detail: str = ""
    changed: bool = False
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, detail: str, changed: bool = True) -> "Outcome":
        return cls(success=True, detail=detail, changed=changed)

    @classmethod
    def unchanged(cls, detail: str) -> "Outcome":
        return cls(success=True, detail=detail, changed=False)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Outcome":
        return cls(success=False, error=error, message=message)


@dataclass(frozen=True)
class ActionResult:
    installed: str
    method: str
    target: str
    status: ResultStatus
    message: Optional[str] = None
    error: Optional[ErrorKind] = None
    detail: str = ""
    changed: bool = False

    @property
    def failed(self) -> bool:
        return self.status == ResultStatus.FAILED

    def as_dict(self) -> dict[str, Any]:
        return {
            "installed": self.installed,
            "method": self.method,
            "target": self.target,
            "status": self.status.value,
            "message": self.message,
            "error": self.error.value if self.error is not None else None,
            "detail": self.detail,
            "changed": self.changed,
        }


@dataclass
class RunReport:
    results: list[ActionResult]
    skipped: list[str]

    def sorted_results(self) -> list[ActionResult]:
        indexed = list(enumerate(self.results))
        indexed.sort(key=lambda item: (STATUS_ORDER[item[1].status], item[0]))
        return [result for _, result in indexed]

    def failures(self) -> list[ActionResult]:
        return [result for result in self.results if result.failed]

    def has_failures(self) -> bool:
        return any(result.failed for result in self.results)

    def exit_code(self) -> int:
        return 1 if self.has_failures() else 0

    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in ResultStatus}
        for result in self.results:
            counts[result.status.value] += 1
        counts["changed"] = sum(1 for result in self.results if result.changed)
        counts["actions"] = len(self.results)
        counts["skipped"] = len(self.skipped)
        return counts

    def as_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "results": [result.as_dict() for result in self.sorted_results()],
            "skipped": list(self.skipped),
        }
