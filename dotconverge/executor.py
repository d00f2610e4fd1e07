import logging
from pathlib import Path
from typing import Iterable, Optional

from dotconverge.filesystem import IFilesystem, LocalFilesystem
from dotconverge.handlers import (
    ActionHandler,
    AppendHandler,
    CopyHandler,
    ExecutionContext,
    LinkHandler,
    MkdirHandler,
    UserEnvHandler,
    UserPathHandler,
)
from dotconverge.models import (
    Action,
    ActionResult,
    AppendAction,
    CopyAction,
    ErrorKind,
    LinkAction,
    MkdirAction,
    Outcome,
    ResultStatus,
    RunReport,
    SourceAction,
    UserEnvAction,
    UserPathAction,
    action_method,
)
from dotconverge.stores import IUserStore
from dotconverge.utils import resolve_source


logger = logging.getLogger(__name__)


class ConvergenceExecutor:
    """Applies declared actions in order, one result per attempted action.

    A failing action never stops the run; optional actions whose source is
    absent are left out of the results and listed as skipped.
    """

    def __init__(self, context: ExecutionContext) -> None:
        self.context = context
        self.handlers: dict[type, ActionHandler] = {
            LinkAction: LinkHandler(),
            CopyAction: CopyHandler(),
            AppendAction: AppendHandler(),
            MkdirAction: MkdirHandler(),
            UserPathAction: UserPathHandler(),
            UserEnvAction: UserEnvHandler(),
        }

    def execute(self, actions: Iterable[Action]) -> RunReport:
        results: list[ActionResult] = []
        skipped: list[str] = []

        for action in actions:
            try:
                if self._should_skip(action):
                    skipped.append(f"Optional source absent: {action.label}")
                    logger.debug("Skipping optional %s", action.label)
                    continue
                results.append(self._run(action))
            except Exception as exc:
                outcome = Outcome.failure(
                    ErrorKind.IO_ERROR,
                    f"{action_method(action)} failed for {action.label}: {exc}",
                )
                results.append(self._failed(action, target="", outcome=outcome))

        return RunReport(results=results, skipped=skipped)

    def describe(self, actions: Iterable[Action]) -> list[dict[str, str]]:
        rows: list[dict[str, str]] = []
        for action in actions:
            handler = self.handlers.get(type(action))
            source = ""
            flags: list[str] = []
            if isinstance(action, SourceAction):
                source = str(resolve_source(action.source, self.context.repo_root))
                if action.optional:
                    flags.append("optional")
            if getattr(action, "absolute", False):
                flags.append("absolute")
            if isinstance(action, AppendAction):
                flags.append(f"keyword={action.keyword}")
            if isinstance(action, UserEnvAction) and action.allow_override:
                flags.append("override")
            rows.append(
                {
                    "method": action_method(action),
                    "source": source,
                    "target": handler.target(action, self.context) if handler else "",
                    "flags": " ".join(flags),
                }
            )
        return rows

    def _should_skip(self, action: Action) -> bool:
        if not isinstance(action, SourceAction):
            return False
        if not action.optional:
            return False
        source = resolve_source(action.source, self.context.repo_root)
        return not self.context.filesystem.exists(source)

    def _run(self, action: Action) -> ActionResult:
        method = action_method(action)
        handler = self.handlers.get(type(action))
        if handler is None:
            return self._failed(
                action,
                target="",
                outcome=Outcome.failure(
                    ErrorKind.UNKNOWN_ACTION_KIND, f"Unknown action kind: {method}"
                ),
            )

        target = handler.target(action, self.context)
        try:
            outcome = handler.handle(action, self.context)
        except Exception as exc:
            outcome = Outcome.failure(
                ErrorKind.IO_ERROR, f"{method} failed for {target}: {exc}"
            )

        if not outcome.success:
            return self._failed(action, target=target, outcome=outcome)
        return ActionResult(
            installed=action.label,
            method=method,
            target=target,
            status=ResultStatus.SUCCESS,
            detail=outcome.detail,
            changed=outcome.changed,
        )

    def _failed(self, action: Action, target: str, outcome: Outcome) -> ActionResult:
        error = outcome.error or ErrorKind.IO_ERROR
        logger.warning("%s %s: %s", error.value, action.label, outcome.message)
        return ActionResult(
            installed=action.label,
            method=action_method(action),
            target=target,
            status=ResultStatus.FAILED,
            message=outcome.message,
            error=error,
        )


def execute_actions(
    actions: Iterable[Action],
    context: ExecutionContext,
) -> RunReport:
    return ConvergenceExecutor(context).execute(actions)


def build_context(
    repo_root: Path,
    home: Path,
    store: IUserStore,
    filesystem: Optional[IFilesystem] = None,
) -> ExecutionContext:
    return ExecutionContext(
        repo_root=repo_root,
        home=home,
        filesystem=filesystem or LocalFilesystem(),
        store=store,
    )
