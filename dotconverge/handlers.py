import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dotconverge.constants import DEFAULT_APPEND_KEYWORD, PATH_VARIABLE
from dotconverge.errors import PrivilegeError
from dotconverge.filesystem import IFilesystem
from dotconverge.models import (
    Action,
    AppendAction,
    CopyAction,
    ErrorKind,
    LinkAction,
    MkdirAction,
    Outcome,
    UserEnvAction,
    UserPathAction,
)
from dotconverge.stores import IUserStore
from dotconverge.utils import resolve_destination, resolve_source


logger = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    repo_root: Path
    home: Path
    filesystem: IFilesystem
    store: IUserStore


def ensure_directory(fs: IFilesystem, path: Path) -> bool:
    if fs.exists(path):
        return False
    fs.create_directory(path)
    logger.info("Created directory %s", path)
    return True


def _source_missing(source: Path) -> Outcome:
    return Outcome.failure(ErrorKind.SOURCE_MISSING, f"Source not found: {source}")


def ensure_link(
    context: ExecutionContext, source: str, destination: str, absolute: bool = False
) -> Outcome:
    fs = context.filesystem
    source_path = resolve_source(source, context.repo_root)
    target = resolve_destination(destination, absolute, context.home)
    if not fs.exists(source_path):
        return _source_missing(source_path)

    ensure_directory(fs, target.parent)

    if not fs.exists(target):
        try:
            fs.create_symlink(target, source_path)
        except PrivilegeError as exc:
            if not fs.is_dir(source_path):
                return Outcome.failure(
                    ErrorKind.PRIVILEGE_REQUIRED,
                    f"Symlink to file needs elevated privileges ({exc.detail}): {target}",
                )
            fs.create_junction(target, source_path)
            logger.info("Created junction %s -> %s", target, source_path)
            return Outcome.ok("created junction")
        logger.info("Created symlink %s -> %s", target, source_path)
        return Outcome.ok("created symlink")

    if fs.is_link_or_junction(target):
        current = fs.link_target(target)
        if current == str(source_path):
            logger.debug("Already linked %s -> %s", target, current)
            return Outcome.unchanged("already linked")
        return Outcome.failure(
            ErrorKind.CONFLICTING_LINK,
            f"Link points elsewhere ({current}, expected {source_path}): {target}",
        )

    return Outcome.failure(
        ErrorKind.CONFLICTING_ENTRY,
        f"Non-link entry exists (not overwritten): {target}",
    )


def ensure_copy(
    context: ExecutionContext, source: str, destination: str, absolute: bool = False
) -> Outcome:
    fs = context.filesystem
    source_path = resolve_source(source, context.repo_root)
    target = resolve_destination(destination, absolute, context.home)
    if not fs.exists(source_path):
        return _source_missing(source_path)
    if fs.is_link_or_junction(target):
        return Outcome.failure(
            ErrorKind.CONFLICTING_ENTRY,
            f"Link exists at copy destination (not overwritten): {target}",
        )
    if fs.is_dir(target):
        return Outcome.failure(
            ErrorKind.CONFLICTING_ENTRY,
            f"Directory exists at copy destination: {target}",
        )

    ensure_directory(fs, target.parent)
    existed = fs.exists(target)
    fs.copy_file(source_path, target)
    logger.info("Copied %s -> %s", source_path, target)
    return Outcome.ok("overwrote file" if existed else "copied file")


def append_directive(keyword: str, source_path: Path) -> str:
    return f"{keyword} {source_path}"


def ensure_append(
    context: ExecutionContext,
    source: str,
    destination: str,
    absolute: bool = False,
    keyword: str = DEFAULT_APPEND_KEYWORD,
) -> Outcome:
    fs = context.filesystem
    source_path = resolve_source(source, context.repo_root)
    target = resolve_destination(destination, absolute, context.home)
    if not fs.exists(source_path):
        return _source_missing(source_path)

    directive = append_directive(keyword, source_path)
    ensure_directory(fs, target.parent)
    if fs.exists(target):
        lines = [line.rstrip() for line in fs.read_lines(target)]
        if directive in lines:
            logger.debug("Directive already present in %s: %s", target, directive)
            return Outcome.unchanged("line already present")

    fs.append_line(target, directive)
    logger.info("Appended %r to %s", directive, target)
    return Outcome.ok("appended line")


def ensure_mkdir(
    context: ExecutionContext, path: str, absolute: bool = False
) -> Outcome:
    fs = context.filesystem
    target = resolve_destination(path, absolute, context.home)
    if fs.exists(target) and not fs.is_dir(target):
        return Outcome.failure(
            ErrorKind.CONFLICTING_ENTRY,
            f"Non-directory entry exists: {target}",
        )
    if ensure_directory(fs, target):
        return Outcome.ok("created directory")
    return Outcome.unchanged("directory exists")


def add_user_path_entry(
    context: ExecutionContext, path: str, absolute: bool = False
) -> Outcome:
    entry = str(resolve_destination(path, absolute, context.home))
    store = context.store
    current = store.get_value(PATH_VARIABLE) or ""
    entries = [item for item in current.split(os.pathsep) if item]
    if entry in entries:
        logger.debug("%s already contains %s", PATH_VARIABLE, entry)
        return Outcome.unchanged("entry already present")

    entries.append(entry)
    store.set_value(PATH_VARIABLE, os.pathsep.join(entries))
    logger.info("Added %s to %s in %s", entry, PATH_VARIABLE, store.name)
    return Outcome.ok("added entry")


def set_user_env_var(
    context: ExecutionContext, name: str, value: str, allow_override: bool = False
) -> Outcome:
    store = context.store
    current = store.get_value(name)
    if current is None:
        store.set_value(name, value)
        logger.info("Set %s in %s", name, store.name)
        return Outcome.ok("set value")
    if current == value:
        logger.debug("%s already set to %s", name, value)
        return Outcome.unchanged("value already set")
    if not allow_override:
        return Outcome.failure(
            ErrorKind.VALUE_CONFLICT,
            f"{name} is already set to {current!r} (wanted {value!r}, override not allowed)",
        )
    store.set_value(name, value)
    logger.info("Overrode %s in %s (was %r)", name, store.name, current)
    return Outcome.ok("overrode value")


class ActionHandler(Protocol):
    def handle(self, action: Action, context: ExecutionContext) -> Outcome: ...

    def target(self, action: Action, context: ExecutionContext) -> str: ...


class LinkHandler:
    def handle(self, action: LinkAction, context: ExecutionContext) -> Outcome:
        return ensure_link(context, action.source, action.destination, action.absolute)

    def target(self, action: LinkAction, context: ExecutionContext) -> str:
        return str(resolve_destination(action.destination, action.absolute, context.home))


class CopyHandler:
    def handle(self, action: CopyAction, context: ExecutionContext) -> Outcome:
        return ensure_copy(context, action.source, action.destination, action.absolute)

    def target(self, action: CopyAction, context: ExecutionContext) -> str:
        return str(resolve_destination(action.destination, action.absolute, context.home))


class AppendHandler:
    def handle(self, action: AppendAction, context: ExecutionContext) -> Outcome:
        return ensure_append(
            context,
            action.source,
            action.destination,
            absolute=action.absolute,
            keyword=action.keyword,
        )

    def target(self, action: AppendAction, context: ExecutionContext) -> str:
        return str(resolve_destination(action.destination, action.absolute, context.home))


class MkdirHandler:
    def handle(self, action: MkdirAction, context: ExecutionContext) -> Outcome:
        return ensure_mkdir(context, action.path, action.absolute)

    def target(self, action: MkdirAction, context: ExecutionContext) -> str:
        return str(resolve_destination(action.path, action.absolute, context.home))


class UserPathHandler:
    def handle(self, action: UserPathAction, context: ExecutionContext) -> Outcome:
        return add_user_path_entry(context, action.path, action.absolute)

    def target(self, action: UserPathAction, context: ExecutionContext) -> str:
        return str(resolve_destination(action.path, action.absolute, context.home))


class UserEnvHandler:
    def handle(self, action: UserEnvAction, context: ExecutionContext) -> Outcome:
        return set_user_env_var(
            context, action.name, action.value, allow_override=action.allow_override
        )

    def target(self, action: UserEnvAction, context: ExecutionContext) -> str:
        return f"{action.name}={action.value}"
