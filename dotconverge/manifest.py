import json
import logging
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from dotconverge.constants import DEFAULT_APPEND_KEYWORD
from dotconverge.errors import (
    InvalidManifestFormatError,
    InvalidManifestSchemaError,
    MissingManifestError,
)
from dotconverge.models import (
    Action,
    ActionKind,
    AppendAction,
    CopyAction,
    LinkAction,
    MkdirAction,
    UnknownAction,
    UserEnvAction,
    UserPathAction,
)


logger = logging.getLogger(__name__)


_STRING = {"type": "string", "minLength": 1}
_FLAG = {"type": "boolean"}


def _kind_schema(kind: ActionKind, required: list[str], properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "required": ["kind", *required],
        "additionalProperties": False,
        "properties": {"kind": {"const": kind.value}, **properties},
    }


_SOURCE_PROPERTIES: dict[str, Any] = {
    "source": _STRING,
    "destination": _STRING,
    "absolute": _FLAG,
    "optional": _FLAG,
}

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["actions"],
    "properties": {
        "actions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["kind"],
                "properties": {"kind": {"type": "string", "minLength": 1}},
            },
        },
    },
}

ACTION_SCHEMAS: dict[ActionKind, dict[str, Any]] = {
    ActionKind.LINK: _kind_schema(
        ActionKind.LINK, ["source", "destination"], _SOURCE_PROPERTIES
    ),
    ActionKind.COPY: _kind_schema(
        ActionKind.COPY, ["source", "destination"], _SOURCE_PROPERTIES
    ),
    ActionKind.APPEND: _kind_schema(
        ActionKind.APPEND,
        ["source", "destination"],
        {**_SOURCE_PROPERTIES, "keyword": _STRING},
    ),
    ActionKind.MKDIR: _kind_schema(
        ActionKind.MKDIR, ["path"], {"path": _STRING, "absolute": _FLAG}
    ),
    ActionKind.SET_USER_PATH: _kind_schema(
        ActionKind.SET_USER_PATH, ["path"], {"path": _STRING, "absolute": _FLAG}
    ),
    ActionKind.SET_USER_ENV: _kind_schema(
        ActionKind.SET_USER_ENV,
        ["name", "value"],
        {"name": _STRING, "value": {"type": "string"}, "allowOverride": _FLAG},
    ),
}

_MANIFEST_VALIDATOR = Draft202012Validator(MANIFEST_SCHEMA)
_ACTION_VALIDATORS = {
    kind: Draft202012Validator(schema) for kind, schema in ACTION_SCHEMAS.items()
}


def format_schema_error(error: Any, prefix: str = "") -> str:
    parts = [str(part) for part in error.path]
    path = ".".join([prefix, *parts] if prefix else parts)
    return f"{error.message} at {path}" if path else str(error.message)


def read_manifest(path: Path) -> Any:
    if not path.exists():
        raise MissingManifestError(path)
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidManifestFormatError(path, str(exc).splitlines()[0]) from exc


def parse_actions(payload: Any, path: Path) -> list[Action]:
    if not isinstance(payload, dict):
        raise InvalidManifestFormatError(path, "top level must be a mapping")

    error = next(iter(_MANIFEST_VALIDATOR.iter_errors(payload)), None)
    if error is not None:
        raise InvalidManifestSchemaError(path, format_schema_error(error))

    actions: list[Action] = []
    for index, entry in enumerate(payload["actions"]):
        try:
            kind = ActionKind(entry["kind"])
        except ValueError:
            logger.debug("Entry %d has unknown kind %r", index, entry["kind"])
            actions.append(UnknownAction(kind=entry["kind"], raw=dict(entry)))
            continue

        entry_error = next(iter(_ACTION_VALIDATORS[kind].iter_errors(entry)), None)
        if entry_error is not None:
            raise InvalidManifestSchemaError(
                path, format_schema_error(entry_error, prefix=f"actions.{index}")
            )
        actions.append(build_action(kind, entry))
    return actions


def build_action(kind: ActionKind, entry: dict[str, Any]) -> Action:
    if kind == ActionKind.LINK:
        return LinkAction(
            source=entry["source"],
            destination=entry["destination"],
            absolute=entry.get("absolute", False),
            optional=entry.get("optional", False),
        )
    if kind == ActionKind.COPY:
        return CopyAction(
            source=entry["source"],
            destination=entry["destination"],
            absolute=entry.get("absolute", False),
            optional=entry.get("optional", False),
        )
    if kind == ActionKind.APPEND:
        return AppendAction(
            source=entry["source"],
            destination=entry["destination"],
            keyword=entry.get("keyword", DEFAULT_APPEND_KEYWORD),
            absolute=entry.get("absolute", False),
            optional=entry.get("optional", False),
        )
    if kind == ActionKind.MKDIR:
        return MkdirAction(path=entry["path"], absolute=entry.get("absolute", False))
    if kind == ActionKind.SET_USER_PATH:
        return UserPathAction(
            path=entry["path"], absolute=entry.get("absolute", False)
        )
    return UserEnvAction(
        name=entry["name"],
        value=entry["value"],
        allow_override=entry.get("allowOverride", False),
    )


def load_manifest(path: Path) -> list[Action]:
    actions = parse_actions(read_manifest(path), path)
    logger.info("Loaded %d actions from %s", len(actions), path)
    return actions
