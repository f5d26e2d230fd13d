"""Dot-path access to nested config values for the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from chatbridge.config.loader import camel_to_snake

if TYPE_CHECKING:
    from chatbridge.config.schema import Config

SECRET_FIELDS = {"bot_token", "app_token"}


def _resolve_field(model: BaseModel, segment: str) -> str:
    fields = type(model).model_fields
    for candidate in (segment, camel_to_snake(segment)):
        if candidate in fields:
            return candidate
    raise ValueError(
        f"Unknown field '{segment}' on {type(model).__name__}. "
        f"Available: {', '.join(fields)}"
    )


def _walk(config: BaseModel, path: str) -> tuple[BaseModel, str, FieldInfo]:
    """Return (parent_model, field_name, field_info) for a dot-path."""
    if not path:
        raise ValueError("Empty path")
    segments = path.split(".")
    current = config
    for i, segment in enumerate(segments):
        if not isinstance(current, BaseModel):
            raise ValueError(f"Cannot traverse into '{'.'.join(segments[:i])}'")
        field_name = _resolve_field(current, segment)
        if i == len(segments) - 1:
            return current, field_name, type(current).model_fields[field_name]
        current = getattr(current, field_name)
    raise ValueError("Empty path")


def get_by_path(config: "Config", path: str) -> Any:
    """Get the value at a path like ``communications.slack.channel``."""
    parent, field_name, _ = _walk(config, path)
    return getattr(parent, field_name)


def set_by_path(config: "Config", path: str, value: Any) -> None:
    """Set the value at a dot-path, coercing CLI strings to the field type.

    Raises:
        ValueError: If the path is unknown or the value fails validation.
    """
    parent, field_name, field_info = _walk(config, path)
    coerced = _coerce(value, field_info)

    data = parent.model_dump()
    data[field_name] = coerced
    try:
        validated = type(parent).model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Validation failed for '{path}': {e}") from e
    setattr(parent, field_name, getattr(validated, field_name))


def _coerce(value: Any, field_info: FieldInfo) -> Any:
    if not isinstance(value, str):
        return value

    annotation = field_info.annotation
    origin = get_origin(annotation)
    args = [a for a in get_args(annotation) if a is not type(None)]

    if origin is list:
        return [item.strip() for item in value.split(",") if item.strip()]
    if args and origin is not list:
        # Optional[X] -> X
        annotation = args[0]
        if value.lower() in ("", "none", "null"):
            return None

    if annotation is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"Cannot convert '{value}' to bool")
    if annotation is int:
        return int(value)
    if annotation is float:
        return float(value)
    return value


def get_all_paths(model: BaseModel, prefix: str = "") -> dict[str, Any]:
    """Flatten a nested model into {dot_path: value}."""
    result: dict[str, Any] = {}
    for field_name in type(model).model_fields:
        path = f"{prefix}.{field_name}" if prefix else field_name
        value = getattr(model, field_name)
        if isinstance(value, BaseModel):
            result.update(get_all_paths(value, path))
        else:
            result[path] = value
    return result


def mask(path: str, value: Any) -> Any:
    """Hide secret values for display."""
    if path.split(".")[-1] in SECRET_FIELDS and value:
        return value[:6] + "…"
    return value
