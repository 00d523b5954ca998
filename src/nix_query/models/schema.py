"""
Small JSON shape checks shared by the metadata decoders.

``nix-env --json`` output is loosely schematized, so every accessor here
takes the JSON location of the value it inspects and raises
:class:`SchemaError` naming that location on a mismatch.
"""

from typing import Any


class SchemaError(ValueError):
    """A JSON value did not have the expected shape."""

    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{path}: {message}")
        self.message = message
        self.path = path


def type_name(value: Any) -> str:
    """Name a JSON value's type the way JSON would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def expect_object(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"expected object, found {type_name(value)}", path)
    return value


def expect_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise SchemaError(f"expected string, found {type_name(value)}", path)
    return value


def expect_int(value: Any, path: str) -> int:
    # bool is a subclass of int; JSON true/false is never a number.
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"expected integer, found {type_name(value)}", path)
    return value


def require_str(obj: dict[str, Any], key: str, path: str) -> str:
    """Required string field."""
    if key not in obj:
        raise SchemaError(f"missing field {key!r}", path)
    return expect_str(obj[key], f"{path}.{key}")


def optional_str(obj: dict[str, Any], key: str, path: str) -> str | None:
    """Optional string field; absent and ``null`` both mean ``None``."""
    value = obj.get(key)
    if value is None:
        return None
    return expect_str(value, f"{path}.{key}")


def optional_int(obj: dict[str, Any], key: str, path: str) -> int | None:
    value = obj.get(key)
    if value is None:
        return None
    return expect_int(value, f"{path}.{key}")


def defaulted_bool(obj: dict[str, Any], key: str, default: bool, path: str) -> bool:
    """Boolean field with a default when absent. ``null`` is not a boolean."""
    if key not in obj:
        return default
    value = obj[key]
    if not isinstance(value, bool):
        raise SchemaError(f"expected boolean, found {type_name(value)}", f"{path}.{key}")
    return value


def defaulted_list(obj: dict[str, Any], key: str, path: str) -> list[Any]:
    """Array field defaulting to empty when absent."""
    if key not in obj:
        return []
    value = obj[key]
    if not isinstance(value, list):
        raise SchemaError(f"expected array, found {type_name(value)}", f"{path}.{key}")
    return value


def string_list(values: list[Any], path: str) -> tuple[str, ...]:
    return tuple(expect_str(v, f"{path}[{i}]") for i, v in enumerate(values))
