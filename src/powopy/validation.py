"""Fail-fast input validation for endpoint wrappers."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping

from powopy.errors import ValidationError


def require_present(value: object, *, name: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} must be provided")


def require_mapping(value: object, *, name: str) -> Mapping[object, object]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{name} must be a mapping")
    return value


def require_boolean(value: object, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be boolean (True/False)")
    return value


def require_int(value: object, *, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer") from exc


def reject_unknown(keys: Iterable[object], *, allowed: Collection[str]) -> None:
    unknown = [str(key) for key in keys if str(key) not in allowed]
    if unknown:
        supported = ", ".join(sorted(allowed))
        raise ValidationError(
            f"Unsupported parameter(s): {', '.join(unknown)}. Supported: [{supported}]",
            hint="Remove the unsupported keys or switch client mode.",
        )
