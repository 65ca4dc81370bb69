"""Helpers for partial (PATCH-style) updates."""

from typing import Any, Iterable, Optional

from pydantic import BaseModel


def changed_fields(
    payload: BaseModel,
    *,
    exclude: Iterable[str] = (),
    drop_empty: bool = False,
) -> dict[str, Any]:
    """Return the columns a partial-update payload asks to write.

    Only fields the client actually sent are included. With ``drop_empty``
    the ``None`` and blank-string values are skipped too, matching forms that
    post every field whether or not the user touched it.
    """
    values = payload.model_dump(exclude_unset=True, exclude=set(exclude))
    if drop_empty:
        values = {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }
    return values


def apply_changes(instance: Any, changes: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Set ``changes`` on an ORM instance; return the previous values."""
    if not changes:
        return None
    previous = {}
    for key, value in changes.items():
        previous[key] = getattr(instance, key)
        setattr(instance, key, value)
    return previous
