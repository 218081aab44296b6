from collections.abc import Iterable, Mapping
from typing import Any


def normalize_account_id(value: Any) -> int:
    """Coerce the account-id shapes callers send into a plain integer id.

    Accepts ints, numeric strings, mappings carrying ``id`` or ``value`` (the
    shape select widgets post) and objects exposing an ``id`` attribute.
    """
    if isinstance(value, bool):
        raise ValueError(f"Unsupported account id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        raise ValueError(f"Unsupported account id: {value!r}")
    if isinstance(value, Mapping):
        for key in ("id", "value"):
            if key in value and value[key] is not None:
                return normalize_account_id(value[key])
        raise ValueError(f"Unsupported account id: {value!r}")
    inner = getattr(value, "id", None)
    if inner is not None:
        return normalize_account_id(inner)
    raise ValueError(f"Unsupported account id: {value!r}")


def normalize_account_ids(values: Iterable[Any]) -> list[int]:
    seen: set[int] = set()
    ids: list[int] = []
    for value in values:
        account_id = normalize_account_id(value)
        if account_id in seen:
            continue
        seen.add(account_id)
        ids.append(account_id)
    return ids
