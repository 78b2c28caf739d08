"""Duplicate-free merging of string lists coming from the step forms and AI assists."""

from __future__ import annotations


def norm_key(value) -> str:
    """Comparison key: trimmed and case-folded."""
    return ("" if value is None else str(value)).strip().casefold()


def merge_no_dup(current: list | None, incoming: list | None) -> list:
    """Append the items of ``incoming`` that ``current`` does not already hold.

    ``current`` is kept as-is and in order. Blank entries and repeats
    (case/whitespace-insensitive, including repeats inside ``incoming``)
    are not appended.
    """
    base = list(current or [])
    seen = {norm_key(x) for x in base}
    merged = list(base)
    for item in incoming or []:
        key = norm_key(item)
        if key and key not in seen:
            seen.add(key)
            merged.append(item)
    return merged


def smart_set(current: list | None = None, incoming: list | None = None) -> list:
    """A fresh list takes ``incoming`` verbatim; otherwise merge without duplicates."""
    if not current:
        return list(incoming or [])
    return merge_no_dup(current, incoming)
