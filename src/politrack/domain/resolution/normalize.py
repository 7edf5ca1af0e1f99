"""Comparison keys for names and titles.

Keys are recomputed on every run and never stored, so the functions here must be
pure and stable across releases: changing them silently changes which records
match.
"""

from __future__ import annotations

import re
import unicodedata

_NAME_DISALLOWED = re.compile(r"[^a-z\s-]")
_TITLE_DISALLOWED = re.compile(r"[^a-z0-9]+")
_EDITORIAL_PREFIX = re.compile(r"^\s*\[[^\]]*\]\s*")


def fold_accents(value: str) -> str:
    """Lower-case and drop combining marks, keeping every other character."""
    return _strip_marks(value.lower())


def _strip_marks(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(value: str) -> str:
    """Return the lookup key for a person's name.

    >>> normalize_name("  Jean-Luc   MÉLENCHON ")
    'jean-luc melenchon'
    """

    text = _strip_marks(value.lower())
    text = _NAME_DISALLOWED.sub("", text)
    return " ".join(text.split())


def swapped_name_key(value: str) -> str | None:
    """Return the "last first" key of a two-token name, else None."""

    tokens = normalize_name(value).split(" ")
    if len(tokens) != 2 or not all(tokens):
        return None
    return f"{tokens[1]} {tokens[0]}"


def name_keys(
    value: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
) -> tuple[str, ...]:
    """Primary key first, then alternative orderings, without duplicates."""

    keys: list[str] = []
    primary = normalize_name(value)
    if primary:
        keys.append(primary)
    swapped = swapped_name_key(value)
    if swapped and swapped not in keys:
        keys.append(swapped)
    if first_name and last_name:
        for ordered in (f"{first_name} {last_name}", f"{last_name} {first_name}"):
            key = normalize_name(ordered)
            if key and key not in keys:
                keys.append(key)
    return tuple(keys)


def normalize_title(value: str) -> str:
    """Return the comparison key for an affair title.

    A leading editorial marker such as ``[À VÉRIFIER]`` is dropped, digits are kept
    and any other punctuation separates words.
    """

    text = _EDITORIAL_PREFIX.sub("", value)
    text = _strip_marks(text.lower())
    text = _TITLE_DISALLOWED.sub(" ", text)
    return " ".join(text.split())
