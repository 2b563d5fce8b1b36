from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from .errors import DuplicateIdentifierError
from .models import ResolvedElement


def resolve_unique_name(desired_name: str, taken: set[str]) -> str:
    if desired_name not in taken:
        return desired_name

    suffix = 2
    while True:
        candidate = f"{desired_name}{suffix}"
        if candidate not in taken:
            return candidate
        suffix += 1


def deduplicate_elements(elements: Iterable[ResolvedElement]) -> list[ResolvedElement]:
    """Give every element a distinct identifier, keeping input order.

    The first element to use a name keeps it; later ones get ``name2``,
    ``name3`` and so on, skipping any candidate already emitted.
    """
    taken: set[str] = set()
    unique: list[ResolvedElement] = []
    for element in elements:
        identifier = resolve_unique_name(element.identifier, taken)
        taken.add(identifier)
        unique.append(element if identifier == element.identifier else replace(element, identifier=identifier))
    ensure_unique_identifiers(unique)
    return unique


def ensure_unique_identifiers(elements: Sequence[ResolvedElement]) -> None:
    seen: set[str] = set()
    for element in elements:
        if element.identifier in seen:
            raise DuplicateIdentifierError(element.identifier)
        seen.add(element.identifier)
