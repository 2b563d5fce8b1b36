from __future__ import annotations

from .config import IgnoreRules
from .models import ElementDescriptor

TEXT_LOCATOR_LIMIT = 50


def usable(value: str | None) -> str | None:
    """Return ``value`` trimmed, or ``None`` when it carries no content.

    An attribute that is present but blank cannot name or locate an element.
    """
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def short_text(value: str | None, limit: int = TEXT_LOCATOR_LIMIT) -> str | None:
    text = usable(value)
    if text is None or len(text) > limit:
        return None
    return text


def ignore_reason(descriptor: ElementDescriptor, rules: IgnoreRules) -> str | None:
    if descriptor.id:
        for fragment in rules.ids:
            if fragment and fragment in descriptor.id:
                return f"id contains {fragment!r}"
    if descriptor.class_name:
        for fragment in rules.classes:
            if fragment and fragment in descriptor.class_name:
                return f"class contains {fragment!r}"
    if descriptor.role and descriptor.role in rules.roles:
        return f"role is {descriptor.role!r}"
    return None
