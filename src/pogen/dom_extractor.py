from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .models import ElementDescriptor, SemanticCategory

if TYPE_CHECKING:
    from playwright.sync_api import Locator, Page

logger = logging.getLogger("pogen.extractor")

# ARIA role queried on the page for each category, in discovery order.
DISCOVERY_ROLES: tuple[tuple[str, SemanticCategory], ...] = (
    ("button", SemanticCategory.BUTTON),
    ("link", SemanticCategory.LINK),
    ("textbox", SemanticCategory.INPUT),
    ("combobox", SemanticCategory.SELECT),
    ("checkbox", SemanticCategory.CHECKBOX),
    ("radio", SemanticCategory.RADIO),
    ("heading", SemanticCategory.HEADING),
)

_EXTRACT_SCRIPT = """
(el) => {
  const clean = (value) => {
    if (value === null || value === undefined) return null;
    const text = String(value).replace(/\\s+/g, ' ').trim();
    return text;
  };
  const id = el.getAttribute('id');
  let label = null;
  const wrapping = el.closest('label');
  if (wrapping) {
    label = clean(wrapping.textContent) || null;
  }
  if (!label && id) {
    const target = document.querySelector(`label[for="${CSS.escape(id)}"]`);
    if (target) label = clean(target.textContent) || null;
  }
  if (!label && el.labels && el.labels.length) {
    label = clean(el.labels[0].textContent) || null;
  }
  return {
    tag: el.tagName.toLowerCase(),
    role: el.getAttribute('role'),
    label,
    text: clean(el.textContent) || null,
    placeholder: el.getAttribute('placeholder'),
    name: el.getAttribute('name'),
    id,
    class_name: el.getAttribute('class'),
    type: el.getAttribute('type'),
    aria_label: el.getAttribute('aria-label'),
    test_id: el.getAttribute('data-testid') || el.getAttribute('data-test-id'),
  };
}
"""


def descriptor_from_payload(payload: Mapping[str, Any]) -> ElementDescriptor:
    def optional(key: str) -> str | None:
        value = payload.get(key)
        return None if value is None else str(value)

    return ElementDescriptor(
        tag=str(payload.get("tag") or "unknown"),
        role=optional("role"),
        label=optional("label"),
        text=optional("text"),
        placeholder=optional("placeholder"),
        name=optional("name"),
        id=optional("id"),
        class_name=optional("class_name"),
        type=optional("type"),
        aria_label=optional("aria_label"),
        test_id=optional("test_id"),
    )


def extract_descriptor(locator: Locator) -> ElementDescriptor:
    payload = locator.evaluate(_EXTRACT_SCRIPT)
    return descriptor_from_payload(payload if isinstance(payload, Mapping) else {})


def category_for_role(role: str, descriptor: ElementDescriptor, default: SemanticCategory) -> SemanticCategory:
    if role == "textbox" and descriptor.tag.lower() == "textarea":
        return SemanticCategory.TEXTAREA
    return default


def discover_descriptors(
    page: Page,
    extra_roles: Iterable[str] = (),
) -> list[tuple[ElementDescriptor, SemanticCategory]]:
    """Enumerate descriptors for every semantic role on ``page``.

    Roles in ``extra_roles`` are collected under the ``other`` category.
    Playwright failures propagate to the caller.
    """
    roles = list(DISCOVERY_ROLES) + [(role, SemanticCategory.OTHER) for role in extra_roles]
    discovered: list[tuple[ElementDescriptor, SemanticCategory]] = []
    for role, category in roles:
        matches = page.get_by_role(role).all()
        for match in matches:
            descriptor = extract_descriptor(match)
            discovered.append((descriptor, category_for_role(role, descriptor, category)))
        logger.info("Found %d element(s) with role %s", len(matches), role)
    return discovered
