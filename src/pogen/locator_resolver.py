from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable, assert_never

from .errors import ConfigurationError
from .locator_dsl import (
    LocatorExpression,
    css_class_selector,
    css_id_selector,
    css_name_selector,
    role_locator,
    text_locator,
)
from .models import ElementDescriptor, LocatorStrategy, SemanticCategory
from .selector_rules import TEXT_LOCATOR_LIMIT, short_text, usable

logger = logging.getLogger("pogen.locator")

Predicate = Callable[[ElementDescriptor, SemanticCategory], bool]
Producer = Callable[[ElementDescriptor, SemanticCategory], LocatorExpression]


@dataclass(frozen=True, slots=True)
class RoleProfile:
    role: str | None
    named_by_text: bool


@dataclass(frozen=True, slots=True)
class LocatorRule:
    strategy: LocatorStrategy
    applies: Predicate
    produce: Producer


def role_profile(category: SemanticCategory) -> RoleProfile:
    match category:
        case SemanticCategory.BUTTON:
            return RoleProfile("button", True)
        case SemanticCategory.LINK:
            return RoleProfile("link", True)
        case SemanticCategory.HEADING:
            return RoleProfile("heading", True)
        case SemanticCategory.INPUT | SemanticCategory.TEXTAREA:
            return RoleProfile("textbox", False)
        case SemanticCategory.SELECT:
            return RoleProfile("combobox", False)
        case SemanticCategory.CHECKBOX:
            return RoleProfile("checkbox", False)
        case SemanticCategory.RADIO:
            return RoleProfile("radio", False)
        case SemanticCategory.OTHER:
            return RoleProfile(None, False)
        case _:
            assert_never(category)


def _accessible_name(descriptor: ElementDescriptor, category: SemanticCategory) -> str | None:
    aria_label = usable(descriptor.aria_label)
    if aria_label:
        return aria_label
    if role_profile(category).named_by_text:
        return short_text(descriptor.text, TEXT_LOCATOR_LIMIT)
    return None


def _role_applies(descriptor: ElementDescriptor, category: SemanticCategory) -> bool:
    return role_profile(category).role is not None and _accessible_name(descriptor, category) is not None


def _role_produce(descriptor: ElementDescriptor, category: SemanticCategory) -> LocatorExpression:
    role = role_profile(category).role
    name = _accessible_name(descriptor, category)
    assert role is not None and name is not None
    return role_locator(role, name)


def _attribute_locator(descriptor: ElementDescriptor, _category: SemanticCategory) -> LocatorExpression:
    id_value = usable(descriptor.id)
    if id_value:
        return text_locator(LocatorStrategy.LOCATOR, css_id_selector(id_value))
    name = usable(descriptor.name)
    if name:
        return text_locator(LocatorStrategy.LOCATOR, css_name_selector(name))
    first_class = descriptor.first_class()
    if first_class:
        return text_locator(LocatorStrategy.LOCATOR, css_class_selector(first_class))
    return tag_locator(descriptor)


def tag_locator(descriptor: ElementDescriptor) -> LocatorExpression:
    tag = (descriptor.tag or "").strip().lower() or "*"
    return text_locator(LocatorStrategy.LOCATOR, tag)


LOCATOR_RULES: dict[LocatorStrategy, LocatorRule] = {
    LocatorStrategy.ROLE: LocatorRule(LocatorStrategy.ROLE, _role_applies, _role_produce),
    LocatorStrategy.LABEL: LocatorRule(
        LocatorStrategy.LABEL,
        lambda descriptor, _category: usable(descriptor.label) is not None,
        lambda descriptor, _category: text_locator(LocatorStrategy.LABEL, descriptor.label or ""),
    ),
    LocatorStrategy.PLACEHOLDER: LocatorRule(
        LocatorStrategy.PLACEHOLDER,
        lambda descriptor, _category: usable(descriptor.placeholder) is not None,
        lambda descriptor, _category: text_locator(LocatorStrategy.PLACEHOLDER, descriptor.placeholder or ""),
    ),
    LocatorStrategy.TEST_ID: LocatorRule(
        LocatorStrategy.TEST_ID,
        lambda descriptor, _category: usable(descriptor.test_id) is not None,
        lambda descriptor, _category: text_locator(LocatorStrategy.TEST_ID, descriptor.test_id or ""),
    ),
    LocatorStrategy.TEXT: LocatorRule(
        LocatorStrategy.TEXT,
        lambda descriptor, _category: short_text(descriptor.text) is not None,
        lambda descriptor, _category: text_locator(LocatorStrategy.TEXT, descriptor.text or ""),
    ),
    LocatorStrategy.LOCATOR: LocatorRule(
        LocatorStrategy.LOCATOR,
        lambda _descriptor, _category: True,
        _attribute_locator,
    ),
}


def build_rule_chain(priority: Iterable[LocatorStrategy]) -> tuple[LocatorRule, ...]:
    strategies = list(priority)
    if not strategies:
        raise ConfigurationError("locator_priority is empty; cannot resolve locators.", "locator_priority")
    chain: list[LocatorRule] = []
    for strategy in strategies:
        rule = LOCATOR_RULES.get(strategy) if isinstance(strategy, LocatorStrategy) else None
        if rule is None:
            raise ConfigurationError(f"Unknown locator strategy: {strategy!r}", "locator_priority")
        if rule in chain:
            raise ConfigurationError(f"Locator strategy listed twice: {strategy.value}", "locator_priority")
        chain.append(rule)
    return tuple(chain)


class LocatorResolver:
    """First-match locator resolution over a fixed priority chain.

    The chain is evaluated left to right and the first applicable rule wins.
    When the priority list omits ``locator``, the bare tag selector still
    closes the chain, so every descriptor resolves.
    """

    def __init__(self, priority: Iterable[LocatorStrategy]) -> None:
        self.chain = build_rule_chain(priority)

    def resolve(self, descriptor: ElementDescriptor, category: SemanticCategory) -> LocatorExpression:
        for rule in self.chain:
            if rule.applies(descriptor, category):
                expression = rule.produce(descriptor, category)
                logger.debug("Resolved %s via %s: %s", descriptor.signature(), rule.strategy.value, expression.code)
                return expression
        return tag_locator(descriptor)


def resolve_locator(
    descriptor: ElementDescriptor,
    category: SemanticCategory,
    priority: Iterable[LocatorStrategy],
) -> LocatorExpression:
    return LocatorResolver(priority).resolve(descriptor, category)
