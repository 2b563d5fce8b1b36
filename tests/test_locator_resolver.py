import pytest

from pogen.config import DEFAULT_LOCATOR_PRIORITY
from pogen.errors import ConfigurationError
from pogen.locator_resolver import LocatorResolver, resolve_locator, role_profile
from pogen.models import CATEGORY_ORDER, ElementDescriptor, LocatorStrategy, SemanticCategory


def _descriptor(**overrides) -> ElementDescriptor:
    values = {"tag": "button"}
    values.update(overrides)
    return ElementDescriptor(**values)


def _resolve(descriptor: ElementDescriptor, category: SemanticCategory, priority=DEFAULT_LOCATOR_PRIORITY) -> str:
    return resolve_locator(descriptor, category, priority).code


def test_aria_label_button_resolves_to_role_and_name() -> None:
    expression = resolve_locator(
        _descriptor(aria_label="Log in", role="button"),
        SemanticCategory.BUTTON,
        DEFAULT_LOCATOR_PRIORITY,
    )
    assert expression.strategy is LocatorStrategy.ROLE
    assert expression.role == "button"
    assert expression.argument == "Log in"


def test_button_without_aria_label_is_named_by_short_text() -> None:
    assert _resolve(_descriptor(text="Submit"), SemanticCategory.BUTTON) == "getByRole('button', { name: 'Submit' })"


def test_blank_aria_label_is_not_a_name() -> None:
    descriptor = _descriptor(aria_label="   ", text="Go")
    assert _resolve(descriptor, SemanticCategory.BUTTON) == "getByRole('button', { name: 'Go' })"


def test_input_is_not_named_by_text_and_falls_to_label() -> None:
    descriptor = _descriptor(tag="input", label="Email", text="ignored")
    assert _resolve(descriptor, SemanticCategory.INPUT) == "getByLabel('Email')"


def test_placeholder_then_test_id_then_text() -> None:
    assert _resolve(_descriptor(tag="input", placeholder="Search"), SemanticCategory.INPUT) == "getByPlaceholder('Search')"
    assert _resolve(_descriptor(tag="div", test_id="hero"), SemanticCategory.OTHER) == "getByTestId('hero')"
    assert _resolve(_descriptor(tag="span", text="Welcome back"), SemanticCategory.OTHER) == "getByText('Welcome back')"


def test_long_text_is_not_used_as_locator() -> None:
    descriptor = _descriptor(tag="p", text="x" * 51, id="intro")
    assert _resolve(descriptor, SemanticCategory.OTHER) == "locator('#intro')"


def test_attribute_locator_prefers_id_then_name_then_class() -> None:
    assert _resolve(_descriptor(tag="div", id="main", name="m", class_name="card"), SemanticCategory.OTHER) == "locator('#main')"
    assert _resolve(_descriptor(tag="div", name="q", class_name="card"), SemanticCategory.OTHER) == "locator('[name=\"q\"]')"
    assert _resolve(_descriptor(tag="div", class_name="card primary"), SemanticCategory.OTHER) == "locator('.card')"


def test_bare_descriptor_falls_back_to_tag() -> None:
    assert _resolve(_descriptor(tag="SPAN"), SemanticCategory.OTHER) == "locator('span')"
    assert _resolve(_descriptor(tag=""), SemanticCategory.OTHER) == "locator('*')"


def test_every_category_resolves_a_bare_descriptor() -> None:
    resolver = LocatorResolver(DEFAULT_LOCATOR_PRIORITY)
    for category in CATEGORY_ORDER:
        expression = resolver.resolve(_descriptor(tag="div"), category)
        assert expression.strategy is LocatorStrategy.LOCATOR
        assert expression.code == "locator('div')"


def test_reordering_priority_changes_the_winning_strategy() -> None:
    descriptor = _descriptor(tag="input", aria_label="Email", label="Email address")
    default_order = resolve_locator(descriptor, SemanticCategory.INPUT, DEFAULT_LOCATOR_PRIORITY)
    label_first = resolve_locator(
        descriptor,
        SemanticCategory.INPUT,
        [LocatorStrategy.LABEL, LocatorStrategy.ROLE, LocatorStrategy.LOCATOR],
    )
    assert default_order.strategy is LocatorStrategy.ROLE
    assert label_first.strategy is LocatorStrategy.LABEL
    assert label_first.code == "getByLabel('Email address')"


def test_priority_without_locator_still_resolves_to_tag() -> None:
    expression = resolve_locator(_descriptor(id="save"), SemanticCategory.BUTTON, [LocatorStrategy.LABEL])
    assert expression.code == "locator('button')"


def test_empty_priority_fails_fast() -> None:
    with pytest.raises(ConfigurationError):
        LocatorResolver([])


def test_unknown_strategy_in_priority_fails_fast() -> None:
    with pytest.raises(ConfigurationError):
        LocatorResolver(["getByAltText"])


def test_role_profile_maps_form_controls() -> None:
    assert role_profile(SemanticCategory.TEXTAREA).role == "textbox"
    assert role_profile(SemanticCategory.SELECT).role == "combobox"
    assert role_profile(SemanticCategory.OTHER).role is None
    assert role_profile(SemanticCategory.LINK).named_by_text
    assert not role_profile(SemanticCategory.CHECKBOX).named_by_text


def test_repeated_strategy_in_priority_fails_fast() -> None:
    with pytest.raises(ConfigurationError):
        LocatorResolver([LocatorStrategy.LABEL, LocatorStrategy.LABEL])
