import pytest

from pogen.deduplication import deduplicate_elements, ensure_unique_identifiers, resolve_unique_name
from pogen.errors import DuplicateIdentifierError
from pogen.models import ElementDescriptor, LocatorStrategy, ResolvedBatch, ResolvedElement, SemanticCategory
from pogen.pipeline import resolve_batch


def _element(identifier: str, index: int = 0) -> ResolvedElement:
    return ResolvedElement(
        identifier=identifier,
        locator="locator('button')",
        strategy=LocatorStrategy.LOCATOR,
        category=SemanticCategory.BUTTON,
        descriptor_index=index,
    )


def test_resolve_unique_name_probes_numeric_suffixes() -> None:
    assert resolve_unique_name("submitButton", set()) == "submitButton"
    assert resolve_unique_name("submitButton", {"submitButton"}) == "submitButton2"
    assert resolve_unique_name("submitButton", {"submitButton", "submitButton2"}) == "submitButton3"


def test_second_duplicate_gets_suffix_and_first_keeps_name() -> None:
    result = deduplicate_elements([_element("submitButton", 0), _element("submitButton", 1)])
    assert [element.identifier for element in result] == ["submitButton", "submitButton2"]
    assert [element.descriptor_index for element in result] == [0, 1]


def test_generated_suffix_skips_names_already_emitted() -> None:
    result = deduplicate_elements([_element("a"), _element("a2"), _element("a")])
    assert [element.identifier for element in result] == ["a", "a2", "a3"]


def test_unique_batch_is_untouched() -> None:
    elements = [_element("emailInput"), _element("loginButton")]
    assert deduplicate_elements(elements) == elements


def test_ensure_unique_identifiers_fails_loudly() -> None:
    with pytest.raises(DuplicateIdentifierError) as exc_info:
        ensure_unique_identifiers([_element("x"), _element("x")])
    assert exc_info.value.identifier == "x"


def test_resolved_batch_rejects_duplicates() -> None:
    with pytest.raises(DuplicateIdentifierError):
        ResolvedBatch(elements=(_element("x"), _element("x")), descriptors=(ElementDescriptor(tag="button"),))


def test_two_submit_buttons_in_pipeline() -> None:
    batch = resolve_batch(
        [
            (ElementDescriptor(tag="button", text="Submit"), SemanticCategory.BUTTON),
            (ElementDescriptor(tag="button", text="Submit", id="secondary"), SemanticCategory.BUTTON),
        ]
    )
    assert batch.identifiers() == ["submitButton", "submitButton2"]
