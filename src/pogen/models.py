from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .errors import BatchIntegrityError, DuplicateIdentifierError


class SemanticCategory(str, Enum):
    BUTTON = "button"
    INPUT = "input"
    LINK = "link"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TEXTAREA = "textarea"
    HEADING = "heading"
    OTHER = "other"


CATEGORY_ORDER: tuple[SemanticCategory, ...] = (
    SemanticCategory.BUTTON,
    SemanticCategory.INPUT,
    SemanticCategory.LINK,
    SemanticCategory.SELECT,
    SemanticCategory.CHECKBOX,
    SemanticCategory.RADIO,
    SemanticCategory.TEXTAREA,
    SemanticCategory.HEADING,
    SemanticCategory.OTHER,
)


class LocatorStrategy(str, Enum):
    ROLE = "getByRole"
    LABEL = "getByLabel"
    PLACEHOLDER = "getByPlaceholder"
    TEST_ID = "getByTestId"
    TEXT = "getByText"
    LOCATOR = "locator"


DESCRIPTOR_FIELDS: tuple[str, ...] = (
    "tag",
    "role",
    "label",
    "text",
    "placeholder",
    "name",
    "id",
    "class_name",
    "type",
    "aria_label",
    "test_id",
)


@dataclass(frozen=True, slots=True)
class ElementDescriptor:
    """Attributes extracted once from a discovered page element.

    ``None`` means the attribute is absent from the markup; an empty string
    means it is present but empty.
    """

    tag: str
    role: str | None = None
    label: str | None = None
    text: str | None = None
    placeholder: str | None = None
    name: str | None = None
    id: str | None = None
    class_name: str | None = None
    type: str | None = None
    aria_label: str | None = None
    test_id: str | None = None

    def first_class(self) -> str | None:
        if not self.class_name:
            return None
        tokens = self.class_name.split()
        return tokens[0] if tokens else None

    def signature(self) -> str:
        pieces = [f"tag={self.tag}"]
        for key in ("id", "name", "test_id", "aria_label", "type"):
            value = getattr(self, key)
            if value:
                pieces.append(f"{key}={value}")
        return "|".join(pieces)


@dataclass(frozen=True, slots=True)
class ResolvedElement:
    identifier: str
    locator: str
    strategy: LocatorStrategy
    category: SemanticCategory
    descriptor_index: int


@dataclass(frozen=True, slots=True)
class ResolvedBatch:
    elements: tuple[ResolvedElement, ...] = ()
    descriptors: tuple[ElementDescriptor, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for element in self.elements:
            if element.identifier in seen:
                raise DuplicateIdentifierError(element.identifier)
            seen.add(element.identifier)
            if not element.identifier.isidentifier():
                raise BatchIntegrityError(
                    f"Identifier is not a valid code identifier: {element.identifier!r}",
                    identifier=element.identifier,
                )
            if not element.locator.strip():
                raise BatchIntegrityError(
                    f"Empty locator expression for {element.identifier}",
                    identifier=element.identifier,
                )
            if not 0 <= element.descriptor_index < len(self.descriptors):
                raise BatchIntegrityError(
                    f"Descriptor index {element.descriptor_index} out of range for {element.identifier}",
                    identifier=element.identifier,
                )

    def __iter__(self) -> Iterator[ResolvedElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def identifiers(self) -> list[str]:
        return [element.identifier for element in self.elements]

    def by_identifier(self) -> dict[str, ResolvedElement]:
        return {element.identifier: element for element in self.elements}

    def by_category(self) -> dict[SemanticCategory, list[ResolvedElement]]:
        grouped: dict[SemanticCategory, list[ResolvedElement]] = {category: [] for category in CATEGORY_ORDER}
        for element in self.elements:
            grouped[element.category].append(element)
        return grouped

    def descriptor_for(self, element: ResolvedElement) -> ElementDescriptor:
        return self.descriptors[element.descriptor_index]


@dataclass(frozen=True, slots=True)
class ModifiedElement:
    old: ResolvedElement
    new: ResolvedElement


@dataclass(frozen=True, slots=True)
class ChangeReport:
    added: tuple[ResolvedElement, ...] = ()
    removed: tuple[ResolvedElement, ...] = ()
    modified: tuple[ModifiedElement, ...] = ()
    unchanged: tuple[ResolvedElement, ...] = ()
    mode: str = "locator"


@dataclass(frozen=True, slots=True)
class RefactorAction:
    type: str
    element_name: str
    element_type: str
    locator: str | None = None
    old_locator: str | None = None
    new_locator: str | None = None


@dataclass(frozen=True, slots=True)
class RefactorPlan:
    page_name: str
    generated_at: str
    summary: dict[str, int] = field(default_factory=dict)
    actions: tuple[RefactorAction, ...] = ()
