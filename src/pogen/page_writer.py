from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Sequence, assert_never

from .config import DEFAULT_CONFIG, GeneratorConfig
from .locator_dsl import parse_locator_expression
from .models import CATEGORY_ORDER, ResolvedBatch, ResolvedElement, SemanticCategory
from .name_suggester import PAGE_MEMBERS, split_words

TS_IMPORT = "import { Page, Locator } from '@playwright/test';"
PY_IMPORT = "from playwright.sync_api import Locator, Page"


@dataclass(frozen=True, slots=True)
class HelperVerb:
    prefix: str
    suffix: str
    action: str
    takes_value: bool


@dataclass(frozen=True, slots=True)
class HelperMethod:
    name: str
    field: str
    action: str
    takes_value: bool


def helper_verbs(category: SemanticCategory) -> tuple[HelperVerb, ...]:
    match category:
        case SemanticCategory.BUTTON:
            return (HelperVerb("click", "", "click", False),)
        case SemanticCategory.LINK:
            return (HelperVerb("click", "Link", "click", False),)
        case SemanticCategory.INPUT | SemanticCategory.TEXTAREA:
            return (HelperVerb("fill", "", "fill", True),)
        case SemanticCategory.SELECT:
            return (HelperVerb("select", "", "select_option", True),)
        case SemanticCategory.CHECKBOX:
            return (
                HelperVerb("check", "", "check", False),
                HelperVerb("uncheck", "", "uncheck", False),
            )
        case SemanticCategory.RADIO | SemanticCategory.HEADING | SemanticCategory.OTHER:
            return ()
        case _:
            assert_never(category)


def is_declared(category: SemanticCategory) -> bool:
    return category is not SemanticCategory.OTHER


# Helpers are emitted grouped as buttons, text fields, selects, checkboxes, links.
_HELPER_RANK = {
    SemanticCategory.BUTTON: 0,
    SemanticCategory.INPUT: 1,
    SemanticCategory.TEXTAREA: 1,
    SemanticCategory.SELECT: 2,
    SemanticCategory.CHECKBOX: 3,
    SemanticCategory.LINK: 4,
}


def page_class_name(page_name: str) -> str:
    pascal = "".join(word[:1].upper() + word[1:] for word in split_words(page_name)) or "Generated"
    if pascal[0].isdigit():
        pascal = f"P{pascal}"
    return re.sub(r"(Page)+$", "", pascal) + "Page"


def declared_elements(batch: ResolvedBatch) -> list[ResolvedElement]:
    grouped = batch.by_category()
    return [element for category in CATEGORY_ORDER if is_declared(category) for element in grouped[category]]


def build_helper_methods(elements: Sequence[ResolvedElement], config: GeneratorConfig = DEFAULT_CONFIG) -> list[HelperMethod]:
    taken = set(PAGE_MEMBERS) | {element.identifier for element in elements}
    ordered = sorted(
        (element for element in elements if element.category in _HELPER_RANK),
        key=lambda element: _HELPER_RANK[element.category],
    )
    methods: list[HelperMethod] = []
    for element in ordered:
        stem = _method_stem(element, config)
        for verb in helper_verbs(element.category):
            name = _resolve_unique_method_name(f"{verb.prefix}{stem}{verb.suffix}", taken)
            taken.add(name)
            methods.append(HelperMethod(name, element.identifier, verb.action, verb.takes_value))
    return methods


def render_page_object(page_name: str, batch: ResolvedBatch, config: GeneratorConfig = DEFAULT_CONFIG) -> str:
    language = config.template.language
    if language == "python":
        return render_python_page_object(page_name, batch, config)
    return render_typescript_page_object(page_name, batch, config)


def render_typescript_page_object(page_name: str, batch: ResolvedBatch, config: GeneratorConfig = DEFAULT_CONFIG) -> str:
    class_name = page_class_name(page_name)
    elements = declared_elements(batch)

    lines = [TS_IMPORT, "", f"export class {class_name} {{", "  readonly page: Page;"]
    lines.extend(f"  readonly {element.identifier}: Locator;" for element in elements)
    lines.extend(["", "  constructor(page: Page) {", "    this.page = page;"])
    lines.extend(f"    this.{element.identifier} = page.{element.locator};" for element in elements)
    lines.append("  }")

    if config.template.include_goto_method:
        lines.extend(
            [
                "",
                "  async goto(url: string): Promise<void> {",
                "    await this.page.goto(url);",
                "  }",
            ]
        )

    if config.template.generate_helper_methods:
        for method in build_helper_methods(elements, config):
            action = "selectOption" if method.action == "select_option" else method.action
            parameter = "value: string" if method.takes_value else ""
            argument = "value" if method.takes_value else ""
            lines.extend(
                [
                    "",
                    f"  async {method.name}({parameter}): Promise<void> {{",
                    f"    await this.{method.field}.{action}({argument});",
                    "  }",
                ]
            )

    lines.append("}")
    return "\n".join(lines) + "\n"


def render_python_page_object(page_name: str, batch: ResolvedBatch, config: GeneratorConfig = DEFAULT_CONFIG) -> str:
    class_name = page_class_name(page_name)
    elements = declared_elements(batch)

    lines = [PY_IMPORT, "", "", f"class {class_name}:", "    page: Page"]
    lines.extend(f"    {element.identifier}: Locator" for element in elements)
    lines.extend(["", "    def __init__(self, page: Page) -> None:", "        self.page = page"])
    for element in elements:
        expression = parse_locator_expression(element.locator)
        lines.append(f"        self.{element.identifier} = page.{expression.python_code}")

    if config.template.include_goto_method:
        lines.extend(
            [
                "",
                "    def goto(self, url: str) -> None:",
                "        self.page.goto(url)",
            ]
        )

    if config.template.generate_helper_methods:
        for method in build_helper_methods(elements, config):
            parameter = ", value: str" if method.takes_value else ""
            argument = "value" if method.takes_value else ""
            lines.extend(
                [
                    "",
                    f"    def {method.name}(self{parameter}) -> None:",
                    f"        self.{method.field}.{method.action}({argument})",
                ]
            )

    return "\n".join(lines) + "\n"


def _method_stem(element: ResolvedElement, config: GeneratorConfig) -> str:
    suffix = config.naming.suffix_for(element.category)
    identifier = element.identifier.rstrip("_")
    if suffix and identifier.endswith(suffix) and len(identifier) > len(suffix):
        identifier = identifier[: -len(suffix)]
    return identifier[:1].upper() + identifier[1:]


def _resolve_unique_method_name(desired_name: str, taken: set[str]) -> str:
    if desired_name not in taken:
        return desired_name

    suffix = 2
    while True:
        candidate = f"{desired_name}_{suffix}"
        if candidate not in taken:
            return candidate
        suffix += 1
