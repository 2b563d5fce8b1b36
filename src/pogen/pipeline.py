from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from .config import DEFAULT_CONFIG, GeneratorConfig, validate_config
from .deduplication import deduplicate_elements
from .locator_resolver import LocatorResolver
from .models import CATEGORY_ORDER, ElementDescriptor, ResolvedBatch, ResolvedElement, SemanticCategory
from .name_suggester import suggest_element_name
from .selector_rules import ignore_reason

logger = logging.getLogger("pogen.pipeline")

CategorizedDescriptors = Iterable[tuple[ElementDescriptor, SemanticCategory]]


def group_by_category(entries: CategorizedDescriptors) -> dict[SemanticCategory, list[ElementDescriptor]]:
    grouped: dict[SemanticCategory, list[ElementDescriptor]] = {category: [] for category in CATEGORY_ORDER}
    for descriptor, category in entries:
        grouped[SemanticCategory(category)].append(descriptor)
    return grouped


def resolve_batch(
    descriptors: CategorizedDescriptors | Mapping[SemanticCategory, Sequence[ElementDescriptor]],
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> ResolvedBatch:
    """Resolve descriptors into a deduplicated batch.

    Descriptors are grouped by category in ``CATEGORY_ORDER`` (input order is
    kept inside a category), ignored descriptors are dropped, then each
    survivor gets a locator and a name independently before deduplication.
    """
    validate_config(config)
    grouped = (
        {category: list(descriptors.get(category, ())) for category in CATEGORY_ORDER}
        if isinstance(descriptors, Mapping)
        else group_by_category(descriptors)
    )
    resolver = LocatorResolver(config.locator_priority)

    kept: list[ElementDescriptor] = []
    elements: list[ResolvedElement] = []
    for category in CATEGORY_ORDER:
        resolved_in_category = 0
        for descriptor in grouped[category]:
            reason = ignore_reason(descriptor, config.ignore)
            if reason:
                logger.debug("Ignoring %s %s: %s", category.value, descriptor.signature(), reason)
                continue
            expression = resolver.resolve(descriptor, category)
            elements.append(
                ResolvedElement(
                    identifier=suggest_element_name(descriptor, category, config.naming),
                    locator=expression.code,
                    strategy=expression.strategy,
                    category=category,
                    descriptor_index=len(kept),
                )
            )
            kept.append(descriptor)
            resolved_in_category += 1
        if resolved_in_category:
            logger.debug("Resolved %d %s element(s)", resolved_in_category, category.value)

    return ResolvedBatch(elements=tuple(deduplicate_elements(elements)), descriptors=tuple(kept))
