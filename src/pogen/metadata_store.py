from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Mapping

from .config import DEFAULT_CONFIG, GeneratorConfig, config_from_dict, config_to_dict
from .errors import BatchIntegrityError, ConfigurationError, LocatorSyntaxError, MetadataNotFoundError, MetadataParseError
from .locator_dsl import parse_locator_expression
from .models import (
    DESCRIPTOR_FIELDS,
    ElementDescriptor,
    LocatorStrategy,
    ResolvedBatch,
    ResolvedElement,
    SemanticCategory,
)

logger = logging.getLogger("pogen.metadata")


@dataclass(frozen=True, slots=True)
class PageObjectMetadata:
    url: str
    page_name: str
    batch: ResolvedBatch
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    screenshot_path: str | None = None
    config: GeneratorConfig = DEFAULT_CONFIG

    @property
    def element_count(self) -> int:
        return len(self.batch)


def descriptor_to_dict(descriptor: ElementDescriptor) -> dict[str, Any]:
    return {key: getattr(descriptor, key) for key in DESCRIPTOR_FIELDS}


def descriptor_from_dict(payload: Mapping[str, Any]) -> ElementDescriptor:
    values: dict[str, Any] = {}
    for key in DESCRIPTOR_FIELDS:
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            raise MetadataParseError(f"Descriptor field {key!r} must be a string or null.")
        values[key] = value
    if values["tag"] is None:
        raise MetadataParseError("Descriptor is missing its tag.")
    return ElementDescriptor(**values)


def batch_to_list(batch: ResolvedBatch) -> list[dict[str, Any]]:
    return [
        {
            "identifier": element.identifier,
            "locator": element.locator,
            "strategy": element.strategy.value,
            "category": element.category.value,
            "descriptor": descriptor_to_dict(batch.descriptor_for(element)),
        }
        for element in batch
    ]


def batch_from_list(items: Any) -> ResolvedBatch:
    if not isinstance(items, list):
        raise MetadataParseError("'elements' must be a list.")
    elements: list[ResolvedElement] = []
    descriptors: list[ElementDescriptor] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise MetadataParseError(f"Element #{index} must be an object.")
        identifier = _required_string(item, "identifier", f"element #{index}")
        locator = _required_string(item, "locator", f"element #{index}")
        try:
            parse_locator_expression(locator)
            strategy = LocatorStrategy(_required_string(item, "strategy", f"element #{index}"))
            category = SemanticCategory(_required_string(item, "category", f"element #{index}"))
        except (LocatorSyntaxError, ValueError) as exc:
            raise MetadataParseError(f"Element {identifier!r} is invalid: {exc}") from exc
        descriptor_payload = item.get("descriptor")
        if not isinstance(descriptor_payload, Mapping):
            raise MetadataParseError(f"Element {identifier!r} has no descriptor object.")
        descriptors.append(descriptor_from_dict(descriptor_payload))
        elements.append(ResolvedElement(identifier, locator, strategy, category, descriptor_index=index))
    try:
        return ResolvedBatch(elements=tuple(elements), descriptors=tuple(descriptors))
    except BatchIntegrityError as exc:
        raise MetadataParseError(f"Snapshot violates batch invariants: {exc}") from exc


def metadata_to_dict(metadata: PageObjectMetadata) -> dict[str, Any]:
    return {
        "url": metadata.url,
        "page_name": metadata.page_name,
        "generated_at": metadata.generated_at,
        "element_count": metadata.element_count,
        "elements": batch_to_list(metadata.batch),
        "screenshot_path": metadata.screenshot_path,
        "config": config_to_dict(metadata.config),
    }


def metadata_from_dict(payload: Any) -> PageObjectMetadata:
    if not isinstance(payload, Mapping):
        raise MetadataParseError("Metadata root must be an object.")
    url = _required_string(payload, "url", "metadata")
    page_name = _required_string(payload, "page_name", "metadata")
    generated_at = _required_string(payload, "generated_at", "metadata")
    batch = batch_from_list(payload.get("elements"))

    element_count = payload.get("element_count")
    if isinstance(element_count, bool) or not isinstance(element_count, int):
        raise MetadataParseError("'element_count' must be an integer.")
    if element_count != len(batch):
        raise MetadataParseError(f"'element_count' is {element_count} but {len(batch)} element(s) were stored.")

    screenshot_path = payload.get("screenshot_path")
    if screenshot_path is not None and not isinstance(screenshot_path, str):
        raise MetadataParseError("'screenshot_path' must be a string or null.")

    config = DEFAULT_CONFIG
    raw_config = payload.get("config")
    if raw_config is not None:
        try:
            config = config_from_dict(raw_config)
        except ConfigurationError as exc:
            raise MetadataParseError(f"Stored config is invalid: {exc}") from exc

    return PageObjectMetadata(
        url=url,
        page_name=page_name,
        batch=batch,
        generated_at=generated_at,
        screenshot_path=screenshot_path,
        config=config,
    )


def save_metadata(path: Path | str, metadata: PageObjectMetadata) -> Path:
    target = Path(path)
    payload = json.dumps(metadata_to_dict(metadata), indent=2, ensure_ascii=False)
    write_text_atomic(target, payload + "\n")
    logger.info("Metadata saved to %s (%d elements)", target, metadata.element_count)
    return target


def load_metadata(path: Path | str) -> PageObjectMetadata:
    source = Path(path)
    if not source.exists():
        raise MetadataNotFoundError(str(source))
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MetadataParseError(f"Malformed JSON in {source}: {exc}", str(source)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataParseError(f"Could not read {source}: {exc}", str(source)) from exc
    try:
        return metadata_from_dict(payload)
    except MetadataParseError as exc:
        raise MetadataParseError(f"{source}: {exc.message}", str(source)) from exc


def write_text_atomic(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
        temp_path = Path(temp_name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        temp_path.replace(target)
    except OSError:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        raise


def _required_string(payload: Mapping[str, Any], key: str, where: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise MetadataParseError(f"{where} is missing string field {key!r}.")
    return value
