from __future__ import annotations

from dataclasses import dataclass, field, replace
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .errors import ConfigurationError
from .models import CATEGORY_ORDER, LocatorStrategy, SemanticCategory

SUPPORTED_LANGUAGES: tuple[str, ...] = ("typescript", "python")

DEFAULT_LOCATOR_PRIORITY: tuple[LocatorStrategy, ...] = (
    LocatorStrategy.ROLE,
    LocatorStrategy.LABEL,
    LocatorStrategy.PLACEHOLDER,
    LocatorStrategy.TEST_ID,
    LocatorStrategy.TEXT,
    LocatorStrategy.LOCATOR,
)

DEFAULT_SUFFIXES: Mapping[SemanticCategory, str] = MappingProxyType(
    {
        SemanticCategory.BUTTON: "Button",
        SemanticCategory.INPUT: "Input",
        SemanticCategory.LINK: "Link",
        SemanticCategory.SELECT: "Select",
        SemanticCategory.CHECKBOX: "Checkbox",
        SemanticCategory.RADIO: "Radio",
        SemanticCategory.TEXTAREA: "Textarea",
        SemanticCategory.HEADING: "Heading",
        SemanticCategory.OTHER: "Element",
    }
)

_TOP_LEVEL_KEYS = {"locator_priority", "naming", "ignore", "template"}
_NAMING_KEYS = {"max_text_length", "suffixes", "use_camel_case"}
_IGNORE_KEYS = {"classes", "ids", "roles"}
_TEMPLATE_KEYS = {"generate_helper_methods", "include_goto_method", "language"}


@dataclass(frozen=True, slots=True)
class NamingRules:
    max_text_length: int = 30
    suffixes: Mapping[SemanticCategory, str] = field(default_factory=lambda: DEFAULT_SUFFIXES)
    use_camel_case: bool = True

    def suffix_for(self, category: SemanticCategory) -> str:
        return self.suffixes.get(category, DEFAULT_SUFFIXES[category])


@dataclass(frozen=True, slots=True)
class IgnoreRules:
    classes: tuple[str, ...] = ()
    ids: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TemplateOptions:
    generate_helper_methods: bool = True
    include_goto_method: bool = True
    language: str = "typescript"


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    locator_priority: tuple[LocatorStrategy, ...] = DEFAULT_LOCATOR_PRIORITY
    naming: NamingRules = field(default_factory=NamingRules)
    ignore: IgnoreRules = field(default_factory=IgnoreRules)
    template: TemplateOptions = field(default_factory=TemplateOptions)


DEFAULT_CONFIG = GeneratorConfig()


def merge_config(base: GeneratorConfig, overrides: Mapping[str, Any] | None) -> GeneratorConfig:
    """Return a new config with ``overrides`` applied over ``base``.

    Per-field policy:

    - ``locator_priority`` replaces the base list.
    - ``naming.max_text_length`` and ``naming.use_camel_case`` replace.
    - ``naming.suffixes`` extends: listed categories override, the rest keep
      the base suffix.
    - ``ignore.classes``, ``ignore.ids`` and ``ignore.roles`` replace.
    - every ``template`` option replaces.

    ``base`` is never modified. Unknown keys raise ``ConfigurationError``.
    """
    if not overrides:
        validate_config(base)
        return base
    if not isinstance(overrides, Mapping):
        raise ConfigurationError("Configuration overrides must be an object.")
    _reject_unknown_keys(overrides, _TOP_LEVEL_KEYS, "")

    merged = base
    if "locator_priority" in overrides:
        merged = replace(merged, locator_priority=parse_locator_priority(overrides["locator_priority"]))
    if "naming" in overrides:
        merged = replace(merged, naming=_merge_naming(merged.naming, overrides["naming"]))
    if "ignore" in overrides:
        merged = replace(merged, ignore=_merge_ignore(merged.ignore, overrides["ignore"]))
    if "template" in overrides:
        merged = replace(merged, template=_merge_template(merged.template, overrides["template"]))

    validate_config(merged)
    return merged


def validate_config(config: GeneratorConfig) -> None:
    priority = config.locator_priority
    if not priority:
        raise ConfigurationError("locator_priority must list at least one strategy.", "locator_priority")
    if len(set(priority)) != len(priority):
        raise ConfigurationError("locator_priority must not repeat a strategy.", "locator_priority")
    for item in priority:
        if not isinstance(item, LocatorStrategy):
            raise ConfigurationError(f"Unknown locator strategy: {item!r}", "locator_priority")

    max_length = config.naming.max_text_length
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 0:
        raise ConfigurationError("naming.max_text_length must be a non-negative integer.", "naming.max_text_length")
    for category, suffix in config.naming.suffixes.items():
        if not isinstance(suffix, str) or (suffix and not suffix.isalnum()):
            raise ConfigurationError(
                f"Suffix for {category.value} must contain only letters and digits.",
                "naming.suffixes",
            )

    if config.template.language not in SUPPORTED_LANGUAGES:
        raise ConfigurationError(
            f"template.language must be one of: {', '.join(SUPPORTED_LANGUAGES)}.",
            "template.language",
        )


def parse_locator_priority(raw: Any) -> tuple[LocatorStrategy, ...]:
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        raise ConfigurationError("locator_priority must be a list of strategy names.", "locator_priority")
    parsed: list[LocatorStrategy] = []
    for item in raw:
        try:
            parsed.append(LocatorStrategy(item))
        except ValueError as exc:
            allowed = ", ".join(strategy.value for strategy in LocatorStrategy)
            raise ConfigurationError(
                f"Unknown locator strategy {item!r}. Expected one of: {allowed}.",
                "locator_priority",
            ) from exc
    return tuple(parsed)


def load_config(path: Path | str) -> GeneratorConfig:
    config_path = Path(path)
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Could not read config file {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Config file {config_path} is not valid JSON: {exc}") from exc
    return merge_config(DEFAULT_CONFIG, payload)


def config_to_dict(config: GeneratorConfig) -> dict[str, Any]:
    return {
        "locator_priority": [strategy.value for strategy in config.locator_priority],
        "naming": {
            "max_text_length": config.naming.max_text_length,
            "suffixes": {category.value: config.naming.suffix_for(category) for category in CATEGORY_ORDER},
            "use_camel_case": config.naming.use_camel_case,
        },
        "ignore": {
            "classes": list(config.ignore.classes),
            "ids": list(config.ignore.ids),
            "roles": list(config.ignore.roles),
        },
        "template": {
            "generate_helper_methods": config.template.generate_helper_methods,
            "include_goto_method": config.template.include_goto_method,
            "language": config.template.language,
        },
    }


def config_from_dict(payload: Mapping[str, Any]) -> GeneratorConfig:
    return merge_config(DEFAULT_CONFIG, payload)


def _merge_naming(base: NamingRules, raw: Any) -> NamingRules:
    section = _section(raw, "naming", _NAMING_KEYS)
    merged = base
    if "max_text_length" in section:
        merged = replace(merged, max_text_length=section["max_text_length"])
    if "use_camel_case" in section:
        merged = replace(merged, use_camel_case=_boolean(section["use_camel_case"], "naming.use_camel_case"))
    if "suffixes" in section:
        raw_suffixes = section["suffixes"]
        if not isinstance(raw_suffixes, Mapping):
            raise ConfigurationError("naming.suffixes must be an object.", "naming.suffixes")
        suffixes = dict(merged.suffixes)
        for key, value in raw_suffixes.items():
            try:
                category = SemanticCategory(key)
            except ValueError as exc:
                raise ConfigurationError(f"Unknown element category in suffixes: {key!r}", "naming.suffixes") from exc
            suffixes[category] = value
        merged = replace(merged, suffixes=MappingProxyType(suffixes))
    return merged


def _merge_ignore(base: IgnoreRules, raw: Any) -> IgnoreRules:
    section = _section(raw, "ignore", _IGNORE_KEYS)
    merged = base
    for key in ("classes", "ids", "roles"):
        if key in section:
            merged = replace(merged, **{key: _string_tuple(section[key], f"ignore.{key}")})
    return merged


def _merge_template(base: TemplateOptions, raw: Any) -> TemplateOptions:
    section = _section(raw, "template", _TEMPLATE_KEYS)
    merged = base
    for key in ("generate_helper_methods", "include_goto_method"):
        if key in section:
            merged = replace(merged, **{key: _boolean(section[key], f"template.{key}")})
    if "language" in section:
        language = section["language"]
        if not isinstance(language, str):
            raise ConfigurationError("template.language must be a string.", "template.language")
        merged = replace(merged, language=language.strip().lower())
    return merged


def _section(raw: Any, name: str, allowed: set[str]) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{name} must be an object.", name)
    _reject_unknown_keys(raw, allowed, f"{name}.")
    return raw


def _reject_unknown_keys(section: Mapping[str, Any], allowed: set[str], prefix: str) -> None:
    unknown = sorted(str(key) for key in section if key not in allowed)
    if unknown:
        raise ConfigurationError(f"Unknown configuration key(s): {', '.join(prefix + key for key in unknown)}")


def _boolean(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.", field_name)
    return value


def _string_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigurationError(f"{field_name} must be a list of strings.", field_name)
    if not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"{field_name} must be a list of strings.", field_name)
    return tuple(value)
