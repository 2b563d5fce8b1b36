import json
from pathlib import Path

import pytest

from pogen.config import (
    DEFAULT_CONFIG,
    config_from_dict,
    config_to_dict,
    load_config,
    merge_config,
)
from pogen.errors import ConfigurationError
from pogen.models import LocatorStrategy, SemanticCategory


def test_merge_returns_new_config_and_leaves_base_untouched() -> None:
    merged = merge_config(DEFAULT_CONFIG, {"naming": {"max_text_length": 12}})
    assert merged.naming.max_text_length == 12
    assert DEFAULT_CONFIG.naming.max_text_length == 30
    assert merged is not DEFAULT_CONFIG


def test_no_overrides_returns_base() -> None:
    assert merge_config(DEFAULT_CONFIG, None) is DEFAULT_CONFIG
    assert merge_config(DEFAULT_CONFIG, {}) is DEFAULT_CONFIG


def test_locator_priority_replaces() -> None:
    merged = merge_config(DEFAULT_CONFIG, {"locator_priority": ["getByTestId", "locator"]})
    assert merged.locator_priority == (LocatorStrategy.TEST_ID, LocatorStrategy.LOCATOR)


def test_suffixes_extend_defaults() -> None:
    merged = merge_config(DEFAULT_CONFIG, {"naming": {"suffixes": {"button": "Btn"}}})
    assert merged.naming.suffix_for(SemanticCategory.BUTTON) == "Btn"
    assert merged.naming.suffix_for(SemanticCategory.INPUT) == "Input"


def test_ignore_lists_replace() -> None:
    first = merge_config(DEFAULT_CONFIG, {"ignore": {"ids": ["tmp-"], "classes": ["ad"]}})
    second = merge_config(first, {"ignore": {"ids": ["draft-"]}})
    assert second.ignore.ids == ("draft-",)
    assert second.ignore.classes == ("ad",)


def test_template_options_replace_and_language_is_normalized() -> None:
    merged = merge_config(DEFAULT_CONFIG, {"template": {"language": " Python ", "include_goto_method": False}})
    assert merged.template.language == "python"
    assert merged.template.include_goto_method is False
    assert merged.template.generate_helper_methods is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"locatorPriority": []},
        {"naming": {"maxLength": 3}},
        {"locator_priority": []},
        {"locator_priority": ["getByRole", "getByRole"]},
        {"locator_priority": ["getByAltText"]},
        {"locator_priority": "getByRole"},
        {"naming": {"max_text_length": -1}},
        {"naming": {"max_text_length": True}},
        {"naming": {"suffixes": {"button": "My Button"}}},
        {"naming": {"suffixes": {"widget": "Widget"}}},
        {"naming": {"use_camel_case": "yes"}},
        {"ignore": {"ids": "tmp-"}},
        {"template": {"language": "java"}},
        {"template": "typescript"},
    ],
)
def test_invalid_overrides_raise(overrides: dict) -> None:
    with pytest.raises(ConfigurationError):
        merge_config(DEFAULT_CONFIG, overrides)


def test_error_names_the_offending_field() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        merge_config(DEFAULT_CONFIG, {"template": {"language": "java"}})
    assert exc_info.value.field == "template.language"
    assert exc_info.value.to_dict()["error_code"] == "INVALID_CONFIGURATION"


def test_load_config_reads_json_file(tmp_path: Path) -> None:
    path = tmp_path / "pogen.json"
    path.write_text(json.dumps({"naming": {"use_camel_case": False}}), encoding="utf-8")
    assert load_config(path).naming.use_camel_case is False


def test_load_config_wraps_read_and_parse_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(broken)


def test_config_dict_round_trip() -> None:
    config = merge_config(
        DEFAULT_CONFIG,
        {
            "locator_priority": ["getByLabel", "getByRole", "locator"],
            "naming": {"max_text_length": 20, "suffixes": {"link": "Anchor"}},
            "ignore": {"roles": ["presentation"]},
            "template": {"language": "python"},
        },
    )
    assert config_from_dict(config_to_dict(config)) == config
