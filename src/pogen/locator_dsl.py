from __future__ import annotations

from dataclasses import dataclass
import re

from .errors import LocatorSyntaxError
from .models import LocatorStrategy

_NEWLINE_PATTERN = re.compile(r"\r\n|\r|\n")
_CSS_SAFE_ID_PATTERN = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")
_QUOTED = r"'((?:[^'\\]|\\.)*)'"
_ROLE_PATTERN = re.compile(rf"getByRole\(\s*{_QUOTED}\s*,\s*\{{\s*name:\s*{_QUOTED}\s*\}}\s*\)")
_SINGLE_ARG_PATTERN = re.compile(rf"(getByLabel|getByPlaceholder|getByTestId|getByText|locator)\(\s*{_QUOTED}\s*\)")
_UNESCAPE_PATTERN = re.compile(r"\\(.)", re.DOTALL)

_PYTHON_METHODS: dict[LocatorStrategy, str] = {
    LocatorStrategy.LABEL: "get_by_label",
    LocatorStrategy.PLACEHOLDER: "get_by_placeholder",
    LocatorStrategy.TEST_ID: "get_by_test_id",
    LocatorStrategy.TEXT: "get_by_text",
    LocatorStrategy.LOCATOR: "locator",
}


@dataclass(frozen=True, slots=True)
class LocatorExpression:
    """One locator in the six-form DSL.

    ``argument`` is the selector text for ``locator`` and the accessible name
    for ``getByRole``. Values are stored unescaped; ``code`` escapes them.
    """

    strategy: LocatorStrategy
    argument: str
    role: str | None = None

    @property
    def code(self) -> str:
        if self.strategy is LocatorStrategy.ROLE:
            return f"getByRole('{_quote(self.role or '')}', {{ name: '{_quote(self.argument)}' }})"
        return f"{self.strategy.value}('{_quote(self.argument)}')"

    @property
    def python_code(self) -> str:
        if self.strategy is LocatorStrategy.ROLE:
            return f'get_by_role("{_escape_double(self.role or "")}", name="{_escape_double(self.argument)}")'
        return f'{_PYTHON_METHODS[self.strategy]}("{_escape_double(self.argument)}")'

    def __str__(self) -> str:
        return self.code


def normalize_argument(value: str) -> str:
    return _NEWLINE_PATTERN.sub(" ", value).strip()


def escape_string(value: str) -> str:
    """Make ``value`` safe to embed inside a single-quoted DSL argument."""
    return _quote(normalize_argument(value))


def unescape_string(value: str) -> str:
    return _UNESCAPE_PATTERN.sub(lambda match: match.group(1), value)


def role_locator(role: str, name: str) -> LocatorExpression:
    return LocatorExpression(LocatorStrategy.ROLE, normalize_argument(name), role=normalize_argument(role))


def text_locator(strategy: LocatorStrategy, value: str) -> LocatorExpression:
    if strategy is LocatorStrategy.ROLE:
        raise ValueError("Use role_locator for getByRole expressions.")
    return LocatorExpression(strategy, normalize_argument(value))


def parse_locator_expression(text: str) -> LocatorExpression:
    stripped = (text or "").strip()
    match = _ROLE_PATTERN.fullmatch(stripped)
    if match:
        return LocatorExpression(
            LocatorStrategy.ROLE,
            unescape_string(match.group(2)),
            role=unescape_string(match.group(1)),
        )

    match = _SINGLE_ARG_PATTERN.fullmatch(stripped)
    if match:
        return LocatorExpression(LocatorStrategy(match.group(1)), unescape_string(match.group(2)))

    raise LocatorSyntaxError(f"Not a recognized locator expression: {text!r}", text=text)


def is_css_safe_id(value: str) -> bool:
    return bool(_CSS_SAFE_ID_PATTERN.fullmatch(value.strip()))


def escape_css_attribute_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_css_identifier(value: str) -> str:
    escaped: list[str] = []
    for char in value:
        if char.isalnum() or char in ("-", "_"):
            escaped.append(char)
        else:
            escaped.append(f"\\{ord(char):x} ")
    return "".join(escaped)


def css_id_selector(id_value: str) -> str:
    value = normalize_argument(id_value)
    if is_css_safe_id(value):
        return f"#{value}"
    return f'[id="{escape_css_attribute_value(value)}"]'


def css_name_selector(name: str) -> str:
    return f'[name="{escape_css_attribute_value(normalize_argument(name))}"]'


def css_class_selector(class_token: str) -> str:
    return f".{escape_css_identifier(class_token.strip())}"


def _quote(value: str) -> str:
    return _NEWLINE_PATTERN.sub(" ", value).replace("\\", "\\\\").replace("'", "\\'")


def _escape_double(value: str) -> str:
    return _NEWLINE_PATTERN.sub(" ", value).replace("\\", "\\\\").replace('"', '\\"')
