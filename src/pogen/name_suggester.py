from __future__ import annotations

import keyword
import re
import unicodedata
from typing import assert_never

from .config import NamingRules
from .models import ElementDescriptor, SemanticCategory
from .selector_rules import usable

_WORD_BREAK = re.compile(r"[^A-Za-z0-9]+")

_TURKISH_TABLE = str.maketrans(
    {
        "ç": "c",
        "Ç": "C",
        "ğ": "g",
        "Ğ": "G",
        "ı": "i",
        "İ": "I",
        "ö": "o",
        "Ö": "O",
        "ş": "s",
        "Ş": "S",
        "ü": "u",
        "Ü": "U",
    }
)

# Members every generated page class defines itself.
PAGE_MEMBERS = frozenset({"page", "goto", "constructor"})

# Words that cannot be used as a bare field name in the generated TypeScript.
_TS_RESERVED = {
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "new",
    "null",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
}


def category_label(category: SemanticCategory) -> str:
    match category:
        case SemanticCategory.BUTTON:
            return "Button"
        case SemanticCategory.INPUT:
            return "Input"
        case SemanticCategory.LINK:
            return "Link"
        case SemanticCategory.SELECT:
            return "Select"
        case SemanticCategory.CHECKBOX:
            return "Checkbox"
        case SemanticCategory.RADIO:
            return "Radio"
        case SemanticCategory.TEXTAREA:
            return "Textarea"
        case SemanticCategory.HEADING:
            return "Heading"
        case SemanticCategory.OTHER:
            return "Other"
        case _:
            assert_never(category)


def suggest_element_name(descriptor: ElementDescriptor, category: SemanticCategory, rules: NamingRules) -> str:
    base = _base_name(descriptor, category, rules)
    identifier = f"{base}{rules.suffix_for(category)}"
    if keyword.iskeyword(identifier) or identifier in _TS_RESERVED or identifier in PAGE_MEMBERS:
        return f"{identifier}_"
    return identifier


def name_sources(descriptor: ElementDescriptor, rules: NamingRules) -> list[str]:
    """Candidate base names in priority order, blanks removed."""
    sources: list[str] = []
    for value in (descriptor.aria_label, descriptor.label, descriptor.placeholder):
        text = usable(value)
        if text:
            sources.append(text)
    text = usable(descriptor.text)
    if text and len(text) <= rules.max_text_length:
        sources.append(text)
    for value in (descriptor.name, descriptor.id, descriptor.test_id):
        text = usable(value)
        if text:
            sources.append(text)
    return sources


def to_camel_case(value: str) -> str:
    words = split_words(value)
    if not words:
        return ""
    head, *tail = (word.lower() for word in words)
    return head + "".join(word[:1].upper() + word[1:] for word in tail)


def to_pascal_case(value: str) -> str:
    camel = to_camel_case(value)
    return camel[:1].upper() + camel[1:]


def split_words(value: str) -> list[str]:
    return [word for word in _WORD_BREAK.split(to_ascii(value)) if word]


def to_ascii(value: str) -> str:
    translated = value.translate(_TURKISH_TABLE)
    decomposed = unicodedata.normalize("NFKD", translated)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _base_name(descriptor: ElementDescriptor, category: SemanticCategory, rules: NamingRules) -> str:
    for source in name_sources(descriptor, rules):
        candidate = to_camel_case(source) if rules.use_camel_case else "".join(split_words(source))
        if candidate:
            return f"e{candidate}" if candidate[0].isdigit() else candidate
    return f"unnamed{category_label(category)}"
