#!/usr/bin/env python3
"""
Catalog helpers.

A catalog maps locale -> (string key -> text). String keys are flat,
with `/` separating a namespace and `.` separating nested names, e.g.
"FRICTION/friction.title".

These helpers cover what the encoder needs (locale/key ordering and the
per-key diff against the fallback locale) and what callers need around it
(flattening string files, directional formatting, validation).
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .opcodes import CHAR_LTR, CHAR_POP, CHAR_RTL

FALLBACK_LOCALE = "en"

Catalog = dict[str, dict[str, str]]


@dataclass
class ValidationError:
    """Structured validation error for agent-friendly reporting."""
    locale: Optional[str]
    key: Optional[str]
    error_type: str
    message: str
    suggestion: str

    def to_dict(self) -> dict:
        return {
            "locale": self.locale,
            "key": self.key,
            "type": self.error_type,
            "message": self.message,
            "fix": self.suggestion,
        }


def sorted_locales(catalog: Catalog) -> list[str]:
    """Locales that get declared in the stream, in stream order."""
    return sorted(locale for locale, strings in catalog.items() if strings is not None)


def sorted_keys(catalog: Catalog) -> list[str]:
    """Sorted union of the string keys of every locale."""
    keys = set()
    for strings in catalog.values():
        if strings:
            keys.update(strings)
    return sorted(keys)


def common_prefix_length(a: str, b: str) -> int:
    """Length of the longest common prefix of a and b."""
    i = 0
    limit = min(len(a), len(b))
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def value_sort_key(text: str) -> bytes:
    """Plain lexicographic order over UTF-16 code units (no collation)."""
    return text.encode("utf-16-be", "surrogatepass")


def candidate_locales(
    catalog: Catalog,
    key: str,
    locales: list[str],
    fallback_locale: str = FALLBACK_LOCALE,
) -> list[tuple[str, str]]:
    """
    Locales whose value has to be written for a key.

    The fallback locale is always included; any other locale only when it has
    a value that differs from the fallback value. Results are ordered by value
    (stable, so equal values keep locale order) so that identical values end
    up adjacent.

    Args:
        catalog: Catalog being encoded
        key: String key
        locales: Declared locales, sorted
        fallback_locale: Locale used to backfill gaps

    Returns:
        List of (locale, value) pairs
    """
    default_value = catalog[fallback_locale][key]

    candidates = []
    for locale in locales:
        if locale == fallback_locale:
            candidates.append((locale, default_value))
            continue
        value = catalog[locale].get(key)
        if value is not None and value != default_value:
            candidates.append((locale, value))

    return sorted(candidates, key=lambda pair: value_sort_key(pair[1]))


def backfill_catalog(catalog: Catalog, fallback_locale: str = FALLBACK_LOCALE) -> Catalog:
    """
    Return the catalog as it comes out of a decode.

    Every declared locale gets every key; gaps take the fallback value.
    """
    locales = sorted_locales(catalog)
    if not locales:
        return {}

    fallback = catalog.get(fallback_locale) or {}
    keys = sorted_keys(catalog)
    result = {}
    for locale in locales:
        strings = catalog[locale]
        result[locale] = {key: strings.get(key, fallback.get(key)) for key in keys}
    return result


def add_directional_formatting(text: str, is_rtl: bool) -> str:
    """Wrap non-empty text with LTR or RTL embedding marks."""
    if not text:
        return text
    return f"{CHAR_RTL if is_rtl else CHAR_LTR}{text}{CHAR_POP}"


def format_directional(catalog: Catalog, rtl_locales: Iterable[str] = ()) -> Catalog:
    """
    Trim every value and wrap it with directional embedding marks.

    Args:
        catalog: Source catalog (left untouched)
        rtl_locales: Locales written right-to-left

    Returns:
        New catalog with formatted values
    """
    rtl = set(rtl_locales)
    return {
        locale: None if strings is None else {
            key: add_directional_formatting(value.strip(), locale in rtl)
            for key, value in strings.items()
        }
        for locale, strings in catalog.items()
    }


def flatten_strings(tree: Any, prefix: str = "") -> dict[str, str]:
    """
    Flatten a nested string file to dot-notation keys.

    Leaves are plain strings or objects holding the text under "value"
    (other fields of such objects are metadata). Arrays, numbers, booleans
    and nulls are not translatable and are skipped.

    Args:
        tree: Parsed JSON/YAML mapping
        prefix: Key prefix for the current level

    Returns:
        Map of dotted key -> text
    """
    strings = {}
    if not isinstance(tree, dict):
        return strings

    for name, node in tree.items():
        key = f"{prefix}.{name}" if prefix else str(name)

        if isinstance(node, str):
            strings[key] = node
        elif isinstance(node, dict):
            if isinstance(node.get("value"), str):
                strings[key] = node["value"]
            else:
                strings.update(flatten_strings(node, key))

    return strings


def nest_strings(strings: dict[str, str]) -> dict[str, Any]:
    """
    Rebuild nested mappings from dot-notation keys.

    A string named "value" below the top level is written as
    {"value": text}, so flatten_strings does not take its parent for a
    string-file entry.

    Raises:
        ValueError: If a key is both a string and a parent of other keys
    """
    result: dict[str, Any] = {}

    for key in sorted(strings):
        path = key.split(".")
        node = result
        for i, name in enumerate(path[:-1]):
            child = node.setdefault(name, {})
            if not isinstance(child, dict):
                raise ValueError(
                    f"Key '{key}' nests under '{'.'.join(path[:i + 1])}', which is a string"
                )
            node = child

        leaf = path[-1]
        if isinstance(node.get(leaf), dict):
            raise ValueError(f"Key '{key}' is both a string and a parent of other keys")
        node[leaf] = strings[key]

    for child in result.values():
        _wrap_value_strings(child)
    return result


def _wrap_value_strings(node: Any) -> None:
    if not isinstance(node, dict):
        return
    for name, child in node.items():
        if name == "value" and isinstance(child, str):
            node[name] = {"value": child}
        else:
            _wrap_value_strings(child)


def has_lone_surrogate(text: str) -> bool:
    """Whether text holds a surrogate code point outside a pair."""
    return any("\ud800" <= char <= "\udfff" for char in text)


def find_lone_surrogates(catalog: Catalog) -> list[ValidationError]:
    """
    Report keys and values that cannot be written as UTF-8.

    JSON files can spell a lone surrogate (\\ud800); such text encodes in
    memory but not to a stream file. Keys holding one are reported escaped.
    """
    errors = []
    for locale in sorted_locales(catalog):
        for key, value in catalog[locale].items():
            if has_lone_surrogate(key) or has_lone_surrogate(value):
                errors.append(ValidationError(
                    locale=locale,
                    key=key.encode("unicode_escape").decode("ascii") if has_lone_surrogate(key) else key,
                    error_type="LONE_SURROGATE",
                    message=f"Entry in '{locale}' holds a surrogate code point that is not part of a pair",
                    suggestion="Replace the \\uD800-\\uDFFF escape with the intended character",
                ))
    return errors


def validate_catalog(
    catalog: Catalog,
    fallback_locale: str = FALLBACK_LOCALE,
) -> tuple[bool, list[ValidationError]]:
    """
    Check that a catalog can be encoded and decoded back faithfully.

    Args:
        catalog: Catalog to check
        fallback_locale: Locale used to backfill gaps

    Returns:
        Tuple of (is_valid, list of ValidationError)
    """
    errors = []
    locales = sorted_locales(catalog)

    if not locales:
        return True, errors

    for locale in locales:
        for key, value in catalog[locale].items():
            if not isinstance(key, str) or not isinstance(value, str):
                wrong = value if isinstance(key, str) else key
                errors.append(ValidationError(
                    locale=locale,
                    key=str(key),
                    error_type="NOT_A_STRING",
                    message=f"Entry {key!r} in '{locale}' has a {type(wrong).__name__}, not a string",
                    suggestion="Catalog keys and values must be strings",
                ))

    # Keys can't be ordered until every one of them is a string
    if errors:
        return False, errors

    errors.extend(find_lone_surrogates(catalog))

    if fallback_locale not in locales:
        errors.append(ValidationError(
            locale=fallback_locale,
            key=None,
            error_type="MISSING_FALLBACK_LOCALE",
            message=f"Fallback locale '{fallback_locale}' is not in the catalog",
            suggestion=f"Add a '{fallback_locale}' dictionary holding every key",
        ))
        return False, errors

    fallback = catalog[fallback_locale]
    keys = sorted_keys(catalog)
    for key in keys:
        if key not in fallback:
            owners = [locale for locale in locales if key in catalog[locale]]
            errors.append(ValidationError(
                locale=fallback_locale,
                key=key,
                error_type="MISSING_FALLBACK_VALUE",
                message=f"Key '{key}' is defined in {owners} but not in '{fallback_locale}'",
                suggestion=f"Add '{key}' to '{fallback_locale}' or remove it from the other locales",
            ))

    key_set = set(keys)
    for key in keys:
        parent = key
        while "." in parent:
            parent = parent.rsplit(".", 1)[0]
            if parent in key_set:
                errors.append(ValidationError(
                    locale=None,
                    key=key,
                    error_type="NESTED_KEY_CONFLICT",
                    message=f"Key '{key}' extends key '{parent}' with a period",
                    suggestion=f"Rename '{parent}' or move '{key}' so no key is a parent of another",
                ))
                break

    return len(errors) == 0, errors
