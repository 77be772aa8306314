"""
Locator variants and translation to provider-native selectors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class LocatorKind(Enum):
    ID = "id"
    CSS = "css"
    XPATH = "xpath"
    NAME = "name"
    CLASS = "class"
    JQUERY = "jquery"
    LINK_TEXT = "link_text"
    TAG = "tag"


@dataclass(frozen=True)
class RawSelector:
    """A selector string plus the kind of selector it is"""
    value: str
    kind: LocatorKind = LocatorKind.CSS

    def __str__(self):
        return f"{self.kind.value}={self.value}"


@dataclass(frozen=True)
class ResolvedHandle:
    """An element handle that was already resolved by the driver"""
    element: Any

    def __str__(self):
        return f"handle({self.element!r})"


Locator = Union[RawSelector, ResolvedHandle]

# Prefixes accepted in plain strings, e.g. "xpath=//div" or "id=submit"
_PREFIXES = {kind.value: kind for kind in LocatorKind}


def as_locator(target: Any) -> Locator:
    """Normalize a caller-supplied target into a Locator.

    Strings become RawSelectors. A `kind=` prefix picks the kind explicitly,
    strings starting with `/` or `(` are read as XPath and everything else as CSS.
    Objects that are neither strings nor Locators are treated as element handles.
    """
    if isinstance(target, (RawSelector, ResolvedHandle)):
        return target
    if isinstance(target, str):
        if not target.strip():
            raise ValueError("Locator string must not be empty")
        prefix, sep, rest = target.partition("=")
        if sep and prefix.lower() in _PREFIXES:
            return RawSelector(rest, _PREFIXES[prefix.lower()])
        if target.startswith(("/", "(")):
            return RawSelector(target, LocatorKind.XPATH)
        return RawSelector(target, LocatorKind.CSS)
    if target is None:
        raise ValueError("Locator must not be None")
    return ResolvedHandle(target)


def to_selector(selector: RawSelector) -> str:
    """Translate a RawSelector into a Playwright selector string"""
    kind, value = selector.kind, selector.value
    if kind == LocatorKind.ID:
        return f'[id="{value}"]'
    if kind == LocatorKind.NAME:
        return f'[name="{value}"]'
    if kind == LocatorKind.CLASS:
        return "." + ".".join(value.split())
    if kind == LocatorKind.XPATH:
        return f"xpath={value}"
    if kind == LocatorKind.LINK_TEXT:
        return f'a:text-is("{value}")'
    if kind == LocatorKind.TAG:
        return f"css={value}"
    # jQuery selectors are handed to the CSS engine as-is
    return f"css={value}"
