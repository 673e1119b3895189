"""Predicate factories for child element queries."""

from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from typed_microdom.microdom.element import MicroElement

ElementFilter = Callable[["MicroElement"], bool]


def filter_name(tag_name: Optional[str]) -> ElementFilter:
    """Match elements by tag name."""
    return lambda element: element.has_tag_name(tag_name)


def filter_namespace_uri(namespace_uri: Optional[str]) -> ElementFilter:
    """Match elements by namespace URI (``None`` matches unqualified elements)."""
    expected = namespace_uri or None
    return lambda element: element.namespace_uri == expected


def filter_namespace_uri_and_name(namespace_uri: Optional[str],
                                  local_name: Optional[str]) -> ElementFilter:
    """Match namespace and local name; without a namespace only the name counts."""
    if not namespace_uri:
        return filter_name(local_name)
    return lambda element: (
        element.has_namespace_uri(namespace_uri) and element.has_local_name(local_name)
    )


def filter_attribute(name: str, value: Optional[str] = None,
                     namespace_uri: Optional[str] = None) -> ElementFilter:
    """Match elements carrying an attribute, optionally with a given value."""
    def matches(element: "MicroElement") -> bool:
        actual = element.get_attribute_value(name, namespace_uri)
        return actual is not None and (value is None or actual == value)
    return matches
