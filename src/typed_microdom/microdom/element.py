"""Micro DOM element with namespace aware attributes.

Attribute names may be given as plain strings (optionally with a separate
``namespace_uri``) or as ``MicroQName`` objects. Typed getters parse
leniently and fall back to the supplied default; conversions through a
``TypeConverterRegistry`` are strict and raise on failure.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from typed_microdom import stringparser
from typed_microdom.microdom.attributes import MicroAttribute, MicroAttributeMap
from typed_microdom.microdom.filters import ElementFilter, filter_namespace_uri_and_name
from typed_microdom.microdom.nodes import (
    EMicroNodeType,
    MicroCDATA,
    MicroComment,
    MicroNode,
    MicroNodeWithChildren,
    MicroText,
    iter_descendants,
)
from typed_microdom.microdom.qname import MicroQName, QNameLike
from typed_microdom.shared import EChange, EContinue
from typed_microdom.typeconvert import TypeConverterRegistry, TypeKey

AttributeValue = Union[str, bool, int, float, None]


def _stringify(value: AttributeValue) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(
        f"Unsupported attribute value type {type(value).__name__}; "
        "use set_attribute_with_conversion"
    )


class MicroElement(MicroNodeWithChildren):
    """Element node owning attributes and an ordered child sequence."""

    node_type = EMicroNodeType.ELEMENT

    def __init__(self, tag_name: str, namespace_uri: Optional[str] = None) -> None:
        super().__init__()
        if not tag_name:
            raise ValueError("Element tag name cannot be empty")
        self._tag_name = tag_name
        self._namespace_uri = namespace_uri or None
        self._attributes = MicroAttributeMap()

    # Naming

    @property
    def node_name(self) -> str:
        """Same as ``tag_name``."""
        return self._tag_name

    @property
    def tag_name(self) -> str:
        """Local tag name without prefix."""
        return self._tag_name

    @property
    def local_name(self) -> str:
        """Alias of ``tag_name``; prefixes are not modelled."""
        return self._tag_name

    @property
    def namespace_uri(self) -> Optional[str]:
        """Namespace URI, None when the element is unqualified."""
        return self._namespace_uri

    @property
    def qname(self) -> MicroQName:
        """Namespace and tag name as a ``MicroQName``."""
        return MicroQName(self._tag_name, self._namespace_uri)

    def set_tag_name(self, tag_name: str) -> EChange:
        """Rename the element; empty names are rejected."""
        if not tag_name:
            raise ValueError("Element tag name cannot be empty")
        if tag_name == self._tag_name:
            return EChange.UNCHANGED
        self._tag_name = tag_name
        return EChange.CHANGED

    def set_namespace_uri(self, namespace_uri: Optional[str]) -> EChange:
        """Change the namespace; an empty URI makes the element unqualified."""
        namespace_uri = namespace_uri or None
        if namespace_uri == self._namespace_uri:
            return EChange.UNCHANGED
        self._namespace_uri = namespace_uri
        return EChange.CHANGED

    def has_namespace_uri(self, namespace_uri: Optional[str] = None) -> bool:
        """Without an argument, check for any namespace; otherwise compare."""
        if namespace_uri is None:
            return self._namespace_uri is not None
        return self._namespace_uri == (namespace_uri or None)

    def has_no_namespace_uri(self) -> bool:
        return self._namespace_uri is None

    def has_local_name(self, local_name: Optional[str]) -> bool:
        return self._tag_name == local_name

    def has_tag_name(self, tag_name: Optional[str]) -> bool:
        return self._tag_name == tag_name

    def has_tag_name_ignore_case(self, tag_name: Optional[str]) -> bool:
        """Case-insensitive tag name comparison."""
        return tag_name is not None and self._tag_name.casefold() == tag_name.casefold()

    # Attributes

    def set_attribute(self, name: QNameLike, value: AttributeValue,
                      namespace_uri: Optional[str] = None) -> EChange:
        """Set, overwrite or (for an empty value) remove an attribute.

        Booleans are stored as ``"true"``/``"false"``, numbers via ``str``.
        """
        return self._attributes.set(MicroQName.of(name, namespace_uri), _stringify(value))

    def set_attribute_with_conversion(self, name: QNameLike, value: Any,
                                      registry: TypeConverterRegistry,
                                      namespace_uri: Optional[str] = None) -> EChange:
        """Convert ``value`` to ``str`` through ``registry`` and store it."""
        return self._attributes.set(
            MicroQName.of(name, namespace_uri), registry.convert(value, str)
        )

    def has_attribute(self, name: QNameLike, namespace_uri: Optional[str] = None) -> bool:
        """Check for an attribute; an empty name never matches."""
        if not name:
            return False
        return MicroQName.of(name, namespace_uri) in self._attributes

    def has_attributes(self) -> bool:
        return len(self._attributes) > 0

    def has_no_attributes(self) -> bool:
        return len(self._attributes) == 0

    def get_attribute_count(self) -> int:
        return len(self._attributes)

    def get_attribute_value(self, name: QNameLike,
                            namespace_uri: Optional[str] = None) -> Optional[str]:
        """Raw attribute value, or None when the attribute is missing."""
        if not name:
            return None
        return self._attributes.get(MicroQName.of(name, namespace_uri))

    def get_attribute_obj(self, name: QNameLike,
                          namespace_uri: Optional[str] = None) -> Optional[MicroAttribute]:
        """Attribute as a ``MicroAttribute`` snapshot, or None."""
        if not name:
            return None
        qname = MicroQName.of(name, namespace_uri)
        value = self._attributes.get(qname)
        return None if value is None else MicroAttribute(qname, value)

    def get_attribute_value_as_bool(self, name: QNameLike, default: bool,
                                    namespace_uri: Optional[str] = None) -> bool:
        """Attribute parsed as a boolean, ``default`` if missing or malformed."""
        return stringparser.parse_bool(self.get_attribute_value(name, namespace_uri), default)

    def get_attribute_value_as_int(self, name: QNameLike, default: int,
                                   namespace_uri: Optional[str] = None) -> int:
        """Attribute parsed as a 32-bit integer, ``default`` if missing or malformed."""
        return stringparser.parse_int(self.get_attribute_value(name, namespace_uri), default)

    def get_attribute_value_as_long(self, name: QNameLike, default: int,
                                    namespace_uri: Optional[str] = None) -> int:
        """Attribute parsed as a 64-bit integer, ``default`` if missing or malformed."""
        return stringparser.parse_long(self.get_attribute_value(name, namespace_uri), default)

    def get_attribute_value_as_float(self, name: QNameLike, default: float,
                                     namespace_uri: Optional[str] = None) -> float:
        """Attribute parsed as a float, ``default`` if missing or malformed."""
        return stringparser.parse_float(self.get_attribute_value(name, namespace_uri), default)

    def get_attribute_value_as_double(self, name: QNameLike, default: float,
                                      namespace_uri: Optional[str] = None) -> float:
        """Attribute parsed as a double, ``default`` if missing or malformed."""
        return stringparser.parse_double(self.get_attribute_value(name, namespace_uri), default)

    def get_attribute_value_with_conversion(self, name: QNameLike, destination: TypeKey,
                                            registry: TypeConverterRegistry,
                                            namespace_uri: Optional[str] = None) -> Any:
        """Convert the attribute value through ``registry``.

        Returns ``None`` for a missing attribute. Conversion failures
        propagate as ``TypeConverterError`` since there is no default.
        """
        value = self.get_attribute_value(name, namespace_uri)
        if value is None:
            return None
        return registry.convert(value, destination)

    def get_all_attribute_objs(self) -> List[MicroAttribute]:
        """All attributes in insertion order."""
        return self._attributes.objects()

    def get_all_qattributes(self) -> Dict[MicroQName, str]:
        """Copy of the attributes keyed by qualified name."""
        return dict(self._attributes.items())

    def get_all_attribute_qnames(self) -> List[MicroQName]:
        return list(self._attributes)

    def for_all_attributes(self, consumer: Callable[[MicroQName, str], None]) -> None:
        """Call ``consumer(qname, value)`` for each attribute in order."""
        self._attributes.for_each(consumer)

    def remove_attribute(self, name: QNameLike,
                         namespace_uri: Optional[str] = None) -> EChange:
        """Remove an attribute; UNCHANGED if it was not present."""
        if not name:
            return EChange.UNCHANGED
        return self._attributes.remove(MicroQName.of(name, namespace_uri))

    def remove_all_attributes(self) -> EChange:
        return self._attributes.clear()

    # Child elements; MicroContainer children are spliced in place

    def for_all_child_elements(self, consumer: Callable[["MicroElement"], None],
                               element_filter: Optional[ElementFilter] = None) -> None:
        """Call ``consumer`` for each matching child element."""
        for element in self.iter_child_elements():
            if element_filter is None or element_filter(element):
                consumer(element)

    def for_all_child_elements_breakable(
        self,
        consumer: Callable[["MicroElement"], EContinue],
        element_filter: Optional[ElementFilter] = None
    ) -> EContinue:
        """Like ``for_all_child_elements`` but stops when ``consumer`` returns BREAK."""
        for element in self.iter_child_elements():
            if element_filter is None or element_filter(element):
                if consumer(element).is_break:
                    return EContinue.BREAK
        return EContinue.CONTINUE

    def contains_any_child_element(self,
                                   element_filter: Optional[ElementFilter] = None) -> bool:
        """Check for at least one matching child element."""
        return self.get_first_child_element(element_filter) is not None

    def has_child_elements(self, tag_name: Optional[str] = None,
                           namespace_uri: Optional[str] = None) -> bool:
        """Check for any child element, optionally with a given name."""
        if tag_name is None:
            return self.contains_any_child_element()
        return self.contains_any_child_element(
            filter_namespace_uri_and_name(namespace_uri, tag_name)
        )

    def get_child_element_count(self,
                                element_filter: Optional[ElementFilter] = None) -> int:
        """Number of matching child elements."""
        return len(self.get_all_child_elements(element_filter))

    def get_all_child_elements_recursive(self) -> List["MicroElement"]:
        """All descendant elements in document order."""
        return [
            node for node in iter_descendants(self)  # type: ignore[misc]
            if node.node_type is EMicroNodeType.ELEMENT
        ]

    # Construction helpers

    def append_element(self, tag_name: str,
                       namespace_uri: Optional[str] = None) -> "MicroElement":
        """Create, append and return a child element."""
        element = MicroElement(tag_name, namespace_uri)
        self.append_child(element)
        return element

    def append_text(self, text: str) -> MicroText:
        """Create, append and return a text node."""
        node = MicroText(text)
        self.append_child(node)
        return node

    def append_comment(self, data: str) -> MicroComment:
        """Create, append and return a comment node."""
        node = MicroComment(data)
        self.append_child(node)
        return node

    def append_cdata(self, data: str) -> MicroCDATA:
        """Create, append and return a CDATA node."""
        node = MicroCDATA(data)
        self.append_child(node)
        return node

    def get_clone(self) -> "MicroElement":
        """Deep copy including attributes and all descendants."""
        clone = MicroElement(self._tag_name, self._namespace_uri)
        clone._attributes = self._attributes.copy()
        self._clone_children_into(clone)
        return clone

    def is_equal_content(self, other: Optional[MicroNode]) -> bool:
        """Compare names, attributes (order-insensitive) and children."""
        if not isinstance(other, MicroElement):
            return False
        return (
            self._tag_name == other._tag_name
            and self._namespace_uri == other._namespace_uri
            and self._attributes == other._attributes
            and super().is_equal_content(other)
        )

    def __repr__(self) -> str:
        if self._namespace_uri:
            return f"MicroElement({{{self._namespace_uri}}}{self._tag_name})"
        return f"MicroElement({self._tag_name})"
