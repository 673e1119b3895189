"""Micro DOM node model.

Every node may hang below one parent. Parents own their children; the
``parent`` back reference exists for navigation only. A ``MicroContainer``
is a tagless grouping node: element queries look straight through it, so its
children behave as children of the container's parent.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional

from typed_microdom.shared import EChange

if TYPE_CHECKING:
    from typed_microdom.microdom.element import MicroElement


class EMicroNodeType(Enum):
    """Kinds of micro DOM nodes."""

    ELEMENT = auto()
    TEXT = auto()
    COMMENT = auto()
    CDATA = auto()
    CONTAINER = auto()
    DOCUMENT = auto()


class MicroNode(ABC):
    """Base class of all micro DOM nodes."""

    node_type: EMicroNodeType

    def __init__(self) -> None:
        self._parent: Optional["MicroNodeWithChildren"] = None

    @property
    def parent(self) -> Optional["MicroNodeWithChildren"]:
        """Direct parent node, or None for detached nodes."""
        return self._parent

    @property
    def has_parent(self) -> bool:
        """Check whether this node is attached to a parent."""
        return self._parent is not None

    @property
    @abstractmethod
    def node_name(self) -> str:
        """Tag name for elements, ``#text`` style names for other nodes."""

    @property
    def node_value(self) -> Optional[str]:
        """Character data of data nodes, None for everything else."""
        return None

    def detach_from_parent(self) -> EChange:
        """Remove this node from its parent, if any."""
        if self._parent is None:
            return EChange.UNCHANGED
        return self._parent.remove_child(self)

    def get_parent_element(self) -> Optional["MicroElement"]:
        """Closest ancestor that is an element (containers are skipped)."""
        ancestor = self._parent
        while ancestor is not None and ancestor.node_type is not EMicroNodeType.ELEMENT:
            ancestor = ancestor.parent
        return ancestor  # type: ignore[return-value]

    def get_owner_document(self) -> Optional["MicroDocument"]:
        """The document at the top of this node's ancestor chain, if any."""
        node: Optional[MicroNode] = self
        while node is not None:
            if node.node_type is EMicroNodeType.DOCUMENT:
                return node  # type: ignore[return-value]
            node = node.parent
        return None

    def is_element(self) -> bool:
        return self.node_type is EMicroNodeType.ELEMENT

    def is_text(self) -> bool:
        return self.node_type is EMicroNodeType.TEXT

    def is_comment(self) -> bool:
        return self.node_type is EMicroNodeType.COMMENT

    def is_cdata(self) -> bool:
        return self.node_type is EMicroNodeType.CDATA

    def is_container(self) -> bool:
        return self.node_type is EMicroNodeType.CONTAINER

    def is_document(self) -> bool:
        return self.node_type is EMicroNodeType.DOCUMENT

    @abstractmethod
    def get_clone(self) -> "MicroNode":
        """Deep copy of this node, detached from any parent."""

    def is_equal_content(self, other: Optional["MicroNode"]) -> bool:
        """Structural comparison ignoring identity and parents."""
        return other is not None and self.node_type is other.node_type

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.node_name!r})"


class MicroDataNode(MicroNode):
    """Node carrying character data (text, comment, CDATA)."""

    def __init__(self, data: Optional[str] = None) -> None:
        super().__init__()
        self._data = data or ""

    @property
    def data(self) -> str:
        """The character data; never None."""
        return self._data

    @property
    def node_value(self) -> Optional[str]:
        return self._data

    def set_data(self, data: Optional[str]) -> EChange:
        """Replace the character data; None is stored as an empty string."""
        data = data or ""
        if data == self._data:
            return EChange.UNCHANGED
        self._data = data
        return EChange.CHANGED

    def append_data(self, data: Optional[str]) -> EChange:
        """Add ``data`` at the end of the current data."""
        if not data:
            return EChange.UNCHANGED
        self._data += data
        return EChange.CHANGED

    def prepend_data(self, data: Optional[str]) -> EChange:
        """Add ``data`` in front of the current data."""
        if not data:
            return EChange.UNCHANGED
        self._data = data + self._data
        return EChange.CHANGED

    def get_clone(self) -> "MicroDataNode":
        return type(self)(self._data)

    def is_equal_content(self, other: Optional[MicroNode]) -> bool:
        return (
            super().is_equal_content(other)
            and self._data == other.data  # type: ignore[union-attr]
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class MicroText(MicroDataNode):
    """Text content of an element."""

    node_type = EMicroNodeType.TEXT

    @property
    def node_name(self) -> str:
        return "#text"

    @property
    def is_whitespace(self) -> bool:
        """Check whether the text consists of whitespace only."""
        return not self._data.strip()


class MicroComment(MicroDataNode):
    node_type = EMicroNodeType.COMMENT

    @property
    def node_name(self) -> str:
        return "#comment"


class MicroCDATA(MicroDataNode):
    node_type = EMicroNodeType.CDATA

    @property
    def node_name(self) -> str:
        return "#cdata-section"


class MicroNodeWithChildren(MicroNode):
    """Node owning an ordered sequence of child nodes."""

    def __init__(self) -> None:
        super().__init__()
        self._children: List[MicroNode] = []

    def _check_insertable(self, child: MicroNode) -> None:
        if not isinstance(child, MicroNode):
            raise TypeError("Child must be a MicroNode instance")
        if child.node_type is EMicroNodeType.DOCUMENT:
            raise ValueError("A document cannot be a child node")
        ancestor: Optional[MicroNode] = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("Cannot append a node to itself or its descendants")
            ancestor = ancestor.parent

    def _adopt(self, child: MicroNode) -> None:
        if child.parent is not None:
            child.parent.remove_child(child)
        child._parent = self

    def append_child(self, child: MicroNode) -> MicroNode:
        """Append ``child`` (moving it if attached elsewhere) and return it."""
        self._check_insertable(child)
        self._adopt(child)
        self._children.append(child)
        return child

    def insert_child_at(self, index: int, child: MicroNode) -> MicroNode:
        """Insert ``child`` so that it ends up at position ``index``."""
        self._check_insertable(child)
        if not (0 <= index <= len(self._children)):
            raise IndexError("Child index out of range")
        if child.parent is self and self._index_of(child) < index:
            index -= 1
        self._adopt(child)
        self._children.insert(index, child)
        return child

    def insert_before(self, child: MicroNode, successor: MicroNode) -> MicroNode:
        """Insert ``child`` directly before the existing child ``successor``."""
        self._check_insertable(child)
        self._index_of(successor)
        if child is successor:
            return child
        self._adopt(child)
        self._children.insert(self._index_of(successor), child)
        return child

    def insert_after(self, child: MicroNode, predecessor: MicroNode) -> MicroNode:
        """Insert ``child`` directly after the existing child ``predecessor``."""
        self._check_insertable(child)
        self._index_of(predecessor)
        if child is predecessor:
            return child
        self._adopt(child)
        self._children.insert(self._index_of(predecessor) + 1, child)
        return child

    def _index_of(self, child: MicroNode) -> int:
        for index, existing in enumerate(self._children):
            if existing is child:
                return index
        raise ValueError("Node is not a child of this node")

    def remove_child(self, child: MicroNode) -> EChange:
        """Detach ``child``; UNCHANGED if it is not a direct child."""
        for index, existing in enumerate(self._children):
            if existing is child:
                return self.remove_child_at(index)
        return EChange.UNCHANGED

    def remove_child_at(self, index: int) -> EChange:
        """Detach the child at ``index``; UNCHANGED for an invalid index."""
        if not (0 <= index < len(self._children)):
            return EChange.UNCHANGED
        child = self._children.pop(index)
        child._parent = None
        return EChange.CHANGED

    def remove_all_children(self) -> EChange:
        """Detach every child."""
        if not self._children:
            return EChange.UNCHANGED
        for child in self._children:
            child._parent = None
        self._children.clear()
        return EChange.CHANGED

    def replace_child(self, old_child: MicroNode, new_child: MicroNode) -> EChange:
        """Put ``new_child`` at the position of ``old_child`` and detach the latter."""
        if old_child is new_child:
            return EChange.UNCHANGED
        self._check_insertable(new_child)
        index = self._index_of(old_child)
        self._adopt(new_child)
        index = self._index_of(old_child)
        self._children[index] = new_child
        old_child._parent = None
        return EChange.CHANGED

    @property
    def children(self) -> List[MicroNode]:
        """Copy of the direct child sequence."""
        return list(self._children)

    def iter_children(self) -> Iterator[MicroNode]:
        """Iterate over a snapshot of the direct children."""
        return iter(list(self._children))

    def get_child_count(self) -> int:
        return len(self._children)

    def has_children(self) -> bool:
        return bool(self._children)

    def get_child_at(self, index: int) -> Optional[MicroNode]:
        """Direct child at ``index``, or None when out of range."""
        if 0 <= index < len(self._children):
            return self._children[index]
        return None

    def get_first_child(self) -> Optional[MicroNode]:
        return self.get_child_at(0)

    def get_last_child(self) -> Optional[MicroNode]:
        return self.get_child_at(len(self._children) - 1)

    def get_text_content(self) -> str:
        """Concatenated text and CDATA of all descendants."""
        return "".join(
            node.data  # type: ignore[attr-defined]
            for node in iter_descendants(self)
            if node.node_type in (EMicroNodeType.TEXT, EMicroNodeType.CDATA)
        )

    def _clone_children_into(self, clone: "MicroNodeWithChildren") -> None:
        for child in self._children:
            clone.append_child(child.get_clone())

    def is_equal_content(self, other: Optional[MicroNode]) -> bool:
        if not super().is_equal_content(other):
            return False
        other_children = other._children  # type: ignore[union-attr]
        return len(self._children) == len(other_children) and all(
            mine.is_equal_content(theirs)
            for mine, theirs in zip(self._children, other_children)
        )

    # Child element queries; containers are transparent

    def iter_child_elements(self) -> Iterator["MicroElement"]:
        """Child elements in order, looking through containers."""
        for child in list(self._children):
            if child.node_type is EMicroNodeType.ELEMENT:
                yield child  # type: ignore[misc]
            elif child.node_type is EMicroNodeType.CONTAINER:
                yield from child.iter_child_elements()  # type: ignore[attr-defined]

    def get_all_child_elements(
        self, element_filter: Optional[Callable[["MicroElement"], bool]] = None
    ) -> List["MicroElement"]:
        """Child elements accepted by ``element_filter`` (all when None)."""
        return [
            element for element in self.iter_child_elements()
            if element_filter is None or element_filter(element)
        ]

    def get_first_child_element(
        self, element_filter: Optional[Callable[["MicroElement"], bool]] = None
    ) -> Optional["MicroElement"]:
        """First child element accepted by ``element_filter``, or None."""
        for element in self.iter_child_elements():
            if element_filter is None or element_filter(element):
                return element
        return None


class MicroContainer(MicroNodeWithChildren):
    """Tagless grouping node, invisible to element queries and serialization."""

    node_type = EMicroNodeType.CONTAINER

    @property
    def node_name(self) -> str:
        return "#container"

    def get_clone(self) -> "MicroContainer":
        clone = MicroContainer()
        self._clone_children_into(clone)
        return clone

    def __repr__(self) -> str:
        return f"MicroContainer(children={len(self._children)})"


class MicroDocument(MicroNodeWithChildren):
    """Root of a micro DOM tree; holds at most one document element."""

    node_type = EMicroNodeType.DOCUMENT

    def __init__(self, standalone: Optional[bool] = None) -> None:
        super().__init__()
        self.standalone = standalone

    @property
    def node_name(self) -> str:
        return "#document"

    def _check_insertable(self, child: MicroNode) -> None:
        super()._check_insertable(child)
        if child.node_type in (EMicroNodeType.TEXT, EMicroNodeType.CDATA):
            raise ValueError("A document cannot contain character data")
        if child.node_type is EMicroNodeType.CONTAINER:
            raise ValueError("A document cannot contain containers")
        if child.node_type is EMicroNodeType.ELEMENT:
            existing = self.get_document_element()
            if existing is not None and existing is not child:
                raise ValueError("A document can only have one document element")

    def get_document_element(self) -> Optional["MicroElement"]:
        """The root element, or None for an empty document."""
        return self.get_first_child_element()

    def append_element(self, tag_name: str,
                       namespace_uri: Optional[str] = None) -> "MicroElement":
        """Create and append the document element."""
        from typed_microdom.microdom.element import MicroElement

        element = MicroElement(tag_name, namespace_uri)
        self.append_child(element)
        return element

    def append_comment(self, data: str) -> MicroComment:
        """Create and append a document level comment."""
        comment = MicroComment(data)
        self.append_child(comment)
        return comment

    def get_clone(self) -> "MicroDocument":
        clone = MicroDocument(self.standalone)
        self._clone_children_into(clone)
        return clone

    def is_equal_content(self, other: Optional[MicroNode]) -> bool:
        return (
            super().is_equal_content(other)
            and self.standalone == other.standalone  # type: ignore[union-attr]
        )

    def __repr__(self) -> str:
        root = self.get_document_element()
        return f"MicroDocument(root={root.tag_name if root else None!r})"


def iter_descendants(node: MicroNode) -> Iterator[MicroNode]:
    """All nodes below ``node`` in document order (depth-first, pre-order).

    ``node`` itself is not included. Containers are yielded like any other
    node, followed by their children.
    """
    if not isinstance(node, MicroNodeWithChildren):
        return
    stack: List[Iterator[MicroNode]] = [node.iter_children()]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        yield child
        if isinstance(child, MicroNodeWithChildren):
            stack.append(child.iter_children())
