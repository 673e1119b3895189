"""Serialization of micro DOM trees through lxml.

The micro tree is converted into an ``lxml.etree`` tree which lxml then
serializes. Containers are spliced into their parent, text and CDATA become
``text``/``tail`` of the surrounding lxml elements.
"""

import os
from typing import IO, Optional, Union

from lxml import etree

from typed_microdom.microdom.element import MicroElement
from typed_microdom.microdom.nodes import (
    EMicroNodeType,
    MicroDocument,
    MicroNode,
    MicroNodeWithChildren,
    iter_descendants,
)
from typed_microdom.shared import ToolkitConfig, XMLWriterSettings

WriterSettingsLike = Union[XMLWriterSettings, ToolkitConfig, None]


def _has_unqualified_descendant(element: MicroElement) -> bool:
    return any(
        node.node_type is EMicroNodeType.ELEMENT and node.has_no_namespace_uri()  # type: ignore[attr-defined]
        for node in iter_descendants(element)
    )


def _clark(name: str, namespace_uri: Optional[str]) -> str:
    return f"{{{namespace_uri}}}{name}" if namespace_uri else name


class MicroWriter:
    """Writes micro documents and elements as XML."""

    def __init__(self, settings: WriterSettingsLike = None) -> None:
        if isinstance(settings, ToolkitConfig):
            settings = settings.writer
        self.settings = settings or XMLWriterSettings()

    def to_lxml(self, node: MicroNode) -> etree._ElementTree:
        """Build the lxml tree for a document or element."""
        if node.node_type is EMicroNodeType.DOCUMENT:
            return self._convert_document(node)  # type: ignore[arg-type]
        if node.node_type is EMicroNodeType.ELEMENT:
            return etree.ElementTree(self._convert_root_element(node))  # type: ignore[arg-type]
        raise ValueError(f"Cannot serialize a {node.node_name} node on its own")

    def write_to_bytes(self, node: MicroNode) -> bytes:
        tree = self.to_lxml(node)
        standalone = None
        if node.node_type is EMicroNodeType.DOCUMENT and self.settings.xml_declaration:
            standalone = node.standalone  # type: ignore[attr-defined]

        kwargs = {}
        if standalone is not None:
            kwargs["standalone"] = standalone
        return etree.tostring(
            tree,
            encoding=self.settings.encoding,
            xml_declaration=self.settings.xml_declaration,
            pretty_print=self.settings.indent,
            **kwargs,
        )

    def write_to_string(self, node: MicroNode) -> str:
        return self.write_to_bytes(node).decode(self.settings.encoding)

    def write_to_file(self, node: MicroNode,
                      target: Union[str, os.PathLike, IO[bytes]]) -> None:
        """Write to a path or a binary file object."""
        data = self.write_to_bytes(node)
        if hasattr(target, "write"):
            target.write(data)  # type: ignore[union-attr]
            return
        with open(target, "wb") as stream:
            stream.write(data)

    def _convert_document(self, document: MicroDocument) -> etree._ElementTree:
        root_element = document.get_document_element()
        if root_element is None:
            raise ValueError("Document has no document element")
        root = self._convert_root_element(root_element)

        emit_comments = self.settings.serialize_comments.is_emit
        before_root = True
        trailing = []
        for child in document.iter_children():
            if child is root_element:
                before_root = False
            elif child.node_type is EMicroNodeType.COMMENT and emit_comments:
                if before_root:
                    root.addprevious(etree.Comment(child.data))  # type: ignore[attr-defined]
                else:
                    trailing.append(etree.Comment(child.data))  # type: ignore[attr-defined]
        # addnext inserts directly after the root, so go backwards
        for comment in reversed(trailing):
            root.addnext(comment)
        return root.getroottree()

    def _convert_root_element(self, element: MicroElement) -> etree._Element:
        nsmap = None
        # Unqualified descendants cannot live under a default namespace
        if element.namespace_uri and not _has_unqualified_descendant(element):
            nsmap = {None: element.namespace_uri}
        root = etree.Element(_clark(element.tag_name, element.namespace_uri), nsmap=nsmap)
        self._fill_element(root, element)
        return root

    def _fill_element(self, target: etree._Element, element: MicroElement) -> None:
        element.for_all_attributes(
            lambda qname, value: target.set(qname.clark_notation, value)
        )
        self._convert_children(target, element, None)

    def _convert_children(self, target: etree._Element, node: MicroNodeWithChildren,
                          last: Optional[etree._Element]) -> Optional[etree._Element]:
        """Append the children of ``node`` to ``target``; return the last lxml child."""
        for child in node.iter_children():
            node_type = child.node_type
            if node_type is EMicroNodeType.CONTAINER:
                last = self._convert_children(target, child, last)  # type: ignore[arg-type]
            elif node_type is EMicroNodeType.ELEMENT:
                sub = etree.SubElement(
                    target, _clark(child.tag_name, child.namespace_uri)  # type: ignore[attr-defined]
                )
                self._fill_element(sub, child)  # type: ignore[arg-type]
                last = sub
            elif node_type is EMicroNodeType.TEXT:
                self._append_text(target, last, child.data)  # type: ignore[attr-defined]
            elif node_type is EMicroNodeType.CDATA:
                self._append_cdata(target, last, child.data)  # type: ignore[attr-defined]
            elif node_type is EMicroNodeType.COMMENT:
                if self.settings.serialize_comments.is_emit:
                    comment = etree.Comment(child.data)  # type: ignore[attr-defined]
                    target.append(comment)
                    last = comment
        return last

    @staticmethod
    def _append_text(target: etree._Element, last: Optional[etree._Element],
                     text: str) -> None:
        if not text:
            return
        if last is None:
            target.text = (target.text or "") + text
        else:
            last.tail = (last.tail or "") + text

    @classmethod
    def _append_cdata(cls, target: etree._Element, last: Optional[etree._Element],
                      data: str) -> None:
        # lxml only supports a single CDATA section as the leading text;
        # anywhere else the data is written as escaped text
        if last is None and target.text is None and data:
            target.text = etree.CDATA(data)
        else:
            cls._append_text(target, last, data)


def write_micro_dom_to_string(node: MicroNode,
                              settings: WriterSettingsLike = None) -> str:
    return MicroWriter(settings).write_to_string(node)


def write_micro_dom_to_bytes(node: MicroNode,
                             settings: WriterSettingsLike = None) -> bytes:
    return MicroWriter(settings).write_to_bytes(node)
