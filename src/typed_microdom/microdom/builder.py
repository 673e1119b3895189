"""Building micro DOM trees.

``MicroDomBuilder`` is the construction contract: a reader calls
``create_*``/``append_child``/``set_attribute`` in encounter order. The same
object doubles as an lxml parser target, so ``read_micro_dom_*`` simply
feeds input into an ``lxml.etree.XMLParser`` and lets lxml drive it.
"""

import os
from typing import IO, Dict, List, Optional, Union

from lxml import etree

from typed_microdom.microdom.element import MicroElement
from typed_microdom.microdom.errors import MicroDomReadError
from typed_microdom.microdom.nodes import (
    MicroCDATA,
    MicroComment,
    MicroDocument,
    MicroNode,
    MicroNodeWithChildren,
    MicroText,
)
from typed_microdom.microdom.qname import MicroQName
from typed_microdom.shared import ToolkitConfig, XMLReaderSettings, get_logger

_READ_CHUNK_SIZE = 64 * 1024

ReaderSettingsLike = Union[XMLReaderSettings, ToolkitConfig, None]


class MicroDomBuilder:
    """Event driven micro DOM construction.

    The factory methods create detached nodes; the parser target methods
    (``start``, ``end``, ``data``, ``comment``, ``close``) maintain an open
    element stack and attach nodes as they arrive.
    """

    def __init__(
        self,
        settings: ReaderSettingsLike = None,
        correlation_id: Optional[str] = None
    ) -> None:
        if isinstance(settings, ToolkitConfig):
            settings = settings.reader
        self.settings = settings or XMLReaderSettings()
        self._logger = get_logger(__name__, correlation_id, "micro_dom_builder")
        self.reset()

    def reset(self) -> None:
        """Discard any partially built document."""
        self._document = MicroDocument()
        self._stack: List[MicroNodeWithChildren] = [self._document]
        self._text_parts: List[str] = []
        self._element_count = 0

    # Construction contract

    @staticmethod
    def create_element(tag_name: str, namespace_uri: Optional[str] = None) -> MicroElement:
        return MicroElement(tag_name, namespace_uri)

    @staticmethod
    def create_text(text: str) -> MicroText:
        return MicroText(text)

    @staticmethod
    def create_comment(data: str) -> MicroComment:
        return MicroComment(data)

    @staticmethod
    def create_cdata(data: str) -> MicroCDATA:
        return MicroCDATA(data)

    @staticmethod
    def append_child(parent: MicroNodeWithChildren, child: MicroNode) -> MicroNode:
        return parent.append_child(child)

    @staticmethod
    def set_attribute(element: MicroElement, name: str, value: Optional[str],
                      namespace_uri: Optional[str] = None) -> None:
        element.set_attribute(name, value, namespace_uri)

    @property
    def document(self) -> MicroDocument:
        return self._document

    # lxml parser target interface

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._flush_text()
        if len(self._stack) > self.settings.max_depth:
            raise MicroDomReadError(
                f"Maximum element depth of {self.settings.max_depth} exceeded"
            )
        qname = MicroQName.from_clark(tag)
        element = self.create_element(qname.name, qname.namespace_uri)
        for attr_name, attr_value in attrib.items():
            attr_qname = MicroQName.from_clark(attr_name)
            self.set_attribute(element, attr_qname.name, attr_value, attr_qname.namespace_uri)
        self.append_child(self._stack[-1], element)
        self._stack.append(element)
        self._element_count += 1

    def end(self, tag: str) -> None:
        self._flush_text()
        if len(self._stack) <= 1:
            raise MicroDomReadError(f"Unexpected end tag {tag!r}")
        self._stack.pop()

    def data(self, data: str) -> None:
        # Character data may arrive in several chunks
        self._text_parts.append(data)

    def comment(self, text: str) -> None:
        self._flush_text()
        if self.settings.keep_comments:
            self.append_child(self._stack[-1], self.create_comment(text))

    def pi(self, target: str, data: Optional[str] = None) -> None:
        # Processing instructions are not represented
        self._flush_text()

    def close(self) -> MicroDocument:
        """Finish the document and reset the builder.

        lxml also calls this after a parse error, so it must not raise;
        unclosed elements simply stay part of the returned tree.
        """
        self._flush_text()
        document = self._document
        open_elements = len(self._stack) - 1
        self._logger.debug(
            f"Built micro DOM with {self._element_count} elements",
            extra={"element_count": self._element_count,
                   "open_elements": open_elements},
        )
        self.reset()
        return document

    def _flush_text(self) -> None:
        if not self._text_parts:
            return
        text = "".join(self._text_parts)
        self._text_parts = []
        parent = self._stack[-1]
        if parent is self._document:
            return
        if self.settings.remove_blank_text and not text.strip():
            return
        self.append_child(parent, self.create_text(text))


def _create_parser(builder: MicroDomBuilder,
                   encoding: Optional[str] = None) -> etree.XMLParser:
    settings = builder.settings
    return etree.XMLParser(
        target=builder,
        encoding=encoding,
        remove_comments=not settings.keep_comments,
        resolve_entities=settings.resolve_entities,
        huge_tree=settings.huge_tree,
        no_network=True,
    )


def _feed(builder: MicroDomBuilder, parser: etree.XMLParser,
          chunks: List[bytes]) -> MicroDocument:
    try:
        for chunk in chunks:
            parser.feed(chunk)
        return parser.close()
    except etree.XMLSyntaxError as e:
        builder.reset()
        line, column = e.position if e.position else (None, None)
        raise MicroDomReadError(f"Malformed XML: {e.msg}", line, column) from e


def read_micro_dom_from_bytes(
    data: bytes,
    settings: ReaderSettingsLike = None,
    correlation_id: Optional[str] = None
) -> MicroDocument:
    """Parse XML bytes; the encoding declaration of the document applies."""
    builder = MicroDomBuilder(settings, correlation_id)
    return _feed(builder, _create_parser(builder), [data])


def read_micro_dom_from_string(
    text: str,
    settings: ReaderSettingsLike = None,
    correlation_id: Optional[str] = None
) -> MicroDocument:
    """Parse XML text; any encoding declaration in ``text`` is ignored."""
    builder = MicroDomBuilder(settings, correlation_id)
    parser = _create_parser(builder, encoding="utf-8")
    return _feed(builder, parser, [text.encode("utf-8")])


def read_micro_dom_from_file(
    source: Union[str, os.PathLike, IO[bytes]],
    settings: ReaderSettingsLike = None,
    correlation_id: Optional[str] = None
) -> MicroDocument:
    """Parse XML from a path or a binary file object."""
    builder = MicroDomBuilder(settings, correlation_id)
    parser = _create_parser(builder)

    if hasattr(source, "read"):
        chunks = list(iter(lambda: source.read(_READ_CHUNK_SIZE), b""))  # type: ignore[union-attr]
        return _feed(builder, parser, chunks)

    try:
        with open(source, "rb") as stream:
            chunks = list(iter(lambda: stream.read(_READ_CHUNK_SIZE), b""))
    except OSError as e:
        raise MicroDomReadError(f"Cannot read {os.fspath(source)}: {e}") from e
    return _feed(builder, parser, chunks)
