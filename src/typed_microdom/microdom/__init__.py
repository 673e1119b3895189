"""Lightweight mutable XML object model.

Key Components:
    MicroDocument / MicroElement: Tree nodes with namespace aware attributes
    MicroContainer: Tagless grouping node, transparent to element queries
    MicroDomBuilder: Construction contract and lxml parser target
    MicroWriter: Serialization through lxml
"""

from .errors import (
    MicroDomError,
    MicroDomReadError,
)
from .qname import (
    MicroQName,
    QNameLike,
)
from .attributes import (
    MicroAttribute,
    MicroAttributeMap,
)
from .nodes import (
    EMicroNodeType,
    MicroCDATA,
    MicroComment,
    MicroContainer,
    MicroDataNode,
    MicroDocument,
    MicroNode,
    MicroNodeWithChildren,
    MicroText,
    iter_descendants,
)
from .filters import (
    ElementFilter,
    filter_attribute,
    filter_name,
    filter_namespace_uri,
    filter_namespace_uri_and_name,
)
from .element import MicroElement
from .builder import (
    MicroDomBuilder,
    read_micro_dom_from_bytes,
    read_micro_dom_from_file,
    read_micro_dom_from_string,
)
from .writer import (
    MicroWriter,
    write_micro_dom_to_bytes,
    write_micro_dom_to_string,
)

__all__ = [
    "MicroDomError",
    "MicroDomReadError",
    "MicroQName",
    "QNameLike",
    "MicroAttribute",
    "MicroAttributeMap",
    "EMicroNodeType",
    "MicroCDATA",
    "MicroComment",
    "MicroContainer",
    "MicroDataNode",
    "MicroDocument",
    "MicroNode",
    "MicroNodeWithChildren",
    "MicroText",
    "iter_descendants",
    "ElementFilter",
    "filter_attribute",
    "filter_name",
    "filter_namespace_uri",
    "filter_namespace_uri_and_name",
    "MicroElement",
    "MicroDomBuilder",
    "read_micro_dom_from_bytes",
    "read_micro_dom_from_file",
    "read_micro_dom_from_string",
    "MicroWriter",
    "write_micro_dom_to_bytes",
    "write_micro_dom_to_string",
]
