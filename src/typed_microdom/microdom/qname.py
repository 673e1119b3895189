"""Namespace qualified names for micro DOM attributes."""

import functools
from dataclasses import dataclass
from typing import Optional, Tuple, Union


@functools.total_ordering
@dataclass(frozen=True)
class MicroQName:
    """Immutable (namespace URI, local name) pair.

    An empty namespace URI is normalized to ``None``, so ``MicroQName("a")``
    and ``MicroQName("a", "")`` are equal and hash alike.
    """

    name: str
    namespace_uri: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the local name and normalize the namespace."""
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Name cannot be empty")
        if not self.namespace_uri:
            object.__setattr__(self, "namespace_uri", None)

    @property
    def has_namespace_uri(self) -> bool:
        return self.namespace_uri is not None

    def _sort_key(self) -> Tuple[str, str]:
        return (self.namespace_uri or "", self.name)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MicroQName):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.clark_notation

    @property
    def clark_notation(self) -> str:
        """``{namespace}name`` form as used by ElementTree and lxml."""
        if self.namespace_uri is None:
            return self.name
        return f"{{{self.namespace_uri}}}{self.name}"

    @classmethod
    def from_clark(cls, value: str) -> "MicroQName":
        """Parse ``{namespace}name`` or a plain name."""
        if value.startswith("{"):
            namespace_uri, sep, name = value[1:].partition("}")
            if not sep:
                raise ValueError(f"Malformed qualified name: {value!r}")
            return cls(name, namespace_uri)
        return cls(value)

    @classmethod
    def of(cls, name: "QNameLike", namespace_uri: Optional[str] = None) -> "MicroQName":
        """Coerce a name or an existing qualified name.

        Passing a namespace together with a ``MicroQName`` is an error.
        """
        if isinstance(name, MicroQName):
            if namespace_uri:
                raise ValueError("Namespace URI given twice")
            return name
        return cls(name, namespace_uri)


QNameLike = Union[str, MicroQName]
