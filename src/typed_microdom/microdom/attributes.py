"""Attribute storage owned by a micro element."""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from typed_microdom.microdom.qname import MicroQName
from typed_microdom.shared import EChange


@dataclass(frozen=True)
class MicroAttribute:
    """A single attribute as exposed to callers."""

    qname: MicroQName
    value: str

    @property
    def name(self) -> str:
        """Local attribute name."""
        return self.qname.name

    @property
    def namespace_uri(self) -> Optional[str]:
        """Attribute namespace, None when unqualified."""
        return self.qname.namespace_uri


class MicroAttributeMap:
    """Ordered mapping from qualified name to string value.

    New names are appended, overwriting an existing name keeps its position.
    Setting an empty or ``None`` value removes the attribute.
    """

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: Dict[MicroQName, str] = {}

    def set(self, qname: MicroQName, value: Optional[str]) -> EChange:
        """Store ``value`` under ``qname``; an empty value removes the attribute."""
        if not value:
            return self.remove(qname)
        if self._values.get(qname) == value:
            return EChange.UNCHANGED
        self._values[qname] = value
        return EChange.CHANGED

    def get(self, qname: MicroQName) -> Optional[str]:
        """Value stored under ``qname``, or None."""
        return self._values.get(qname)

    def remove(self, qname: MicroQName) -> EChange:
        """Drop ``qname``; UNCHANGED if it was not present."""
        if self._values.pop(qname, None) is None:
            return EChange.UNCHANGED
        return EChange.CHANGED

    def clear(self) -> EChange:
        if not self._values:
            return EChange.UNCHANGED
        self._values.clear()
        return EChange.CHANGED

    def items(self) -> List[Tuple[MicroQName, str]]:
        """Snapshot of (qname, value) pairs in insertion order."""
        return list(self._values.items())

    def objects(self) -> List[MicroAttribute]:
        """Snapshot as ``MicroAttribute`` objects in insertion order."""
        return [MicroAttribute(qname, value) for qname, value in self._values.items()]

    def for_each(self, consumer: Callable[[MicroQName, str], None]) -> None:
        """Call ``consumer(qname, value)`` for each attribute; mutation inside is safe."""
        for qname, value in list(self._values.items()):
            consumer(qname, value)

    def copy(self) -> "MicroAttributeMap":
        clone = MicroAttributeMap()
        clone._values = dict(self._values)
        return clone

    def __contains__(self, qname: object) -> bool:
        return qname in self._values

    def __iter__(self) -> Iterator[MicroQName]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        # Attribute order is not significant for equality
        if not isinstance(other, MicroAttributeMap):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MicroAttributeMap({dict((str(k), v) for k, v in self._values.items())!r})"
