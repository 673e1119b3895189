"""Result indicators shared by the converter registry and the micro DOM.

Mutating operations report whether they had an effect through ``EChange``
instead of a plain boolean, and breakable iterations report whether they ran
to completion through ``EContinue``.
"""

from enum import Enum, auto


class EChange(Enum):
    """Outcome of a mutating operation."""

    CHANGED = auto()     # The operation modified the target
    UNCHANGED = auto()   # The operation was a no-op

    @classmethod
    def value_of(cls, changed: bool) -> "EChange":
        """Map a boolean onto the matching indicator."""
        return cls.CHANGED if changed else cls.UNCHANGED

    @property
    def is_changed(self) -> bool:
        """Check if the operation modified the target."""
        return self is EChange.CHANGED

    @property
    def is_unchanged(self) -> bool:
        """Check if the operation was a no-op."""
        return self is EChange.UNCHANGED

    def or_(self, other: "EChange") -> "EChange":
        """Combine two indicators; changed if either one is."""
        return EChange.value_of(self.is_changed or other.is_changed)


class EContinue(Enum):
    """Signal returned by breakable visitor callbacks."""

    CONTINUE = auto()
    BREAK = auto()

    @classmethod
    def value_of(cls, continue_: bool) -> "EContinue":
        """Map a boolean onto the matching indicator."""
        return cls.CONTINUE if continue_ else cls.BREAK

    @property
    def is_continue(self) -> bool:
        return self is EContinue.CONTINUE

    @property
    def is_break(self) -> bool:
        return self is EContinue.BREAK
