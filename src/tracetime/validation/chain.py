"""
tracetime — fluent value validation chain.

File: src/tracetime/validation/chain.py

Purpose
- Compose a handful of predicates against one value into a single boolean
  without nested conditionals.

Semantics
- A chain starts with verdict ``True``.
- Every predicate returns a new chain; once the verdict is ``False`` later
  predicates are skipped and the verdict stays ``False``.
- Predicates always inspect the original value and never raise.

Example
    >>> check(True).is_set().is_not_null().is_boolean().is_valid()
    True
    >>> check(1).is_boolean().is_true().is_valid()
    False
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final


class _Unset:
    """Marker type for a value that was never supplied."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final[_Unset] = _Unset()


@dataclass(frozen=True, slots=True)
class ValueChain:
    """Immutable accumulator of ``(value, verdict)`` for one subject."""

    value: object = UNSET
    verdict: bool = True

    def is_set(self) -> ValueChain:
        return self._then(lambda value: value is not UNSET)

    def is_not_null(self) -> ValueChain:
        return self._then(lambda value: value is not None)

    def is_boolean(self) -> ValueChain:
        """Strict type check: only ``True`` and ``False`` pass, never ``0``/``1``."""

        return self._then(lambda value: isinstance(value, bool))

    def is_true(self) -> ValueChain:
        return self._then(lambda value: value is True)

    def is_false(self) -> ValueChain:
        return self._then(lambda value: value is False)

    def is_valid(self) -> bool:
        """Return the verdict of every predicate applied so far."""

        return self.verdict

    def __bool__(self) -> bool:
        return self.is_valid()

    def _then(self, predicate: Callable[[object], bool]) -> ValueChain:
        if not self.verdict:
            return self
        return ValueChain(self.value, predicate(self.value))


def check(value: object = UNSET) -> ValueChain:
    """Start a validation chain for ``value``."""

    return ValueChain(value)


__all__ = ["UNSET", "ValueChain", "check"]
