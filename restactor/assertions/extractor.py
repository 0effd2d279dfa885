"""
Single-assignment value capture for assertion chains.

A chain is assert-only by default. Calling ``extract()`` on the response
asserter (or on one of its body assertors) arms the shared ``ExtractorSlot``
and the first value evaluated afterwards is handed back to the caller of
``expect()``.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from ..exceptions import AlreadyExtractedError


T = TypeVar("T")


class ValueExtractor:
    """Value holder which can be written only once."""

    def __init__(self) -> None:
        self._value: Any = None
        self._extracted = False

    def set_value(self, value: Any) -> None:
        if self._extracted:
            raise AlreadyExtractedError("This ValueExtractor already contains a value!")
        self._value = value
        self._extracted = True

    def get_value(self) -> Optional[Any]:
        return self._value

    def is_extracted(self) -> bool:
        return self._extracted


class ExtractorSlot:
    """
    Mutable single-slot reference shared by every assertor of one chain.

    ``capture()`` never raises: once the armed extractor holds a value, later
    captures are ignored so the first evaluated value wins.
    """

    def __init__(self) -> None:
        self._extractor: Optional[ValueExtractor] = None

    def arm(self) -> None:
        """Install a fresh extractor, discarding any previous one."""
        self._extractor = ValueExtractor()

    def is_armed(self) -> bool:
        return self._extractor is not None

    def capture(self, value: T) -> T:
        extractor = self._extractor
        if extractor is not None and not extractor.is_extracted():
            extractor.set_value(value)
        return value

    @property
    def value(self) -> Optional[Any]:
        if self._extractor is None:
            return None
        return self._extractor.get_value()


__all__ = [
    "ValueExtractor",
    "ExtractorSlot",
]
