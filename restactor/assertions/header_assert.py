"""Response header assertions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .extractor import ExtractorSlot
from .value_assert import MapAssert, StringAssert


class HeaderAssert:
    """
    Assertions over response headers.

    Header names are matched case-insensitively by ``with_name``; ``all()``
    exposes the headers as a plain dict keyed by the names the server sent.
    """

    def __init__(self, softly: Any, headers: Dict[str, str], slot: ExtractorSlot) -> None:
        self._softly = softly
        self.actual = headers
        self._slot = slot

    def all(self) -> MapAssert:
        return MapAssert(self._softly, self._slot.capture(self.actual))

    def with_name(self, header: str) -> StringAssert:
        value = self._slot.capture(self._lookup(header))
        return StringAssert(self._softly, value, description=f"Header '{header}'")

    def extract(self) -> "HeaderAssert":
        self._slot.arm()
        return self

    def _lookup(self, header: str) -> Optional[str]:
        if header in self.actual:
            return self.actual[header]
        lowered = header.lower()
        for name, value in self.actual.items():
            if name.lower() == lowered:
                return value
        return None


__all__ = [
    "HeaderAssert",
]
