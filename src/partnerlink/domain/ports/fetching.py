"""Ports for reading the external reference source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from partnerlink.domain.model import ReferenceSheet


@runtime_checkable
class ReferenceSheetReader(Protocol):
    """Produce the resolved rows of one reference spreadsheet tab.

    Implementations own header detection and column resolution and raise
    ``ReferenceSheetError`` when the source cannot be read.
    """

    def read(self) -> ReferenceSheet: ...
