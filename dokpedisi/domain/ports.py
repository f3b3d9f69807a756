"""Ports - interfaces of external collaborators (ABC)

Each adapter inherits one of these ABCs, so a missing method is caught
when the adapter is instantiated rather than when it is first called.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dokpedisi.domain.models import ExpeditionUpdate


class SheetRowSource(ABC):
    """Source of raw agenda rows (Google Sheets API, CSV export, ...)"""

    @abstractmethod
    def fetch_rows(self) -> list[list[str]]:
        """
        Return the data rows of the agenda sheet, in sheet order.

        The header row is not included. Blank rows between data rows are
        kept (as empty or all-blank lists) so that the position of a row
        in the result gives its sheet row number.

        Raises:
            ExternalFetchError: the fetch failed or timed out
        """
        pass


class ExpeditionWriter(ABC):
    """Persistence of a new expedition (written back into the sheet)"""

    @abstractmethod
    def write(self, update: ExpeditionUpdate) -> None:
        """
        Persist the derived fields of one document.

        Raises:
            ExternalWriteError: the write failed
        """
        pass


class SignatureStorage(ABC):
    """Storage of captured signature images"""

    @abstractmethod
    def store(self, image: str) -> str:
        """
        Store an inline-encoded image (data URL) and return an opaque
        signature reference (URL or inline data).
        """
        pass
