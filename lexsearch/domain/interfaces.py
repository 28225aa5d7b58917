# lexsearch/domain/interfaces.py

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from .models import FormattedDocumentModel, PaginatedLayout, RunKind


class TextMeasurePort(ABC):
    """
    Port for any text-width measurement backend.
    Widths are returned in the layout's own unit (not necessarily points).
    """

    @abstractmethod
    def measure(self, text: str, kind: RunKind, font_size: float) -> float: ...


class ExportSinkPort(ABC):
    """
    Port for a sink that serializes a rendered model into a concrete container.
    """

    extension: str

    @abstractmethod
    def export(
        self,
        rendered: Union[FormattedDocumentModel, PaginatedLayout],
        destination: Path,
    ) -> Path:
        """
        Write the rendered model to `destination` (a file path) and return it.
        """
        ...

    @abstractmethod
    def to_bytes(self, rendered: Union[FormattedDocumentModel, PaginatedLayout]) -> bytes: ...
