"""Base extractor interface."""

import abc
import logging
from typing import Any

from chronomap.config import IngestionConfig

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """A required data source could not be loaded or parsed at all."""


class BaseExtractor(abc.ABC):
    """Base class for source extractors.

    Extractors turn the text of one source into model objects. Rows that do
    not normalize are dropped and counted in ``rejected``; only a source that
    cannot be read as a whole raises IngestionError.
    """

    source_name = "source"

    def __init__(self, config: IngestionConfig | None = None) -> None:
        self.config = config or IngestionConfig()
        self.rejected = 0

    @abc.abstractmethod
    def extract(self, text: str) -> list[Any]:
        """Extract entities from the raw source text.

        Args:
            text: Full contents of the source.

        Returns:
            Accepted entities, sorted by timestamp.
        """
        ...

    def _reject(self, reason: str, position: int) -> None:
        self.rejected += 1
        logger.debug("Dropped %s row %d: %s", self.source_name, position, reason)
