"""Gene window resolution and sequence fetching."""

import logging

from genenav.api.genome_api import GenomeDataSource
from genenav.core.errors import GeneLoadError, SequenceLoadError
from genenav.core.requests import RequestTracker
from genenav.models.gene import GeneDetailsResult
from genenav.models.sequence import SequenceWindow

logger = logging.getLogger(__name__)


class SequenceWindowFetcher:
    """Loads gene details and sequence windows, committing only the latest window.

    ``window`` holds the last committed sequence together with the range the
    provider actually returned. Windows are never validated here; callers run
    the range validator first where user input is involved.
    """

    def __init__(self, source: GenomeDataSource):
        self.source = source
        self.window: SequenceWindow | None = None
        self._requests = RequestTracker()

    async def load_initial_window(self, gene_id: str) -> GeneDetailsResult:
        """Fetch gene details, bounds and the suggested initial range.

        Raises:
            GeneLoadError: If the details cannot be fetched
        """
        try:
            result = await self.source.get_gene_details(gene_id)
        except Exception as e:
            logger.warning(f"Gene details request failed for {gene_id}: {e}")
            raise GeneLoadError() from e

        logger.debug(
            f"Gene {gene_id} bounds {result.bounds.lo}-{result.bounds.hi}, "
            f"initial range {result.initial_range}"
        )
        return result

    async def load_window(
        self,
        chromosome: str,
        start: int,
        end: int,
        assembly_id: str,
    ) -> SequenceWindow | None:
        """Fetch a sequence window and commit it if still the latest request.

        Returns:
            The committed window, or None when a newer request superseded this one

        Raises:
            SequenceLoadError: If this (latest) request failed
        """
        token = self._requests.begin()
        logger.debug(f"Sequence request #{token}: {chromosome}:{start}-{end} ({assembly_id})")

        try:
            response = await self.source.get_sequence(chromosome, start, end, assembly_id)
        except Exception as e:
            if not self._requests.is_latest(token):
                logger.debug(f"Ignoring failure of superseded sequence request #{token}: {e}")
                return None
            logger.warning(f"Sequence request failed for {chromosome}:{start}-{end}: {e}")
            raise SequenceLoadError() from e

        if not self._requests.is_latest(token):
            logger.debug(f"Discarding superseded sequence response #{token}")
            return None

        window = SequenceWindow(
            sequence=response.sequence,
            actual_range=response.actual_range,
            chromosome=chromosome,
            assembly_id=assembly_id,
            warning=response.error or None,
        )
        self.window = window
        if window.warning:
            logger.info(f"Sequence provider warning for {chromosome}:{start}-{end}: {window.warning}")
        return window

    def supersede(self) -> None:
        """Drop in-flight requests but keep the committed window."""
        self._requests.invalidate()

    def reset(self) -> None:
        """Drop the committed window and supersede in-flight requests."""
        self._requests.invalidate()
        self.window = None
