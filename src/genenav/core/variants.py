"""In-memory ClinVar variant set for the current gene."""

import logging
from dataclasses import dataclass

from genenav.api.genome_api import GenomeDataSource
from genenav.core.errors import ClinvarLoadError
from genenav.core.requests import RequestTracker
from genenav.models.gene import GeneBounds
from genenav.models.variant import ClinvarVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantQuery:
    chromosome: str
    bounds: GeneBounds
    assembly_id: str


class VariantSetSynchronizer:
    """Keeps the gene-scoped ClinVar set in sync with fetches and point updates.

    Point updates replace by ``clinvar_id`` and never insert. A full fetch
    always replaces the whole set.
    """

    def __init__(self, source: GenomeDataSource):
        self.source = source
        self._variants: list[ClinvarVariant] = []
        self._last_query: VariantQuery | None = None
        self._requests = RequestTracker()

    @property
    def variants(self) -> tuple[ClinvarVariant, ...]:
        return tuple(self._variants)

    @property
    def last_query(self) -> VariantQuery | None:
        return self._last_query

    def get(self, clinvar_id: str) -> ClinvarVariant | None:
        for variant in self._variants:
            if variant.clinvar_id == clinvar_id:
                return variant
        return None

    async def fetch_all(
        self,
        chromosome: str,
        bounds: GeneBounds | None,
        assembly_id: str,
    ) -> list[ClinvarVariant] | None:
        """Fetch variants overlapping ``bounds`` and replace the set.

        Returns:
            The new set, or None when a newer fetch superseded this one

        Raises:
            ValueError: If called without bounds
            ClinvarLoadError: If this (latest) fetch failed; the previous set is kept
        """
        if bounds is None:
            raise ValueError("fetch_all requires gene bounds")

        self._last_query = VariantQuery(chromosome, bounds, assembly_id)
        token = self._requests.begin()

        try:
            fetched = await self.source.get_clinvar_variants(chromosome, bounds, assembly_id)
        except Exception as e:
            if not self._requests.is_latest(token):
                logger.debug(f"Ignoring failure of superseded ClinVar fetch #{token}: {e}")
                return None
            logger.warning(f"ClinVar fetch failed for {chromosome}:{bounds.lo}-{bounds.hi}: {e}")
            raise ClinvarLoadError() from e

        if not self._requests.is_latest(token):
            logger.debug(f"Discarding superseded ClinVar response #{token}")
            return None

        self._variants = list(fetched)
        return list(self._variants)

    def update_one(self, clinvar_id: str, updated: ClinvarVariant) -> None:
        """Replace the variant with ``clinvar_id`` in place; no-op if absent."""
        for i, variant in enumerate(self._variants):
            if variant.clinvar_id == clinvar_id:
                self._variants[i] = updated
                return
        logger.debug(f"Ignoring update for unknown ClinVar variant {clinvar_id}")

    async def refresh(self) -> list[ClinvarVariant] | None:
        """Re-run the last fetch with the same parameters."""
        if self._last_query is None:
            raise RuntimeError("refresh() called before fetch_all()")
        query = self._last_query
        return await self.fetch_all(query.chromosome, query.bounds, query.assembly_id)

    def clear(self) -> None:
        """Empty the set, forget the last query and supersede in-flight fetches."""
        self._requests.invalidate()
        self._variants = []
        self._last_query = None
