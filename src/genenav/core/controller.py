"""Gene context controller.

ARCHITECTURE:
    select_gene → reset → gene details/bounds → (sequence window ‖ ClinVar set)
    request_window → validate → sequence window
    record_effect_prediction → point update of the ClinVar set
    select_for_comparison → comparison selector (by ClinVar ID)

Key Design:
- Sole writer of the gene context; consumers read NavigationSnapshot copies
- One loading/error slot per data source (gene, sequence, ClinVar)
- Latest request wins per slot; stale responses are dropped silently
- Sequence and ClinVar loads run concurrently (asyncio.gather) and fail independently
- No error escapes an entry point; failures become slot messages
"""

import asyncio
import logging
from dataclasses import dataclass

from genenav.api.genome_api import GenomeDataSource
from genenav.core.comparison import ComparisonSelector
from genenav.core.errors import ClinvarLoadError, GeneLoadError, MissingIdentifier, SequenceLoadError
from genenav.core.requests import RequestTracker
from genenav.core.sequence import SequenceWindowFetcher
from genenav.core.validation import MAX_VIEW_RANGE, RangeValidationError, validate_window
from genenav.core.variants import VariantSetSynchronizer
from genenav.models.gene import AssemblyContext, Gene, GeneBounds, GeneDetail
from genenav.models.snapshot import NavigationSnapshot, SlotView
from genenav.models.variant import ClinvarVariant, EffectPrediction

logger = logging.getLogger(__name__)


@dataclass
class SlotStatus:
    loading: bool = False
    error: str | None = None

    def view(self) -> SlotView:
        return SlotView(loading=self.loading, error=self.error)


class GeneContextController:
    """Owns the state of the currently selected gene and assembly."""

    def __init__(self, source: GenomeDataSource, max_view_range: int = MAX_VIEW_RANGE):
        self.source = source
        self.max_view_range = max_view_range
        self.sequence_fetcher = SequenceWindowFetcher(source)
        self.variant_set = VariantSetSynchronizer(source)
        self.comparison = ComparisonSelector(self.variant_set.get)
        self._contexts = RequestTracker()

        self.gene: Gene | None = None
        self.assembly_id: str | None = None
        self.gene_detail: GeneDetail | None = None
        self.gene_bounds: GeneBounds | None = None
        self.start_position = ""
        self.end_position = ""
        self.active_position: int | None = None

        self.gene_status = SlotStatus()
        self.sequence_status = SlotStatus()
        self.clinvar_status = SlotStatus()

    @property
    def context(self) -> AssemblyContext | None:
        if self.gene is None or self.assembly_id is None:
            return None
        return AssemblyContext(assembly_id=self.assembly_id, chromosome=self.gene.chrom)

    def snapshot(self) -> NavigationSnapshot:
        """Immutable copy of the current state for the presentation layer."""
        window = self.sequence_fetcher.window
        return NavigationSnapshot(
            gene=self.gene,
            assembly_id=self.assembly_id,
            gene_detail=self.gene_detail,
            gene_bounds=self.gene_bounds,
            start_position=self.start_position,
            end_position=self.end_position,
            sequence=window.sequence if window else "",
            actual_range=window.actual_range if window else None,
            sequence_warning=window.warning if window else None,
            active_position=self.active_position,
            active_reference=window.base_at(self.active_position) if window and self.active_position is not None else None,
            clinvar_variants=self.variant_set.variants,
            comparison_variant=self.comparison.current,
            gene_status=self.gene_status.view(),
            sequence_status=self.sequence_status.view(),
            clinvar_status=self.clinvar_status.view(),
            max_view_range=self.max_view_range,
        )

    def _reset(self, gene: Gene | None, assembly_id: str | None) -> int:
        """Clear every dependent slot and supersede all in-flight requests."""
        token = self._contexts.begin()
        self.gene = gene
        self.assembly_id = assembly_id
        self.gene_detail = None
        self.gene_bounds = None
        self.start_position = ""
        self.end_position = ""
        self.active_position = None
        self.sequence_fetcher.reset()
        self.variant_set.clear()
        self.comparison.clear()
        self.gene_status = SlotStatus()
        self.sequence_status = SlotStatus()
        self.clinvar_status = SlotStatus()
        return token

    async def select_gene(self, gene: Gene, assembly_id: str) -> NavigationSnapshot:
        """Switch to ``gene`` on ``assembly_id`` and run the initialization sequence."""
        context = self._reset(gene, assembly_id)
        logger.info(f"Selected {gene.symbol} ({gene.gene_id}) on {gene.chrom}, {assembly_id}")

        if not gene.gene_id:
            error = MissingIdentifier(gene.symbol)
            logger.warning(f"{gene.symbol}: {error}")
            self.gene_status = SlotStatus(error=str(error))
            return self.snapshot()

        self.gene_status = SlotStatus(loading=True)
        try:
            result = await self.sequence_fetcher.load_initial_window(gene.gene_id)
        except GeneLoadError as e:
            if self._contexts.is_latest(context):
                self.gene_status = SlotStatus(error=str(e))
            return self.snapshot()

        if not self._contexts.is_latest(context):
            logger.debug(f"Discarding gene details for {gene.symbol}: context changed")
            return self.snapshot()

        self.gene_detail = result.detail
        self.gene_bounds = result.bounds
        self.gene_status = SlotStatus()

        loads = []
        if result.initial_range is not None:
            self.start_position = str(result.initial_range.start)
            self.end_position = str(result.initial_range.end)
            loads.append(self._load_sequence(result.initial_range.start, result.initial_range.end))
        loads.append(self._load_variants())
        await asyncio.gather(*loads)

        return self.snapshot()

    async def change_assembly(self, assembly_id: str) -> NavigationSnapshot:
        """Switch assembly, which resets the whole gene context."""
        if self.gene is None:
            self._reset(None, assembly_id)
            return self.snapshot()
        return await self.select_gene(self.gene, assembly_id)

    async def request_window(self, start: int | str, end: int | str) -> NavigationSnapshot:
        """Validate a user-entered window and load its sequence.

        Validation failures are reported in the sequence slot before any fetch
        is issued; they also supersede an older window request still in flight.
        A gene whose details failed to load (or that has no gene ID) gets no
        window at all until another gene is selected.
        """
        self.start_position = str(start).strip()
        self.end_position = str(end).strip()

        if self.gene is None:
            self.sequence_status = SlotStatus(error="Select a gene before loading a sequence")
            return self.snapshot()

        if not self.gene.gene_id or self.gene_status.error:
            # gene context failed to load; nothing may be fetched for it
            error = self.gene_status.error or str(MissingIdentifier(self.gene.symbol))
            logger.debug(f"Rejected window {start}-{end} for {self.gene.symbol}: {error}")
            self.sequence_status = SlotStatus(error=error)
            return self.snapshot()

        try:
            window = validate_window(start, end, self.gene_bounds, self.max_view_range)
        except RangeValidationError as e:
            logger.debug(f"Rejected window {start}-{end}: {e}")
            self.sequence_fetcher.supersede()
            self.sequence_status = SlotStatus(error=str(e))
            return self.snapshot()

        await self._load_sequence(window.start, window.end)
        return self.snapshot()

    async def _load_sequence(self, start: int, end: int) -> None:
        gene, assembly_id = self.gene, self.assembly_id
        self.sequence_status = SlotStatus(loading=True)
        try:
            window = await self.sequence_fetcher.load_window(gene.chrom, start, end, assembly_id)
        except SequenceLoadError as e:
            self.sequence_status = SlotStatus(error=str(e))
            return

        if window is not None:
            self.sequence_status = SlotStatus()

    async def refresh_variants(self) -> NavigationSnapshot:
        """Reload the ClinVar set for the current gene bounds."""
        if self.gene is None or self.gene_bounds is None:
            logger.debug("Ignoring ClinVar refresh: no gene bounds yet")
            return self.snapshot()
        await self._load_variants(refresh=self.variant_set.last_query is not None)
        return self.snapshot()

    async def _load_variants(self, refresh: bool = False) -> None:
        self.clinvar_status = SlotStatus(loading=True)
        try:
            if refresh:
                variants = await self.variant_set.refresh()
            else:
                variants = await self.variant_set.fetch_all(self.gene.chrom, self.gene_bounds, self.assembly_id)
        except ClinvarLoadError as e:
            self.clinvar_status = SlotStatus(error=str(e))
            return

        if variants is not None:
            self.clinvar_status = SlotStatus()
            self.comparison.reconcile()

    def record_effect_prediction(self, clinvar_id: str, result: EffectPrediction) -> NavigationSnapshot:
        """Attach a completed effect prediction to a variant of the current set."""
        variant = self.variant_set.get(clinvar_id)
        if variant is None:
            logger.debug(f"Dropping prediction for {clinvar_id}: not in the current set")
        else:
            self.variant_set.update_one(clinvar_id, variant.with_prediction(result))
        return self.snapshot()

    def record_effect_error(self, clinvar_id: str, message: str) -> NavigationSnapshot:
        """Attach a failed prediction message to a variant of the current set."""
        variant = self.variant_set.get(clinvar_id)
        if variant is not None:
            self.variant_set.update_one(clinvar_id, variant.model_copy(update={"evo2_error": message}))
        return self.snapshot()

    def select_for_comparison(self, variant: ClinvarVariant | str | None) -> NavigationSnapshot:
        """Compare a variant of the current set; unscored variants are ignored."""
        if variant is None:
            self.comparison.clear()
            return self.snapshot()

        clinvar_id = variant if isinstance(variant, str) else variant.clinvar_id
        current = self.variant_set.get(clinvar_id)
        if current is None:
            logger.debug(f"Cannot compare {clinvar_id}: not in the current set")
        else:
            self.comparison.select(current)
        return self.snapshot()

    def clear_comparison(self) -> NavigationSnapshot:
        self.comparison.clear()
        return self.snapshot()

    def select_position(self, position: int | None) -> NavigationSnapshot:
        """Mark a genomic position of the loaded window (e.g. a clicked base)."""
        window = self.sequence_fetcher.window
        if position is not None and (window is None or window.base_at(position) is None):
            logger.debug(f"Position {position} is outside the loaded window")
            position = None
        self.active_position = position
        return self.snapshot()
