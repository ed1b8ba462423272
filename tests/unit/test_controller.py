"""Tests for GeneContextController."""

import asyncio

import httpx
import pytest

from genenav.core.comparison import ComparisonState
from genenav.core.controller import GeneContextController
from genenav.models.gene import Gene, GenomicRange
from genenav.models.sequence import SequenceWindow


@pytest.fixture
def controller(source):
    return GeneContextController(source)


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


class TestSelectGene:
    @pytest.mark.asyncio
    async def test_brca1_end_to_end(self, controller, source, brca1_gene, prediction_factory):
        snapshot = await controller.select_gene(brca1_gene, "hg38")

        assert snapshot.gene_bounds.lo == 43044295
        assert snapshot.gene_bounds.hi == 43170245
        assert snapshot.start_position == "43044295"
        assert snapshot.end_position == "43047000"
        assert ("get_sequence", "chr17", 43044295, 43047000, "hg38") in source.calls
        assert snapshot.actual_range == GenomicRange(start=43044295, end=43047000)
        assert len(snapshot.sequence) == 2705
        assert len(snapshot.clinvar_variants) == 3
        assert snapshot.gene_detail.strand == "-"
        assert not snapshot.gene_status.loading
        assert not snapshot.sequence_status.loading
        assert not snapshot.clinvar_status.loading

        controller.record_effect_prediction("55502", prediction_factory(43057062))
        snapshot = controller.select_for_comparison("55502")

        assert controller.comparison.state == ComparisonState.COMPARING
        assert controller.comparison.selected_id == "55502"
        assert snapshot.comparison_variant.clinvar_id == "55502"

    @pytest.mark.asyncio
    async def test_missing_gene_id_fetches_nothing(self, controller, source):
        gene = Gene(gene_id=None, symbol="LOC1", chrom="chr1")

        snapshot = await controller.select_gene(gene, "hg38")

        assert snapshot.gene_status.error == "Gene ID is missing, cannot fetch details"
        assert source.calls == []
        assert snapshot.gene_bounds is None

    @pytest.mark.asyncio
    async def test_gene_load_failure_skips_variants(self, controller, source, brca1_gene):
        source.details_error = httpx.ConnectError("refused")

        snapshot = await controller.select_gene(brca1_gene, "hg38")

        assert snapshot.gene_status.error == "Failed to load gene information. Please try again."
        assert source.count("get_sequence") == 0
        assert source.count("get_clinvar_variants") == 0

    @pytest.mark.asyncio
    async def test_sequence_failure_does_not_block_variants(self, controller, source, brca1_gene):
        source.sequence_error = httpx.ReadTimeout("slow")

        snapshot = await controller.select_gene(brca1_gene, "hg38")

        assert snapshot.sequence_status.error == "Failed to load sequence data"
        assert snapshot.clinvar_status.error is None
        assert len(snapshot.clinvar_variants) == 3

    @pytest.mark.asyncio
    async def test_variant_failure_does_not_block_sequence(self, controller, source, brca1_gene):
        source.clinvar_error = httpx.ConnectError("refused")

        snapshot = await controller.select_gene(brca1_gene, "hg38")

        assert snapshot.clinvar_status.error == "Failed to fetch ClinVar variants"
        assert snapshot.sequence_status.error is None
        assert len(snapshot.sequence) == 2705

    @pytest.mark.asyncio
    async def test_loads_run_concurrently(self, controller, source, brca1_gene):
        gate = asyncio.Event()
        source.sequence_gates[(43044295, 43047000)] = gate

        task = asyncio.create_task(controller.select_gene(brca1_gene, "hg38"))
        await settle()

        assert controller.sequence_status.loading
        assert len(controller.variant_set.variants) == 3
        assert not controller.clinvar_status.loading

        gate.set()
        snapshot = await task
        assert len(snapshot.sequence) == 2705

    @pytest.mark.asyncio
    async def test_switching_gene_discards_stale_results(self, controller, source, brca1_gene, tp53_gene):
        sequence_gate = asyncio.Event()
        clinvar_gate = asyncio.Event()
        source.sequence_gates[(43044295, 43047000)] = sequence_gate
        source.clinvar_gates["chr17:43044295"] = clinvar_gate

        first = asyncio.create_task(controller.select_gene(brca1_gene, "hg38"))
        await settle()
        snapshot = await controller.select_gene(tp53_gene, "hg38")
        sequence_gate.set()
        clinvar_gate.set()
        await first

        snapshot = controller.snapshot()
        assert snapshot.gene.symbol == "TP53"
        assert snapshot.actual_range == GenomicRange(start=7668421, end=7678421)
        assert [v.clinvar_id for v in snapshot.clinvar_variants] == ["12347"]

    @pytest.mark.asyncio
    async def test_switching_gene_clears_state(self, controller, brca1_gene, tp53_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")
        await controller.request_window(1, 2)

        snapshot = await controller.select_gene(tp53_gene, "hg38")

        assert snapshot.comparison_variant is None
        assert snapshot.sequence_status.error is None
        assert all(v.gene_sort == "TP53" for v in snapshot.clinvar_variants)

    @pytest.mark.asyncio
    async def test_change_assembly_resets_context(self, controller, source, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")

        snapshot = await controller.change_assembly("hg19")

        assert snapshot.assembly_id == "hg19"
        assert snapshot.comparison_variant is None
        assert source.calls[-1][-1] == "hg19"
        assert controller.context.assembly_id == "hg19"


class TestRequestWindow:
    @pytest.mark.asyncio
    async def test_valid_window_loads(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = await controller.request_window("43050000", "43055000")

        assert snapshot.actual_range == GenomicRange(start=43050000, end=43055000)
        assert snapshot.start_position == "43050000"
        assert snapshot.sequence_status.error is None

    @pytest.mark.asyncio
    async def test_below_minimum_rejected_before_fetch(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")
        fetches = source.count("get_sequence")

        snapshot = await controller.request_window("43040000", "43045000")

        assert source.count("get_sequence") == fetches
        assert "43040000" in snapshot.sequence_status.error
        assert "43044295" in snapshot.sequence_status.error
        # the previously loaded window stays on display
        assert snapshot.actual_range == GenomicRange(start=43044295, end=43047000)

    @pytest.mark.asyncio
    async def test_span_too_large_rejected(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = await controller.request_window(43050000, 43070000)

        assert "exceeds maximum view range" in snapshot.sequence_status.error

    @pytest.mark.asyncio
    async def test_latest_request_wins(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")
        gate = asyncio.Event()
        source.sequence_gates[(43050100, 43050200)] = gate

        first = asyncio.create_task(controller.request_window(43050100, 43050200))
        await asyncio.sleep(0)
        await controller.request_window(43050300, 43050400)
        gate.set()
        await first

        snapshot = controller.snapshot()
        assert snapshot.actual_range == GenomicRange(start=43050300, end=43050400)
        assert not snapshot.sequence_status.loading

    @pytest.mark.asyncio
    async def test_invalid_request_supersedes_in_flight(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")
        gate = asyncio.Event()
        source.sequence_gates[(43050100, 43050200)] = gate

        pending = asyncio.create_task(controller.request_window(43050100, 43050200))
        await asyncio.sleep(0)
        await controller.request_window("abc", "43050200")
        gate.set()
        await pending

        snapshot = controller.snapshot()
        assert snapshot.sequence_status.error == "Please enter valid start and end positions"
        assert snapshot.actual_range == GenomicRange(start=43044295, end=43047000)

    @pytest.mark.asyncio
    async def test_load_error_clears_on_next_success(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")
        source.sequence_error = httpx.ReadTimeout("slow")
        snapshot = await controller.request_window(43050000, 43051000)
        assert snapshot.sequence_status.error == "Failed to load sequence data"

        source.sequence_error = None
        snapshot = await controller.request_window(43050000, 43051000)
        assert snapshot.sequence_status.error is None

    @pytest.mark.asyncio
    async def test_without_gene(self, controller, source):
        snapshot = await controller.request_window(100, 200)

        assert snapshot.sequence_status.error is not None
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_gene_without_id_gets_no_window(self, controller, source):
        await controller.select_gene(Gene(gene_id=None, symbol="LOC1", chrom="chr1"), "hg38")

        snapshot = await controller.request_window(100, 200)

        assert source.calls == []
        assert snapshot.sequence_status.error == "Gene ID is missing, cannot fetch details"
        assert snapshot.sequence == ""

    @pytest.mark.asyncio
    async def test_failed_gene_load_gets_no_window(self, controller, source, brca1_gene):
        source.details_error = httpx.ConnectError("refused")
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = await controller.request_window(43050000, 43051000)

        assert source.count("get_sequence") == 0
        assert snapshot.sequence_status.error == "Failed to load gene information. Please try again."

    @pytest.mark.asyncio
    async def test_window_allowed_after_recovering_gene(self, controller, source, brca1_gene):
        source.details_error = httpx.ConnectError("refused")
        await controller.select_gene(brca1_gene, "hg38")
        source.details_error = None
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = await controller.request_window(43050000, 43051000)

        assert snapshot.sequence_status.error is None
        assert snapshot.actual_range == GenomicRange(start=43050000, end=43051000)


class TestVariants:
    @pytest.mark.asyncio
    async def test_refresh_variants(self, controller, source, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = await controller.refresh_variants()

        assert source.count("get_clinvar_variants") == 2
        assert len(snapshot.clinvar_variants) == 3

    @pytest.mark.asyncio
    async def test_refresh_without_bounds_is_ignored(self, controller, source):
        await controller.refresh_variants()
        assert source.count("get_clinvar_variants") == 0

    @pytest.mark.asyncio
    async def test_prediction_for_unknown_variant_is_dropped(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = controller.record_effect_prediction("nope", prediction_factory())

        assert len(snapshot.clinvar_variants) == 3
        assert all(v.evo2_result is None for v in snapshot.clinvar_variants)

    @pytest.mark.asyncio
    async def test_record_effect_error(self, controller, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = controller.record_effect_error("37447", "Evo2 analysis failed")

        assert snapshot.clinvar_variants[1].evo2_error == "Evo2 analysis failed"


class TestComparison:
    @pytest.mark.asyncio
    async def test_unscored_variant_not_compared(self, controller, brca1_gene):
        snapshot = await controller.select_gene(brca1_gene, "hg38")

        snapshot = controller.select_for_comparison(snapshot.clinvar_variants[0])

        assert snapshot.comparison_variant is None
        assert controller.comparison.state == ComparisonState.EMPTY

    @pytest.mark.asyncio
    async def test_comparison_follows_point_updates(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory(prediction="Likely pathogenic"))
        controller.select_for_comparison("55502")

        snapshot = controller.record_effect_prediction("55502", prediction_factory(prediction="Likely benign"))

        assert snapshot.comparison_variant.evo2_result.prediction == "Likely benign"

    @pytest.mark.asyncio
    async def test_refresh_drops_comparison_of_unscored_copy(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")

        snapshot = await controller.refresh_variants()

        assert snapshot.comparison_variant is None

    @pytest.mark.asyncio
    async def test_comparison_not_restored_by_later_prediction(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")
        await controller.refresh_variants()

        snapshot = controller.record_effect_prediction("55502", prediction_factory())

        assert snapshot.comparison_variant is None
        assert controller.comparison.selected_id is None
        assert controller.comparison.state == ComparisonState.EMPTY

    @pytest.mark.asyncio
    async def test_clear_comparison(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")

        assert controller.clear_comparison().comparison_variant is None
        controller.select_for_comparison("55502")
        assert controller.select_for_comparison(None).comparison_variant is None

    @pytest.mark.asyncio
    async def test_unknown_id_keeps_selection(self, controller, brca1_gene, prediction_factory):
        await controller.select_gene(brca1_gene, "hg38")
        controller.record_effect_prediction("55502", prediction_factory())
        controller.select_for_comparison("55502")

        snapshot = controller.select_for_comparison("does-not-exist")

        assert snapshot.comparison_variant.clinvar_id == "55502"


class TestSelectPosition:
    def test_position_zero_is_a_position(self, controller):
        controller.sequence_fetcher.window = SequenceWindow(
            sequence="ACGT",
            actual_range=GenomicRange(start=0, end=4),
            chromosome="chr1",
            assembly_id="hg38",
        )

        snapshot = controller.select_position(0)

        assert snapshot.active_position == 0
        assert snapshot.active_reference == "A"

    @pytest.mark.asyncio
    async def test_reference_base_from_window(self, controller, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = controller.select_position(43044296)

        assert snapshot.active_position == 43044296
        assert snapshot.active_reference == "C"

    @pytest.mark.asyncio
    async def test_position_outside_window_ignored(self, controller, brca1_gene):
        await controller.select_gene(brca1_gene, "hg38")

        snapshot = controller.select_position(43100000)

        assert snapshot.active_position is None
        assert snapshot.active_reference is None


@pytest.mark.asyncio
async def test_snapshot_report(controller, brca1_gene):
    await controller.select_gene(brca1_gene, "hg38")

    report = controller.snapshot().to_report()

    assert "BRCA1" in report
    assert "ClinVar variants" in report
