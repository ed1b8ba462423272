"""Shared fixtures: an in-memory genome data source and BRCA1 test data."""

import asyncio

import pytest

from genenav.api.ucsc import SequenceResponse
from genenav.models.gene import (
    Chromosome,
    Gene,
    GeneBounds,
    GeneDetail,
    GeneDetailsResult,
    GenomeAssembly,
    GenomicInfo,
    GenomicRange,
)
from genenav.models.variant import ClinvarVariant, EffectPrediction

BRCA1_BOUNDS = GeneBounds(min=43044295, max=43170245)


class FakeGenomeSource:
    """Scriptable stand-in for GenomeAPI.

    ``sequence_gates`` / ``clinvar_gates`` hold asyncio.Events keyed by request
    parameters; a gated call waits for its event before answering, which lets
    tests control the order in which responses resolve.
    """

    def __init__(self):
        self.details: dict[str, GeneDetailsResult] = {}
        self.variants: dict[str, list[ClinvarVariant]] = {}
        self.sequence_overrides: dict[tuple[int, int], SequenceResponse] = {}
        self.sequence_gates: dict[tuple[int, int], asyncio.Event] = {}
        self.clinvar_gates: dict[str, asyncio.Event] = {}
        self.details_error: Exception | None = None
        self.sequence_error: Exception | None = None
        self.clinvar_error: Exception | None = None
        self.calls: list[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    async def search_genes(self, query, assembly_id):
        self.calls.append(("search_genes", query, assembly_id))
        return [
            Gene(gene_id="672", symbol="BRCA1", name="BRCA1 DNA repair associated", chrom="chr17", description="17q21.31"),
            Gene(gene_id="7157", symbol="TP53", name="tumor protein p53", chrom="chr17", description="17p13.1"),
            Gene(gene_id="675", symbol="BRCA2", name="BRCA2 DNA repair associated", chrom="chr13", description="13q13.1"),
        ]

    async def list_chromosomes(self, assembly_id):
        self.calls.append(("list_chromosomes", assembly_id))
        return [Chromosome(name="chr1", size=248956422), Chromosome(name="chr17", size=83257441)]

    async def list_assemblies(self):
        self.calls.append(("list_assemblies",))
        return {
            "Human": [
                GenomeAssembly(id="hg38", name="Dec. 2013 (GRCh38/hg38)", source_name="GRCh38", active=True),
                GenomeAssembly(id="hg19", name="Feb. 2009 (GRCh37/hg19)", source_name="GRCh37", active=True),
            ],
            "Mouse": [GenomeAssembly(id="mm39", name="Jun. 2020 (GRCm39/mm39)", source_name="GRCm39", active=True)],
        }

    async def get_gene_details(self, gene_id):
        self.calls.append(("get_gene_details", gene_id))
        if self.details_error:
            raise self.details_error
        return self.details[gene_id]

    async def get_sequence(self, chromosome, start, end, assembly_id):
        self.calls.append(("get_sequence", chromosome, start, end, assembly_id))
        gate = self.sequence_gates.get((start, end))
        if gate is not None:
            await gate.wait()
        if self.sequence_error:
            raise self.sequence_error
        if (start, end) in self.sequence_overrides:
            return self.sequence_overrides[(start, end)]
        return SequenceResponse(
            sequence=("ACGT" * ((end - start) // 4 + 1))[: end - start],
            actual_range=GenomicRange(start=start, end=end),
        )

    async def get_clinvar_variants(self, chromosome, bounds, assembly_id):
        self.calls.append(("get_clinvar_variants", chromosome, bounds, assembly_id))
        key = f"{chromosome}:{bounds.lo}"
        gate = self.clinvar_gates.get(key)
        if gate is not None:
            await gate.wait()
        if self.clinvar_error:
            raise self.clinvar_error
        return list(self.variants.get(key, []))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


def make_variant(clinvar_id: str, position: int = 43045000, **kwargs) -> ClinvarVariant:
    defaults = {
        "title": f"NM_007294.4(BRCA1):c.{clinvar_id}G>A",
        "variation_type": "Single Nucleotide Variant",
        "classification": "Pathogenic",
        "gene_sort": "BRCA1",
        "chromosome": "17",
        "location": f"{position:,}",
        "position": position,
        "ref_allele": "G",
        "alt_allele": "A",
    }
    defaults.update(kwargs)
    return ClinvarVariant(clinvar_id=clinvar_id, **defaults)


def make_prediction(position: int = 43045000, prediction: str = "Likely pathogenic") -> EffectPrediction:
    return EffectPrediction(
        position=position,
        reference="G",
        alternative="A",
        delta_score=-0.0021,
        prediction=prediction,
        classification_confidence=0.87,
    )


@pytest.fixture
def brca1_gene():
    return Gene(
        gene_id="672",
        symbol="BRCA1",
        name="BRCA1 DNA repair associated",
        chrom="chr17",
        description="17q21.31",
    )


@pytest.fixture
def tp53_gene():
    return Gene(
        gene_id="7157",
        symbol="TP53",
        name="tumor protein p53",
        chrom="chr17",
        description="17p13.1",
    )


@pytest.fixture
def brca1_variants():
    return [
        make_variant("55502", 43057062),
        make_variant("37447", 43045711, classification="Likely benign"),
        make_variant("209219", 43063903, variation_type="Deletion", alt_allele=None),
    ]


@pytest.fixture
def source(brca1_variants):
    fake = FakeGenomeSource()
    fake.details["672"] = GeneDetailsResult(
        detail=GeneDetail(
            gene_id="672",
            symbol="BRCA1",
            description="BRCA1 DNA repair associated",
            chromosome="17",
            map_location="17q21.31",
            genomic_info=[GenomicInfo(chrloc="17", chrstart=43170245, chrstop=43044295, exoncount=24)],
        ),
        bounds=BRCA1_BOUNDS,
        initial_range=GenomicRange(start=43044295, end=43047000),
    )
    fake.details["7157"] = GeneDetailsResult(
        detail=GeneDetail(gene_id="7157", symbol="TP53", chromosome="17"),
        bounds=GeneBounds(min=7687490, max=7668421),
        initial_range=GenomicRange(start=7668421, end=7678421),
    )
    fake.variants["chr17:43044295"] = brca1_variants
    fake.variants["chr17:7668421"] = [make_variant("12347", 7675088, gene_sort="TP53")]
    return fake


@pytest.fixture
def variant_factory():
    return make_variant


@pytest.fixture
def prediction_factory():
    return make_prediction
