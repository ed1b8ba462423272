"""Gene, coordinate and assembly models."""

from pydantic import BaseModel, ConfigDict, Field


class Gene(BaseModel):
    """A gene as returned by gene search. Immutable once returned."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "gene_id": "672",
                "symbol": "BRCA1",
                "name": "BRCA1 DNA repair associated",
                "chrom": "chr17",
                "description": "17q21.31",
            }
        },
    )

    gene_id: str | None = Field(None, description="NCBI Gene ID (e.g., 672)")
    symbol: str = Field(..., description="Gene symbol (e.g., BRCA1)")
    name: str = Field("", description="Human-readable gene name")
    chrom: str = Field(..., description="Chromosome in UCSC naming (e.g., chr17)")
    description: str | None = Field(None, description="Coarse cytogenetic locus (e.g., 17q21.31)")


class GeneBounds(BaseModel):
    """Full genomic extent of a gene on its chromosome.

    Orientation is not assumed: ``min`` may be greater than ``max`` for genes
    reported on the minus strand. Use ``lo`` and ``hi`` for the ordered ends.
    """

    model_config = ConfigDict(frozen=True)

    min: int
    max: int

    @property
    def lo(self) -> int:
        return min(self.min, self.max)

    @property
    def hi(self) -> int:
        return max(self.min, self.max)

    def contains(self, start: int, end: int) -> bool:
        """Check whether the window [start, end] lies within the bounds."""
        return self.lo <= start and end <= self.hi


class GenomicRange(BaseModel):
    """A coordinate window on a chromosome."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @property
    def span(self) -> int:
        return self.end - self.start


class GenomicInfo(BaseModel):
    """Placement of a gene (or transcript annotation) on an assembly."""

    chrloc: str | None = None
    chraccver: str | None = None
    chrstart: int
    chrstop: int
    exoncount: int | None = None

    @property
    def strand(self) -> str:
        # NCBI reports minus-strand genes with chrstart > chrstop
        return "-" if self.chrstart > self.chrstop else "+"


class Organism(BaseModel):
    scientific_name: str | None = None
    common_name: str | None = None
    tax_id: int | None = None


class GeneDetail(BaseModel):
    """Extended metadata about a gene, fetched once per selected gene."""

    gene_id: str
    symbol: str | None = None
    description: str | None = Field(None, description="Official full name")
    summary: str | None = Field(None, description="RefSeq functional summary")
    chromosome: str | None = None
    map_location: str | None = None
    other_aliases: list[str] = Field(default_factory=list)
    organism: Organism | None = None
    genomic_info: list[GenomicInfo] = Field(default_factory=list)

    @property
    def strand(self) -> str | None:
        if not self.genomic_info:
            return None
        return self.genomic_info[0].strand


class GeneDetailsResult(BaseModel):
    """Gene metadata, bounds and suggested initial viewing window."""

    detail: GeneDetail
    bounds: GeneBounds
    initial_range: GenomicRange | None = None


class GenomeAssembly(BaseModel):
    """A reference genome assembly offered by the genome browser."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    source_name: str = Field("", alias="sourceName")
    active: bool = False


class Chromosome(BaseModel):
    name: str
    size: int = 0


class AssemblyContext(BaseModel):
    """The (assembly, chromosome) pair that scopes every fetch."""

    model_config = ConfigDict(frozen=True)

    assembly_id: str
    chromosome: str
