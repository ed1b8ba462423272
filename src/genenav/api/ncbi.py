"""NCBI gene search, gene summary and ClinVar clients.

ARCHITECTURE:
    Query → NLM Clinical Tables (ncbi_genes) → Gene search hits
    Gene ID → E-utilities esummary (db=gene) → GeneDetail + bounds + initial window
    Chromosome + bounds → E-utilities esearch/esummary (db=clinvar) → ClinvarVariant[]
"""

import logging
from typing import Any

from genenav.api.base import AsyncHTTPClient
from genenav.models.gene import (
    Gene,
    GeneBounds,
    GeneDetail,
    GeneDetailsResult,
    GenomicInfo,
    GenomicRange,
    Organism,
)
from genenav.models.variant import ClinvarVariant

logger = logging.getLogger(__name__)

EUTILS_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
CLINICAL_TABLES_URL = "https://clinicaltables.nlm.nih.gov/api/ncbi_genes/v3/search"

# ClinVar position index and assembly label per UCSC assembly
CLINVAR_POSITION_FIELDS = {"hg19": "chrpos37", "hg38": "chrpos38"}
CLINVAR_ASSEMBLY_NAMES = {"hg19": "GRCh37", "hg38": "GRCh38"}


class NCBIAPIError(Exception):
    """Exception raised for NCBI API errors."""

    pass


def _strip_chr(chrom: str) -> str:
    return chrom[3:] if chrom.lower().startswith("chr") else chrom


def _title_case(value: str) -> str:
    return " ".join(word.capitalize() for word in value.split(" "))


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class NCBIGeneClient(AsyncHTTPClient):
    """Client for NCBI gene search and gene summaries."""

    BASE_URL = EUTILS_URL

    def __init__(
        self,
        base_url: str | None = None,
        search_url: str = CLINICAL_TABLES_URL,
        initial_window: int = 10_000,
        search_limit: int = 10,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url=base_url, **kwargs)
        self.search_url = search_url
        self.initial_window = initial_window
        self.search_limit = search_limit

    async def search_genes(self, query: str, assembly_id: str | None = None) -> list[Gene]:
        """Search genes by symbol or free text.

        NCBI gene records are assembly independent, so ``assembly_id`` only
        scopes the request for logging.

        Returns:
            Up to ``search_limit`` matching genes
        """
        data = await self._get_json(
            self.search_url,
            params={
                "terms": query,
                "df": "chromosome,Symbol,description,map_location,type_of_gene",
                "ef": "chromosome,Symbol,description,map_location,type_of_gene,GenomicInfo,GeneID",
            },
        )
        if not isinstance(data, list) or len(data) < 4:
            raise NCBIAPIError("Unexpected gene search response")

        total, _codes, extra_fields, display_rows = data[0], data[1], data[2] or {}, data[3] or []
        gene_ids = extra_fields.get("GeneID") or []

        genes: list[Gene] = []
        for i, row in enumerate(display_rows[: min(self.search_limit, total)]):
            chrom, symbol, name, map_location = row[0], row[1], row[2], row[3]
            if not symbol or not chrom:
                continue
            genes.append(
                Gene(
                    gene_id=str(gene_ids[i]) if i < len(gene_ids) and gene_ids[i] else None,
                    symbol=symbol,
                    name=name or "",
                    chrom=chrom if chrom.lower().startswith("chr") else f"chr{chrom}",
                    description=map_location,
                )
            )

        logger.info(f"Gene search '{query}' ({assembly_id}) returned {len(genes)} of {total} hits")
        return genes

    async def get_gene_details(self, gene_id: str) -> GeneDetailsResult:
        """Fetch the gene summary, its bounds and a default viewing window.

        Raises:
            NCBIAPIError: If the gene is unknown or has no genomic placement
        """
        data = await self._get_json(
            f"{self.base_url}/esummary.fcgi",
            params={"db": "gene", "id": gene_id, "retmode": "json"},
        )
        record = (data.get("result") or {}).get(str(gene_id))
        if not record or "error" in record:
            message = record.get("error") if record else "no record"
            raise NCBIAPIError(f"Gene {gene_id} not found: {message}")

        detail = self._parse_gene_detail(gene_id, record)
        if not detail.genomic_info:
            raise NCBIAPIError(f"Gene {gene_id} has no genomic location")

        info = detail.genomic_info[0]
        bounds = GeneBounds(min=info.chrstart, max=info.chrstop)
        initial_end = min(bounds.lo + self.initial_window, bounds.hi)
        initial_range = GenomicRange(start=bounds.lo, end=initial_end)

        return GeneDetailsResult(detail=detail, bounds=bounds, initial_range=initial_range)

    def _parse_gene_detail(self, gene_id: str, record: dict[str, Any]) -> GeneDetail:
        organism = record.get("organism") or {}
        aliases = record.get("otheraliases") or ""
        return GeneDetail(
            gene_id=str(gene_id),
            symbol=record.get("name"),
            description=record.get("description"),
            summary=record.get("summary") or None,
            chromosome=record.get("chromosome"),
            map_location=record.get("maplocation"),
            other_aliases=[a.strip() for a in aliases.split(",") if a.strip()],
            organism=Organism(
                scientific_name=organism.get("scientificname"),
                common_name=organism.get("commonname"),
                tax_id=_to_int(organism.get("taxid")),
            ) if organism else None,
            genomic_info=[
                GenomicInfo(
                    chrloc=info.get("chrloc"),
                    chraccver=info.get("chraccver"),
                    chrstart=int(info["chrstart"]),
                    chrstop=int(info["chrstop"]),
                    exoncount=_to_int(info.get("exoncount")),
                )
                for info in record.get("genomicinfo") or []
                if info.get("chrstart") is not None and info.get("chrstop") is not None
            ],
        )


class ClinVarClient(AsyncHTTPClient):
    """Client for ClinVar records via NCBI E-utilities."""

    BASE_URL = EUTILS_URL

    def __init__(self, base_url: str | None = None, retmax: int = 20, **kwargs: Any) -> None:
        super().__init__(base_url=base_url, **kwargs)
        self.retmax = retmax

    def build_search_term(self, chrom: str, bounds: GeneBounds, assembly_id: str) -> str:
        """Build the esearch term, e.g. ``17[chromosome] AND 43044295:43170245[chrpos38]``."""
        position_field = CLINVAR_POSITION_FIELDS.get(assembly_id, "chrpos38")
        return f"{_strip_chr(chrom)}[chromosome] AND {bounds.lo}:{bounds.hi}[{position_field}]"

    async def get_clinvar_variants(
        self,
        chrom: str,
        bounds: GeneBounds,
        assembly_id: str,
    ) -> list[ClinvarVariant]:
        """Fetch ClinVar variants overlapping the gene bounds."""
        search = await self._get_json(
            f"{self.base_url}/esearch.fcgi",
            params={
                "db": "clinvar",
                "term": self.build_search_term(chrom, bounds, assembly_id),
                "retmode": "json",
                "retmax": self.retmax,
            },
        )
        ids = (search.get("esearchresult") or {}).get("idlist") or []
        if not ids:
            logger.info(f"No ClinVar variants in {chrom}:{bounds.lo}-{bounds.hi} ({assembly_id})")
            return []

        summary = await self._get_json(
            f"{self.base_url}/esummary.fcgi",
            params={"db": "clinvar", "id": ",".join(ids), "retmode": "json"},
        )
        result = summary.get("result") or {}

        variants = []
        for uid in result.get("uids") or ids:
            record = result.get(str(uid))
            if record:
                variants.append(self._parse_variant(str(uid), record, chrom, assembly_id))

        logger.info(f"Fetched {len(variants)} ClinVar variants for {chrom}:{bounds.lo}-{bounds.hi}")
        return variants

    def _parse_variant(
        self,
        uid: str,
        record: dict[str, Any],
        chrom: str,
        assembly_id: str,
    ) -> ClinvarVariant:
        """Map an esummary record onto a ClinvarVariant."""
        classification = (record.get("germline_classification") or {}).get("description")
        position = _to_int(record.get("location_sort"))
        ref_allele = alt_allele = None

        variation_set = record.get("variation_set") or []
        if variation_set:
            variation = variation_set[0]
            assembly_name = CLINVAR_ASSEMBLY_NAMES.get(assembly_id)
            for loc in variation.get("variation_loc") or []:
                if loc.get("assembly_name") == assembly_name and _to_int(loc.get("start")):
                    position = _to_int(loc.get("start"))
                    break

            # canonical SPDI: <sequence>:<0-based position>:<deleted>:<inserted>
            spdi = (variation.get("canonical_spdi") or "").split(":")
            if len(spdi) == 4:
                ref_allele, alt_allele = spdi[2] or None, spdi[3] or None

        return ClinvarVariant(
            clinvar_id=uid,
            title=record.get("title") or "",
            variation_type=_title_case(record.get("obj_type") or "Unknown"),
            classification=classification or "Unknown",
            gene_sort=record.get("gene_sort") or "",
            chromosome=_strip_chr(chrom),
            location=f"{position:,}" if position else "Unknown",
            position=position,
            ref_allele=ref_allele,
            alt_allele=alt_allele,
        )
