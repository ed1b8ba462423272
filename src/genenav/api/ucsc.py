"""UCSC Genome Browser REST API client.

ARCHITECTURE:
    Assembly → api.genome.ucsc.edu → Genomes / Chromosomes / DNA sequence

Coordinates handed to and returned from this client are 1-based and
inclusive; the UCSC API itself is 0-based half-open, so the start is shifted
on the way in and back on the way out.
"""

import logging
from dataclasses import dataclass
from typing import Any

from genenav.api.base import AsyncHTTPClient
from genenav.models.gene import Chromosome, GenomeAssembly, GenomicRange

logger = logging.getLogger(__name__)

# Sex chromosomes and mitochondria sort after the autosomes
_NAMED_CHROMOSOME_ORDER = {"X": 1, "Y": 2, "M": 3, "MT": 3}


class UCSCAPIError(Exception):
    """Exception raised for UCSC API errors."""

    pass


@dataclass
class SequenceResponse:
    """DNA returned by the sequence endpoint."""

    sequence: str
    actual_range: GenomicRange
    error: str | None = None


def chromosome_sort_key(name: str) -> tuple[int, int, str]:
    """Natural sort: chr1..chr22, then chrX, chrY, chrM, then anything else."""
    label = name[3:] if name.lower().startswith("chr") else name
    if label.isdigit():
        return (0, int(label), "")
    return (1, _NAMED_CHROMOSOME_ORDER.get(label.upper(), 99), label)


def is_primary_chromosome(name: str) -> bool:
    """Drop alt/random/unplaced contigs such as chr1_KI270706v1_random or chrUn_*."""
    return "_" not in name and not name.startswith("chrUn")


def ucsc_chromosome(chrom: str) -> str:
    return chrom if chrom.lower().startswith("chr") else f"chr{chrom}"


class UCSCClient(AsyncHTTPClient):
    """Client for the UCSC Genome Browser REST API.

    API Documentation: https://genome.ucsc.edu/goldenPath/help/api.html
    """

    BASE_URL = "https://api.genome.ucsc.edu"

    async def _query(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GET against the UCSC API.

        Raises:
            UCSCAPIError: If the response carries no usable payload
        """
        data = await self._get_json(f"{self.base_url}{path}", params=params)
        if not isinstance(data, dict):
            raise UCSCAPIError(f"Unexpected UCSC response for {path}")
        return data

    async def list_genomes(self) -> dict[str, list[GenomeAssembly]]:
        """List available assemblies grouped by organism.

        Returns:
            Mapping of organism name (e.g. "Human") to its assemblies
        """
        data = await self._query("/list/ucscGenomes")
        genomes = data.get("ucscGenomes") or {}

        grouped: dict[str, list[GenomeAssembly]] = {}
        for genome_id, info in genomes.items():
            organism = info.get("organism") or "Other"
            grouped.setdefault(organism, []).append(
                GenomeAssembly(
                    id=genome_id,
                    name=info.get("description") or genome_id,
                    source_name=info.get("sourceName") or "",
                    active=bool(info.get("active")),
                )
            )

        logger.info(f"Loaded {len(genomes)} UCSC assemblies across {len(grouped)} organisms")
        return grouped

    async def list_chromosomes(self, genome: str) -> list[Chromosome]:
        """List primary chromosomes of an assembly in natural order."""
        data = await self._query("/list/chromosomes", params={"genome": genome})
        chromosomes = data.get("chromosomes") or {}

        result = [
            Chromosome(name=name, size=int(size))
            for name, size in chromosomes.items()
            if is_primary_chromosome(name)
        ]
        result.sort(key=lambda c: chromosome_sort_key(c.name))
        return result

    async def get_sequence(self, chrom: str, start: int, end: int, genome: str) -> SequenceResponse:
        """Fetch reference DNA for a 1-based inclusive window.

        The returned ``actual_range`` reflects what UCSC served, which can be
        clamped at chromosome ends. A UCSC ``error`` message that accompanies
        data is passed through rather than raised.
        """
        chromosome = ucsc_chromosome(chrom)
        data = await self._query(
            "/getData/sequence",
            params={"genome": genome, "chrom": chromosome, "start": start - 1, "end": end},
        )

        dna = data.get("dna")
        error = data.get("error")
        if dna is None and error:
            raise UCSCAPIError(f"UCSC sequence error: {error}")

        served_start = data.get("start")
        served_end = data.get("end")
        actual_range = GenomicRange(
            start=int(served_start) + 1 if served_start is not None else start,
            end=int(served_end) if served_end is not None else end,
        )
        if actual_range.start != start or actual_range.end != end:
            logger.info(
                f"UCSC clamped {chromosome}:{start}-{end} to {actual_range.start}-{actual_range.end}"
            )

        return SequenceResponse(sequence=(dna or "").upper(), actual_range=actual_range, error=error)
