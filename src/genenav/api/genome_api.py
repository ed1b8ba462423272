"""Genome data source used by the navigation core.

``GenomeDataSource`` is the boundary the core consumes; ``GenomeAPI`` is the
production implementation composing the UCSC and NCBI clients.
"""

import asyncio
from typing import Any, Protocol

from genenav.api.ncbi import ClinVarClient, NCBIGeneClient
from genenav.api.ucsc import SequenceResponse, UCSCClient
from genenav.config import GeneNavSettings, load_settings
from genenav.models.gene import (
    Chromosome,
    Gene,
    GeneBounds,
    GeneDetailsResult,
    GenomeAssembly,
)
from genenav.models.variant import ClinvarVariant


class GenomeDataSource(Protocol):
    """Search and data backend consumed by the navigation core."""

    async def search_genes(self, query: str, assembly_id: str) -> list[Gene]: ...

    async def list_chromosomes(self, assembly_id: str) -> list[Chromosome]: ...

    async def list_assemblies(self) -> dict[str, list[GenomeAssembly]]: ...

    async def get_gene_details(self, gene_id: str) -> GeneDetailsResult: ...

    async def get_sequence(self, chromosome: str, start: int, end: int, assembly_id: str) -> SequenceResponse: ...

    async def get_clinvar_variants(
        self, chromosome: str, bounds: GeneBounds, assembly_id: str
    ) -> list[ClinvarVariant]: ...


class GenomeAPI:
    """UCSC + NCBI implementation of ``GenomeDataSource``.

    Use with 'async with' to share pooled connections across calls.
    """

    def __init__(self, settings: GeneNavSettings | None = None, **client_kwargs: Any):
        self.settings = settings or load_settings()
        common = {"timeout": self.settings.timeout, "max_retries": self.settings.max_retries, **client_kwargs}
        self.ucsc_client = UCSCClient(base_url=self.settings.ucsc_url, **common)
        self.gene_client = NCBIGeneClient(
            base_url=self.settings.eutils_url,
            search_url=self.settings.clinical_tables_url,
            initial_window=self.settings.initial_window,
            search_limit=self.settings.gene_search_limit,
            **common,
        )
        self.clinvar_client = ClinVarClient(
            base_url=self.settings.eutils_url,
            retmax=self.settings.clinvar_retmax,
            **common,
        )

    async def __aenter__(self) -> "GenomeAPI":
        await self.ucsc_client.__aenter__()
        await self.gene_client.__aenter__()
        await self.clinvar_client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await asyncio.gather(
            self.ucsc_client.close(),
            self.gene_client.close(),
            self.clinvar_client.close(),
        )

    async def search_genes(self, query: str, assembly_id: str) -> list[Gene]:
        return await self.gene_client.search_genes(query, assembly_id)

    async def list_chromosomes(self, assembly_id: str) -> list[Chromosome]:
        return await self.ucsc_client.list_chromosomes(assembly_id)

    async def list_assemblies(self) -> dict[str, list[GenomeAssembly]]:
        return await self.ucsc_client.list_genomes()

    async def get_gene_details(self, gene_id: str) -> GeneDetailsResult:
        return await self.gene_client.get_gene_details(gene_id)

    async def get_sequence(self, chromosome: str, start: int, end: int, assembly_id: str) -> SequenceResponse:
        return await self.ucsc_client.get_sequence(chromosome, start, end, assembly_id)

    async def get_clinvar_variants(
        self, chromosome: str, bounds: GeneBounds, assembly_id: str
    ) -> list[ClinvarVariant]:
        return await self.clinvar_client.get_clinvar_variants(chromosome, bounds, assembly_id)
