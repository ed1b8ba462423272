"""Gene search and chromosome browsing ahead of gene selection."""

import logging

from genenav.api.genome_api import GenomeDataSource
from genenav.models.gene import Chromosome, Gene, GenomeAssembly

logger = logging.getLogger(__name__)


class GeneSearch:
    """Search-screen helpers: assemblies, chromosomes and gene lookup."""

    def __init__(self, source: GenomeDataSource, organism: str = "Human"):
        self.source = source
        self.organism = organism

    async def assemblies(self) -> list[GenomeAssembly]:
        """Assemblies available for the configured organism."""
        genomes = await self.source.list_assemblies()
        return genomes.get(self.organism, [])

    async def chromosomes(self, assembly_id: str) -> list[Chromosome]:
        return await self.source.list_chromosomes(assembly_id)

    async def search(self, query: str, assembly_id: str) -> list[Gene]:
        """Free-text or symbol search; blank queries return nothing."""
        query = query.strip()
        if not query:
            return []
        return await self.source.search_genes(query, assembly_id)

    async def browse_chromosome(self, chromosome: str, assembly_id: str) -> list[Gene]:
        """Genes found by searching for the chromosome name, restricted to it."""
        results = await self.source.search_genes(chromosome, assembly_id)
        genes = [gene for gene in results if gene.chrom == chromosome]
        logger.debug(f"{len(genes)} of {len(results)} hits are on {chromosome}")
        return genes
