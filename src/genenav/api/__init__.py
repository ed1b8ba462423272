"""API clients for external genome data sources."""

from genenav.api.evo2 import Evo2APIError, Evo2Client
from genenav.api.genome_api import GenomeAPI, GenomeDataSource
from genenav.api.ncbi import ClinVarClient, NCBIAPIError, NCBIGeneClient
from genenav.api.ucsc import SequenceResponse, UCSCAPIError, UCSCClient

__all__ = [
    "ClinVarClient",
    "Evo2APIError",
    "Evo2Client",
    "GenomeAPI",
    "GenomeDataSource",
    "NCBIAPIError",
    "NCBIGeneClient",
    "SequenceResponse",
    "UCSCAPIError",
    "UCSCClient",
]
