"""Evo2 variant effect prediction client.

ARCHITECTURE:
    SNV (position, alt allele) + assembly + chromosome → Evo2 service → EffectPrediction

The prediction service is deployed separately; its URL comes from settings
(``GENENAV_EVO2_URL``). Scoring a single variant can take tens of seconds, so
the default timeout is generous.
"""

import logging
from typing import Any

from genenav.api.base import AsyncHTTPClient
from genenav.models.variant import ClinvarVariant, EffectPrediction

logger = logging.getLogger(__name__)


class Evo2APIError(Exception):
    """Exception raised for effect prediction errors."""

    pass


class Evo2Client(AsyncHTTPClient):
    """Client for the Evo2 single-variant analysis endpoint."""

    DEFAULT_TIMEOUT = 120.0

    def __init__(self, base_url: str | None = None, timeout: float = DEFAULT_TIMEOUT, **kwargs: Any) -> None:
        super().__init__(base_url=base_url, timeout=timeout, **kwargs)

    async def analyze_variant(
        self,
        position: int,
        alternative: str,
        assembly_id: str,
        chromosome: str,
    ) -> EffectPrediction:
        """Score a single-nucleotide variant.

        Raises:
            Evo2APIError: If no endpoint is configured or the reply is malformed
        """
        if not self.base_url:
            raise Evo2APIError("Evo2 endpoint is not configured (set GENENAV_EVO2_URL)")

        chrom = chromosome if chromosome.lower().startswith("chr") else f"chr{chromosome}"
        logger.info(f"Requesting Evo2 prediction for {chrom}:{position} {alternative} ({assembly_id})")

        response = await self._request(
            "POST",
            self.base_url,
            params={
                "variant_position": position,
                "alternative": alternative,
                "genome": assembly_id,
                "chromosome": chrom,
            },
        )
        data = response.json()
        if not isinstance(data, dict) or "error" in data:
            message = data.get("error") if isinstance(data, dict) else "malformed response"
            raise Evo2APIError(f"Evo2 analysis failed: {message}")

        return EffectPrediction(**data)

    async def analyze_clinvar_variant(self, variant: ClinvarVariant, assembly_id: str) -> EffectPrediction:
        """Score a ClinVar SNV using its position and alternate allele."""
        if not variant.is_single_nucleotide:
            raise Evo2APIError(f"Variant {variant.clinvar_id} is not a single nucleotide variant")
        if variant.position is None or not variant.alt_allele:
            raise Evo2APIError(f"Variant {variant.clinvar_id} has no position or alternate allele")

        return await self.analyze_variant(
            position=variant.position,
            alternative=variant.alt_allele,
            assembly_id=assembly_id,
            chromosome=variant.chromosome,
        )
