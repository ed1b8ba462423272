"""ClinVar variant data models."""

from pydantic import BaseModel, ConfigDict, Field


class EffectPrediction(BaseModel):
    """Predicted effect of a single-nucleotide variant from the Evo2 service."""

    position: int
    reference: str
    alternative: str
    delta_score: float = Field(..., description="Likelihood delta (alt - ref)")
    prediction: str = Field(..., description="e.g. 'Likely pathogenic', 'Likely benign'")
    classification_confidence: float = Field(..., ge=0.0, le=1.0)


class ClinvarVariant(BaseModel):
    """A ClinVar record overlapping the current gene's bounds.

    ``evo2_result`` is attached after the variant is fetched, once an effect
    prediction completes. Instances are frozen: updates produce a copy that
    replaces the original by ``clinvar_id``.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "clinvar_id": "55502",
                "title": "NM_007294.4(BRCA1):c.5266dup (p.Gln1756fs)",
                "variation_type": "Duplication",
                "classification": "Pathogenic",
                "gene_sort": "BRCA1",
                "chromosome": "17",
                "location": "43,057,062",
            }
        },
    )

    clinvar_id: str = Field(..., description="ClinVar variation ID")
    title: str = ""
    variation_type: str = ""
    classification: str = Field("Unknown", description="Germline clinical significance")
    gene_sort: str = ""
    chromosome: str = ""
    location: str = Field("Unknown", description="Formatted genomic position")
    position: int | None = None
    ref_allele: str | None = None
    alt_allele: str | None = None
    evo2_result: EffectPrediction | None = Field(None, alias="evo2Result")
    evo2_error: str | None = None

    @property
    def is_scored(self) -> bool:
        return self.evo2_result is not None

    @property
    def is_single_nucleotide(self) -> bool:
        """Only SNVs can be scored by the effect predictor."""
        return "single nucleotide" in self.variation_type.lower()

    def with_prediction(self, result: EffectPrediction) -> "ClinvarVariant":
        return self.model_copy(update={"evo2_result": result, "evo2_error": None})
