"""Reference sequence window models."""

from pydantic import BaseModel, ConfigDict, Field

from genenav.models.gene import GenomicRange


class SequenceWindow(BaseModel):
    """Sequence returned for a window request.

    ``actual_range`` is the range the provider actually returned and is the
    range of record for display; it may be narrower than the request.
    """

    model_config = ConfigDict(frozen=True)

    sequence: str = ""
    actual_range: GenomicRange
    chromosome: str
    assembly_id: str
    warning: str | None = Field(None, description="Non-fatal provider message (e.g., partial data)")

    @property
    def key(self) -> tuple[str, int, int, str]:
        return (self.chromosome, self.actual_range.start, self.actual_range.end, self.assembly_id)

    def base_at(self, position: int) -> str | None:
        """Reference base at a 1-based genomic position, if inside the window."""
        offset = position - self.actual_range.start
        if 0 <= offset < len(self.sequence):
            return self.sequence[offset]
        return None
