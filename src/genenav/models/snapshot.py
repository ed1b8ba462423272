"""Read-only navigation snapshot handed to the presentation layer."""

import textwrap

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.panel import Panel

from genenav.models.gene import Gene, GeneBounds, GeneDetail, GenomicRange
from genenav.models.variant import ClinvarVariant


class SlotView(BaseModel):
    """Loading and error flags for one state slot."""

    model_config = ConfigDict(frozen=True)

    loading: bool = False
    error: str | None = None


class NavigationSnapshot(BaseModel):
    """Immutable view of the current gene context."""

    model_config = ConfigDict(frozen=True)

    gene: Gene | None = None
    assembly_id: str | None = None
    gene_detail: GeneDetail | None = None
    gene_bounds: GeneBounds | None = None
    start_position: str = ""
    end_position: str = ""
    sequence: str = ""
    actual_range: GenomicRange | None = None
    sequence_warning: str | None = None
    active_position: int | None = None
    active_reference: str | None = None
    clinvar_variants: tuple[ClinvarVariant, ...] = Field(default_factory=tuple)
    comparison_variant: ClinvarVariant | None = None
    gene_status: SlotView = Field(default_factory=SlotView)
    sequence_status: SlotView = Field(default_factory=SlotView)
    clinvar_status: SlotView = Field(default_factory=SlotView)
    max_view_range: int = 10_000

    def to_report(self) -> str:
        """Pretty report output with Rich formatting."""
        console = Console(width=80, force_terminal=True)

        if self.gene is None:
            header = "[dim]No gene selected[/dim]"
        else:
            header = f"[bold cyan]{self.gene.symbol}[/bold cyan]  |  {self.gene.chrom}  |  [italic]{self.assembly_id}[/italic]"
        content_lines = [header, ""]

        if self.gene_bounds:
            content_lines.append(f"[dim]Bounds:[/dim] {self.gene_bounds.lo:,} - {self.gene_bounds.hi:,}")
        if self.actual_range:
            content_lines.append(
                f"[dim]Window:[/dim] {self.actual_range.start:,} - {self.actual_range.end:,} "
                f"({len(self.sequence):,} bp)"
            )
        if self.sequence:
            preview = self.sequence[:70] + ("..." if len(self.sequence) > 70 else "")
            content_lines.append(f"[dim]Sequence:[/dim] {preview}")
        if self.sequence_warning:
            content_lines.append(f"[yellow]Warning:[/yellow] {self.sequence_warning}")

        for label, status in (
            ("Gene", self.gene_status),
            ("Sequence", self.sequence_status),
            ("ClinVar", self.clinvar_status),
        ):
            if status.error:
                content_lines.append(f"[bold red]{label} error:[/bold red] {status.error}")

        content_lines.append("")
        content_lines.append(f"[dim]ClinVar variants:[/dim] {len(self.clinvar_variants)}")
        for variant in self.clinvar_variants[:10]:
            scored = f"  [green]{variant.evo2_result.prediction}[/green]" if variant.evo2_result else ""
            line = textwrap.shorten(f"{variant.clinvar_id}  {variant.classification}  {variant.title}", width=60)
            content_lines.append(f"  {line}{scored}")

        if self.comparison_variant is not None:
            content_lines.append("")
            content_lines.append(f"[bold]Comparing:[/bold] {self.comparison_variant.clinvar_id}")

        panel = Panel(
            "\n".join(content_lines),
            title="[bold white]Gene Navigation[/bold white]",
            border_style="blue",
            padding=(1, 2),
        )

        with console.capture() as capture:
            console.print(panel)

        return capture.get()
