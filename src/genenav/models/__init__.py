"""Data models for genenav."""

from genenav.models.gene import (
    AssemblyContext,
    Chromosome,
    Gene,
    GeneBounds,
    GeneDetail,
    GeneDetailsResult,
    GenomeAssembly,
    GenomicInfo,
    GenomicRange,
    Organism,
)
from genenav.models.sequence import SequenceWindow
from genenav.models.snapshot import NavigationSnapshot, SlotView
from genenav.models.variant import ClinvarVariant, EffectPrediction

__all__ = [
    "AssemblyContext",
    "Chromosome",
    "ClinvarVariant",
    "EffectPrediction",
    "Gene",
    "GeneBounds",
    "GeneDetail",
    "GeneDetailsResult",
    "GenomeAssembly",
    "GenomicInfo",
    "GenomicRange",
    "NavigationSnapshot",
    "Organism",
    "SequenceWindow",
    "SlotView",
]
