"""Gene region navigation core."""

from genenav.core.comparison import ComparisonSelector, ComparisonState
from genenav.core.controller import GeneContextController
from genenav.core.errors import (
    ClinvarLoadError,
    GeneLoadError,
    GeneNavigationError,
    MissingIdentifier,
    SequenceLoadError,
)
from genenav.core.requests import RequestTracker
from genenav.core.search import GeneSearch
from genenav.core.sequence import SequenceWindowFetcher
from genenav.core.validation import (
    MAX_VIEW_RANGE,
    AboveMaximum,
    BelowMinimum,
    OrderError,
    ParseError,
    RangeValidationError,
    SpanTooLarge,
    validate_window,
)
from genenav.core.variants import VariantSetSynchronizer

__all__ = [
    "MAX_VIEW_RANGE",
    "AboveMaximum",
    "BelowMinimum",
    "ClinvarLoadError",
    "ComparisonSelector",
    "ComparisonState",
    "GeneContextController",
    "GeneLoadError",
    "GeneNavigationError",
    "GeneSearch",
    "MissingIdentifier",
    "OrderError",
    "ParseError",
    "RangeValidationError",
    "RequestTracker",
    "SequenceLoadError",
    "SequenceWindowFetcher",
    "SpanTooLarge",
    "VariantSetSynchronizer",
    "validate_window",
]
