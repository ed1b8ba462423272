"""Load errors scoped to a single state slot."""


class GeneNavigationError(Exception):
    """Base class for navigation errors surfaced to the user."""

    pass


class MissingIdentifier(GeneNavigationError):
    """The selected gene carries no gene ID, so nothing can be fetched."""

    def __init__(self, symbol: str | None = None):
        self.symbol = symbol
        super().__init__("Gene ID is missing, cannot fetch details")


class GeneLoadError(GeneNavigationError):
    """Gene details or bounds could not be loaded."""

    def __init__(self, message: str = "Failed to load gene information. Please try again."):
        super().__init__(message)


class SequenceLoadError(GeneNavigationError):
    """Sequence window could not be loaded."""

    def __init__(self, message: str = "Failed to load sequence data"):
        super().__init__(message)


class ClinvarLoadError(GeneNavigationError):
    """ClinVar variant set could not be loaded."""

    def __init__(self, message: str = "Failed to fetch ClinVar variants"):
        super().__init__(message)
