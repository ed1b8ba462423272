"""genenav: gene region navigation and ClinVar variant state."""

__version__ = "0.1.0"
