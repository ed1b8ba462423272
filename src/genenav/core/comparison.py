"""Selection of a scored variant for side-by-side comparison."""

from enum import Enum
from typing import Callable

from genenav.models.variant import ClinvarVariant


class ComparisonState(str, Enum):
    EMPTY = "empty"
    COMPARING = "comparing"


class ComparisonSelector:
    """Holds at most one compared variant, by identifier.

    The variant itself is always re-read through ``lookup`` so point updates
    to the set are visible. The selection reads as empty once the variant is
    gone from the set or no longer carries an effect prediction, and
    ``reconcile()`` makes that permanent: a cleared selection only comes back
    through ``select()``.
    """

    def __init__(self, lookup: Callable[[str], ClinvarVariant | None]):
        self._lookup = lookup
        self._selected_id: str | None = None

    def select(self, variant: ClinvarVariant | None) -> None:
        """Compare ``variant``; unscored variants are ignored, None clears."""
        if variant is None:
            self.clear()
            return
        if variant.evo2_result is None:
            return
        self._selected_id = variant.clinvar_id

    def clear(self) -> None:
        self._selected_id = None

    def reconcile(self) -> None:
        """Drop the selection once its variant is gone or no longer scored."""
        if self._selected_id is not None and self.current is None:
            self._selected_id = None

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def current(self) -> ClinvarVariant | None:
        if self._selected_id is None:
            return None
        variant = self._lookup(self._selected_id)
        if variant is None or variant.evo2_result is None:
            return None
        return variant

    @property
    def state(self) -> ComparisonState:
        return ComparisonState.COMPARING if self.current is not None else ComparisonState.EMPTY
