"""Validation of requested sequence windows against gene bounds.

Rules are applied in order and the first failure wins:

1. start and end must be integers
2. start < end
3. start >= lower bound and end <= upper bound (when bounds are known)
4. end - start <= maximum view range (always)

Messages embed the offending numbers because they are shown verbatim next to
the range inputs.
"""

import re
from typing import Any

from genenav.models.gene import GeneBounds, GenomicRange

MAX_VIEW_RANGE = 10_000

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


class RangeValidationError(ValueError):
    """Base class for rejected window requests."""

    pass


class ParseError(RangeValidationError):
    def __init__(self, start: Any = None, end: Any = None):
        self.start = start
        self.end = end
        super().__init__("Please enter valid start and end positions")


class OrderError(RangeValidationError):
    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        super().__init__("Start position must be less than end position")


class BelowMinimum(RangeValidationError):
    def __init__(self, requested_start: int, minimum: int):
        self.requested_start = requested_start
        self.minimum = minimum
        super().__init__(
            f"Start position ({requested_start}) is below the minimum value ({minimum})"
        )


class AboveMaximum(RangeValidationError):
    def __init__(self, requested_end: int, maximum: int):
        self.requested_end = requested_end
        self.maximum = maximum
        super().__init__(
            f"End position ({requested_end}) exceeds the maximum value ({maximum})"
        )


class SpanTooLarge(RangeValidationError):
    def __init__(self, span: int, max_span: int):
        self.span = span
        self.max_span = max_span
        super().__init__(
            f"Selected range ({span} bp) exceeds maximum view range of {max_span} bp"
        )


def parse_position(value: Any) -> int | None:
    """Parse an int or integer string; anything else yields None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    return None


def validate_window(
    start: Any,
    end: Any,
    bounds: GeneBounds | None,
    max_span: int = MAX_VIEW_RANGE,
) -> GenomicRange:
    """Validate a requested window.

    Args:
        start: Requested start (int or string as typed by the user)
        end: Requested end
        bounds: Gene bounds, or None when not yet known
        max_span: Largest permitted end - start

    Returns:
        The validated window, unchanged

    Raises:
        RangeValidationError: The first rule the request violates
    """
    parsed_start = parse_position(start)
    parsed_end = parse_position(end)
    if parsed_start is None or parsed_end is None:
        raise ParseError(start, end)

    if parsed_start >= parsed_end:
        raise OrderError(parsed_start, parsed_end)

    if bounds is not None:
        if parsed_start < bounds.lo:
            raise BelowMinimum(parsed_start, bounds.lo)
        if parsed_end > bounds.hi:
            raise AboveMaximum(parsed_end, bounds.hi)

    span = parsed_end - parsed_start
    if span > max_span:
        raise SpanTooLarge(span, max_span)

    return GenomicRange(start=parsed_start, end=parsed_end)
