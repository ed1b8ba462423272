"""Latest-request-wins bookkeeping."""

import itertools


class RequestTracker:
    """Issues monotonically increasing tokens for one state slot.

    A response may be committed only if the token captured when its request
    was initiated is still the latest. When two responses resolve in the same
    event-loop turn, the one whose request was initiated last wins, whatever
    the order of resolution.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0

    def begin(self) -> int:
        self._latest = next(self._counter)
        return self._latest

    def is_latest(self, token: int) -> bool:
        return token == self._latest

    def invalidate(self) -> None:
        """Supersede every request issued so far."""
        self._latest = next(self._counter)

    @property
    def latest(self) -> int:
        return self._latest
