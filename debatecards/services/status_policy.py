from typing import Iterable, Optional

from debatecards.config.settings import settings


class AcceptableStatusPolicy:
    """Decides whether an HTTP status proves a citation link is reachable.

    Every 2xx and 3xx counts. `extra_statuses` adds codes returned by servers that exist
    but block the probe (401/403/405 by default).
    """

    def __init__(self, extra_statuses: Optional[Iterable[int]] = None):
        if extra_statuses is None:
            extra_statuses = settings.PROBE_ACCEPTABLE_STATUSES
        self.extra_statuses = frozenset(int(s) for s in extra_statuses)

    def is_acceptable(self, status: Optional[int]) -> bool:
        if status is None:
            return False
        return 200 <= status < 400 or status in self.extra_statuses
