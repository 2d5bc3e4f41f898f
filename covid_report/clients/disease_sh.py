"""disease.sh COVID-19 statistics client.

Endpoints:
    ``<base>/countries/<id>`` for a single country
    ``<base>/all``            for the global aggregate
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any

from covid_report.constants import DISEASE_SH_BASE_URL, GLOBAL_TARGET
from covid_report.http_utils import HTTPError, http_get, join_url

logger = logging.getLogger(__name__)


class StatisticsAPIError(Exception):
    """Raised on disease.sh API failures."""

    def __init__(self, endpoint: str, detail: str = "") -> None:
        self.endpoint = endpoint
        self.detail = detail
        super().__init__(f"disease.sh API error on {endpoint}: {detail}")


@dataclass(frozen=True)
class StatisticsRecord:
    """Snapshot of the counters shown in a report.

    Any field may be ``None`` when the source omits it.
    """

    population: int | None = None
    active: int | None = None
    critical: int | None = None
    recovered: int | None = None
    cases: int | None = None
    deaths: int | None = None
    tests: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> StatisticsRecord:
        values: dict[str, int | None] = {}
        for f in fields(cls):
            values[f.name] = _to_count(payload.get(f.name))
        return cls(**values)

    def to_dict(self) -> dict[str, int | None]:
        return asdict(self)


_RECORD_FIELDS = frozenset(f.name for f in fields(StatisticsRecord))


def _to_count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def statistics_path(target_id: str) -> str:
    """Endpoint path for *target_id* (``all`` selects the aggregate)."""
    if target_id == GLOBAL_TARGET:
        return "all"
    return f"countries/{target_id}"


class StatisticsClient:
    """Thin wrapper around the disease.sh REST API.

    Parameters
    ----------
    base_url:
        Override for testing.
    timeout_s:
        Per-request timeout passed to ``requests``.
    """

    def __init__(
        self,
        base_url: str = DISEASE_SH_BASE_URL,
        timeout_s: float = 30.0,
    ) -> None:
        self._base_url = base_url
        self._timeout_s = timeout_s

    def url_for(self, target_id: str) -> str:
        return join_url(self._base_url, statistics_path(target_id))

    def get_statistics(self, target_id: str) -> StatisticsRecord:
        """Fetch the current statistics for *target_id*.

        Raises ``StatisticsAPIError`` on transport failure or when the
        response is not a JSON object carrying any of the record fields.
        """
        path = statistics_path(target_id)
        try:
            data = http_get(self.url_for(target_id), timeout_s=self._timeout_s)
        except HTTPError as exc:
            raise StatisticsAPIError(path, str(exc)) from exc

        if not isinstance(data, dict):
            raise StatisticsAPIError(path, f"unexpected payload type {type(data).__name__}")
        if not _RECORD_FIELDS.intersection(data):
            # disease.sh reports unknown countries as {"message": "..."}
            detail = data.get("message") or "payload has none of the statistics fields"
            raise StatisticsAPIError(path, str(detail))
        try:
            return StatisticsRecord.from_payload(data)
        except (TypeError, ValueError, OverflowError) as exc:
            raise StatisticsAPIError(path, f"malformed payload: {exc}") from exc

    def fetch(self, target_id: str) -> StatisticsRecord | None:
        """Like :meth:`get_statistics`, but ``None`` instead of raising."""
        try:
            return self.get_statistics(target_id)
        except StatisticsAPIError as exc:
            logger.debug("No statistics for %s: %s", target_id, exc)
            return None
