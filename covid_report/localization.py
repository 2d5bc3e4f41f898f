"""Display names for report targets.

Targets may be given as ISO-2 codes, ISO-3 codes, or English country
names (all accepted by disease.sh).  :meth:`CountryNameTranslator.translate`
returns ``None`` for anything it does not know so callers can fall back
to the raw identifier.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from covid_report.constants import GLOBAL_TARGET

logger = logging.getLogger(__name__)


@runtime_checkable
class Translator(Protocol):
    def translate(self, target_id: str) -> str | None: ...


# ISO-2 -> (ISO-3, display name)
_COUNTRIES: dict[str, tuple[str, str]] = {
    "AR": ("ARG", "Argentina"),
    "AU": ("AUS", "Australia"),
    "BR": ("BRA", "Brazil"),
    "CA": ("CAN", "Canada"),
    "CN": ("CHN", "China"),
    "DE": ("DEU", "Germany"),
    "ES": ("ESP", "Spain"),
    "FR": ("FRA", "France"),
    "GB": ("GBR", "United Kingdom"),
    "ID": ("IDN", "Indonesia"),
    "IN": ("IND", "India"),
    "IT": ("ITA", "Italy"),
    "JP": ("JPN", "Japan"),
    "KR": ("KOR", "South Korea"),
    "MX": ("MEX", "Mexico"),
    "NL": ("NLD", "Netherlands"),
    "RU": ("RUS", "Russia"),
    "SE": ("SWE", "Sweden"),
    "TR": ("TUR", "Turkey"),
    "US": ("USA", "United States"),
    "ZA": ("ZAF", "South Africa"),
}

# Names disease.sh uses that differ from the display name.
_ALIASES: dict[str, str] = {
    "uk": "GB",
    "usa": "US",
    "s. korea": "KR",
}


def _build_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {GLOBAL_TARGET: "World"}
    for iso2, (iso3, name) in _COUNTRIES.items():
        lookup[iso2.lower()] = name
        lookup[iso3.lower()] = name
        lookup[name.lower()] = name
    for alias, iso2 in _ALIASES.items():
        lookup[alias] = _COUNTRIES[iso2][1]
    return lookup


class CountryNameTranslator:
    """Case-insensitive identifier -> display name lookup.

    Parameters
    ----------
    overrides:
        Extra or replacement names keyed by identifier; checked first.
    """

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._lookup = _build_lookup()
        for key, name in (overrides or {}).items():
            self._lookup[key.strip().lower()] = name

    def translate(self, target_id: str) -> str | None:
        if not target_id:
            return None
        name = self._lookup.get(target_id.strip().lower())
        if name is None:
            logger.debug("No display name for %r", target_id)
        return name
