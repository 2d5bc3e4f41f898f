"""Load report configuration from YAML, a ``.env`` file, and the environment.

Priority order (later wins):

1. Built-in defaults from :mod:`covid_report.constants`
2. ``config/report.yml`` (or the path given to :func:`load_config`)
3. ``.env`` file in the project root
4. OS environment variables (``BASE_URL``, ``LOCAL_FOLDER``, ...)

The resulting :class:`ReportConfig` is passed explicitly to the
assembler; nothing here is cached at module level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from covid_report.constants import DEFAULT_FONT_FAMILY, DISEASE_SH_BASE_URL, OUTPUT_DIR

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "config" / "report.yml"

# Environment variable -> ReportConfig attribute.
_ENV_OVERRIDES: dict[str, str] = {
    "BASE_URL": "base_url",
    "LOCAL_FOLDER": "output_dir",
    "REPORT_FONT_FAMILY": "font_family",
    "REPORT_FONT_PATH": "font_normal",
    "REPORT_FONT_BOLD_PATH": "font_bold",
    "ANNOTATIONS_PATH": "annotations_path",
    "REPORT_TIMEOUT_S": "timeout_s",
}


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or malformed."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Invalid configuration in {source}: {detail}")


@dataclass(frozen=True)
class ReportConfig:
    """Settings shared by every report build.

    ``font_normal`` / ``font_bold`` are TrueType file paths.  When
    ``font_normal`` is empty the built-in ``font_family`` is used as-is.
    """

    base_url: str = DISEASE_SH_BASE_URL
    output_dir: str = OUTPUT_DIR
    timeout_s: float = 30.0
    font_family: str = DEFAULT_FONT_FAMILY
    font_normal: str | None = None
    font_bold: str | None = None
    annotations_path: str | None = None
    country_names: dict[str, str] = field(default_factory=dict)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigError(str(path), str(exc)) from exc
    except OSError as exc:
        raise ConfigError(str(path), str(exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top-level value must be a mapping")
    return data


def _coerce(values: dict[str, Any], source: str) -> dict[str, Any]:
    """Drop unknown keys and normalise types."""
    known = set(ReportConfig.__dataclass_fields__)
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", source, ", ".join(unknown))

    out = {k: v for k, v in values.items() if k in known}
    if "timeout_s" in out:
        try:
            out["timeout_s"] = float(out["timeout_s"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(source, f"timeout_s must be a number, got {out['timeout_s']!r}") from exc
    if "country_names" in out:
        names = out["country_names"] or {}
        if not isinstance(names, dict):
            raise ConfigError(source, "country_names must be a mapping")
        out["country_names"] = {str(k): str(v) for k, v in names.items()}
    return out


def load_config(
    path: str | Path | None = None,
    *,
    env: dict[str, str] | None = None,
    use_dotenv: bool = True,
) -> ReportConfig:
    """Build a :class:`ReportConfig`.

    Parameters
    ----------
    path:
        YAML file to read.  Defaults to ``config/report.yml``; a missing
        default file is not an error, a missing explicit path is.
    env:
        Mapping used for overrides instead of ``os.environ`` (tests).
    use_dotenv:
        Load the project ``.env`` file into ``os.environ`` first.
    """
    values: dict[str, Any] = {}

    if path is not None:
        cfg_path = Path(path)
        if not cfg_path.exists():
            raise ConfigError(str(cfg_path), "file not found")
        values.update(_coerce(_read_yaml(cfg_path), str(cfg_path)))
    elif _DEFAULT_CONFIG_PATH.exists():
        values.update(_coerce(_read_yaml(_DEFAULT_CONFIG_PATH), str(_DEFAULT_CONFIG_PATH)))

    if env is None:
        if use_dotenv:
            env_path = _PROJECT_ROOT / ".env"
            if env_path.exists():
                load_dotenv(env_path)
                logger.info("Loaded environment from %s", env_path)
        env = dict(os.environ)

    overrides = {
        attr: env[name]
        for name, attr in _ENV_OVERRIDES.items()
        if env.get(name)
    }
    values.update(_coerce(overrides, "environment"))

    return ReportConfig(**values)
