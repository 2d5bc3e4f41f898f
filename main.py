#!/usr/bin/env python3
"""COVID-19 report -- CLI entry point.

Usage:
    python main.py --country JP --chart charts/jp.png
    python main.py --country all --chart charts/world.png --datetime "2020-05-01 09:00"
    python main.py --help

Settings come from ``config/report.yml``; ``BASE_URL`` and ``LOCAL_FOLDER``
in the environment (or a ``.env`` file) override the base URL and the
output directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime

# ---------------------------------------------------------------------------
# Early setup: configure logging before any covid_report imports
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("covid_report.main")


def main(argv: list[str] | None = None) -> int:
    """Generate one report and return the process exit code."""

    parser = argparse.ArgumentParser(
        description="COVID-19 report -- statistics, chart and comments as PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  python main.py --country JP --chart charts/jp.png
  python main.py --country all --chart charts/world.png --output-dir reports
""",
    )
    parser.add_argument(
        "--country", required=True,
        help="Country name / ISO code, or 'all' for the global aggregate",
    )
    parser.add_argument(
        "--chart", required=True,
        help="Chart image (PNG/JPEG) to embed in the report",
    )
    parser.add_argument(
        "--datetime", dest="display_time", default=None,
        help="Creation time printed in the report (default: now)",
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML config file (default: config/report.yml)",
    )
    parser.add_argument(
        "--output-dir", default=None,
        help="Directory for the PDF (overrides config / LOCAL_FOLDER)",
    )
    parser.add_argument(
        "--annotations", default=None,
        help="Annotation CSV with columns country,datetime,comment",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    from covid_report.annotations import CsvAnnotationStore
    from covid_report.config_loader import ConfigError, load_config
    from covid_report.report.assembler import FailureKind, ReportAssembler

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    if args.output_dir:
        config = replace(config, output_dir=args.output_dir)
    annotations_path = args.annotations or config.annotations_path

    display_time = args.display_time or datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    assembler = ReportAssembler(
        config,
        annotations=CsvAnnotationStore(annotations_path) if annotations_path else None,
    )
    result = assembler.assemble(display_time, args.country, args.chart)

    if not result.ok:
        # Render/IO failures were already logged by the assembler.
        if result.failure is FailureKind.INVALID_INPUT:
            logger.error("%s", result.error)
        return 1

    if not result.statistics_available:
        logger.debug("Statistics unavailable for %s; report omits the tables", args.country)
    return 0


if __name__ == "__main__":
    sys.exit(main())
