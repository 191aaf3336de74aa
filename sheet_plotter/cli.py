"""Command line entry point: plot a spreadsheet and write the exports."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .core import PlotMode, ProcessingError
from .pipelines import PlotSession
from .services import GapPolicy, SheetReader

__all__ = ["main"]

LOGGER = logging.getLogger(__name__)


def _parse_point(value: str) -> tuple[str, str]:
    lat_column, sep, lng_column = value.partition(":")
    if not sep or not lat_column or not lng_column:
        raise argparse.ArgumentTypeError(f"expected LAT_COLUMN:LNG_COLUMN, got {value!r}")
    return lat_column, lng_column


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Plot spreadsheet rows as areas or paths and export them.",
    )
    parser.add_argument("sheet", type=Path, help="Input CSV or XLSX file")
    parser.add_argument(
        "--point",
        dest="points",
        action="append",
        type=_parse_point,
        required=True,
        metavar="LAT:LNG",
        help="Latitude and longitude columns of one vertex; repeat in vertex order (at least 2)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in PlotMode],
        default=PlotMode.AREA.value,
        help="Plot rows as closed areas or as distance paths (default: area)",
    )
    parser.add_argument(
        "--reject-gaps",
        action="store_true",
        help="Skip rows with any missing point instead of closing up the gap.",
    )
    parser.add_argument("--kml", type=Path, help="Write the KML document here")
    parser.add_argument("--kmz", type=Path, help="Write a KMZ archive here")
    parser.add_argument("--bundle", type=Path, help="Write the GeoJSON + CSV zip bundle here")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    if len(args.points) < 2:
        parser.error("at least two --point options are required")

    session = PlotSession.default()
    if args.reject_gaps:
        session.builder.gap_policy = GapPolicy.REJECT

    try:
        session.load_sheet(SheetReader().load(args.sheet))
        for _ in range(len(args.points) - len(session.point_configs)):
            session.add_point()
        for index, (lat_column, lng_column) in enumerate(args.points):
            session.assign_column(index, "lat", lat_column)
            session.assign_column(index, "lng", lng_column)
        session.set_mode(args.mode)

        result = session.plot()
        LOGGER.info("Plotted: %d rows, skipped: %d rows", result.plotted_count, result.skipped_count)

        if args.kml:
            args.kml.write_text(session.export_kml(), encoding="utf-8")
        if args.kmz:
            args.kmz.write_bytes(session.export_kmz())
        if args.bundle:
            args.bundle.write_bytes(session.export_bundle())
    except ProcessingError as exc:
        LOGGER.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
