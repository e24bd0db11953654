"""CLI entry point: ``python -m coatingcam project.json -o output.gcode``"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config.settings import CoatingSettings
from .core.job import load_job
from .core.shapes import AvoidanceStrategy
from .gcode.validate import WorkEnvelope, validate_program


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="coatingcam",
        description="Generate coating G-code from a JSON shape project.",
    )
    p.add_argument("input", type=Path, help="Input project file (.json)")
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output G-code file (default: <input>.gcode)",
    )
    p.add_argument(
        "--settings", type=Path, default=None,
        help="Settings JSON overriding the project's own settings",
    )
    p.add_argument("--no-masking", action="store_true",
                   help="Ignore masking shapes")
    p.add_argument(
        "--strategy", choices=[s.value for s in AvoidanceStrategy], default=None,
        help="Travel avoidance strategy around masks",
    )
    p.add_argument("--max-feed", type=float, default=None,
                   help="Warn about feeds above this value (mm/min)")
    p.add_argument("--skip-validate", action="store_true",
                   help="Skip program validation")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Enable debug logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    output: Path = args.output or args.input.with_suffix(".gcode")

    try:
        job = load_job(args.input)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.settings is not None:
        job.settings = CoatingSettings.load(args.settings)
    if args.no_masking:
        job.settings.enable_masking = False
    if args.strategy is not None:
        job.settings.travel_avoidance_strategy = AvoidanceStrategy(args.strategy)

    print(f"Loaded {args.input}: {len(job.shapes)} shapes "
          f"({len(job.coating_shapes)} to coat, {len(job.mask_shapes)} masks)")

    def _progress(percent: float, message: str) -> None:
        logging.getLogger("coatingcam.progress").info("%5.1f%% %s", percent, message)

    text, emitter = job.generate_gcode_sync(_progress)
    print(f"  Generated {len(emitter.lines)} lines, "
          f"{emitter.coat_move_count} coating moves ({job.settings.unit.label()})")

    if not args.skip_validate:
        envelope = WorkEnvelope.from_work_area(*job.work_area, max_feed=args.max_feed)
        result = validate_program(emitter.moves, envelope)
        if result.has_errors:
            print("VALIDATION ERRORS:", file=sys.stderr)
            for issue in result.issues:
                if issue.severity == "error":
                    print(f"  ERROR: {issue.message}", file=sys.stderr)
            return 1
        for issue in result.issues:
            if issue.severity == "warning":
                print(f"  Warning: {issue.message}")

    output.write_text(text)
    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
