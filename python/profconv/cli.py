import argparse
import logging
import sys
from pathlib import Path

from .detect import ProfileFormat, detect_format, load_any
from .errors import ProfconvError
from .performance import PerformanceLog
from .utils.files import GZIP_SUFFIXES
from .utils.logging import add_logging_args, configure_logging_from_args

logger = logging.getLogger("Profconv-cli")

INPUT_SUFFIXES = (".json",) + GZIP_SUFFIXES


def output_path(input_file: Path, output_dir: Path | None) -> Path:
    """``trace.json.gz`` -> ``<output_dir>/trace.profile.json``"""
    name = input_file.name
    for suffix in GZIP_SUFFIXES:
        if name.lower().endswith(suffix):
            name = name[:-len(suffix)]
            break
    if name.lower().endswith(".json"):
        name = name[:-len(".json")]
    return (output_dir or input_file.parent) / f"{name}.profile.json"


def collect_inputs(paths: list[Path]) -> list[Path]:
    inputs = []
    for path in paths:
        if path.is_dir():
            inputs.extend(sorted(
                f for f in path.iterdir()
                if f.is_file() and f.name.lower().endswith(INPUT_SUFFIXES)
            ))
        else:
            inputs.append(path)
    return inputs


def run_convert(args: argparse.Namespace) -> int:
    fmt = ProfileFormat.parse(args.format)
    inputs = collect_inputs(args.inputs)
    if not inputs:
        logger.error("No input files to convert")
        return 1

    if args.output_dir:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    performance = PerformanceLog()

    success = 0
    failed = 0
    for input_file in inputs:
        scenario = performance.add_scenario(str(input_file))
        logger.info("Converting '%s'...", str(input_file))
        try:
            with scenario.event("load"):
                profile, detected = load_any(input_file, fmt, scenario)
            out_file = output_path(input_file, args.output_dir)
            with scenario.event("write"):
                with open(out_file, "w", encoding="utf-8") as fp:
                    profile.to_json(fp, indent=args.indent)
        except KeyboardInterrupt:
            raise
        except (OSError, ProfconvError) as e:
            logger.error("Failed to convert '%s': %s", str(input_file), str(e))
            failed += 1
        else:
            logger.info(
                "Wrote '%s' (%s, %d threads, %.1f ms)",
                str(out_file), detected.value, profile.thread_count, profile.duration,
            )
            success += 1

    if args.performance_report:
        performance.write(args.performance_report)
        logger.debug("Performance report written to '%s'", args.performance_report)

    print(f"Summary: successfully converted {success} files, failed to convert {failed} files")
    return 1 if failed else 0


def run_detect(args: argparse.Namespace) -> int:
    failed = 0
    for input_file in collect_inputs(args.inputs):
        try:
            fmt = detect_format(input_file)
        except (OSError, ProfconvError) as e:
            logger.error("Failed to read '%s': %s", str(input_file), str(e))
            failed += 1
            continue
        print(f"{input_file}: {fmt.value}")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="profconv",
        description="Convert Chrome traces and Firefox profiles into one canonical profile format"
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert profiles to the canonical format")
    convert.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        metavar=".json | .json.gz | DIR",
        help="Profile or trace files, or directories containing them"
    )
    convert.add_argument(
        "-o", "--output-dir",
        type=Path,
        metavar="DIR",
        default=None,
        help="Output directory (default: next to each input)"
    )
    convert.add_argument(
        "-f", "--format",
        type=str,
        choices=["auto", "chrome", "firefox"],
        default="auto",
        help="Input format (choices: %(choices)s, default: %(default)s)"
    )
    convert.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indent the output JSON by this many spaces"
    )
    convert.add_argument(
        "--performance-report",
        type=str,
        default=None,
        metavar="CSV",
        help="Write per-phase conversion timings to CSV"
    )
    convert.set_defaults(func=run_convert)

    detect = subparsers.add_parser("detect", help="Print the detected format of each input")
    detect.add_argument("inputs", type=Path, nargs="+", metavar="FILE | DIR")
    detect.set_defaults(func=run_detect)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging_from_args(args)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
