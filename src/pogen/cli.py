from __future__ import annotations

import argparse
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import sys
from typing import Sequence

from .config import DEFAULT_CONFIG, GeneratorConfig, SUPPORTED_LANGUAGES, load_config, merge_config
from .drift import (
    DiffMode,
    build_refactor_plan,
    compare_batches,
    format_report,
    has_changes,
    refactor_plan_to_dict,
    report_to_dict,
)
from .errors import PogenError
from .generator import PageObjectGenerator
from .metadata_store import load_metadata, save_metadata, write_text_atomic
from .models import ChangeReport

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DRIFT = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}\n")


def build_logger(verbose: bool = False, log_dir: Path | None = None) -> logging.Logger:
    logger = logging.getLogger("pogen")
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        logger.propagate = False
        try:
            directory = log_dir or (Path.home() / ".pogen")
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(directory / "pogen.log", encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
        except OSError:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(stream_handler)

    if verbose:
        logger.setLevel(logging.DEBUG)
        if not any(getattr(handler, "_pogen_verbose", False) for handler in logger.handlers):
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
            console._pogen_verbose = True  # type: ignore[attr-defined]
            logger.addHandler(console)
    return logger


def create_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pogen",
        description="Generate Playwright page objects and detect locator drift between snapshots.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a page object from a live URL")
    generate.add_argument("url", help="URL of the page to analyze")
    generate.add_argument("page_name", help="Name for the generated page object class")
    generate.add_argument("--output", "-o", help="Write the page object to this file instead of stdout")
    generate.add_argument("--json", dest="json_path", help="Write generation metadata to this JSON file")
    generate.add_argument(
        "--screenshot",
        nargs="?",
        const="",
        default=None,
        help="Capture a full-page screenshot (optional path)",
    )
    _add_config_arguments(generate)

    diff = subparsers.add_parser("diff", help="Compare two metadata snapshots")
    diff.add_argument("old", help="Baseline metadata JSON")
    diff.add_argument("new", help="Current metadata JSON")
    _add_report_arguments(diff)

    check = subparsers.add_parser("check", help="Regenerate a page and compare it against a baseline snapshot")
    check.add_argument("url", help="URL of the page to analyze")
    check.add_argument("page_name", help="Page name used for the snapshot")
    check.add_argument("--baseline", required=True, help="Baseline metadata JSON")
    check.add_argument("--update", action="store_true", help="Overwrite the baseline with the new snapshot")
    _add_config_arguments(check)
    _add_report_arguments(check)
    return parser


def cmd_generate(args: argparse.Namespace, logger: logging.Logger) -> int:
    generator = PageObjectGenerator(_resolve_config(args))
    screenshot_path = _screenshot_path(args.screenshot)
    logger.info("Generating %s from %s", args.page_name, args.url)
    result = generator.generate_from_url(
        args.url,
        args.page_name,
        screenshot_path=screenshot_path,
        extra_roles=args.extra_role or (),
    )

    if args.output:
        output_path = Path(args.output)
        write_text_atomic(output_path, result.code)
        print(f"Page object saved to: {output_path}")
    else:
        sys.stdout.write(result.code)

    if args.json_path:
        save_metadata(args.json_path, result.metadata)
        print(f"Metadata saved to: {args.json_path}")
    if result.metadata.screenshot_path:
        print(f"Screenshot saved to: {result.metadata.screenshot_path}")
    return EXIT_OK


def cmd_diff(args: argparse.Namespace, logger: logging.Logger) -> int:
    old = load_metadata(args.old)
    new = load_metadata(args.new)
    report = compare_batches(old.batch, new.batch, DiffMode(args.mode))
    logger.info("Compared %s against %s (%s mode)", args.old, args.new, args.mode)
    return _emit_report(args, report, new.page_name)


def cmd_check(args: argparse.Namespace, logger: logging.Logger) -> int:
    baseline = load_metadata(args.baseline)
    generator = PageObjectGenerator(_resolve_config(args, fallback=baseline.config))
    result = generator.generate_from_url(args.url, args.page_name, extra_roles=args.extra_role or ())
    report = compare_batches(baseline.batch, result.metadata.batch, DiffMode(args.mode))
    exit_code = _emit_report(args, report, args.page_name)
    if args.update and exit_code == EXIT_DRIFT:
        save_metadata(args.baseline, result.metadata)
        logger.info("Baseline %s updated", args.baseline)
    return exit_code


def main(argv: Sequence[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    logger = build_logger(verbose=args.verbose)

    handlers = {
        "generate": cmd_generate,
        "diff": cmd_diff,
        "check": cmd_check,
    }
    try:
        return handlers[args.command](args, logger)
    except PogenError as exc:
        logger.error("%s failed: %s", args.command, exc.message, extra={"error": exc.to_dict()})
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as exc:
        logger.exception("%s failed with an I/O error", args.command)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="JSON file with configuration overrides")
    parser.add_argument("--language", choices=SUPPORTED_LANGUAGES, help="Language of the generated page object")
    parser.add_argument(
        "--extra-role",
        action="append",
        metavar="ROLE",
        help="Also collect elements with this ARIA role (metadata only)",
    )


def _add_report_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--format", choices=("text", "json"), default="text", help="Report format")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DiffMode],
        default=DiffMode.LOCATOR.value,
        help="Compare locator expressions only, or source descriptors too",
    )
    parser.add_argument("--plan", help="Write a refactor plan JSON to this path")


def _resolve_config(args: argparse.Namespace, fallback: GeneratorConfig = DEFAULT_CONFIG) -> GeneratorConfig:
    config = load_config(args.config) if args.config else fallback
    if args.language:
        config = merge_config(config, {"template": {"language": args.language}})
    return config


def _screenshot_path(raw: str | None) -> str | None:
    if raw is None:
        return None
    if raw:
        return raw
    return f"screenshot-{int(datetime.now(timezone.utc).timestamp() * 1000)}.png"


def _emit_report(args: argparse.Namespace, report: ChangeReport, page_name: str) -> int:
    if args.format == "json":
        print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
    else:
        print(format_report(report))

    if args.plan:
        plan = build_refactor_plan(report, page_name)
        write_text_atomic(Path(args.plan), json.dumps(refactor_plan_to_dict(plan), indent=2, ensure_ascii=False) + "\n")

    return EXIT_DRIFT if has_changes(report) else EXIT_OK
