# src/main.py — v2
"""CLI entry point: parse and risk commands.

Usage:
    rentroll parse <file> [--assessments <json>] [--sheet <name>]
    rentroll risk <json>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rentroll.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from rentroll.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rentroll",
        description=f"rentroll v{__version__} - rent roll normalization and tenant risk summary",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- parse ---
    p_parse = subparsers.add_parser(
        "parse", help="Normalize every sheet of a rent roll file",
    )
    p_parse.add_argument("file", type=Path, help="Path to .xlsx or .csv file")
    p_parse.add_argument(
        "--assessments", type=Path, default=None,
        help="Tenant assessments JSON to summarize alongside each sheet",
    )
    p_parse.add_argument(
        "--sheet", default=None,
        help="Only process the sheet with this name",
    )
    p_parse.set_defaults(func=_cmd_parse)

    # --- risk ---
    p_risk = subparsers.add_parser(
        "risk", help="Summarize tenant risk assessments",
    )
    p_risk.add_argument("file", type=Path, help="Assessments JSON file")
    p_risk.set_defaults(func=_cmd_risk)

    return parser


async def _cmd_parse(args: argparse.Namespace, settings: Any) -> int:
    """Normalize a workbook and print one outcome per sheet."""
    from rentroll.extraction.sheet_reader import read_workbook, to_documents
    from rentroll.pipeline.orchestrator import AnalysisOrchestrator

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    sheets = read_workbook(file_path)
    if args.sheet is not None:
        sheets = [s for s in sheets if s.name == args.sheet]
        if not sheets:
            logger.error("Sheet not found: %s", args.sheet)
            return 1

    assessments = None
    if args.assessments is not None:
        assessments, _ = _load_risk_file(args.assessments)

    orchestrator = AnalysisOrchestrator.from_settings(settings)
    documents = to_documents(file_path, sheets)
    outcomes = await asyncio.gather(
        *(orchestrator.process(d, assessments=assessments) for d in documents)
    )

    payload = [o.model_dump(mode="json") for o in outcomes]
    print(json.dumps(payload, indent=2))
    return 0 if all(o.success for o in outcomes) else 1


async def _cmd_risk(args: argparse.Namespace, settings: Any) -> int:
    """Print the portfolio analysis for an assessments file."""
    from rentroll.risk.aggregator import analyze_portfolio

    if not args.file.exists():
        logger.error("File not found: %s", args.file)
        return 1

    assessments, actions = _load_risk_file(args.file)
    analysis = analyze_portfolio(assessments, actions)
    print(analysis.model_dump_json(indent=2))
    return 0


def _load_risk_file(path: Path) -> tuple[list[Any], list[Any]]:
    """Read assessments (and actions) from a list or an upstream result object."""
    from rentroll.risk.adapter import to_actions, to_assessments

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return to_assessments(data), []

    analysis = data.get("tenantDefaultAnalysis", data)
    raw_assessments = analysis.get("tenantAssessments") or analysis.get("tenant_assessments") or []
    raw_actions = analysis.get("recommendedActions") or analysis.get("recommended_actions") or []
    return to_assessments(raw_assessments), to_actions(raw_actions)


def _setup_logging(settings: Any, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from rentroll.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
