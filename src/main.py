# src/main.py - v1
"""CLI entry point: serve, build, compare, network, relations commands.

Usage:
    conceptgraph serve [--host HOST] [--port PORT]
    conceptgraph build "memory, network, graph" [--threshold 0.7] [--no-relations]
    conceptgraph compare <concept1> <concept2>
    conceptgraph network [--limit N]
    conceptgraph relations <concept>

Command results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import BaseModel, ValidationError

from conceptgraph.config.settings import ConfigurationError, Settings, load_settings
from conceptgraph.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    from conceptgraph.pipeline.orchestrator import InvalidTermsError

    try:
        result = args.func(args, settings)
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
        return result
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except InvalidTermsError as exc:
        logger.error("%s: %s", exc, exc.details)
        return 2
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="conceptgraph",
        description=f"conceptgraph v{__version__} - LLM-assisted concept graph builder",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- build ---
    p_build = subparsers.add_parser("build", help="Build a graph from comma-separated terms")
    p_build.add_argument("terms", help='Comma-separated terms, e.g. "memory, network, graph"')
    p_build.add_argument(
        "--threshold", type=float, default=None,
        help="Similarity threshold for relation analysis (default: SIMILARITY_THRESHOLD)",
    )
    p_build.add_argument(
        "--no-relations", action="store_true",
        help="Only embed and store the concepts",
    )
    p_build.set_defaults(func=_cmd_build)

    # --- compare ---
    p_compare = subparsers.add_parser("compare", help="Compare two concepts")
    p_compare.add_argument("concept1")
    p_compare.add_argument("concept2")
    p_compare.set_defaults(func=_cmd_compare)

    # --- network ---
    p_network = subparsers.add_parser("network", help="Print the stored concept network")
    p_network.add_argument(
        "--limit", type=int, default=None,
        help="Maximum number of concepts (default: NETWORK_DEFAULT_LIMIT)",
    )
    p_network.set_defaults(func=_cmd_network)

    # --- relations ---
    p_relations = subparsers.add_parser("relations", help="List relations of a concept")
    p_relations.add_argument("concept")
    p_relations.set_defaults(func=_cmd_relations)

    return parser


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Run the API with uvicorn (blocking)."""
    import uvicorn

    from conceptgraph.api.app import create_app

    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info("Serving on http://%s:%d%s", host, port, settings.api_prefix)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)
    return 0


async def _cmd_build(args: argparse.Namespace, settings: Settings) -> int:
    from conceptgraph.api.facade import build_graph
    from conceptgraph.core.text import parse_terms_input

    payload = await build_graph(
        parse_terms_input(args.terms),
        settings=settings,
        similarity_threshold=args.threshold,
        include_relations=not args.no_relations,
    )
    _print_json(payload)
    return 0


async def _cmd_compare(args: argparse.Namespace, settings: Settings) -> int:
    from conceptgraph.api.facade import create_orchestrator

    orchestrator = create_orchestrator(settings)
    try:
        _print_json(await orchestrator.compare_concepts(args.concept1, args.concept2))
    finally:
        await orchestrator.close()
    return 0


async def _cmd_network(args: argparse.Namespace, settings: Settings) -> int:
    from conceptgraph.api.facade import create_orchestrator

    orchestrator = create_orchestrator(settings)
    try:
        _print_json(await orchestrator.get_concept_network(args.limit))
    finally:
        await orchestrator.close()
    return 0


async def _cmd_relations(args: argparse.Namespace, settings: Settings) -> int:
    from conceptgraph.api.facade import create_orchestrator

    orchestrator = create_orchestrator(settings)
    try:
        relations = await orchestrator.get_concept_relations(args.concept)
        _print_json({
            "concept": args.concept,
            "relations": [r.model_dump(by_alias=True, mode="json") for r in relations],
            "relationsCount": len(relations),
        })
    finally:
        await orchestrator.close()
    return 0


def _print_json(data: BaseModel | dict[str, Any]) -> None:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from conceptgraph.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
