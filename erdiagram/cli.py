#!/usr/bin/env python3
"""Entity relationship diagram CLI - lay out, navigate, validate and summarize ER data."""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from .analysis import summarize_graph
from .composition import LayoutStrategy, compose_diagram
from .config import configure_logging, get_settings
from .graph import EntityReferenceError, Graph
from .models import ElasticLayoutOptions, EntityRelationshipData
from .rendering import DiagramHost
from .validation import IssueSeverity, validate_data, validation_summary

logger = logging.getLogger(__name__)


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _error(message):
    _json_out({"status": "error", "error": message}, code=1)


def _load_data(file_path):
    """Read entity relationship data from a JSON file."""
    try:
        with open(file_path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        _error(f"Cannot read {file_path}: {e.strerror}")
    except json.JSONDecodeError as e:
        _error(f"Invalid JSON in {file_path}: {e}")

    try:
        return EntityRelationshipData.from_json_dict(raw)
    except ValidationError as e:
        _error(f"Invalid data in {file_path}: {e}")


def _parse_options(value):
    """Parse elastic layout options from a JSON string."""
    if value is None:
        return None
    try:
        return ElasticLayoutOptions.model_validate_json(value)
    except ValidationError as e:
        _error(f"Invalid layout options: {e}")


def _host(args, settings):
    return DiagramHost(
        width=args.width or settings.width,
        height=args.height or settings.height,
        seed=args.seed if args.seed is not None else settings.seed,
    )


# ── Layout ───────────────────────────────────────────────────────────────────

def cmd_layout(args, settings):
    data = _load_data(args.file_path)
    options = _parse_options(args.options)
    try:
        diagram = compose_diagram(_host(args, settings), data, args.strategy, options)
    except EntityReferenceError as e:
        _error(str(e))
    _json_out(diagram.to_dict())


def cmd_navigate(args, settings):
    data = _load_data(args.file_path)
    try:
        diagram = compose_diagram(_host(args, settings), data, LayoutStrategy.NAVIGABLE)
    except EntityReferenceError as e:
        _error(str(e))

    if args.entity is not None:
        try:
            diagram.select(args.entity)
        except KeyError:
            _error(f"Entity not found: {args.entity}")
    _json_out(diagram.to_dict())


# ── Analysis ─────────────────────────────────────────────────────────────────

def cmd_validate(args, settings):
    issues = validate_data(_load_data(args.file_path))
    for issue in issues:
        if issue.severity != IssueSeverity.INFO:
            logger.warning("%s: %s", issue.severity.value, issue.message)

    summary = validation_summary(issues)
    _json_out({
        "success": summary["valid"],
        "issues": [issue.to_dict() for issue in issues],
        "summary": summary
    }, code=0 if summary["valid"] else 1)


def cmd_summarize(args, settings):
    data = _load_data(args.file_path)
    try:
        graph = Graph.from_data(data)
    except EntityReferenceError as e:
        _error(str(e))
    _json_out({"success": True, "summary": summarize_graph(graph, top_n=args.top).to_dict()})


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args, settings):
    from .server import run

    updates = {}
    if args.host is not None:
        updates["host"] = args.host
    if args.port is not None:
        updates["port"] = args.port
    run(settings.model_copy(update=updates))


# ── Main ─────────────────────────────────────────────────────────────────────

def _add_host_arguments(p):
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--seed", type=int, default=None)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="erdiagram", description="Entity relationship diagram CLI")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    # Layout
    p = sub.add_parser("layout")
    p.add_argument("file_path")
    p.add_argument("--strategy", choices=[s.value for s in LayoutStrategy], default=LayoutStrategy.ELASTIC.value)
    p.add_argument("--options", default=None, help="Elastic layout options as a JSON object")
    _add_host_arguments(p)

    p = sub.add_parser("navigate")
    p.add_argument("file_path")
    p.add_argument("--entity", default=None)
    _add_host_arguments(p)

    # Analysis
    p = sub.add_parser("validate")
    p.add_argument("file_path")

    p = sub.add_parser("summarize")
    p.add_argument("file_path")
    p.add_argument("--top", type=int, default=5)

    # Service
    p = sub.add_parser("serve")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        _error(f"Invalid configuration: {e}")
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    cmd_map = {
        "layout": cmd_layout,
        "navigate": cmd_navigate,
        "validate": cmd_validate,
        "summarize": cmd_summarize,
        "serve": cmd_serve,
    }
    cmd_map[args.command](args, settings)


if __name__ == "__main__":
    main()
