"""
CLI entry point for the ACV mix service.

Usage:
    python -m acv_mix serve --port 5000
    python -m acv_mix compute --data-dir data
    python -m acv_mix compute --dataset customerTypes --summary
    python -m acv_mix init-config config.json
"""

import argparse
import json
import logging
import sys

from acv_mix.aggregation.assembler import DATASETS, compute_response
from acv_mix.aggregation.views import summarize_dataset
from acv_mix.config.settings import create_default_config, load_config_with_fallback
from acv_mix.services.record_source import RecordSource
from acv_mix.shared.exceptions import AcvMixException
from acv_mix.shared.logging_config import configure_structured_logging
from acv_mix.shared.models import response_to_dict


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    from acv_mix.main import run_dev_server

    run_dev_server(host=args.host, port=args.port, reload=args.reload)
    return 0


def cmd_compute(args: argparse.Namespace) -> int:
    """Compute the response once and print it as JSON."""
    config = load_config_with_fallback(args.config)
    if args.data_dir:
        config.paths.data_dir = args.data_dir

    source = RecordSource.from_config(config)

    try:
        response = compute_response(
            source,
            parallel=config.processing.parallel,
            max_workers=config.processing.max_workers,
        )
    except AcvMixException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.dataset:
        dataset = response[args.dataset]
        payload = (
            summarize_dataset(dataset).to_dict() if args.summary else dataset.to_dict()
        )
    else:
        payload = response_to_dict(response)

    print(json.dumps(payload, indent=args.indent))
    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    create_default_config(args.path)
    print(f"Default configuration written to {args.path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acv_mix", description="Won ACV mix aggregation service"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Log level (default: WARNING)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Listen port")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.set_defaults(func=cmd_serve)

    compute = subparsers.add_parser("compute", help="Print the aggregated response")
    compute.add_argument("--config", default=None, help="Path to config.json")
    compute.add_argument("--data-dir", default=None, help="Override data directory")
    compute.add_argument(
        "--dataset", choices=list(DATASETS), default=None, help="Print one dataset"
    )
    compute.add_argument(
        "--summary",
        action="store_true",
        help="Print the display summary (requires --dataset)",
    )
    compute.add_argument("--indent", type=int, default=2, help="JSON indent")
    compute.set_defaults(func=cmd_compute)

    init_config = subparsers.add_parser(
        "init-config", help="Write a default configuration file"
    )
    init_config.add_argument("path", help="Output path")
    init_config.set_defaults(func=cmd_init_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "summary", False) and not args.dataset:
        parser.error("--summary requires --dataset")

    configure_structured_logging(level=args.log_level)
    logging.getLogger(__name__).debug(f"Running command: {args.command}")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
