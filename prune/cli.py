"""Command-line interface for history pruning utilities."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from .config import ConfigLoader, create_example_config
from .history import ConversationHistory, coerce_response_item
from .stats import format_report
from .types import PruneConfig, PruneError, ResponseItem


def parse_messages_json(data: str) -> list[ResponseItem]:
    """Parse a JSON list of {"role", "content"} objects."""
    try:
        msgs = json.loads(data)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(msgs, list):
        print("Invalid JSON: expected a list of messages", file=sys.stderr)
        sys.exit(1)

    return [coerce_response_item(msg) for msg in msgs]


def read_messages(args: Any) -> list[ResponseItem]:
    if args.messages_file:
        return parse_messages_json(Path(args.messages_file).read_text())
    return parse_messages_json(args.messages)


def load_config(args: Any) -> PruneConfig:
    config = ConfigLoader.load(args.config, merge_env=args.merge_env)
    if getattr(args, "max_tokens", None) is not None:
        config = replace(config, max_tokens=args.max_tokens)
        config.validate()
    return config


def cmd_validate_config(args: Any) -> None:
    """Validate configuration file."""
    try:
        config = load_config(args)
        print("✓ Configuration is valid")
        print(f"  Max tokens: {config.max_tokens}")
        print(f"  Min messages: {config.policy.min_messages}")
        print(f"  Full retention: {config.policy.full_retention_count}")
        print(
            "  Aggressive pruning: "
            f"{'enabled' if config.policy.enable_aggressive_pruning else 'disabled'}"
        )
    except (OSError, PruneError) as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_dry_run(args: Any) -> None:
    """Replay messages and report the outcome without writing anything."""
    try:
        config = replace(load_config(args), telemetry_enabled=False)
        messages = read_messages(args)

        history = ConversationHistory.from_config(config, history_id="cli-dry-run")
        results = history.record_items(messages)

        print(f"Messages in: {len(messages)}")
        print(f"Tokens in: {history.estimate_tokens(messages)}")
        print(f"Pruning runs: {len(results)}")
        print(format_report(history.get_stats()))
    except (OSError, PruneError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_run(args: Any) -> None:
    """Replay messages through a history and emit the survivors."""
    try:
        config = load_config(args)
        messages = read_messages(args)

        history = ConversationHistory.from_config(config, history_id="cli-session")
        history.record_items(messages)
        stats = history.get_stats()

        print(format_report(stats, title="Pruning Result"))

        if args.output:
            output = {
                "messages": [
                    {"role": item.role, "content": item.content}
                    for item in history.items()
                ],
                "statistics": stats.to_dict(),
            }
            with open(args.output, "w") as f:
                json.dump(output, f, indent=2)
            print(f"  Output saved to: {args.output}")
    except (OSError, PruneError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_create_config(args: Any) -> None:
    """Create example configuration file."""
    try:
        create_example_config(args.output)
        print(f"Example config created: {args.output}")
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument(
        "--merge-env", action="store_true", help="Merge environment variables"
    )
    parser.add_argument("--max-tokens", type=int, help="Override max_tokens")


def _add_messages(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--messages", help="JSON-encoded messages list")
    group.add_argument("--messages-file", help="File containing a JSON messages list")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prune", description="Token-budgeted conversation history tool"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    validate_parser = subparsers.add_parser(
        "validate-config", help="Validate configuration file"
    )
    _add_common(validate_parser)
    validate_parser.set_defaults(func=cmd_validate_config)

    dry_run_parser = subparsers.add_parser(
        "dry-run", help="Show pruning outcome without writing output"
    )
    _add_common(dry_run_parser)
    _add_messages(dry_run_parser)
    dry_run_parser.set_defaults(func=cmd_dry_run)

    run_parser = subparsers.add_parser("run", help="Prune messages")
    _add_common(run_parser)
    _add_messages(run_parser)
    run_parser.add_argument("--output", help="Output file for surviving messages (JSON)")
    run_parser.set_defaults(func=cmd_run)

    config_parser = subparsers.add_parser(
        "create-config", help="Create example configuration file"
    )
    config_parser.add_argument(
        "--output", help="Output file path", default="prune.yaml"
    )
    config_parser.set_defaults(func=cmd_create_config)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
