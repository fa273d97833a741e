"""CLI commands for carfind.

Provides subcommands for parsing vehicle search prompts.

Commands:
    carfind parse "<prompt>"   - Parse a prompt into search filters
    carfind check              - Check that the Ollama backend is reachable
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import AppConfig
from .core.backends.ollama import OllamaParserBackend
from .core.prompt_search import ParsedPrompt, PromptSearchService, create_service

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(log_dir: Path | None = None) -> Path:
    """Configure logging with rotation.

    Logs are written to ~/.carfind/logs/ with owner-only permissions.
    Uses INFO level by default; set CARFIND_DEBUG=1 for DEBUG level.

    Args:
        log_dir: Override for the log directory

    Returns:
        Path of the log file
    """
    log_dir = log_dir or Path.home() / ".carfind" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_dir.chmod(0o700)

    log_file = log_dir / "carfind.log"
    log_level = logging.DEBUG if os.environ.get("CARFIND_DEBUG") else logging.INFO

    # 5 MB per file, keep 3 backups
    handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    return log_file


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = AppConfig.load(Path(args.project_path).resolve())
    if getattr(args, "endpoint", None):
        config = config.model_copy(update={"ollama_endpoint": args.endpoint})
    if getattr(args, "offline", False):
        config = config.model_copy(update={"remote_enabled": False})
    return config


async def _parse(service: PromptSearchService, prompt: str) -> ParsedPrompt:
    async with service:
        return await service.parse_prompt(prompt)


def print_parsed(service: PromptSearchService, parsed: ParsedPrompt) -> None:
    """Render a parse result as rich tables."""
    filters = parsed.filters.to_dict()

    if filters:
        table = Table(title="Search Filters")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in filters.items():
            table.add_row(key, str(value))
        console.print(table)
    else:
        console.print("[dim]No filters extracted.[/dim]")

    if parsed.extracted_entities:
        table = Table(title="Entities")
        table.add_column("Type", style="cyan")
        table.add_column("Value")
        table.add_column("Confidence", justify="right")
        table.add_column("Span", justify="right", style="dim")
        for entity in parsed.extracted_entities:
            table.add_row(
                entity.type.value,
                str(entity.value),
                f"{entity.confidence:.2f}",
                f"{entity.position.start}-{entity.position.end}",
            )
        console.print(table)

    decision = service.evaluate(parsed)
    color = "green" if decision.should_search else "yellow"
    console.print(
        f"Confidence: [{color}]{parsed.confidence:.2f}[/{color}] "
        f"[dim]({parsed.source.value})[/dim]"
    )

    if not decision.should_search:
        console.print("[yellow]Not confident enough to search.[/yellow]")
    for suggestion in service.get_suggestions(parsed):
        console.print(f"  • {suggestion}")


def parse_command(args: argparse.Namespace) -> int:
    """Parse a prompt and print the result.

    Args:
        args: Parsed arguments (prompt, offline, json)

    Returns:
        Exit code (0 for success)
    """
    config = _load_config(args)
    service = create_service(config)
    prompt = " ".join(args.prompt)

    parsed = asyncio.run(_parse(service, prompt))

    if args.json:
        payload = parsed.to_dict()
        payload["decision"] = service.evaluate(parsed).to_dict()
        payload["suggestions"] = service.get_suggestions(parsed)
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print_parsed(service, parsed)

    return 0


def check_command(args: argparse.Namespace) -> int:
    """Report whether the Ollama backend is reachable.

    Returns:
        Exit code (0 if reachable, 1 otherwise)
    """
    config = _load_config(args)
    available = asyncio.run(OllamaParserBackend.is_available(config.ollama_endpoint))

    if available:
        console.print(f"[green]✓[/green] Ollama reachable at {config.ollama_endpoint}")
        return 0

    console.print(
        f"[red]✗[/red] Ollama not reachable at {config.ollama_endpoint} "
        "(prompts will use deterministic parsing)"
    )
    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="carfind",
        description="carfind: natural-language vehicle search (Hebrew / English)",
    )
    parser.add_argument(
        "--project",
        "-p",
        dest="project_path",
        default=".",
        help="Directory holding .carfind/config.yaml (default: current directory)",
    )
    parser.add_argument(
        "--endpoint",
        "-e",
        help="Ollama API base URL (overrides configuration)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # parse command
    # =========================================================================
    parse_parser = subparsers.add_parser("parse", help="Parse a search prompt")
    parse_parser.add_argument(
        "prompt",
        nargs="+",
        help="Free-text vehicle search prompt",
    )
    parse_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the remote backend and parse deterministically",
    )
    parse_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parse_parser.set_defaults(func=parse_command)

    # =========================================================================
    # check command
    # =========================================================================
    check_parser = subparsers.add_parser("check", help="Check Ollama availability")
    check_parser.set_defaults(func=check_command)

    return parser


def run_cli(args: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not hasattr(parsed, "func"):
        parser.print_help()
        return 0

    try:
        return parsed.func(parsed)
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")
        return 130
    except Exception as e:
        logger.exception("Command failed")
        console.print(f"[red]Error:[/red] {e}")
        return 1


def main() -> None:
    """Console script entry point."""
    setup_logging()
    sys.exit(run_cli())


__all__ = [
    "check_command",
    "create_parser",
    "main",
    "parse_command",
    "print_parsed",
    "run_cli",
    "setup_logging",
]
