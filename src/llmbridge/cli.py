#!/usr/bin/env python3
"""
llmbridge Command Line Interface

Usage:
    llmbridge capabilities [--format table|markdown] [-o FILE]
    llmbridge generate PROMPT [--provider P] [--stream]
    llmbridge count-tokens PROMPT [--provider P]
"""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from llmbridge import __version__
from llmbridge.adapters import AdapterError, TokenCountEstimator, get_registry
from llmbridge.capabilities import COLUMNS, capability_matrix, render_markdown, render_page
from llmbridge.config import Provider, settings
from llmbridge.log_config import configure_logging


class CLI:
    """CLI helper class."""

    def __init__(self):
        self.console = Console()

    def print_header(self, title: str):
        self.console.print(Panel.fit(f"[bold cyan]{title}[/bold cyan]", border_style="cyan"))

    def print_success(self, msg: str):
        self.console.print(f"[green]✓[/green] {msg}")

    def print_error(self, msg: str):
        self.console.print(f"[red]✗[/red] {msg}")

    def print_text(self, text: str, end: str = "\n"):
        self.console.print(text, end=end, markup=False, highlight=False, soft_wrap=True)


def cmd_capabilities(args):
    """Show or export the provider capability matrix."""
    cli = CLI()
    rows = capability_matrix()

    if args.output:
        Path(args.output).write_text(render_page(rows), encoding="utf-8")
        cli.print_success(f"Capability matrix written to {args.output}")
        return 0

    if args.format == "markdown":
        print(render_markdown(rows), end="")
        return 0

    table = Table(title="Provider Capabilities", show_header=True)
    table.add_column("Provider", style="bold")
    for _, title in COLUMNS:
        table.add_column(title, justify="center")
    for row in rows:
        table.add_row(
            row.title,
            *["[green]✓[/green]" if row.supports(name) else "" for name, _ in COLUMNS],
        )
    cli.console.print(table)
    return 0


def cmd_generate(args):
    """Generate a completion with the configured provider."""
    cli = CLI()
    try:
        model = get_registry().language_model(args.provider)

        if args.stream:
            response = None
            for chunk in model.stream(args.prompt):
                if chunk.is_final:
                    response = chunk.response
                else:
                    cli.print_text(chunk.text, end="")
            cli.print_text("")
        else:
            response = model.generate(args.prompt)
            cli.print_text(response.content)
    except AdapterError as e:
        cli.print_error(f"{e.provider}: {e}")
        return 1

    if args.verbose and response is not None:
        usage = response.token_usage
        cli.console.print(
            f"[dim]finish_reason={response.finish_reason.value if response.finish_reason else None} "
            f"input_tokens={usage.input_token_count if usage else None} "
            f"output_tokens={usage.output_token_count if usage else None}[/dim]"
        )
    return 0


def cmd_count_tokens(args):
    """Estimate the number of tokens in a prompt."""
    cli = CLI()
    try:
        model = get_registry().language_model(args.provider)
    except AdapterError as e:
        cli.print_error(f"{e.provider}: {e}")
        return 1

    if not isinstance(model, TokenCountEstimator):
        cli.print_error(f"{model.provider_name} does not support token counting")
        return 1

    cli.print_text(str(model.estimate_token_count(args.prompt)))
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="llmbridge",
        description="llmbridge - one interface over many LLM provider SDKs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  llmbridge capabilities                         Show the capability matrix
  llmbridge capabilities -o docs/capabilities.md Export it as markdown
  llmbridge generate "Say hi" --provider ollama  Run a completion
  llmbridge count-tokens "Say hi"                Estimate prompt tokens
        """
    )

    parser.add_argument("--log-level", default=None, type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: LLMBRIDGE_LOG_LEVEL or INFO)")
    parser.add_argument("--version", "-v", action="version", version=f"llmbridge {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Capabilities
    caps_p = subparsers.add_parser("capabilities", help="Show provider capability matrix")
    caps_p.add_argument("--format", choices=["table", "markdown"], default="table")
    caps_p.add_argument("-o", "--output", help="Write the markdown docs page to this file")
    caps_p.set_defaults(func=cmd_capabilities)

    providers = [p.value for p in Provider]

    # Generate
    gen_p = subparsers.add_parser("generate", help="Generate a completion")
    gen_p.add_argument("prompt")
    gen_p.add_argument("--provider", "-p", choices=providers, default=None)
    gen_p.add_argument("--stream", action="store_true", help="Print tokens as they arrive")
    gen_p.add_argument("--verbose", action="store_true", help="Show finish reason and usage")
    gen_p.set_defaults(func=cmd_generate)

    # Count tokens
    count_p = subparsers.add_parser("count-tokens", help="Estimate prompt token count")
    count_p.add_argument("prompt")
    count_p.add_argument("--provider", "-p", choices=providers, default=None)
    count_p.set_defaults(func=cmd_count_tokens)

    args = parser.parse_args(argv)

    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
