# Standard Library Imports
import argparse
import logging
import os
import sys
from typing import List, Mapping, Optional

# Third-Party Library Imports
import requests
from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

# Internal Module Imports
from lumen import __version__
from lumen._engine.command import LumenCommand
from lumen._engine.git import GitRepository
from lumen._engine.provider import ProviderClient
from lumen._types.errors import LumenError, ProviderConfigError
from lumen._types.model import ProviderConfig
from lumen._types.provider import ProviderType

# --- Configuration ---
ENV_PROVIDER = "LUMEN_AI_PROVIDER"
ENV_API_KEY = "LUMEN_API_KEY"
ENV_MODEL = "LUMEN_AI_MODEL"
DEFAULT_PROVIDER = ProviderType.PHIND.value

custom_theme = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        "highlight": "magenta",
    }
)

# Answers go to stdout; spinners, pickers and errors go to stderr so that
# `lumen draft` can be piped straight into `git commit`.
console = Console(theme=custom_theme)
err_console = Console(stderr=True, theme=custom_theme)


# --- Setup Functions ---


def configure_logging(verbosity: int) -> None:
    """
    Configure the root logger based on a verbosity count.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_provider_config(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProviderConfig:
    """
    Resolve provider settings and construct the run's ProviderConfig.

    Each value comes from its command-line flag when given, otherwise from
    its environment variable. The provider falls back to phind.

    Raises:
        ProviderConfigError: unknown provider, missing API key for a provider
            that needs one, or a blank model override.
    """
    environ = os.environ if environ is None else environ

    provider_name = provider or environ.get(ENV_PROVIDER) or DEFAULT_PROVIDER
    try:
        variant = ProviderType(provider_name.lower())
    except ValueError:
        choices = ", ".join(p.value for p in ProviderType)
        raise ProviderConfigError(f"unknown provider '{provider_name}' (choose from {choices})")

    return ProviderConfig(
        variant=variant,
        api_key=api_key if api_key is not None else environ.get(ENV_API_KEY),
        model=model if model is not None else environ.get(ENV_MODEL),
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lumen",
        description="AI-powered CLI tool for git commit summaries",
    )
    parser.add_argument(
        "-p",
        "--provider",
        choices=[p.value for p in ProviderType],
        help=f"AI provider to use. Env: {ENV_PROVIDER}. Default: {DEFAULT_PROVIDER}",
    )
    parser.add_argument(
        "-k",
        "--api-key",
        help=f"API key for the provider. Env: {ENV_API_KEY}",
    )
    parser.add_argument(
        "-m",
        "--model",
        help=f"Model name overriding the provider's default. Env: {ENV_MODEL}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    explain = subparsers.add_parser(
        "explain", help="Explain the changes in a commit, or the current diff"
    )
    explain.add_argument("sha", nargs="?", help="The commit hash to use")
    explain.add_argument("--diff", action="store_true", help="Explain current diff")
    explain.add_argument("--staged", action="store_true", help="Use staged diff")
    explain.add_argument("-q", "--query", help="Ask a question instead of summary")

    subparsers.add_parser(
        "list",
        help="List recent commits in an interactive picker, and summarize the chosen one",
    )

    draft = subparsers.add_parser(
        "draft", help="Generate a commit message for the staged changes"
    )
    draft.add_argument("-c", "--context", help="Add context to communicate intent")

    return parser


# --- Main Application Logic ---


def run(args: argparse.Namespace, session: Optional[requests.Session] = None) -> str:
    """Execute the parsed command and return the final answer text."""
    config = build_provider_config(args.provider, args.api_key, args.model)
    logging.getLogger(__name__).info(
        "using provider %s with model %s", config.variant.value, config.effective_model
    )

    client = ProviderClient(config, session or requests.Session())
    command = LumenCommand(
        client,
        GitRepository(console=err_console),
        console=console,
        status_console=err_console,
    )

    if args.command == "explain":
        return command.explain(
            sha=args.sha, diff=args.diff, staged=args.staged, query=args.query
        )
    if args.command == "list":
        return command.list_commits()
    return command.draft(context=args.context)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        run(args)
    except LumenError as e:
        message = " ".join(str(e).split())
        err_console.print(f"[error]error:[/error] {escape(message)}", highlight=False, soft_wrap=True)
        return 1

    return 0


# --- Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
