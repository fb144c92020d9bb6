"""Command-line entry point: ``vuecreate <app-name> [options]``."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

from rich.panel import Panel

from .config import Config, CreateOptions
from .create import create
from .options import PACKAGE_MANAGERS
from .utils import console, print_warning
from .versions import CLI_VERSION


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vuecreate",
        description="Create a new project powered by vue-cli-service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  vuecreate my-app\n"
            "  vuecreate my-app --default --packageManager yarn\n"
            "  vuecreate . --preset ./presets/team.json\n"
            "  vuecreate my-app --preset owner/repo --clone\n"
        ),
    )
    parser.add_argument("app_name", nargs="+", help="Project name, or '.' for the current directory")
    parser.add_argument(
        "-p", "--preset",
        default=None,
        help="Skip prompts and use saved or remote preset",
    )
    parser.add_argument(
        "-d", "--default",
        action="store_true",
        help="Skip prompts and use default preset",
    )
    parser.add_argument(
        "-i", "--inlinePreset",
        dest="inline_preset",
        default=None,
        help="Skip prompts and use inline JSON string as preset",
    )
    parser.add_argument(
        "-m", "--packageManager",
        dest="package_manager",
        choices=PACKAGE_MANAGERS,
        default=None,
        help="Use specified npm client when installing dependencies",
    )
    parser.add_argument(
        "-g", "--git",
        nargs="?",
        const=True,
        default=None,
        metavar="MESSAGE",
        help="Force git initialization with initial commit message",
    )
    parser.add_argument(
        "-n", "--no-git",
        dest="no_git",
        action="store_true",
        help="Skip git initialization",
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite target directory if it exists",
    )
    parser.add_argument(
        "--merge",
        action="store_true",
        help="Merge target directory if it exists",
    )
    parser.add_argument(
        "-c", "--clone",
        action="store_true",
        help="Use git clone when fetching remote preset",
    )
    parser.add_argument(
        "-b", "--bare",
        action="store_true",
        help="Scaffold project without beginner instructions",
    )
    parser.add_argument(
        "--skipGetStarted",
        dest="skip_get_started",
        action="store_true",
        help='Skip displaying "Get started" instructions',
    )
    return parser


def options_from_args(args: argparse.Namespace) -> CreateOptions:
    """Map parsed arguments to ``CreateOptions``.

    ``--git`` forces initialisation (its optional value is the commit
    message); ``--no-git`` disables it.
    """
    git: bool | str | None = args.git
    if args.no_git:
        git = False
    return CreateOptions(
        preset=args.preset,
        default=args.default,
        inline_preset=args.inline_preset,
        package_manager=args.package_manager,
        force_git=args.git is not None and not args.no_git,
        git=git,
        merge=args.merge,
        force=args.force,
        clone=args.clone,
        bare=args.bare,
        skip_get_started=args.skip_get_started,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``vuecreate`` / ``python -m vuecreate``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.app_name) > 1:
        print_warning(
            "You provided more than one argument. The first one will be used as "
            "the app's name, the rest are ignored."
        )

    config = Config.from_env()
    console.print(
        Panel(
            f"[bold bright_cyan]Vue CLI v{CLI_VERSION}[/bold bright_cyan]",
            border_style="bright_cyan",
        )
    )
    asyncio.run(create(args.app_name[0], options_from_args(args), config))


if __name__ == "__main__":
    main()
