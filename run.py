"""Puzzle Adventure CLI entry point.

Provides subcommands for running the Socket.IO server, printing a generated
level for inspection and resetting the stored profile. Accepts configuration
via flags and environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import signal
import sys
from pathlib import Path
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()


def _load_version() -> str:
    path = Path(__file__).resolve().parent / "VERSION"
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Puzzle Adventure Server

    Run the Flask-SocketIO game server, print a generated level, or reset the
    stored player profile. Configuration can be provided via CLI flags or
    environment variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST               Bind address for the web server (default: 0.0.0.0)
          PORT               Port for the web server (default: 5000)
          DATABASE_URL       SQLAlchemy database URI (default: sqlite:///instance/puzzle.db)
          PUZZLE_DIFFICULTY  Default difficulty: easy, medium or hard (default: medium)
          PUZZLE_LOG_LEVEL   debug, info, warn or error (default: info)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Bind to localhost only and use a different database
          python run.py server --host 127.0.0.1 --db sqlite:///instance/dev.db

          # Print a reproducible hard level
          python run.py generate --difficulty hard --level 3 --seed 42

          # Load variables from .env then run the server
          python run.py --env-file .env server
        """
    )

    parser = argparse.ArgumentParser(
        prog="Puzzle",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Puzzle Adventure Server {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the real-time Flask/Socket.IO server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--db",
        dest="db_uri",
        default=None,
        help="Database URI (default: env DATABASE_URL or sqlite:///instance/puzzle.db)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one level and print it as ASCII with its metrics",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    gen_parser.add_argument(
        "--difficulty",
        choices=("easy", "medium", "hard"),
        default=None,
        help="Difficulty profile (default: env PUZZLE_DIFFICULTY or medium)",
    )
    gen_parser.add_argument("--level", type=int, default=1, help="Level number (default: 1)")
    gen_parser.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible level")
    gen_parser.set_defaults(command="generate")

    reset_parser = subparsers.add_parser(
        "reset-profile",
        help="Delete the stored player profile",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    reset_parser.set_defaults(command="reset-profile")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    return parser.parse_args(argv)


def _print_level(difficulty: str, level: int, seed) -> int:
    from puzzle.maze import LevelGenerator, resolve_profile

    if level < 1:
        print("[ERROR] --level must be >= 1")
        return 1
    profile = resolve_profile(difficulty)
    generated = LevelGenerator(profile, seed=seed).generate(level=level)
    print(generated.grid.to_ascii())
    print()
    print(f"difficulty={profile.name} level={level} score={generated.difficulty:.2f} keys={generated.total_keys}")
    for name, val in generated.metrics.items():
        print(f"  {name}: {val}")
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()

    if mode == "generate":
        difficulty = getattr(args, "difficulty", None) or os.getenv("PUZZLE_DIFFICULTY", "medium")
        return _print_level(difficulty, args.level, args.seed)

    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    env_db = os.getenv("DATABASE_URL")

    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)
    db_uri_cli = getattr(args, "db_uri", None)

    # Make DATABASE_URL available to the Flask app BEFORE importing it
    if db_uri_cli:
        os.environ["DATABASE_URL"] = db_uri_cli

    db_banner = db_uri_cli or env_db or "auto (instance/puzzle.db)"

    if mode == "reset-profile":
        from puzzle.server import reset_profile

        reset_profile()
        print("[OK] Profile reset")
        return 0

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from puzzle import server
    from puzzle.logging_utils import log

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    title = "Puzzle Adventure Server"
    if _COLOR_ENABLED:
        title = f"{Fore.CYAN}{Style.BRIGHT}{title}{Style.RESET_ALL}"
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    difficulty = os.getenv("PUZZLE_DIFFICULTY", "medium")
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Mode:'):12} {value(mode.upper())}",
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Database:'):12} {value(db_banner)}",
        f"  {label('Difficulty:'):12} {value(difficulty)}",
        f"  {label('WebSockets:'):12} {value('enabled')}",
        divider,
        "",
    ]
    print("\n".join(lines))
    log.info(event="startup", mode=mode, host=host, port=port, db=db_banner)

    server.start_server(host=host, port=port, debug=getattr(args, "debug", False))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
