"""CLI entrypoints for tapdocs commands."""

from __future__ import annotations

import argparse
import sys
from functools import partial
from pathlib import Path

from .config import ConfigError, SiteConfig, load_config
from .logging import configure_logging
from .orchestrator import BuildError, BuildOrchestrator, rebuild_from_disk
from .scaffold import create_definition
from .service import PreviewServer
from .watcher import ChangeWatcher


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
        "default": argparse.SUPPRESS if suppress_default else False,
    }
    parser.add_argument("-v", "--verbose", **verbose_kwargs)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug-level logs to this file.",
    )
    parser.add_argument(
        "-C",
        "--root",
        default=argparse.SUPPRESS if suppress_default else ".",
        help="Project root containing Formula/ and theme/ (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tapdocs",
        description="Build and preview the documentation site for a package tap.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("build", "Parse definition files and build the static site."),
        ("parse", "Parse definition files and write the record data only."),
        ("render", "Build the static site from previously parsed record data."),
        ("clean", "Remove generated files."),
        ("check", "Check that required directories and templates exist."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        _add_common_options(sub, suppress_default=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Build, serve and rebuild the site on changes.",
    )
    _add_common_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("port", nargs="?", type=int, help="Port to bind (default 4000).")
    serve_parser.add_argument("host", nargs="?", help="Host to bind (default localhost).")
    serve_parser.add_argument(
        "--list-watched",
        action="store_true",
        help="List every watched file instead of starting the server.",
    )

    new_parser = subparsers.add_parser("new", help="Create a skeleton definition file.")
    _add_common_options(new_parser, suppress_default=True)
    new_parser.add_argument("name", help="Kebab-case package name, e.g. my-tool.")

    subparsers.add_parser("help", help="Show this help message.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tapdocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        parser.print_help()
        return

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(Path(args.root))
    except ConfigError as exc:
        parser.exit(1, f"tapdocs: {exc}\n")

    orchestrator = BuildOrchestrator(config)

    try:
        if args.command == "build":
            outcome = orchestrator.run_build()
            print(
                f"Build complete: {outcome.page_count} pages for "
                f"{outcome.record_set.count} packages in {_relativize(config.output_dir)}"
            )
        elif args.command == "parse":
            record_set = orchestrator.run_parse()
            print(f"Parsed {record_set.count} packages into {_relativize(config.data_file)}")
        elif args.command == "render":
            result = orchestrator.run_render()
            print(f"Rendered {result.page_count} pages into {_relativize(config.output_dir)}")
        elif args.command == "clean":
            removed = orchestrator.clean()
            for path in removed:
                print(f"Removed {_relativize(path)}")
            print("Clean complete")
        elif args.command == "check":
            _run_check(parser, orchestrator)
        elif args.command == "new":
            path = create_definition(config, args.name)
            print(f"Definition created at {_relativize(path)}")
        elif args.command == "serve":
            _run_serve(args, config)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except BuildError as exc:
        parser.exit(1, f"tapdocs {args.command} failed: {exc}\nRun with --verbose for more details.\n")
    except (FileExistsError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")


def _run_check(parser: argparse.ArgumentParser, orchestrator: BuildOrchestrator) -> None:
    failed = False
    for item in orchestrator.check():
        mark = "ok" if item.present else ("missing" if item.required else "absent")
        print(f"  {mark:<8} {item.label}: {_relativize(item.path)}")
        failed = failed or (item.required and not item.present)
    if failed:
        parser.exit(1, "Project structure check failed\n")
    print("Project structure OK")


def _run_serve(args: argparse.Namespace, config: SiteConfig) -> None:
    # Each rebuild rereads .tapdocs.yml.
    rebuild = partial(rebuild_from_disk, config.root)
    watcher = ChangeWatcher(config, rebuild)
    if args.list_watched:
        files = watcher.watched_files()
        print(f"Watching {len(files)} files:")
        for path in files:
            print(f"  - {_relativize(path, config.root)}")
        return
    server = PreviewServer(config, rebuild, host=args.host, port=args.port, watcher=watcher)
    server.serve()


def _relativize(path: Path, base: Path | None = None) -> str:
    try:
        return str(path.relative_to(base or Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
