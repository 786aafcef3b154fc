"""Entry point for voxsettings."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from voxsettings import __version__
from voxsettings.backend.local import LocalBackend
from voxsettings.config import Config, _get_user_config_dir, get_config, get_store_path
from voxsettings.console import ConsoleView
from voxsettings.log import setup_logger
from voxsettings.page import DEFAULT_TTS_TEST_TEXT, SettingsPage
from voxsettings.settings.coordinator import SaveOutcome
from voxsettings.settings.fields import MONITORING_KEY


def setup_logging(config: Config, verbose: bool = False) -> None:
    """Configure package logging from the [logging] section."""
    logging_config = config.get("logging", {})
    level = "DEBUG" if verbose else logging_config.get("level", "INFO")
    log_file = logging_config.get("file", "")
    log_path = None
    if log_file:
        log_path = Path(log_file).expanduser()
        if not log_path.is_absolute():
            log_path = _get_user_config_dir() / log_path
    setup_logger(level, log_path, console=verbose)


def build_page(config: Config, view: ConsoleView) -> SettingsPage:
    """Create a settings page on the local backend."""
    backend = LocalBackend.from_config(config, get_store_path(config))
    return SettingsPage.from_config(backend, view, config)


def parse_assignment(text: str) -> tuple[str, str]:
    """Split a KEY=VALUE argument."""
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key.strip(), value


async def show_settings(config: Config) -> int:
    """Print the stored settings."""
    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        view.print_settings(page.model.snapshot())
    return 0


async def set_settings(config: Config, assignments: list[tuple[str, str]]) -> int:
    """Update settings and save them."""
    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        for key, value in assignments:
            try:
                page.update(key, value)
            except KeyError:
                view.show_error(f"Unknown setting: {key}")
                return 2
            except ValueError as e:
                view.show_error(f"Invalid value for {key}: {e}")
                return 2
        outcome = await page.save()
    return 0 if outcome is SaveOutcome.SAVED else 1


async def list_devices(config: Config) -> int:
    """Print audio devices and voices."""
    view = ConsoleView(quiet=True)
    page = build_page(config, view)
    await page.directory.refresh()
    view.print_devices(page.directory)
    return 0


async def monitor(config: Config) -> int:
    """Watch for device changes until interrupted."""
    view = ConsoleView()
    async with build_page(config, view) as page:
        if not page.model.monitoring_enabled:
            print("Device monitoring is off in settings; enabling it for this session.")
            page.update(MONITORING_KEY, True)
        print("Watching devices (Ctrl+C to stop)...")
        await asyncio.Event().wait()
    return 0


async def export_to(config: Config, output: str | None) -> int:
    """Export settings as JSON to a file or stdout."""
    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        data = page.export_settings()
    if output:
        Path(output).write_text(data, encoding="utf-8")
        print(f"Exported settings to {output}")
    else:
        print(data)
    return 0


async def import_from(config: Config, path: str) -> int:
    """Import settings from a JSON export and save them."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        changed = page.import_settings(text)
        if view.errors:
            return 1
        print(f"Imported {len(changed)} changed setting(s)")
        outcome = await page.save()
    return 0 if outcome is SaveOutcome.SAVED else 1


async def test_tts(config: Config, text: str | None) -> int:
    """Speak a test phrase with the stored TTS settings."""
    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        ok = await page.test_tts(text or DEFAULT_TTS_TEST_TEXT)
    return 0 if ok else 1


async def test_ai(config: Config) -> int:
    """Send a test request with the stored AI settings."""
    view = ConsoleView(quiet=True)
    async with build_page(config, view) as page:
        reply = await page.test_ai()
    return 0 if reply is not None else 1


def main() -> None:
    """Main entry point for voxsettings."""
    parser = argparse.ArgumentParser(
        prog="voxsettings",
        description="voxsettings - Voice assistant settings and device monitoring",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        metavar="FILE",
        help="Configuration file (defaults to the per-user config.toml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # show subcommand (also the default when no args)
    subparsers.add_parser("show", help="Show stored settings (default)")

    # set subcommand
    set_parser = subparsers.add_parser("set", help="Change settings and save them")
    set_parser.add_argument(
        "assignments",
        nargs="+",
        type=parse_assignment,
        metavar="KEY=VALUE",
        help="Setting to change",
    )

    # devices subcommand
    subparsers.add_parser("devices", help="List audio devices and voices")

    # monitor subcommand
    subparsers.add_parser("monitor", help="Watch audio devices for changes")

    # export subcommand
    export_parser = subparsers.add_parser("export", help="Export settings as JSON (API keys excluded)")
    export_parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write to FILE instead of stdout",
    )

    # import subcommand
    import_parser = subparsers.add_parser("import", help="Import settings from a JSON export")
    import_parser.add_argument("file", metavar="FILE", help="Exported settings file")

    # test-tts subcommand
    tts_parser = subparsers.add_parser("test-tts", help="Speak a test phrase")
    tts_parser.add_argument("text", nargs="?", metavar="TEXT", help="Phrase to speak")

    # test-ai subcommand
    subparsers.add_parser("test-ai", help="Test the AI provider connection")

    args = parser.parse_args()

    config = get_config(Path(args.config) if args.config else None)
    setup_logging(config, args.verbose)

    if args.command == "show" or args.command is None:
        coro = show_settings(config)
    elif args.command == "set":
        coro = set_settings(config, args.assignments)
    elif args.command == "devices":
        coro = list_devices(config)
    elif args.command == "monitor":
        coro = monitor(config)
    elif args.command == "export":
        coro = export_to(config, args.output)
    elif args.command == "import":
        coro = import_from(config, args.file)
    elif args.command == "test-tts":
        coro = test_tts(config, args.text)
    else:
        coro = test_ai(config)

    try:
        sys.exit(asyncio.run(coro))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
