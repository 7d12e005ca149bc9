"""Entry point for hyprvoice."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from hyprvoice import __version__
from hyprvoice.config import (
    ConfigError,
    ConfigManager,
    ConfigNotFoundError,
    get_config_path,
    load_config,
    save_default_config,
    to_injection_config,
    validate,
)
from hyprvoice.injection import InjectionError, Injector
from hyprvoice.logging_setup import setup_logging
from hyprvoice.notify import MessageType, build_notifier

logger = logging.getLogger(__name__)

# How long `inject` waits for the clipboard to be put back before exiting
RESTORE_WAIT_TIMEOUT = 5.0


def run_serve(config_path: Path | None) -> int:
    """Run the daemon core until SIGINT or SIGTERM.

    Loads and validates the configuration, watches the file for changes and
    keeps the injector and notifier in step with each reload.

    Returns:
        Exit code: 0 for success, 1 for error.
    """
    try:
        manager = ConfigManager(config_path)
    except ConfigNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if manager.is_legacy():
        print(
            "Error: legacy configuration detected, run 'hyprvoice init-config --force' "
            "to write a current config",
            file=sys.stderr,
        )
        return 1

    config = manager.get_config()
    injector = Injector(to_injection_config(config))
    notifier = build_notifier(config.notifications)
    shutdown_event = threading.Event()

    def on_config_reload() -> None:
        nonlocal notifier
        new_config = manager.get_config()
        injector.update_config(to_injection_config(new_config))
        notifier = build_notifier(new_config.notifications)
        notifier.send(MessageType.CONFIG_RELOADED)

    def signal_handler(signum, frame):
        """Handle SIGINT/SIGTERM for clean shutdown."""
        print("\nShutting down...")
        shutdown_event.set()

    original_handlers = {
        sig: signal.signal(sig, signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        manager.set_on_config_reload(on_config_reload)
        manager.start_watching()
        print(f"hyprvoice {__version__} watching {manager.config_path}. Press Ctrl+C to exit")
        logger.info("serve: started, backends=%s", config.injection.backends)

        while not shutdown_event.is_set():
            shutdown_event.wait(timeout=0.5)
        return 0

    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    finally:
        manager.stop()
        injector.close()
        for sig, handler in original_handlers.items():
            signal.signal(sig, handler)
        logger.info("serve: stopped")


def run_init_config(config_path: Path | None, force: bool) -> int:
    """Write the default configuration file.

    Returns:
        Exit code: 0 for success, 1 for error.
    """
    try:
        path = config_path if config_path is not None else get_config_path()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if path.exists() and not force:
        print(f"Config already exists at {path} (use --force to overwrite)")
        return 0

    try:
        save_default_config(path)
    except OSError as e:
        print(f"Error writing config: {e}", file=sys.stderr)
        return 1

    print(f"Wrote default config to {path}")
    print("Set an API key under [providers.openai] or export OPENAI_API_KEY.")
    return 0


def run_validate(config_path: Path | None) -> int:
    """Load and validate the configuration file.

    Returns:
        Exit code: 0 if the config is valid, 1 otherwise.
    """
    try:
        config = load_config(config_path)
        validate(config)
    except ConfigError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1

    print("Config OK")
    print(f"  Transcription: {config.transcription.provider} / {config.transcription.model}")
    print(f"  Injection:     {' -> '.join(config.injection.backends)}")
    if config.llm.enabled:
        print(f"  LLM:           {config.llm.provider} / {config.llm.model}")
    return 0


def run_inject(config_path: Path | None, text: str) -> int:
    """Deliver text once through the configured backend chain.

    Returns:
        Exit code: 0 for success, 1 for error.
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    injector = Injector(to_injection_config(config))
    try:
        backend = injector.inject(text)
        injector.wait_for_restore(RESTORE_WAIT_TIMEOUT)
    except InjectionError as e:
        print(f"Injection failed: {e}", file=sys.stderr)
        return 1
    finally:
        injector.close()

    print(f"Injected via {backend}")
    return 0


def main() -> None:
    """Main entry point for hyprvoice."""
    parser = argparse.ArgumentParser(
        prog="hyprvoice",
        description="Hyprvoice - voice dictation daemon core",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        metavar="FILE",
        type=Path,
        help="Config file (default: <user config dir>/hyprvoice/config.toml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve subcommand (also the default when no args)
    subparsers.add_parser(
        "serve",
        help="Watch the config and keep the injector ready (default)",
    )

    init_parser = subparsers.add_parser(
        "init-config",
        help="Write the default config file",
    )
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )

    subparsers.add_parser(
        "validate",
        help="Check the config file and exit",
    )

    inject_parser = subparsers.add_parser(
        "inject",
        help="Type TEXT into the focused window using the configured backends",
    )
    inject_parser.add_argument("text", metavar="TEXT")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    if args.command == "serve" or args.command is None:
        sys.exit(run_serve(args.config))
    elif args.command == "init-config":
        sys.exit(run_init_config(args.config, args.force))
    elif args.command == "validate":
        sys.exit(run_validate(args.config))
    elif args.command == "inject":
        sys.exit(run_inject(args.config, args.text))


if __name__ == "__main__":
    main()
