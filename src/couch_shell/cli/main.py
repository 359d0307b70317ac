#!/usr/bin/env python3
"""
couch-shell - interactive shell for CouchDB servers.

Usage:
    couch-shell                          # Start without a server
    couch-shell localhost:5984           # Connect to a server
    couch-shell localhost:5984 mydb      # Connect and cd into a path
    couch-shell --config                 # Show current config
    couch-shell --reset-config           # Delete the config file
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from couch_shell.cli import _repl, _simple_repl
from couch_shell.config import DEFAULTS, get_config, get_config_manager
from couch_shell.core.exceptions import Quit, ShellUserError
from couch_shell.http.transport import HttpTransport
from couch_shell.log import close_file_logging, configure_file_logging
from couch_shell.plugins import DEFAULT_PLUGINS
from couch_shell.shell import Shell


def print_config():
    """Print current configuration."""
    cfg_mgr = get_config_manager()
    settings = cfg_mgr.list_settings()

    print(f"Config file: {cfg_mgr.CONFIG_FILE}")

    if settings:
        print("\nCustom settings:")
        for key, value in settings.items():
            print(f"  {key}: {value}")

    print("\nDefaults (used when not set):")
    for key, value in DEFAULTS.items():
        if key not in settings:
            print(f"  {key}: {value}")

    print("\nSet with: couch-shell --set-config key=value")
    print(f"Available keys: {', '.join(DEFAULTS)}")
    print()


def _parse_config_value(key: str, value: str):
    """Convert a --set-config string for list and bool keys."""
    if key == "plugins":
        return [p.strip() for p in value.split(",") if p.strip()]
    if key in ("color", "simple", "log_file"):
        return value.lower() in ("true", "1", "yes")
    if value.lower() in ("none", "null", ""):
        return None
    return value


def build_shell(args: argparse.Namespace) -> Shell:
    """Create a shell from parsed arguments and load its plugins."""
    read_secret = _simple_repl.read_password if args.simple else _repl.read_password
    shell = Shell(
        history_size=args.history_size,
        transport=HttpTransport(timeout=args.timeout),
        color=args.color,
        read_secret=read_secret,
        plugins_dir=args.plugins_dir,
    )
    for name in DEFAULT_PLUGINS + list(args.plugin or []):
        try:
            shell.plugin(name)
        except ShellUserError as e:
            shell.errmsg(str(e))
    return shell


def main():
    """Main entry point for the couch-shell CLI."""
    # Load config for defaults
    cfg_mgr = get_config_manager()
    cfg = get_config()

    parser = argparse.ArgumentParser(
        description="Interactive shell for CouchDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Config file: {cfg_mgr.CONFIG_FILE}

Examples:
    couch-shell                              # Start without a server
    couch-shell localhost:5984               # Connect to a server
    couch-shell http://localhost:5984 mydb   # Connect and cd into mydb
    couch-shell --set-config server=localhost:5984
    couch-shell --reset-config
        """,
    )
    parser.add_argument("server", nargs="?", default=cfg.get("server"),
                        help="CouchDB server url (default: config server)")
    parser.add_argument("path", nargs="?", help="Initial path, e.g. a database name")
    parser.add_argument("-u", "--user", default=cfg.get("username"),
                        help="Username for authentication (password is prompted)")
    parser.add_argument("-p", "--plugin", action="append",
                        default=list(cfg.get("plugins") or []),
                        help="Load an extra plugin (repeatable)")
    parser.add_argument("--plugins-dir", type=Path, default=None,
                        help="User plugins directory (default: ~/.couch-shell/plugins)")
    parser.add_argument("--history-size", type=int, default=cfg.get("history_size"),
                        help=f"Number of responses kept (default: {cfg.get('history_size')})")
    parser.add_argument("--timeout", type=float, default=cfg.get("timeout"),
                        help=f"HTTP timeout in seconds (default: {cfg.get('timeout')})")
    parser.add_argument("--no-color", dest="color", action="store_false",
                        default=cfg.get("color"),
                        help="Disable colored output")
    parser.add_argument("--simple", action="store_true",
                        default=cfg.get("simple"),
                        help="Use simple REPL (no prompt_toolkit features)")
    parser.add_argument("--no-log", dest="log_file", action="store_false",
                        default=cfg.get("log_file"),
                        help="Don't write ~/.couch-shell/logs/shell.log")
    parser.add_argument("-e", "--execute", action="append", metavar="LINE",
                        help="Execute LINE and exit (repeatable)")

    # Config management
    parser.add_argument("--config", action="store_true",
                        help="Show current configuration")
    parser.add_argument("--set-config", metavar="KEY=VALUE",
                        help=f"Set a config value. Keys: {', '.join(DEFAULTS)}")
    parser.add_argument("--unset-config", metavar="KEY",
                        help="Unset a config value (reset to default)")
    parser.add_argument("--init-config", action="store_true",
                        help="Write a config file with the default values")
    parser.add_argument("--reset-config", action="store_true",
                        help="Delete the config file")

    args = parser.parse_args()

    # Handle --config
    if args.config:
        print_config()
        return

    if args.init_config:
        if cfg_mgr.CONFIG_FILE.exists():
            print(f"Config file already exists: {cfg_mgr.CONFIG_FILE}")
        else:
            cfg_mgr.load(create_if_missing=True)
            print(f"Created {cfg_mgr.CONFIG_FILE}")
        return

    if args.reset_config:
        cfg_mgr.reset()
        print(f"Removed {cfg_mgr.CONFIG_FILE}, using defaults")
        return

    # Handle --set-config
    if args.set_config:
        try:
            key, value = args.set_config.split("=", 1)
            key = key.strip()
            cfg_mgr.set(key, _parse_config_value(key, value.strip()))
            print(f"Set {key} = {cfg_mgr.get(key)}")
            print(f"Saved to {cfg_mgr.CONFIG_FILE}")
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
        return

    # Handle --unset-config
    if args.unset_config:
        try:
            cfg_mgr.unset(args.unset_config)
            print(f"Unset {args.unset_config}")
            print(f"Saved to {cfg_mgr.CONFIG_FILE}")
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
        return

    if args.log_file:
        configure_file_logging()

    shell = build_shell(args)
    try:
        if args.server:
            shell.execute(f"server {args.server}")
        if args.user:
            shell.execute(f"user {args.user}")
        if args.path:
            shell.execute(f"cg {args.path}")

        if args.execute:
            for line in args.execute:
                shell.execute(line)
            return

        if args.simple or not sys.stdin.isatty():
            _simple_repl.repl(shell)
        else:
            _repl.repl(shell)
    except Quit:
        pass
    finally:
        shell.close()
        close_file_logging()


if __name__ == "__main__":
    main()
