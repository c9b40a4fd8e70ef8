"""
CLI Runner - Command line interface for NeuroCore

Loads configuration, discovers plugins and lets an operator inspect and
exercise intent resolution from the shell.

Usage:
    neurocore list
    neurocore resolve chat:send
    neurocore execute echo:say --data '"hello"'
    neurocore init-config neurocore.toml
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv

from ..config.manager import ConfigManager, ConfigValidationError
from ..config.models import CoreConfig, LogLevel
from ..intents.models import Intent, RequestContext
from ..plugins.manager import PluginManagerAdapter, no_handler_message
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neurocore",
        description="NeuroCore - plugin discovery and intent resolution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                               # List loaded plugins
  %(prog)s --config neurocore.toml list       # Use specific config file
  %(prog)s resolve chat:send                  # Show which plugin handles an intent
  %(prog)s execute echo:say --data '"hi"'     # Execute an intent
  %(prog)s init-config neurocore.toml         # Write a default config file
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Configuration file path (default: auto-detect)"
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Override the configured logging level"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Disable console logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List loaded plugins and their intents")

    resolve_parser = subparsers.add_parser("resolve", help="Show the plugin resolved for an intent")
    resolve_parser.add_argument("action", help="Intent action, e.g. chat:send")

    execute_parser = subparsers.add_parser("execute", help="Execute an intent and print the result")
    execute_parser.add_argument("action", help="Intent action, e.g. chat:send")
    execute_parser.add_argument("--data", type=str, default=None, help="Intent payload as JSON")

    init_parser = subparsers.add_parser("init-config", help="Write a default configuration file")
    init_parser.add_argument("path", type=Path, help="Destination (.toml or .json)")

    return parser


async def _cmd_list(adapter: PluginManagerAdapter) -> int:
    plugins = adapter.get_plugins()
    if not plugins:
        print("No plugins loaded")
        return 0

    for plugin_id, plugin in plugins.items():
        kind = "system" if adapter.discovery.is_system_plugin(plugin_id) else "user"
        if adapter.discovery.get_plugin(plugin_id) is None:
            kind = "legacy"
        line = f"{plugin_id} [{kind}]: {', '.join(plugin.supported_intents())}"
        if adapter.is_plugin_substituted(plugin_id):
            line += " (substituted)"
        print(line)

    for error in adapter.discovery.load_errors:
        print(f"! {error['type']}: {error['message']}")
    return 0


async def _cmd_resolve(adapter: PluginManagerAdapter, action: str) -> int:
    resolution = adapter.discovery.explain(action)
    if resolution is not None:
        priority = f", priority {resolution.priority}" if resolution.priority is not None else ""
        print(f"{action} -> {resolution.plugin_id} ({resolution.strategy}{priority})")
        return 0

    plugin = adapter.find_plugin_for_intent(Intent(action=action))
    if plugin is not None:
        print(f"{action} -> {type(plugin).__name__} (legacy)")
        return 0

    print(no_handler_message(action))
    return 1


async def _cmd_execute(adapter: PluginManagerAdapter, action: str, raw_data: Optional[str]) -> int:
    data = None
    if raw_data is not None:
        try:
            data = json.loads(raw_data)
        except json.JSONDecodeError as e:
            print(f"Invalid --data JSON: {e}")
            return 1

    result = await adapter.execute_intent(Intent(action=action, data=data), RequestContext.create(user_id="cli"))
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
    return 0 if result.success else 1


async def _cmd_init_config(path: Path) -> int:
    if path.exists():
        print(f"Refusing to overwrite existing file: {path}")
        return 1
    saved = await ConfigManager().save_config(CoreConfig(), path)
    if saved:
        print(f"Wrote default configuration to {path}")
        return 0
    print(f"Failed to write configuration to {path}")
    return 1


async def run(args: Optional[List[str]] = None) -> int:
    """Parse arguments, set up logging and plugins, and dispatch the command"""
    load_dotenv()

    parsed_args = _create_argument_parser().parse_args(args)

    if parsed_args.command == "init-config":
        setup_logging(level=LogLevel(parsed_args.log_level or LogLevel.INFO.value),
                      enable_console=not parsed_args.quiet)
        return await _cmd_init_config(parsed_args.path)

    try:
        config = await ConfigManager().load_config(parsed_args.config)
    except ConfigValidationError as e:
        print(f"Configuration error: {e}")
        return 1

    level = LogLevel(parsed_args.log_level) if parsed_args.log_level else config.log_level
    setup_logging(level=level, log_file=config.log_file, enable_console=not parsed_args.quiet,
                  plugin_level=config.plugin_log_level)

    adapter = PluginManagerAdapter.from_config(config.plugins)
    try:
        await adapter.initialize()

        if parsed_args.command == "list":
            return await _cmd_list(adapter)
        if parsed_args.command == "resolve":
            return await _cmd_resolve(adapter, parsed_args.action)
        if parsed_args.command == "execute":
            return await _cmd_execute(adapter, parsed_args.action, parsed_args.data)

        logger.error(f"Unknown command: {parsed_args.command}")
        return 1
    finally:
        await adapter.shutdown()


def main() -> int:
    """Entry point for the neurocore command"""
    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
