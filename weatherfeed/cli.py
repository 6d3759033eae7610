"""CLI entry point for the weather feed."""

import argparse
import logging

from weatherfeed.config.loader import get_config_value, load_config, set_config_value
from weatherfeed.daemon import PollDaemon, daemon_status
from weatherfeed.pipeline.poll_pipeline import PollPipeline
from weatherfeed.reporting.formatters import format_poll_json, format_snapshot_text

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherfeed",
        description="QWeather poller producing a normalized weather snapshot",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # poll
    poll_p = sub.add_parser("poll", help="Run one poll and print the snapshot")
    poll_p.add_argument("--json", action="store_true", help="Print JSON")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Poll on an interval")
    daemon_p.add_argument(
        "--interval", type=int, default=None, help="Seconds between polls"
    )
    daemon_p.add_argument(
        "--status", action="store_true", help="Show daemon status and exit"
    )

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Validate a config change")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "daemon" and args.status:
        return daemon_status()

    config = load_config(args.config)

    if args.command == "poll":
        return _cmd_poll(config, args)
    elif args.command == "daemon":
        return _cmd_daemon(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_poll(config, args) -> int:
    pipeline = PollPipeline(config)
    summary = pipeline.run()
    if args.json:
        print(format_poll_json(summary, pipeline.snapshot))
    elif summary.ok:
        print(format_snapshot_text(pipeline.snapshot))
    else:
        print(f"Poll failed at {summary.failed_stage}: {summary.error_message}")
    return 0 if summary.ok else 1


def _cmd_daemon(config, args) -> int:
    PollDaemon(config, interval=args.interval).start()
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        # SecretStr renders the API key masked
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
