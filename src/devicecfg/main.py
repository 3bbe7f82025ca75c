import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from devicecfg.exception import DeviceCfgError
from devicecfg.schema.device_schema import DeviceInfo, DriverConfig
from devicecfg.util.config_manager import ConfigManager
from devicecfg.util.logger_config import quiet_pymodbus_logs, setup_logging

logger = logging.getLogger("devicecfg.main")


def describe_device(device: DeviceInfo) -> dict[str, Any]:
    access = device.access
    return {
        "name": device.name,
        "version": device.version,
        "protocol": device.protocol,
        "access": access.model_dump(mode="json", by_alias=True) if access is not None else None,
        "properties": [
            {
                "name": prop.name,
                "type": prop.effective_type,
                "mode": prop.mode,
                "protocol": prop.visitor.protocol if prop.visitor is not None else None,
                "visitor": prop.visitor.model_dump(mode="json", by_alias=True) if prop.visitor is not None else None,
            }
            for prop in device.properties
        ],
    }


def describe_config(config: DriverConfig, device_name: str | None = None) -> dict[str, Any]:
    devices = [d for d in config.devices if device_name is None or d.name == device_name]
    return {"driver": config.driver, "devices": [describe_device(d) for d in devices]}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="devicecfg", description="Decode and inspect driver device configuration")
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-dir", default=None, help="Also write a daily-rotated log file to this directory")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Decode a YAML/JSON driver config and print the resolved devices")
    check.add_argument("path", help="Path to the driver configuration document")
    check.add_argument("--device", default=None, help="Only print the device with this name")
    check.add_argument("--no-env", action="store_true", help="Do not substitute ${VAR:-default} values")
    check.add_argument("--compact", action="store_true", help="Print JSON on a single line")
    return parser


def run_check(args: argparse.Namespace) -> int:
    try:
        config = ConfigManager.load_driver_config(args.path, resolve_env=not args.no_env)
    except (DeviceCfgError, OSError) as e:
        logger.error(f"Rejected {args.path}: {e}")
        return 1

    summary = describe_config(config, args.device)
    if args.device is not None and not summary["devices"]:
        logger.error(f"Device {args.device!r} not found in {args.path}")
        return 1

    indent = None if args.compact else 2
    print(json.dumps(summary, ensure_ascii=False, indent=indent))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    setup_logging(log_level=args.log_level, log_to_file=args.log_dir is not None, log_dir=args.log_dir or "logs")
    quiet_pymodbus_logs()

    if args.command == "check":
        return run_check(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
