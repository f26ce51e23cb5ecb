# src/lora_channel_manager/cli.py
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

import yaml

from .classifier import build_channel_plan
from .client import HttpGatewayClient
from .errors import ChannelManagerError
from .manager import ChannelManager
from .merge import dump_config, load_base_config, merge_config
from .models import load_channel_plan, normalize_gateway_mac
from .outputs import write_config, write_plan_description
from .plotting import plot_channel_plan
from .settings import ENV_VARS, load_settings

logger = logging.getLogger(__name__)


def _add_run_parser(sub) -> None:
    p = sub.add_parser(
        "run",
        help="Poll the gateway server and apply channel configuration changes",
    )
    p.add_argument("--config", type=str, default=None, help="YAML/JSON settings file")
    p.add_argument("--gw-mac", type=str, default=None, help="MAC address of the gateway")
    p.add_argument("--gw-server", type=str, default=None, help="URL of the gateway API server")
    p.add_argument("--gw-client-ca-cert", type=str, default=None, help="CA certificate (optional)")
    p.add_argument("--gw-client-tls-cert", type=str, default=None, help="TLS certificate (optional)")
    p.add_argument("--gw-client-tls-key", type=str, default=None, help="TLS key (optional)")
    p.add_argument(
        "--gw-client-jwt-token",
        type=str,
        default=None,
        help="JWT token used for authentication against the gateway server",
    )
    p.add_argument("--base-config-file", type=str, default=None, help="Path to the base configuration file")
    p.add_argument("--output-config-file", type=str, default=None, help="Path to the output configuration file")
    p.add_argument(
        "--pf-restart-command",
        type=str,
        default=None,
        help="Command executed on configuration changes to restart the packet-forwarder",
    )
    p.add_argument(
        "--config-poll-interval",
        type=str,
        default=None,
        help="Interval between configuration polls, e.g. 300, 30s, 5m (default: 5m)",
    )
    p.epilog = "Every option can also be set through the environment: " + ", ".join(ENV_VARS)


def _add_plan_parser(sub) -> None:
    p = sub.add_parser(
        "plan",
        help="Compute a channel plan from a local channel file (no server, no restart)",
    )
    p.add_argument("channels", type=str, help="YAML/JSON channel plan file")
    p.add_argument("base_config", type=str, help="Base packet-forwarder configuration file")
    p.add_argument("--gw-mac", type=str, required=True, help="MAC address of the gateway")
    p.add_argument("--out", type=str, default=None, help="Write merged configuration here (default: stdout)")
    p.add_argument("--plan-json", type=str, default=None, help="Write a plan description JSON here")
    p.add_argument("--plot", type=str, default=None, help="Write a channel plan plot (PNG) here")


def _run(args) -> int:
    overrides = {
        k: v
        for k, v in vars(args).items()
        if k not in {"command", "config", "log_level"}
    }
    try:
        settings = load_settings(args.config, overrides=overrides).validated()
    except (OSError, ValueError, yaml.YAMLError) as err:
        logger.error(f"invalid settings: {err}")
        return 1

    logger.info(
        f"starting LoRa Channel Manager: base_config_file={settings.base_config_file} "
        f"output_config_file={settings.output_config_file}"
    )
    logger.info(f"connecting to gateway-server: server={settings.gw_server}")
    client = HttpGatewayClient.from_settings(settings)
    manager = ChannelManager(settings, client)

    stop = threading.Event()

    def _on_signal(signum, frame):
        logger.info(f"signal received: {signal.Signals(signum).name}")
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    # The loop thread is abandoned on exit; an in-flight cycle is not awaited.
    worker = threading.Thread(target=manager.run, kwargs={"stop_event": stop}, daemon=True)
    worker.start()
    while not stop.wait(timeout=1.0):
        pass
    return 0


def _plan(args) -> int:
    try:
        gw_mac = normalize_gateway_mac(args.gw_mac)
        conf = load_channel_plan(args.channels)
        plan = build_channel_plan(conf)
        merged = merge_config(load_base_config(args.base_config), plan, gw_mac)
    except (ChannelManagerError, OSError, ValueError, yaml.YAMLError) as err:
        logger.error(f"plan error: {err}")
        return 1

    if args.out:
        write_config(args.out, merged)
    else:
        sys.stdout.write(dump_config(merged))

    if args.plan_json:
        write_plan_description(args.plan_json, plan)
    if args.plot:
        plot_channel_plan(plan, out_path=Path(args.plot))
    return 0


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        prog="lora-channel-manager",
        description="Channel-configuration daemon for LoRa gateways",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    _add_run_parser(sub)
    _add_plan_parser(sub)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        code = _run(args)
    else:
        code = _plan(args)
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
