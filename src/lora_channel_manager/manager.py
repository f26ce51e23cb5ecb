# src/lora_channel_manager/manager.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol
import logging
import subprocess
import threading
import time

from .classifier import build_channel_plan
from .client import GatewayClient
from .errors import (
    ChannelManagerError,
    ConfigWriteError,
    FetchError,
    RestartCommandError,
)
from .merge import load_base_config, merge_config
from .outputs import write_config
from .settings import Settings

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def invoke_restart(command: str) -> str:
    """
    Run the packet-forwarder restart command and wait for it to finish.

    The command string is split on whitespace; no shell is involved.
    Returns the captured stdout.
    """
    parts = command.split()
    if not parts:
        raise RestartCommandError("no packet-forwarder restart command configured")

    program, args = parts[0], parts[1:]
    logger.info(f"invoking packet-forwarder restart command: cmd={program} args={args}")

    try:
        result = subprocess.run(
            [program, *args],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as err:
        raise RestartCommandError(
            f"execute command error: exit status {err.returncode}: "
            f"{(err.stderr or '').strip()}"
        ) from err
    except OSError as err:
        raise RestartCommandError(f"execute command error: {err}") from err

    logger.info(f"packet-forwarder restart command invoked: output={result.stdout!r}")
    return result.stdout


class ChannelManager:
    """
    Polls the configuration source and applies new channel plans.

    last_updated_at is only advanced after a plan has been written and the
    restart command succeeded, so a failed cycle is retried on the next tick.
    """

    def __init__(
        self,
        settings: Settings,
        client: GatewayClient,
        clock: Optional[Clock] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.clock = clock or SystemClock()
        self.last_updated_at: Optional[datetime] = None

    def update_config(self) -> bool:
        """
        Run one update cycle. Returns True if a new configuration was applied,
        False if there was nothing to do. Raises ChannelManagerError on failure.
        """
        s = self.settings
        try:
            conf = self.client.get_configuration(s.gw_mac)
        except ChannelManagerError:
            raise
        except Exception as err:
            raise FetchError(f"get packet-forwarder config error: {err}") from err

        if self.last_updated_at is not None and self.last_updated_at == conf.updated_at:
            logger.info("no configuration update available")
            return False

        base = load_base_config(s.base_config_file)
        plan = build_channel_plan(conf)
        merged = merge_config(base, plan, s.gw_mac)

        try:
            write_config(s.output_config_file, merged)
        except OSError as err:
            raise ConfigWriteError(f"write file error: {err}") from err
        logger.info(f"configuration written to disk: path={s.output_config_file}")

        invoke_restart(s.pf_restart_command)

        self.last_updated_at = conf.updated_at
        return True

    def run_once(self) -> bool:
        try:
            return self.update_config()
        except ChannelManagerError as err:
            logger.error(f"update config error: {err}")
            return False
        except Exception:
            logger.exception("update config error: unexpected failure")
            return False

    def run(
        self,
        max_cycles: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> List[bool]:
        """
        Poll loop. Runs until max_cycles cycles have completed or stop_event
        is set; returns the per-cycle results.
        """
        results: List[bool] = []
        interval = self.settings.config_poll_interval
        while max_cycles is None or len(results) < max_cycles:
            if stop_event is not None and stop_event.is_set():
                break
            logger.info("checking for updated configuration")
            results.append(self.run_once())
            if max_cycles is not None and len(results) >= max_cycles:
                break
            logger.info(f"sleeping until next update check: duration={interval}s")
            self.clock.sleep(interval)
        return results
