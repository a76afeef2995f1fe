"""
Agent-check sidecar entry point.

Reads AC_LISTEN_PORT (report channel, polled by the load balancer) and
AC_TALK_PORT (control channel) from the environment, starts both channels and
runs until SIGINT/SIGTERM.
"""

from __future__ import annotations

import signal
import sys
import threading

from agentcheck.config import load_config
from agentcheck.env_loader import load_env_files
from agentcheck.exceptions import ConfigError
from agentcheck.logging_utils import METRICS, get_logger, set_level
from agentcheck.server import AgentCheck


logger = get_logger()


def _install_signal_handlers(stop_event: threading.Event, received: list) -> None:
    def handler(signum, frame):
        received.append(signum)
        stop_event.set()

    signal.signal(signal.SIGINT, handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, handler)


def main() -> int:
    load_env_files()
    try:
        config = load_config()
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    set_level(config.log_level)

    stop_event = threading.Event()
    received: list = []
    _install_signal_handlers(stop_event, received)

    agent = AgentCheck(config)
    if not agent.start():
        logger.error("could not bind listen addresses, exiting")
        return 1

    # Short waits keep the main thread responsive to signals on every platform.
    while not stop_event.wait(1.0):
        pass

    signame = signal.Signals(received[0]).name if received else "unknown"
    logger.info("exiting on signal", extra={"signal": signame, "counters": METRICS.snapshot()})
    agent.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
