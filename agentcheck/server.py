"""TCP accept loops for the report and control channels.

Each channel is a ``ChannelServer``: one listening socket, one accept thread,
and a fresh daemon thread per accepted connection. There is no cap on
in-flight connections.

``AgentCheck`` wires the two channels to a shared ``StateStore``.
"""

from __future__ import annotations

import functools
import socket
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from agentcheck.config import AgentConfig
from agentcheck.cpu import CpuSampler
from agentcheck.handlers import IdleSampler, handle_control, handle_report
from agentcheck.logging_utils import METRICS, get_logger
from agentcheck.state import StateStore


_logger = get_logger()

ConnectionHandler = Callable[[socket.socket, tuple], None]

_BACKLOG = 128
_ANY_HOSTS = ("", "::")


def open_listener(host: str, port: int) -> socket.socket:
    """Bind and listen on ``(host, port)``.

    An empty host (or ``::``) listens on every IPv4 and IPv6 interface when
    the platform supports dual-stack sockets. Named hosts use the first
    resolved address, IPv4 preferred, so ``localhost`` stays on 127.0.0.1.
    """

    if host in _ANY_HOSTS and socket.has_dualstack_ipv6():
        srv = socket.create_server(
            ("", port), family=socket.AF_INET6, backlog=_BACKLOG, dualstack_ipv6=True
        )
    else:
        infos = socket.getaddrinfo(host or None, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_PASSIVE)
        family = next((info[0] for info in infos if info[0] == socket.AF_INET), infos[0][0])
        srv = socket.create_server((host, port), family=family, backlog=_BACKLOG)
    srv.settimeout(0.5)
    return srv


@dataclass(frozen=True)
class ChannelConfig:
    name: str
    host: str
    port: int
    client_timeout: Optional[float] = None


class ChannelServer:
    """A small threaded TCP server handing every connection to ``handler``."""

    def __init__(self, config: ChannelConfig, handler: ConnectionHandler, *, quiet: bool = False) -> None:
        self._cfg = config
        self._handler = handler
        self._quiet = quiet
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._sock: Optional[socket.socket] = None

    @property
    def name(self) -> str:
        return self._cfg.name

    @property
    def address(self) -> Optional[tuple[str, int]]:
        """Bound (host, port), or None before ``start``."""
        if self._sock is None:
            return None
        host, port = self._sock.getsockname()[:2]
        return host, port

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        if self.running:
            return True
        try:
            srv = open_listener(self._cfg.host, self._cfg.port)
        except OSError as exc:
            _logger.warning(
                "listener failed to start",
                extra={
                    "channel": self._cfg.name,
                    "host": self._cfg.host,
                    "port": self._cfg.port,
                    "error": str(exc),
                },
            )
            return False
        self._sock = srv
        self._stop.clear()

        self._thread = threading.Thread(target=self._accept_loop, name=f"{self._cfg.name}-accept", daemon=True)
        self._thread.start()
        if not self._quiet:
            host, port = self.address or (self._cfg.host, self._cfg.port)
            _logger.info(
                "listener started",
                extra={"channel": self._cfg.name, "host": host, "port": port},
            )
        return True

    def stop(self) -> None:
        self._stop.set()
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.0)

    def _accept_loop(self) -> None:
        assert self._sock is not None
        sock = self._sock
        try:
            while not self._stop.is_set():
                try:
                    conn, addr = sock.accept()
                except socket.timeout:
                    continue
                except OSError as exc:
                    # Fatal for this channel only; the other keeps serving.
                    if not self._stop.is_set():
                        METRICS.counter("accept_errors").inc()
                        _logger.error(
                            "accept loop error",
                            extra={"channel": self._cfg.name, "error": str(exc)},
                        )
                    break

                conn.settimeout(self._cfg.client_timeout)
                t = threading.Thread(
                    target=self._handler,
                    args=(conn, addr),
                    name=f"{self._cfg.name}-conn",
                    daemon=True,
                )
                try:
                    t.start()
                except RuntimeError as exc:
                    # Out of threads; drop this client and keep accepting.
                    METRICS.counter("dispatch_errors").inc()
                    _logger.error(
                        "connection dispatch failed",
                        extra={"channel": self._cfg.name, "peer": addr[0], "error": str(exc)},
                    )
                    conn.close()
        finally:
            try:
                sock.close()
            except OSError:
                pass


class AgentCheck:
    """Report and control channels sharing one ``StateStore``."""

    def __init__(
        self,
        config: AgentConfig,
        *,
        store: Optional[StateStore] = None,
        sampler: Optional[IdleSampler] = None,
        quiet: bool = False,
    ) -> None:
        self.config = config
        self.store = store if store is not None else StateStore(config.initial_state)
        self.sampler = sampler if sampler is not None else CpuSampler()
        self.report = ChannelServer(
            ChannelConfig("report", config.listen_host, config.listen_port, config.client_timeout),
            functools.partial(handle_report, store=self.store, sampler=self.sampler),
            quiet=quiet,
        )
        self.control = ChannelServer(
            ChannelConfig("control", config.talk_host, config.talk_port, config.client_timeout),
            functools.partial(handle_control, store=self.store),
            quiet=quiet,
        )

    def start(self) -> bool:
        """Start both channels, or neither."""
        if not self.report.start():
            return False
        if not self.control.start():
            self.report.stop()
            return False
        return True

    def stop(self) -> None:
        self.report.stop()
        self.control.stop()
