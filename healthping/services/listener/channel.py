"""
Command Channel

UDP endpoint the dispatcher reads commands from and writes replies to.
Any socket failure is raised as a non-recoverable ChannelError.
"""

import asyncio
import socket

from healthping.common.exceptions import BindError, ReceiveError, SendError
from healthping.common.logging_setup import get_service_logger

from .commands import Command

logger = get_service_logger("listener.channel")

# Datagrams longer than this are truncated by the kernel, silently
RECEIVE_BUFFER_SIZE = 1024


class CommandChannel:
    """Single-reader, single-writer UDP socket wrapper"""

    def __init__(self, port: int, host: str = ""):
        self.port = port
        self.host = host
        self._sock: socket.socket | None = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def bound_port(self) -> int | None:
        """Actual port (differs from ``port`` when 0 was requested)"""
        if self._sock is None:
            return None
        return self._sock.getsockname()[1]

    def open(self) -> None:
        """Bind the UDP endpoint on all interfaces (or ``host``)"""
        logger.info(f"Starting UDP server, listening on port {self.port}")

        try:
            sock, address = self._create_socket()
        except OSError as e:
            logger.critical(f"Could not start udp server: {e}", extra={"port": self.port})
            raise BindError(f"could not bind udp port {self.port}: {e}", port=self.port)

        try:
            sock.bind(address)
        except OSError as e:
            sock.close()
            logger.critical(f"Could not start udp server: {e}", extra={"port": self.port})
            raise BindError(f"could not bind udp port {self.port}: {e}", port=self.port)

        sock.setblocking(False)
        self._sock = sock
        logger.info(f"UDP server bound to {address[0] or '0.0.0.0'}:{self.bound_port}")

    def _create_socket(self) -> tuple[socket.socket, tuple]:
        """Pick the socket family; an empty host means every interface, v4 and v6"""
        if not self.host and socket.has_dualstack_ipv6():
            sock = socket.socket(socket.AF_INET6, socket.SOCK_DGRAM)
            try:
                sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
            except OSError:
                sock.close()
                raise
            return sock, ("::", self.port)

        if ":" in self.host:
            return socket.socket(socket.AF_INET6, socket.SOCK_DGRAM), (self.host, self.port)

        return socket.socket(socket.AF_INET, socket.SOCK_DGRAM), (self.host, self.port)

    async def receive(self) -> Command:
        """Wait for one datagram and decode it into a Command"""
        if self._sock is None:
            raise ReceiveError("channel is not open", port=self.port)

        loop = asyncio.get_running_loop()
        try:
            data, sender = await loop.sock_recvfrom(self._sock, RECEIVE_BUFFER_SIZE)
        except OSError as e:
            logger.critical(f"Could not read from udp stream: {e}", extra={"port": self.port})
            raise ReceiveError(f"could not read from udp stream: {e}", port=self.port)

        text = data.decode("utf-8", errors="replace").strip()
        logger.info(
            f"Received packet from {sender[0]}:{sender[1]}: {text}",
            extra={"sender": f"{sender[0]}:{sender[1]}", "size": len(data)},
        )
        return Command.from_text(text, sender)

    async def reply(self, sender: tuple, text: str) -> None:
        """Send one best-effort reply datagram"""
        if self._sock is None:
            raise SendError("channel is not open", port=self.port, address=sender)

        loop = asyncio.get_running_loop()
        try:
            await loop.sock_sendto(self._sock, text.encode("utf-8"), sender)
        except OSError as e:
            logger.critical(
                f"Could not write to udp stream: {e}",
                extra={"port": self.port, "sender": str(sender)},
            )
            raise SendError(f"could not write to udp stream: {e}", port=self.port, address=sender)

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
