"""
UDP transport for StatsD datagrams.
"""
import logging
import socket
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from retrying import retry

from . import config
from .errors import NotConnectedError, TransportError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """A datagram sink a client writes encoded metrics to."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Send one datagram.

        Raises:
            NotConnectedError: If the transport is closed
            TransportError: If the socket reports an error
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying socket. Safe to call more than once."""
        pass


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` address.

    IPv6 hosts may be given in brackets, e.g. ``[::1]:8125``.

    Args:
        address (str): The address to parse

    Returns:
        tuple: (host, port)

    Raises:
        NotConnectedError: If the address is malformed
    """
    host, sep, port = address.rpartition(':')
    if not sep or not host or not port:
        raise NotConnectedError(f"invalid StatsD address: {address!r}")
    try:
        port_number = int(port)
    except ValueError:
        raise NotConnectedError(f"invalid StatsD port in address: {address!r}")
    return host.strip('[]'), port_number


def _retry_if_timeout(exception: Exception) -> bool:
    """Return True if a connect attempt should be retried."""
    return isinstance(exception, socket.timeout)


class UDPTransport(Transport):
    """Transport writing each datagram to a connected UDP socket."""

    def __init__(self, sock: socket.socket, address: str):
        self._sock: Optional[socket.socket] = sock
        self.address = address

    @classmethod
    def connect(
        cls,
        address: str,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None
    ) -> 'UDPTransport':
        """
        Open a UDP socket connected to a StatsD server.

        UDP is connectionless, so this only resolves the address and fixes
        the peer; unreachable servers surface later as write errors.

        Args:
            address (str): ``host:port`` of the server
            timeout (float, optional): Socket timeout in seconds. Defaults to config.CONNECT_TIMEOUT.
            max_retries (int, optional): Connect attempts. Defaults to config.MAX_RETRIES.
            retry_delay (float, optional): Delay between attempts in seconds. Defaults to config.RETRY_DELAY.

        Returns:
            UDPTransport: The connected transport

        Raises:
            NotConnectedError: If the address cannot be resolved or connected
        """
        host, port = parse_address(address)
        timeout = config.CONNECT_TIMEOUT if timeout is None else timeout
        max_retries = max_retries or config.MAX_RETRIES
        retry_delay = config.RETRY_DELAY if retry_delay is None else retry_delay

        @retry(
            retry_on_exception=_retry_if_timeout,
            stop_max_attempt_number=max_retries,
            wait_fixed=int(retry_delay * 1000)  # milliseconds
        )
        def _dial() -> socket.socket:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, 0, socket.SOCK_DGRAM
            )[0]
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(timeout)
            try:
                sock.connect(sockaddr)
            except OSError:
                sock.close()
                raise
            return sock

        try:
            sock = _dial()
        except OSError as e:
            logger.error("Failed to connect to StatsD server %s: %s", address, e)
            raise NotConnectedError(f"can't connect to StatsD server {address}: {e}") from e

        logger.info("Connected to StatsD server %s", address)
        return cls(sock, address)

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def write(self, data: bytes) -> None:
        sock = self._sock
        if sock is None:
            raise NotConnectedError()
        try:
            sock.send(data)
        except OSError as e:
            raise TransportError(f"failed to write to {self.address}: {e}") from e

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        sock.close()
        logger.debug("Closed StatsD socket %s", self.address)
