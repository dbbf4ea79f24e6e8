"""LAN address lookup used by `healthylife.main` to print a reachable URL."""
import socket

_ROUTE_ADDR = ("8.8.8.8", 80)
_LOOPBACK = "127.0.0.1"


def get_local_ip() -> str:
    """Address of the interface that routes outbound traffic, else loopback.

    Connecting a UDP socket only picks a route; nothing is sent.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(_ROUTE_ADDR)
            return str(sock.getsockname()[0])
    except OSError:
        return _LOOPBACK
