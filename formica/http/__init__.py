from .bound import BoundHttp  # NOQA
from .unix_socket import UnixSocketConnection, unix_socket_http  # NOQA
from .ssh_tunnel import SSHTunnel, SSHTunnelConnection, ssh_tunnel_http  # NOQA
