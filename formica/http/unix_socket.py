import http.client as httplib
import logging
import socket

from .bound import BoundHttp

logger = logging.getLogger(__name__)


def has_timeout(timeout):  # pragma: no cover
    if hasattr(socket, '_GLOBAL_DEFAULT_TIMEOUT'):
        return (timeout is not None and timeout is not socket._GLOBAL_DEFAULT_TIMEOUT)
    return (timeout is not None)


class UnixSocketConnection(httplib.HTTPConnection):
    """
    HTTP over UNIX Domain Sockets

    The socket path lives on the class, use ``bind`` to get a connection class
    for one path.  The host and port handed to us by the HTTP layer are only
    used for the Host header, they are never dialed.
    """

    socket_path = None

    def __init__(self, host, port=None, timeout=None, proxy_info=None):
        httplib.HTTPConnection.__init__(self, host, port)
        self.timeout = timeout

    @classmethod
    def bind(cls, socket_path):
        """Build a connection class that always dials ``socket_path``

        httplib2 wants a class for ``connection_type``, not a factory.

        Args:
            socket_path (str): Path to a unix domain socket

        Returns:
            type: A subclass of this class bound to socket_path

        """
        return type('BoundUnixSocketConnection', (cls,), {'socket_path': socket_path})

    def connect(self):
        """Connect to the unix domain socket at self.socket_path

        Raises:
            socket.error: The socket does not exist or refused the connection

        """
        logger.debug('dialing unix socket %s for %s', self.socket_path, self.host)

        self.sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)

        try:
            if has_timeout(self.timeout):
                self.sock.settimeout(self.timeout)

            self.sock.connect(self.socket_path)
        except socket.error:
            self.sock.close()
            self.sock = None

            raise


def unix_socket_http(socket_path, timeout=None):
    """Build an httplib2.Http whose every connection dials ``socket_path``

    Args:
        socket_path (str): Path to a unix domain socket
        timeout (float, optional): Socket timeout in seconds

    Returns:
        BoundHttp: The http object to send requests through

    """
    return BoundHttp(
        UnixSocketConnection.bind(socket_path),
        timeout=timeout
    )
