import http.client as httplib
import logging
import os

import paramiko

from .bound import BoundHttp

logger = logging.getLogger(__name__)


class SSHTunnel(object):
    """Use paramiko to setup local "ssh -L" tunnels for fleet connections"""

    def __init__(
        self,
        host,
        username=None,
        port=22,
        timeout=10,
        known_hosts_file=None,
        strict_host_key_checking=True
    ):
        """Connect to the SSH server, and authenticate

        Args:
            host (str or paramiko.transport.Transport): The hostname to connect to or an already connected Transport.
            username (str): The username to use when authenticating.
            port (int): The port to connect to, defaults to 22.
            timeout (int): The timeout to wait for a connection in seconds, defaults to 10.
            known_hosts_file (str): A path to a known host file, ignored if strict_host_key_checking is False.
            strict_host_key_checking (bool): Verify host keys presented by remote machines before
            initiating SSH connections, defaults to True.

        Raises:
            ValueError: strict_host_key_checking was true, but known_hosts_file didn't exist.
            socket.gaierror: Unable to resolve host
            socket.error: Unable to connect to host:port
            paramiko.ssh_exception.SSHException: Error authenticating during SSH connection.
        """

        self.client = None
        self.transport = None

        # an already connected transport needs no further setup
        if isinstance(host, paramiko.transport.Transport):
            self.transport = host
            return

        self.client = paramiko.SSHClient()

        if strict_host_key_checking:
            if not known_hosts_file:
                raise ValueError('Strict Host Key Checking is enabled, but no known hosts file was given.')

            try:
                self.client.load_system_host_keys(os.path.expanduser(known_hosts_file))
            except IOError:
                raise ValueError(
                    'Strict Host Key Checking is enabled, but hosts file ({0}) '
                    'does not exist or is unreadable.'.format(known_hosts_file)
                )
        else:
            self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        logger.debug('opening ssh tunnel to %s@%s:%s', username, host, port)

        # let connection and authentication errors bubble up
        self.client.connect(
            host,
            port=port,
            username=username,
            timeout=timeout,
            banner_timeout=timeout,
        )

        self.transport = self.client.get_transport()

    def forward_tcp(self, host, port):
        """Open a connection to host:port via an ssh tunnel.

        Args:
            host (str): The host to connect to.
            port (int): The port to connect to.

        Returns:
            A socket-like object that is connected to the provided host:port.

        """

        return self.transport.open_channel(
            'direct-tcpip',
            (host, port),
            self.transport.getpeername()
        )

    def close(self):
        """Close the SSH connection if we opened it ourselves"""
        if self.client is not None:
            self.client.close()


class SSHTunnelConnection(httplib.HTTPConnection):
    """
    An HTTP connection whose socket is a channel forwarded through an SSH tunnel.

    The tunnel and the (host, port) to forward to live on the class, use ``bind``
    to get a connection class for one tunnel.  The authority httplib2 passes in
    is only used for the Host header.
    """

    tunnel = None
    target = None

    def __init__(self, host, port=None, timeout=None, proxy_info=None):
        httplib.HTTPConnection.__init__(self, host, port)
        self.timeout = timeout

    @classmethod
    def bind(cls, tunnel, target):
        """Build a connection class that always forwards to ``target`` through ``tunnel``

        Args:
            tunnel (SSHTunnel): A connected tunnel
            target (tuple): The (host, port) to forward to

        Returns:
            type: A subclass of this class bound to tunnel and target

        """
        return type('BoundSSHTunnelConnection', (cls,), {'tunnel': tunnel, 'target': target})

    def connect(self):
        """Open a new channel on the tunnel for this connection"""
        logger.debug('forwarding %s:%s through ssh tunnel', *self.target)

        self.sock = self.tunnel.forward_tcp(*self.target)

        if self.timeout is not None and hasattr(self.sock, 'settimeout'):
            self.sock.settimeout(self.timeout)


def ssh_tunnel_http(tunnel, host, port, timeout=None):
    """Build an httplib2.Http whose every connection is forwarded through ``tunnel``

    Args:
        tunnel (SSHTunnel): A connected tunnel
        host (str): The host to forward to, as seen from the ssh server
        port (int): The port to forward to
        timeout (float, optional): Socket timeout in seconds

    Returns:
        BoundHttp: The http object to send requests through

    """
    return BoundHttp(
        SSHTunnelConnection.bind(tunnel, (host, port)),
        timeout=timeout
    )
