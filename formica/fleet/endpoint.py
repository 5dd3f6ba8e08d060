import collections
import logging
import socket
import urllib.parse as urlparse

import httplib2
import paramiko

from formica.http import SSHTunnel, ssh_tunnel_http, unix_socket_http
from formica.fleet.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'unix:///var/run/fleet.sock'

# exposed in debug logs in place of a real host for socket endpoints
DOMAIN_SOCKET_HOST = 'domain-sock'

SOCKET_SCHEMES = ('unix', 'file')
HTTP_SCHEMES = ('http', 'https')


ResolvedEndpoint = collections.namedtuple('ResolvedEndpoint', [
    'url',          # the URL requests are built against, always http(s)
    'http',         # the httplib2.Http (or compatible) all requests go through
    'socket_path',  # the unix socket dialed, None for network endpoints
    'tunnel',       # the SSHTunnel connections are forwarded through, or None
])


def split_hostport(hostport, default_port=None):
    """Split a string in the format of '<host>:<port>' into it's component parts

    default_port will be used if a port is not included in the string

    Args:
        hostport ('<host>' or '<host>:<port>'): A string to split into it's parts
        default_port (int, optional): The port to use if hostport does not include one

    Returns:
        two item tuple: (host, port)

    Raises:
        ConfigurationError: The string was in an invalid format
    """

    try:
        (host, port) = hostport.rsplit(':', 1)
    except ValueError:  # no colon in the string so make our own port
        host = hostport

        if default_port is None:
            raise ConfigurationError('No port found in {0}, and default_port not provided.'.format(hostport))

        port = default_port

    try:
        port = int(port)
        if port < 1 or port > 65535:
            raise ValueError()
    except ValueError:
        raise ConfigurationError("{0} is not a valid TCP port".format(port))

    if not host:
        raise ConfigurationError('No host found in {0}'.format(hostport))

    return (host, port)


def resolve_endpoint(
    endpoint,
    http=None,
    timeout=None,

    ssh_tunnel=None,
    ssh_username='core',
    ssh_timeout=10,
    ssh_known_hosts_file='~/.fleetctl/known_hosts',
    ssh_strict_host_key_checking=True,

    ssh_raw_transport=None
):
    """Turn a fleet endpoint URL into the URL and transport requests are sent with

    Supported schemes are:
        unix, file: HTTP over a unix domain socket. The path is the socket path
            and the URL must not carry a host (note the three slashes).
            Example: unix:///var/run/fleet.sock
        http, https: HTTP over TCP.
            Example: http://127.0.0.1:49153

    Socket endpoints are rewritten to ``http://domain-sock``; the socket path is only
    used for dialing and never appears in a request.

    Args:
        endpoint (str): The URL fleet can be reached at
        http (httplib2.Http, optional): The http object to use for http(s) endpoints. You do not need to pass this
            unless you need to configure specific options for your http client, or want to pass in a mock for testing.
            It can not be combined with a socket endpoint or with ssh tunneling, both of which build their own.
        timeout (float, optional): Socket timeout in seconds for connections we build

        ssh_tunnel (str '<host>[:<port>]'): Establish an SSH tunnel through the provided address for communication
        with fleet. Only http endpoints can be tunneled.
            ssh_username (str): Username to use when connecting to SSH, defaults to 'core'.
            ssh_timeout (float): Seconds to allow for SSH connection initialization, defaults to 10.
            ssh_known_hosts_file (str): File used to store remote machine fingerprints,
            defaults to '~/.fleetctl/known_hosts'.  Ignored if `ssh_strict_host_key_checking` is False
            ssh_strict_host_key_checking (bool): Verify host keys presented by remote machines, defaults to True.

        ssh_raw_transport (paramiko.transport.Transport): An active Transport on which open_channel() will be
        called to establish connections.

    Returns:
        ResolvedEndpoint: The URL, transport and dial target to use for every request

    Raises:
        ConfigurationError: The endpoint or the combination of options is invalid
        TransportError: The SSH tunnel could not be established
    """

    if not endpoint:
        raise ConfigurationError('No fleet endpoint provided')

    try:
        parsed = urlparse.urlsplit(endpoint)
    except ValueError as exc:
        raise ConfigurationError('Unable to parse fleet endpoint {0}'.format(endpoint), cause=exc)

    scheme = parsed.scheme.lower()

    if (ssh_tunnel or ssh_raw_transport) and http:
        raise ConfigurationError('You cannot specify your own http client, and request ssh tunneling.')

    if ssh_tunnel and ssh_raw_transport:
        raise ConfigurationError('If ssh_tunnel is specified, ssh_raw_transport must be None')

    if scheme in SOCKET_SCHEMES:
        if parsed.netloc:
            # This commonly happens if the user misses the leading slash after the
            # scheme: "unix://var/run/fleet.sock" is parsed as host "var"
            raise ConfigurationError('unable to connect to host {0!r} with scheme {1!r}'.format(
                parsed.netloc,
                scheme
            ))

        if not parsed.path:
            raise ConfigurationError('No socket path found in fleet endpoint {0}'.format(endpoint))

        if ssh_tunnel or ssh_raw_transport:
            raise ConfigurationError(
                'Unix domain sockets can not be reached through an ssh tunnel; '
                'use an http endpoint reachable from the ssh host instead.'
            )

        if http is not None:
            raise ConfigurationError('You cannot specify your own http client for a unix socket endpoint.')

        url = urlparse.urlunsplit(('http', DOMAIN_SOCKET_HOST, '', '', ''))

        logger.debug('resolved fleet endpoint %s to unix socket %s', endpoint, parsed.path)

        return ResolvedEndpoint(
            url=url,
            http=unix_socket_http(parsed.path, timeout=timeout),
            socket_path=parsed.path,
            tunnel=None
        )

    if scheme not in HTTP_SCHEMES:
        raise ConfigurationError('invalid scheme in fleet endpoint: {0}'.format(parsed.scheme))

    if not parsed.netloc:
        raise ConfigurationError('No host found in fleet endpoint {0}'.format(endpoint))

    url = endpoint.rstrip('/')

    tunnel = _open_tunnel(
        ssh_tunnel,
        ssh_raw_transport,
        username=ssh_username,
        timeout=ssh_timeout,
        known_hosts_file=ssh_known_hosts_file,
        strict_host_key_checking=ssh_strict_host_key_checking
    )

    if tunnel is not None:
        if scheme == 'https':
            raise ConfigurationError('https endpoints can not be reached through an ssh tunnel')

        (target_host, target_port) = split_hostport(parsed.netloc, default_port=80)

        logger.debug('resolved fleet endpoint %s through ssh tunnel', url)

        return ResolvedEndpoint(
            url=url,
            http=ssh_tunnel_http(tunnel, target_host, target_port, timeout=timeout),
            socket_path=None,
            tunnel=tunnel
        )

    if http is None:
        http = httplib2.Http(timeout=timeout)

    logger.debug('resolved fleet endpoint %s', url)

    return ResolvedEndpoint(url=url, http=http, socket_path=None, tunnel=None)


def _open_tunnel(ssh_tunnel, ssh_raw_transport, **kwargs):
    """Build the SSHTunnel asked for by the caller, or None

    Raises:
        ConfigurationError: The tunnel options are invalid or the ssh host can not be resolved
        TransportError: The ssh connection failed
    """

    if ssh_raw_transport:
        if not isinstance(ssh_raw_transport, paramiko.transport.Transport):
            raise ConfigurationError('ssh_raw_transport must be an active instance of paramiko.transport.Transport.')

        return SSHTunnel(host=ssh_raw_transport)

    if not ssh_tunnel:
        return None

    (ssh_host, ssh_port) = split_hostport(ssh_tunnel, default_port=22)

    try:
        return SSHTunnel(host=ssh_host, port=ssh_port, **kwargs)

    except ValueError as exc:
        raise ConfigurationError(str(exc), cause=exc)

    except socket.gaierror as exc:
        raise ConfigurationError('{0} could not be resolved.'.format(ssh_host), cause=exc)

    except socket.error as exc:
        raise TransportError('Unable to connect to {0}:{1}'.format(ssh_host, ssh_port), cause=exc)

    except paramiko.ssh_exception.SSHException as exc:
        raise TransportError('Unable to connect via ssh: {0}'.format(exc.__class__.__name__), cause=exc)
