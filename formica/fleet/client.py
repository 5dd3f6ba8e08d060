"""Unit lifecycle and status operations against a fleet cluster

    >>> fleet = Fleet(Config(endpoint='http://127.0.0.1:49153'))
    >>> fleet.submit('app.service', open('app.service').read())
    >>> fleet.start('app.service')
    >>> fleet.get_status('app.service')
    <UnitStatus: {"current": "launched", "desired": "launched", "machine": [...]}>

"""
import logging

from formica.fleet.api import Client
from formica.fleet.endpoint import DEFAULT_ENDPOINT
from formica.fleet.errors import IPNotFoundError, UnitNotFound
from formica.fleet.objects import MachineStatus, Unit, UnitStatus, LAUNCHED, LOADED

logger = logging.getLogger(__name__)


class Config(object):
    """Everything needed to build a Fleet

    Attributes:
        endpoint (str): URL of the fleet API, defaults to unix:///var/run/fleet.sock
        http (httplib2.Http): http object for http(s) endpoints, one is built if None.
            unix and file endpoints always dial through their own socket transport,
            so setting http with one of them raises ConfigurationError rather than
            replacing the object you passed
        timeout (float): socket timeout in seconds, None for no timeout
        ssh_tunnel (str '<host>[:<port>]'): reach an http endpoint through this ssh host
        ssh_username (str): defaults to 'core'
        ssh_timeout (float): defaults to 10
        ssh_known_hosts_file (str): defaults to '~/.fleetctl/known_hosts'
        ssh_strict_host_key_checking (bool): defaults to True
        ssh_raw_transport (paramiko.transport.Transport): an already connected ssh transport
    """

    def __init__(
        self,
        endpoint=DEFAULT_ENDPOINT,
        http=None,
        timeout=None,

        ssh_tunnel=None,
        ssh_username='core',
        ssh_timeout=10,
        ssh_known_hosts_file='~/.fleetctl/known_hosts',
        ssh_strict_host_key_checking=True,

        ssh_raw_transport=None
    ):
        self.endpoint = endpoint
        self.http = http
        self.timeout = timeout

        self.ssh_tunnel = ssh_tunnel
        self.ssh_username = ssh_username
        self.ssh_timeout = ssh_timeout
        self.ssh_known_hosts_file = ssh_known_hosts_file
        self.ssh_strict_host_key_checking = ssh_strict_host_key_checking

        self.ssh_raw_transport = ssh_raw_transport

    @classmethod
    def default(cls):
        """A Config with every value at its default"""
        return cls()

    def ssh_options(self):
        return {
            'ssh_tunnel': self.ssh_tunnel,
            'ssh_username': self.ssh_username,
            'ssh_timeout': self.ssh_timeout,
            'ssh_known_hosts_file': self.ssh_known_hosts_file,
            'ssh_strict_host_key_checking': self.ssh_strict_host_key_checking,
            'ssh_raw_transport': self.ssh_raw_transport,
        }


class Fleet(object):
    """Submit, start, stop, destroy and inspect units in a fleet cluster

    Every operation is synchronous. Errors are always formica.fleet.errors.FleetError
    subclasses; use formica.fleet.errors.is_unit_not_found to tell a missing unit
    apart from every other failure.
    """

    def __init__(self, config=None, client=None):
        """
        Args:
            config (Config, optional): Defaults to Config.default()
            client (formica.fleet.api.Client, optional): An already built API client, config is ignored if given

        Raises:
            ConfigurationError: The endpoint is invalid
            TransportError: The endpoint is not reachable
        """
        if config is None:
            config = Config.default()

        self.config = config

        if client is None:
            client = Client(
                config.endpoint,
                http=config.http,
                timeout=config.timeout,
                **config.ssh_options()
            )

        self._client = client

    @property
    def client(self):
        """formica.fleet.api.Client: the underlying fleet v1 API client"""
        return self._client

    def submit(self, name, content):
        """Create a unit from unit file contents, with its desired state set to loaded

        Args:
            name (str): The name of the unit, e.g. app.service
            content (str): The unit file

        Raises:
            UnitFileError: content is not a valid unit file
            APIError: fleet rejected the unit
            TransportError: The request failed before fleet could answer it
        """
        unit = Unit(from_string=content, desired_state=LOADED)

        logger.debug('submitting unit %s with %d options', name, len(unit.options))

        self._client.create_unit(name, unit)

    def start(self, name):
        """Set the desired state of a unit to launched

        Raises:
            APIError: fleet rejected the request, e.g. the unit does not exist
            TransportError: The request failed before fleet could answer it
        """
        logger.debug('starting unit %s', name)

        self._client.set_unit_desired_state(name, LAUNCHED)

    def stop(self, name):
        """Set the desired state of a unit to loaded

        Raises:
            APIError: fleet rejected the request, e.g. the unit does not exist
            TransportError: The request failed before fleet could answer it
        """
        logger.debug('stopping unit %s', name)

        self._client.set_unit_desired_state(name, LOADED)

    def destroy(self, name):
        """Delete a unit from the cluster

        Raises:
            APIError: fleet rejected the request, e.g. the unit does not exist
            TransportError: The request failed before fleet could answer it
        """
        logger.debug('destroying unit %s', name)

        self._client.destroy_unit(name)

    def get_status(self, name):
        """Fetch the status of a unit on every machine it is scheduled to

        Units, unit states and machines are separate listings made one after
        another, so the result is not a consistent snapshot of the cluster.

        Args:
            name (str): The name of the unit

        Returns:
            UnitStatus: The joined status

        Raises:
            UnitNotFound: No unit named ``name`` exists
            IPNotFoundError: A unit state references a machine fleet does not list
            APIError: fleet rejected one of the listings
            TransportError: One of the listings failed before fleet could answer it
        """

        # first match wins, fleet keeps names unique
        unit = None
        for candidate in self._client.list_units():
            if candidate.get('name') == name:
                unit = candidate
                break

        if unit is None:
            raise UnitNotFound(name)

        states = [s for s in self._client.list_unit_states() if s.get('name') == name]

        machine_status = []

        if states:
            # listed once per call, every state is resolved against the same listing
            machines = {}
            for machine in self._client.list_machines():
                machines.setdefault(machine.get('id'), machine)

            for state in states:
                machine_id = state.get('machineID')

                if machine_id not in machines:
                    raise IPNotFoundError(machine_id, unit_name=name)

                machine_status.append(MachineStatus(
                    id=machine_id,
                    ip=machines[machine_id].ip,
                    systemd_active=state.get('systemdActiveState')
                ))

        logger.debug('unit %s is scheduled to %d machines', name, len(machine_status))

        return UnitStatus(
            current=unit.get('currentState'),
            desired=unit.get('desiredState'),
            machine=machine_status
        )
