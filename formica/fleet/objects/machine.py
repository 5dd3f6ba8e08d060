import ipaddress

from .fleet_object import FleetObject


def parse_ip(value):
    """Parse a textual IP address, returning None if it isn't one"""
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


class Machine(FleetObject):
    """A Machine represents a host in the cluster. It uses the host's machine-id as a unique identifier.

    Attribues:
        id: unique identifier of Machine entity
        primaryIP: IP address that should be used to communicate with this host
        metadata: dictionary of key-value data published by the machine
    """

    def __init__(self, data=None):
        data = dict(data or {})

        # fleet api doesn't return a key for metadata if there is none
        # we want to retun an empty dict in those cases for consistency
        if 'metadata' not in data:
            data['metadata'] = {}

        super(Machine, self).__init__(data=data)

    @property
    def ip(self):
        """ipaddress.IPv4Address or IPv6Address: primaryIP parsed, None if missing or malformed"""
        return parse_ip(self._data.get('primaryIP', ''))
