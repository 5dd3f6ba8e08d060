from io import StringIO

from ..errors import UnitFileError
from .fleet_object import FleetObject

INACTIVE = 'inactive'
LOADED = 'loaded'
LAUNCHED = 'launched'

# ordered by increasing activity
STATES = (INACTIVE, LOADED, LAUNCHED)


def compare_states(a, b):
    """Compare two unit states by activity

    Args:
        a (str): A unit state, one of ``STATES``
        b (str): A unit state, one of ``STATES``

    Returns:
        int: negative if ``a`` is less active than ``b``, zero if equal, positive otherwise

    Raises:
        ValueError: Either state is not one of ``STATES``
    """
    for state in (a, b):
        if state not in STATES:
            raise ValueError('state must be one of: {0}'.format(list(STATES)))

    return STATES.index(a) - STATES.index(b)


def parse_unit_file(file_handle):
    """Parse a systemd unit file into fleet's option records

    Comments (# or ;) and blank lines are skipped, a trailing backslash continues
    a value on the next line, and repeated names are kept in order.

    Args:
        file_handle (file): a file-like object (supporting read()) containing a unit

    Returns:
        list: dicts with ``section``, ``name`` and ``value`` keys, in file order

    Raises:
        UnitFileError: The contents are not a valid unit file
    """

    # Can't use configparser, it doesn't handle multiple entries for the same key in the same section

    options = []

    section = None

    # a value continued with a trailing backslash, and the line it started on
    pending = None
    pending_line = None

    for line_number, line in enumerate(file_handle.read().splitlines(), 1):
        line = line.strip()

        if pending is not None:
            pending_line, line = pending_line, pending + ' ' + line
            pending = None
        else:
            pending_line = line_number

            # ignore comments, and blank lines
            if not line or line.startswith('#') or line.startswith(';'):
                continue

            # Section headers look like: [Section]
            if line.startswith('[') and line.endswith(']'):
                section = line[1:-1].strip()

                if not section:
                    raise UnitFileError(
                        'Unable to parse unit file; '
                        'Empty section name (line: {0})'.format(line_number)
                    )
                continue

        if line.endswith('\\'):
            pending = line[:-1].rstrip()
            continue

        # We encountered a non blank line outside of a section, this is a problem
        if not section:
            raise UnitFileError(
                'Unable to parse unit file; '
                'Unexpected line outside of a section: {0} (line: {1})'.format(
                    line,
                    pending_line
                ))

        # Lines should look like: name=value
        name, sep, value = line.partition('=')
        name = name.strip()

        if not sep or not name:
            raise UnitFileError(
                'Unable to parse unit file; '
                'Malformed line in section {0}: {1} (line: {2})'.format(
                    section,
                    line,
                    pending_line
                ))

        options.append({
            'section': section,
            'name': name,
            'value': value.strip()
        })

    if pending is not None:
        raise UnitFileError(
            'Unable to parse unit file; '
            'Line continuation at end of file (line: {0})'.format(pending_line)
        )

    if not options:
        raise UnitFileError('Unable to parse unit file; No options found')

    return options


class Unit(FleetObject):
    """This object represents a Unit in Fleet

    Create Unit entities to communicate to fleet the desired state of the cluster.
    This simply declares what should be happening; the backend system still has to react to the changes in
    this desired state. The actual state of the system is communicated with UnitState entities.

    Attributes (all are readonly):
        Always available:
            options: list of UnitOption entities
            desiredState: state the user wishes the Unit to be in
                          ("inactive", "loaded", or "launched")

        Available once units are submitted to fleet:
            name: unique identifier of entity
            currentState: state the Unit is currently in (same possible values as desiredState)
            machineID: ID of machine to which the Unit is scheduled

    A UnitOption represents a single option in a systemd unit file.
        section: name of section that contains the option (e.g. "Unit", "Service", "Socket")
        name: name of option (e.g. "BindsTo", "After", "ExecStart")
        value: value of option (e.g. "/usr/bin/docker run busybox /bin/sleep 1000")

    """

    _STATES = list(STATES)

    def __init__(self, data=None, desired_state=None, options=None, from_file=None, from_string=None):
        """Create a new unit

        Args:
            data (dict, optional): Initialize this object with this data.  If this is used you must not
                                   specify options, desired_state, from_file, or from_string

            desired_state (string, optional): The desired_state for this object, defaults to 'launched' if not specified

            If you do not specify data, You may specify one of the following args to initialize the object:

                options (list, optional): A list of options to initialize the object with.
                from_file (str, optional): Initialize this object from the unit file on disk at this path
                from_string (str, optional): Initialize this object from the unit file in this string

                If none are specified, an empty unit will be created

        Raises:
            IOError: from_file was specified and it does not exist
            ValueError: Conflicting options, or an invalid desired_state
            UnitFileError: The unit contents specified in from_string or from_file is not valid

        """

        sources = [x for x in (options, from_file, from_string) if x is not None]

        # make sure if they specify data, then they didn't specify anything else
        if data is not None and (desired_state is not None or sources):
            raise ValueError('If you specify data you can not specify desired_state, '
                             'options, from_file, or from_string')

        if len(sources) > 1:
            raise ValueError('You must specify only one of options, from_file, from_string')

        if data is None:
            if desired_state is None:
                desired_state = LAUNCHED

            if desired_state not in STATES:
                raise ValueError('desired_state must be one of: {0}'.format(self._STATES))

            # Minimum structure required by fleet
            data = {
                'desiredState': desired_state,
                'options': list(options or [])
            }

        super(Unit, self).__init__(data=data)

        if from_file is not None:
            with open(from_file, 'r') as fh:
                self._set_options_from_file(fh)

        if from_string is not None:
            self._set_options_from_file(StringIO(from_string))

    def __repr__(self):
        return '<{0}: {1}>'.format(
            self.__class__.__name__,
            self.as_dict()
        )

    def __str__(self):
        """Generate a Unit file representation of this object"""

        output = []

        # sections in the order they first appear
        sections = []
        for option in self._data['options']:
            if option['section'] not in sections:
                sections.append(option['section'])

        for section in sections:
            if output:
                output.append(u'')

            output.append(u'[{0}]'.format(section))

            for option in self._data['options']:
                if option['section'] == section:
                    output.append(u'{0}={1}'.format(option['name'], option['value']))

        return u"\n".join(output)

    def _set_options_from_file(self, file_handle):
        """Parses a unit file and updates self._data['options']

        Args:
            file_handle (file): a file-like object (supporting read()) containing a unit

        Returns:
            True: The file was successfuly parsed and options were updated

        Raises:
            UnitFileError: The unit contents are not valid
        """

        self._data['options'] = parse_unit_file(file_handle)

        return True
