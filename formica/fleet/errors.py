NOT_FOUND = 'not-found'
OPAQUE = 'opaque'


class FleetError(Exception):
    """Base class for every error raised by formica's fleet client

    Callers that only care whether a unit is missing should branch on ``kind``
    (or use ``is_unit_not_found``); every other failure is opaque.

    Attributes:
        kind (str): ``NOT_FOUND`` or ``OPAQUE``
        message (str): A human readable description of the failure
        cause (Exception): The underlying exception that caused this error, if any
    """

    kind = OPAQUE

    def __init__(self, message, cause=None):
        super(FleetError, self).__init__(message)

        self.message = message
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def __str__(self):
        if self.cause is not None:
            return '{0}: {1}'.format(self.message, self.cause)

        return self.message

    def __repr__(self):
        return '<{0}; Kind: {1}; Message: {2}>'.format(
            self.__class__.__name__,
            self.kind,
            self.message
        )


class ConfigurationError(FleetError, ValueError):
    """The endpoint or client configuration is invalid"""


class TransportError(FleetError):
    """The request never produced a usable response from fleet

    Raised for refused connections, timeouts and responses that could not be decoded.
    """


class UnitFileError(FleetError, ValueError):
    """Unit file contents could not be parsed"""


class IPNotFoundError(FleetError):
    """A UnitState references a machine that is not in the Machine collection"""

    def __init__(self, machine_id, unit_name=None):
        super(IPNotFoundError, self).__init__(
            'no machine with id {0} found for unit {1}'.format(machine_id, unit_name)
        )

        self.machine_id = machine_id
        self.unit_name = unit_name


class UnitNotFound(FleetError):
    """No unit by the requested name exists in the cluster"""

    kind = NOT_FOUND

    def __init__(self, name):
        super(UnitNotFound, self).__init__('unit {0} not found'.format(name))

        self.name = name


class APIError(FleetError):
    """Represents an error returned in a response to a fleet API call

    This exception will be raised any time a response code >= 400 is returned

    Attributes:
        code (int): The response code
        message(str): The message included with the error response
        http_error(googleapiclient.errors.HttpError): The underlying exception that caused this exception to be raised
                                                      If you need access to the raw response, this is where you'll find
                                                      it.
    """
    def __init__(self, code, message, http_error):
        super(APIError, self).__init__(message, cause=http_error)

        self.code = code
        self.http_error = http_error

    def __str__(self):
        # Return a string like r'Some bad thing happened (400)'
        return '{1} ({0})'.format(
            self.code,
            self.message
        )

    def __repr__(self):
        return '<{0}; Code: {1}; Message: {2}>'.format(
            self.__class__.__name__,
            self.code,
            self.message
        )


def is_unit_not_found(exc):
    """Check if ``exc`` means the requested unit does not exist

    Args:
        exc (Exception): Any exception

    Returns:
        bool: True if the exception is classified as not found
    """
    return getattr(exc, 'kind', None) == NOT_FOUND
