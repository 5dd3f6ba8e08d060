from .client import Config, Fleet  # NOQA
from .endpoint import DEFAULT_ENDPOINT, resolve_endpoint  # NOQA
from .errors import (  # NOQA
    FleetError, ConfigurationError, TransportError, APIError, UnitFileError,
    IPNotFoundError, UnitNotFound, is_unit_not_found, NOT_FOUND, OPAQUE
)
from .objects import Unit, UnitState, Machine, UnitStatus, MachineStatus, STATES  # NOQA
