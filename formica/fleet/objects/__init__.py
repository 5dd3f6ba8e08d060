from .fleet_object import FleetObject  # NOQA
from .machine import Machine  # NOQA
from .status import MachineStatus, UnitStatus  # NOQA
from .unit import Unit, STATES, INACTIVE, LOADED, LAUNCHED, compare_states, parse_unit_file  # NOQA
from .unit_state import UnitState  # NOQA
