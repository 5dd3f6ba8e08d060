from .fleet_object import FleetObject


class MachineStatus(FleetObject):
    """The status of a unit on one machine it is scheduled to

    Attributes:
        id: ID of the machine the unit is scheduled to
        ip: the machine's primary IP as an ipaddress object, None if fleet reported an unparseable address
        systemdActive: the unit's active state as reported by systemd on that machine
    """

    def __init__(self, id, ip, systemd_active):
        super(MachineStatus, self).__init__(data={
            'id': id,
            'ip': ip,
            'systemdActive': systemd_active,
        })


class UnitStatus(FleetObject):
    """The status of a unit across the cluster, joined from its Unit, UnitStates and Machines

    Attributes:
        current: the state fleet last observed for the unit
        desired: the state the unit was asked to be in
        machine: list of MachineStatus, one per UnitState of the unit in the order fleet
                 returned them. Normal units have at most one, global units one per machine.
                 Empty if the unit is not scheduled anywhere yet.
    """

    def __init__(self, current, desired, machine=None):
        super(UnitStatus, self).__init__(data={
            'current': current,
            'desired': desired,
            'machine': list(machine or []),
        })

    def as_dict(self):
        data = dict(self._data)
        data['machine'] = [m.as_dict() for m in data['machine']]
        return data
