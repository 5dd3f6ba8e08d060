from .fleet_object import FleetObject


class UnitState(FleetObject):
    """Whereas Unit entities represent the desired state of units known by fleet,
    UnitStates represent the current states of units actually running in the cluster.

    There is one UnitState per machine a unit is scheduled to, so a global unit
    has as many UnitStates as it has machines.

    Attributes:
        name: name of the Unit this state belongs to
        hash: SHA1 hash of underlying unit file
        machineID: ID of machine from which this state originated
        systemdLoadState: load state as reported by systemd
        systemdActiveState: active state as reported by systemd
        systemdSubState: sub state as reported by systemd
    """
    pass
