# Copyright 2019 Joan Puig
# See LICENSE for details


from datetime import datetime, timezone
from enum import Enum


FIT_EPOCH = datetime(1989, 12, 31, tzinfo=timezone.utc)


def to_date_time(value: datetime) -> int:
    """
    Converts a datetime into a FIT date_time, seconds since UTC 00:00 Dec 31 1989
    Naive datetimes are taken as UTC
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int((value - FIT_EPOCH).total_seconds())


class MesgNum(Enum):
    FileId = 0
    Capabilities = 1
    DeviceSettings = 2
    UserProfile = 3
    Session = 18
    Lap = 19
    Record = 20
    Event = 21
    DeviceInfo = 23
    Activity = 34
    MfgRangeMin = 0xFF00
    MfgRangeMax = 0xFFFE


class File(Enum):
    Device = 1
    Settings = 2
    Sport = 3
    Activity = 4
    Workout = 5


class Manufacturer(Enum):
    Garmin = 1
    Development = 255


class Event(Enum):
    Timer = 0
    Workout = 3
    Session = 8
    Lap = 9
    Activity = 26


class EventType(Enum):
    Start = 0
    Stop = 1
    Marker = 3
    StopAll = 4
    StopDisable = 8
    StopDisableAll = 9


class Sport(Enum):
    Generic = 0
    Running = 1
    Cycling = 2


class SubSport(Enum):
    Generic = 0
    Treadmill = 1
    Street = 2
    Trail = 3
    Track = 4
    Spin = 5
    IndoorCycling = 6


class Activity(Enum):
    Manual = 0
    AutoMultiSport = 1


class SessionTrigger(Enum):
    ActivityEnd = 0
    Manual = 1
    AutoMultiSport = 2
    FitnessEquipment = 3


class LapTrigger(Enum):
    Manual = 0
    Time = 1
    Distance = 2
    PositionStart = 3
    PositionLap = 4
    PositionWaypoint = 5
    PositionMarked = 6
    SessionEnd = 7
    FitnessEquipment = 8


class SourceType(Enum):
    Ant = 0
    Antplus = 1
    Bluetooth = 2
    BluetoothLowEnergy = 3
    Wifi = 4
    Local = 5
