# Copyright 2019 Joan Puig
# See LICENSE for details


import functools
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Tuple, Type, Dict

from FITWriter import duplicates
from FITWriter.base_types import BaseType, FITEnum, String, UnsignedInt8, UnsignedInt8z, UnsignedInt16, UnsignedInt16z, UnsignedInt32, UnsignedInt32z, FITValueEncodingError
from FITWriter.model import FieldDefinition, MessageDefinition
from FITWriter.types import MesgNum, File, Event as EventValue, EventType, Sport, SubSport, Activity as ActivityValue, SessionTrigger, LapTrigger, SourceType


"""
Field schema catalog
Each message type is a frozen dataclass, the declaration order of its fields is the order in which they are written
Field numbers, sizes, scales and units are attached to each dataclass field as metadata, the annotation is the base type
The message definition is derived from the very same fields that are serialized, so both always describe the same layout
"""


class FITMessageSchemaError(Exception):
    pass


@dataclass(frozen=True)
class FieldMetadata:
    name: str
    number: int
    size: int
    base_type: Type[BaseType]
    scale: float
    offset: float
    units: str

    def field_definition(self) -> FieldDefinition:
        return FieldDefinition(self.number, self.size, self.base_type)


def fit_field(number: int, size: int = None, scale: float = 1, offset: float = 0, units: str = '', default=0):
    return field(default=default, metadata={'number': number, 'size': size, 'scale': scale, 'offset': offset, 'units': units})


@dataclass(frozen=True)
class Message:
    MESG_NUM = None

    @classmethod
    def global_message_number(cls) -> int:
        if cls.MESG_NUM is None:
            raise FITMessageSchemaError('{} has no global message number'.format(cls.__name__))
        return cls.MESG_NUM.value

    @classmethod
    @functools.lru_cache(maxsize=None)
    def fields_metadata(cls) -> Tuple[FieldMetadata, ...]:
        metadata = []
        for f in fields(cls):
            if 'number' not in f.metadata:
                raise FITMessageSchemaError('{}.{} is not declared with fit_field'.format(cls.__name__, f.name))

            base_type = f.type
            if not isinstance(base_type, type) or not issubclass(base_type, BaseType):
                raise FITMessageSchemaError('{}.{} is not annotated with a base type'.format(cls.__name__, f.name))

            size = f.metadata['size']
            if size is None:
                if base_type is String:
                    raise FITMessageSchemaError('{}.{} is a string field without size'.format(cls.__name__, f.name))
                size = base_type.metadata.underlying_bytes

            metadata.append(FieldMetadata(f.name, f.metadata['number'], size, base_type, f.metadata['scale'], f.metadata['offset'], f.metadata['units']))

        repeated = duplicates([field_metadata.number for field_metadata in metadata])
        if repeated:
            raise FITMessageSchemaError('{} has duplicate field numbers: {}'.format(cls.__name__, sorted(repeated)))

        return tuple(metadata)

    @classmethod
    def message_definition(cls) -> MessageDefinition:
        field_definitions = tuple(field_metadata.field_definition() for field_metadata in cls.fields_metadata())
        return MessageDefinition(cls.global_message_number(), field_definitions)

    def to_bytes(self) -> bytes:
        content = []
        for field_metadata in self.fields_metadata():
            value = getattr(self, field_metadata.name)
            if isinstance(value, Enum):
                value = value.value

            try:
                content.append(field_metadata.base_type.to_bytes(value, field_metadata.size, field_metadata.scale, field_metadata.offset))
            except FITValueEncodingError as e:
                raise FITValueEncodingError('{}.{}: {}'.format(type(self).__name__, field_metadata.name, e)) from e

        return b''.join(content)


@dataclass(frozen=True)
class FileId(Message):
    MESG_NUM = MesgNum.FileId

    serial_number: UnsignedInt32z = fit_field(3)
    time_created: UnsignedInt32 = fit_field(4, units='s')
    product_name: String = fit_field(8, size=20, default='')
    manufacturer: UnsignedInt16 = fit_field(1)
    product: UnsignedInt16 = fit_field(2)
    number: UnsignedInt16 = fit_field(5)
    type: FITEnum = fit_field(0, default=File.Activity)


@dataclass(frozen=True)
class DeviceInfo(Message):
    MESG_NUM = MesgNum.DeviceInfo

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    serial_number: UnsignedInt32z = fit_field(3)
    cum_operating_time: UnsignedInt32 = fit_field(7, units='s')
    product_name: String = fit_field(27, size=20, default='')
    manufacturer: UnsignedInt16 = fit_field(2)
    product: UnsignedInt16 = fit_field(4)
    software_version: UnsignedInt16 = fit_field(5, scale=100)
    battery_voltage: UnsignedInt16 = fit_field(10, scale=256, units='V')
    ant_device_number: UnsignedInt16z = fit_field(21)
    device_index: UnsignedInt8 = fit_field(0)
    device_type: UnsignedInt8 = fit_field(1)
    hardware_version: UnsignedInt8 = fit_field(6)
    battery_status: UnsignedInt8 = fit_field(11)
    sensor_position: FITEnum = fit_field(18)
    descriptor: String = fit_field(19, size=20, default='')
    ant_transmission_type: UnsignedInt8z = fit_field(20)
    ant_network: FITEnum = fit_field(22)
    source_type: FITEnum = fit_field(25, default=SourceType.Ant)


@dataclass(frozen=True)
class Event(Message):
    MESG_NUM = MesgNum.Event

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    data: UnsignedInt32 = fit_field(3)
    data16: UnsignedInt16 = fit_field(2)
    score: UnsignedInt16 = fit_field(7)
    opponent_score: UnsignedInt16 = fit_field(8)
    event: FITEnum = fit_field(0, default=EventValue.Timer)
    event_type: FITEnum = fit_field(1, default=EventType.Start)
    event_group: UnsignedInt8 = fit_field(4)
    front_gear_num: UnsignedInt8z = fit_field(9)
    front_gear: UnsignedInt8z = fit_field(10)
    rear_gear_num: UnsignedInt8z = fit_field(11)
    rear_gear: UnsignedInt8z = fit_field(12)
    radar_threat_level_max: FITEnum = fit_field(21)
    radar_threat_count: UnsignedInt8 = fit_field(22)


@dataclass(frozen=True)
class Record(Message):
    MESG_NUM = MesgNum.Record

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    distance: UnsignedInt32 = fit_field(5, scale=100, units='m')
    speed: UnsignedInt16 = fit_field(6, scale=1000, units='m/s')
    power: UnsignedInt16 = fit_field(7, units='watts')
    heart_rate: UnsignedInt8 = fit_field(3, units='bpm')
    cadence: UnsignedInt8 = fit_field(4, units='rpm')
    fractional_cadence: UnsignedInt8 = fit_field(53, scale=128, units='rpm')


@dataclass(frozen=True)
class Lap(Message):
    MESG_NUM = MesgNum.Lap

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    start_time: UnsignedInt32 = fit_field(2, units='s')
    total_elapsed_time: UnsignedInt32 = fit_field(7, scale=1000, units='s')
    total_timer_time: UnsignedInt32 = fit_field(8, scale=1000, units='s')
    total_distance: UnsignedInt32 = fit_field(9, scale=100, units='m')
    message_index: UnsignedInt16 = fit_field(254)
    avg_speed: UnsignedInt16 = fit_field(13, scale=1000, units='m/s')
    max_speed: UnsignedInt16 = fit_field(14, scale=1000, units='m/s')
    avg_power: UnsignedInt16 = fit_field(19, units='watts')
    max_power: UnsignedInt16 = fit_field(20, units='watts')
    event: FITEnum = fit_field(0, default=EventValue.Lap)
    event_type: FITEnum = fit_field(1, default=EventType.Stop)
    avg_heart_rate: UnsignedInt8 = fit_field(15, units='bpm')
    max_heart_rate: UnsignedInt8 = fit_field(16, units='bpm')
    avg_cadence: UnsignedInt8 = fit_field(17, units='rpm')
    max_cadence: UnsignedInt8 = fit_field(18, units='rpm')
    lap_trigger: FITEnum = fit_field(24, default=LapTrigger.SessionEnd)
    sport: FITEnum = fit_field(25, default=Sport.Cycling)


@dataclass(frozen=True)
class Session(Message):
    MESG_NUM = MesgNum.Session

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    start_time: UnsignedInt32 = fit_field(2, units='s')
    total_elapsed_time: UnsignedInt32 = fit_field(7, scale=1000, units='s')
    total_timer_time: UnsignedInt32 = fit_field(8, scale=1000, units='s')
    total_distance: UnsignedInt32 = fit_field(9, scale=100, units='m')
    message_index: UnsignedInt16 = fit_field(254)
    first_lap_index: UnsignedInt16 = fit_field(25)
    num_laps: UnsignedInt16 = fit_field(26, default=1)
    avg_speed: UnsignedInt16 = fit_field(14, scale=1000, units='m/s')
    max_speed: UnsignedInt16 = fit_field(15, scale=1000, units='m/s')
    avg_power: UnsignedInt16 = fit_field(20, units='watts')
    max_power: UnsignedInt16 = fit_field(21, units='watts')
    event: FITEnum = fit_field(0, default=EventValue.Session)
    event_type: FITEnum = fit_field(1, default=EventType.Stop)
    sport: FITEnum = fit_field(5, default=Sport.Cycling)
    sub_sport: FITEnum = fit_field(6, default=SubSport.IndoorCycling)
    avg_heart_rate: UnsignedInt8 = fit_field(16, units='bpm')
    max_heart_rate: UnsignedInt8 = fit_field(17, units='bpm')
    avg_cadence: UnsignedInt8 = fit_field(18, units='rpm')
    max_cadence: UnsignedInt8 = fit_field(19, units='rpm')
    trigger: FITEnum = fit_field(28, default=SessionTrigger.ActivityEnd)


@dataclass(frozen=True)
class Activity(Message):
    MESG_NUM = MesgNum.Activity

    timestamp: UnsignedInt32 = fit_field(253, units='s')
    total_timer_time: UnsignedInt32 = fit_field(0, scale=1000, units='s')
    local_timestamp: UnsignedInt32 = fit_field(5, units='s')
    num_sessions: UnsignedInt16 = fit_field(1, default=1)
    type: FITEnum = fit_field(2, default=ActivityValue.Manual)
    event: FITEnum = fit_field(3, default=EventValue.Activity)
    event_type: FITEnum = fit_field(4, default=EventType.Stop)


MESSAGE_TYPES: Dict[int, Type[Message]] = {
    message_class.MESG_NUM.value: message_class for message_class in (
        FileId,
        DeviceInfo,
        Event,
        Record,
        Lap,
        Session,
        Activity,
    )
}
