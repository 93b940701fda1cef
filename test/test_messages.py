# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass, fields

import pytest

from FITWriter import duplicates
from FITWriter.base_types import String, UnsignedInt8, UnsignedInt32, FITValueEncodingError
from FITWriter.messages import MESSAGE_TYPES, Message, FileId, DeviceInfo, Event, Record, Lap, Session, Activity, FITMessageSchemaError, fit_field
from FITWriter.types import MesgNum, Manufacturer


def field_triples(message_class):
    return [(d.number, d.size, d.base_type.metadata.base_type_field) for d in message_class.message_definition().field_definitions]


def test_duplicates():
    assert not duplicates(())
    assert not duplicates([0, 1, 2])
    assert duplicates([1, 1, 2]) == {1}
    assert duplicates([1, 1, 2, 3, 3]) == {1, 3}


@pytest.mark.parametrize('message_class, mesg_num', [
    (FileId, MesgNum.FileId),
    (DeviceInfo, MesgNum.DeviceInfo),
    (Event, MesgNum.Event),
    (Record, MesgNum.Record),
    (Lap, MesgNum.Lap),
    (Session, MesgNum.Session),
    (Activity, MesgNum.Activity),
])
def test_global_message_number(message_class, mesg_num):
    assert message_class.global_message_number() == mesg_num.value
    assert MESSAGE_TYPES[mesg_num.value] is message_class


@pytest.mark.parametrize('message_class', MESSAGE_TYPES.values())
def test_layout(message_class):
    definition = message_class.message_definition()
    message = message_class()

    assert len(message.to_bytes()) == definition.data_size()
    assert definition.number_of_fields == len(fields(message_class))
    assert [f.name for f in fields(message_class)] == [m.name for m in message_class.fields_metadata()]
    assert not duplicates([d.number for d in definition.field_definitions])
    assert all(d.size % d.base_type.metadata.underlying_bytes == 0 for d in definition.field_definitions)


def test_file_id_fields():
    assert field_triples(FileId) == [
        (3, 4, 0x8C),
        (4, 4, 0x86),
        (8, 20, 0x07),
        (1, 2, 0x84),
        (2, 2, 0x84),
        (5, 2, 0x84),
        (0, 1, 0x00),
    ]


def test_device_info_fields():
    assert field_triples(DeviceInfo) == [
        (253, 4, 0x86),
        (3, 4, 0x8C),
        (7, 4, 0x86),
        (27, 20, 0x07),
        (2, 2, 0x84),
        (4, 2, 0x84),
        (5, 2, 0x84),
        (10, 2, 0x84),
        (21, 2, 0x8B),
        (0, 1, 0x02),
        (1, 1, 0x02),
        (6, 1, 0x02),
        (11, 1, 0x02),
        (18, 1, 0x00),
        (19, 20, 0x07),
        (20, 1, 0x0A),
        (22, 1, 0x00),
        (25, 1, 0x00),
    ]


def test_event_fields():
    assert field_triples(Event)[:8] == [
        (253, 4, 0x86),
        (3, 4, 0x86),
        (2, 2, 0x84),
        (7, 2, 0x84),
        (8, 2, 0x84),
        (0, 1, 0x00),
        (1, 1, 0x00),
        (4, 1, 0x02),
    ]


def test_record_fields():
    assert field_triples(Record) == [
        (253, 4, 0x86),
        (5, 4, 0x86),
        (6, 2, 0x84),
        (7, 2, 0x84),
        (3, 1, 0x02),
        (4, 1, 0x02),
        (53, 1, 0x02),
    ]


def test_data_sizes():
    assert FileId.message_definition().data_size() == 35
    assert DeviceInfo.message_definition().data_size() == 70
    assert Event.message_definition().data_size() == 23
    assert Record.message_definition().data_size() == 15
    assert Lap.message_definition().data_size() == 38
    assert Session.message_definition().data_size() == 43
    assert Activity.message_definition().data_size() == 17


def test_definition_bytes():
    assert FileId.message_definition().to_bytes() == bytes([
        0x00, 0x00, 0x00, 0x00, 0x07,
        3, 4, 0x8C,
        4, 4, 0x86,
        8, 20, 0x07,
        1, 2, 0x84,
        2, 2, 0x84,
        5, 2, 0x84,
        0, 1, 0x00,
    ])
    assert Activity.message_definition().to_bytes()[:5] == bytes([0x00, 0x00, 34, 0x00, 7])


def test_record_bytes():
    record = Record(timestamp=1, distance=1.5, speed=2.5, power=100, heart_rate=None, cadence=90, fractional_cadence=0.5)
    assert record.to_bytes() == b'\x01\x00\x00\x00\x96\x00\x00\x00\xC4\x09\x64\x00\xFF\x5A\x40'


def test_file_id_bytes():
    file_id = FileId(serial_number=1, time_created=2, product_name='.FIT', manufacturer=Manufacturer.Development, product=1, number=1)
    assert file_id.to_bytes() == (
        b'\x01\x00\x00\x00'
        b'\x02\x00\x00\x00'
        b'.FIT' + b'\x00' * 16 +
        b'\xFF\x00'
        b'\x01\x00'
        b'\x01\x00'
        b'\x04'
    )


def test_default_message_is_zero_filled():
    assert Record().to_bytes() == b'\x00' * 15


def test_encoding_error_names_field():
    with pytest.raises(FITValueEncodingError, match='Record.cadence'):
        Record(cadence=300).to_bytes()


def test_missing_field_number():
    @dataclass(frozen=True)
    class MissingNumber(Message):
        MESG_NUM = MesgNum.Record

        timestamp: UnsignedInt32 = 0

    with pytest.raises(FITMessageSchemaError):
        MissingNumber.message_definition()


def test_duplicate_field_number():
    @dataclass(frozen=True)
    class DuplicateNumber(Message):
        MESG_NUM = MesgNum.Record

        timestamp: UnsignedInt32 = fit_field(253)
        distance: UnsignedInt32 = fit_field(253)

    with pytest.raises(FITMessageSchemaError):
        DuplicateNumber.message_definition()


def test_string_without_size():
    @dataclass(frozen=True)
    class StringWithoutSize(Message):
        MESG_NUM = MesgNum.FileId

        product_name: String = fit_field(8, default='')

    with pytest.raises(FITMessageSchemaError):
        StringWithoutSize.message_definition()


def test_not_a_base_type():
    @dataclass(frozen=True)
    class NotABaseType(Message):
        MESG_NUM = MesgNum.Record

        cadence: int = fit_field(4)

    with pytest.raises(FITMessageSchemaError):
        NotABaseType.message_definition()


def test_no_global_message_number():
    @dataclass(frozen=True)
    class NoMesgNum(Message):
        cadence: UnsignedInt8 = fit_field(4)

    with pytest.raises(FITMessageSchemaError):
        NoMesgNum.message_definition()
