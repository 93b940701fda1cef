# Copyright 2019 Joan Puig
# See LICENSE for details


import io

import pytest

from FITWriter.crc import CRC_SEED, crc_calc16
from FITWriter.encoder import ByteWriter, Encoder, HEADER_SIZE, CRC_SIZE
from FITWriter.messages import FileId, Record, Event
from FITWriter.model import RecordHeader
from FITWriter.profile import ProfileVersion, ProtocolVersion

from test_common import header_fields, written_records


PLACEHOLDER_HEADER = bytes([0x0E, 0x20, 0x30, 0x08, 0x0C, 0x00, 0x00, 0x00]) + b'.FIT' + bytes([0xFB, 0xEF])


class FailingStream(io.BytesIO):
    def __init__(self, fail_after: int):
        super().__init__()
        self.fail_after = fail_after

    def write(self, data) -> int:
        if self.tell() + len(data) > self.fail_after:
            raise OSError('No space left on device')
        return super().write(data)


def new_encoder():
    stream = io.BytesIO()
    return stream, Encoder(ByteWriter(stream))


def test_record_header():
    assert RecordHeader(True, 0).to_bytes() == b'\x40'
    assert RecordHeader(False, 0).to_bytes() == b'\x00'
    assert RecordHeader(True, 3).to_bytes() == b'\x43'
    assert RecordHeader(False, 15).to_bytes() == b'\x0F'


@pytest.mark.parametrize('local_message_type', range(16))
def test_record_header_carries_no_developer_flag(local_message_type: int):
    assert RecordHeader(True, local_message_type).to_bytes()[0] == 0x40 | local_message_type
    assert RecordHeader(False, local_message_type).to_bytes()[0] == local_message_type


def test_versions():
    assert ProtocolVersion.current().header_value() == 0x20
    assert ProtocolVersion.current().version_str() == '2.0'
    assert ProfileVersion.current().header_value() == 2096
    assert ProfileVersion.current().version_str() == '20.96.00'


def test_placeholder_header():
    stream, encoder = new_encoder()
    header = encoder.write_header()

    assert stream.getvalue() == PLACEHOLDER_HEADER
    assert header.data_size == HEADER_SIZE - CRC_SIZE
    assert header.crc == 0xEFFB


def test_header_after_payload():
    stream, encoder = new_encoder()
    encoder.write_header()
    stream.write(b'\x00' * 30)

    header = encoder.write_header()
    data = stream.getvalue()

    assert len(data) == HEADER_SIZE + 30
    assert header.data_size == 30 - CRC_SIZE
    assert header_fields(data)['data_size'] == 30 - CRC_SIZE
    assert header_fields(data)['crc'] == crc_calc16(data[:12])
    assert data[HEADER_SIZE:] == b'\x00' * 30


def test_emit_definition():
    stream, encoder = new_encoder()
    definition = FileId.message_definition()

    crc = encoder.emit_definition(CRC_SEED, 0, definition)
    data = stream.getvalue()

    assert data == b'\x40' + definition.to_bytes()
    assert crc == crc_calc16(data)


def test_emit_data():
    stream, encoder = new_encoder()
    record = Record(timestamp=1, distance=1.5, speed=2.5, power=100, heart_rate=None, cadence=90, fractional_cadence=0.5)

    crc = encoder.emit_data(CRC_SEED, 0, record)
    data = stream.getvalue()

    assert data == b'\x00' + record.to_bytes()
    assert len(data) == 1 + Record.message_definition().data_size()
    assert crc == crc_calc16(data)


def test_crc_threading():
    stream, encoder = new_encoder()
    messages = [FileId(serial_number=7), Event(timestamp=10), Record(timestamp=11)]

    crc = CRC_SEED
    for message in messages:
        crc = encoder.emit_message(crc, message)

    assert crc == crc_calc16(stream.getvalue())


def test_crc_depends_on_order():
    forward_stream, forward = new_encoder()
    reverse_stream, reverse = new_encoder()

    first = Event(timestamp=10)
    second = Record(timestamp=11, power=250)

    forward_crc = forward.emit_message(forward.emit_message(CRC_SEED, first), second)
    reverse_crc = reverse.emit_message(reverse.emit_message(CRC_SEED, second), first)

    assert forward_stream.getvalue() != reverse_stream.getvalue()
    assert forward_crc == crc_calc16(forward_stream.getvalue())
    assert reverse_crc == crc_calc16(reverse_stream.getvalue())
    assert forward_crc != reverse_crc


def test_encode_messages():
    stream, encoder = new_encoder()
    messages = [FileId(serial_number=7, time_created=100), Event(timestamp=100), Record(timestamp=101, power=150), Event(timestamp=102, event_type=4)]

    header = encoder.encode_messages(messages)
    data = stream.getvalue()
    fields = header_fields(data)

    expected_size = sum(1 + 5 + 3 * m.message_definition().number_of_fields + 1 + m.message_definition().data_size() for m in messages)

    assert len(data) == HEADER_SIZE + expected_size + CRC_SIZE
    assert fields['header_size'] == HEADER_SIZE
    assert fields['protocol_version'] == 0x20
    assert fields['profile_version'] == 2096
    assert fields['data_type'] == b'.FIT'
    assert fields['data_size'] == len(data) - HEADER_SIZE - CRC_SIZE == header.data_size
    assert fields['crc'] == crc_calc16(data[:12]) == header.crc

    # The trailer covers the payload in emission order, the header residue is zero so it also holds from offset 0
    assert data[-2:] == crc_calc16(data[HEADER_SIZE:-CRC_SIZE]).to_bytes(2, 'little')
    assert data[-2:] == crc_calc16(data[:-CRC_SIZE]).to_bytes(2, 'little')

    records = written_records(data)
    assert [r.is_definition_message for r in records] == [True, False] * len(messages)
    assert [r.global_message_number for r in records[::2]] == [m.global_message_number() for m in messages]
    assert all(r.local_message_type == 0 for r in records)
    assert [r.content for r in records[1::2]] == [m.to_bytes() for m in messages]


def test_encode_no_messages():
    stream, encoder = new_encoder()
    header = encoder.encode_messages([])
    data = stream.getvalue()

    assert len(data) == HEADER_SIZE + CRC_SIZE
    assert header.data_size == 0
    assert data[-2:] == b'\x00\x00'
    assert data[-2:] == crc_calc16(data[:-CRC_SIZE]).to_bytes(2, 'little')


def test_encode_fit_file(tmp_path):
    file_name = str(tmp_path / 'messages.fit')
    header = Encoder.encode_fit_file(file_name, [FileId(serial_number=1)])

    with open(file_name, 'rb') as file:
        data = file.read()

    assert header.data_size == len(data) - HEADER_SIZE - CRC_SIZE
    assert header_fields(data)['data_size'] == header.data_size


def test_encode_fit_file_overwrites(tmp_path):
    file_name = str(tmp_path / 'messages.fit')
    with open(file_name, 'wb') as file:
        file.write(b'\xAA' * 1000)

    header = Encoder.encode_fit_file(file_name, [FileId(serial_number=1)])

    with open(file_name, 'rb') as file:
        data = file.read()

    assert len(data) == HEADER_SIZE + header.data_size + CRC_SIZE


def test_write_failure_is_fatal():
    stream = FailingStream(HEADER_SIZE + 10)
    encoder = Encoder(ByteWriter(stream))

    with pytest.raises(OSError):
        encoder.encode_messages([FileId(serial_number=1), Record()])

    assert stream.getvalue()[:HEADER_SIZE] == PLACEHOLDER_HEADER
    assert len(stream.getvalue()) < HEADER_SIZE + 10
