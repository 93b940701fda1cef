# Copyright 2019 Joan Puig
# See LICENSE for details


import logging
import os
from dataclasses import replace
from typing import BinaryIO, Iterable

from FITWriter.base_types import UnsignedInt16
from FITWriter.crc import CRC_SEED, crc_calc16, crc_update16
from FITWriter.messages import Message
from FITWriter.model import FileHeader, MessageDefinition, RecordHeader
from FITWriter.profile import ProfileVersion, ProtocolVersion


logger = logging.getLogger(__name__)


HEADER_SIZE = FileHeader.SIZE
CRC_SIZE = 2


class ByteWriter:
    """
    Thin wrapper around a seekable binary stream
    Payload bytes go through write, which returns the running CRC advanced over exactly the bytes written
    """
    stream: BinaryIO

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write(self, data: bytes, crc: int) -> int:
        self.stream.write(data)
        return crc_update16(crc, data)

    def write_at(self, offset: int, data: bytes) -> None:
        self.stream.seek(offset, os.SEEK_SET)
        self.stream.write(data)
        self.stream.seek(0, os.SEEK_END)

    def append(self, data: bytes) -> None:
        self.stream.seek(0, os.SEEK_END)
        self.stream.write(data)

    def size(self) -> int:
        self.stream.seek(0, os.SEEK_END)
        return self.stream.tell()


class Encoder:
    LOCAL_MESSAGE_TYPE = 0

    writer: ByteWriter
    protocol_version: ProtocolVersion
    profile_version: ProfileVersion

    def __init__(self, writer: ByteWriter, protocol_version: ProtocolVersion = None, profile_version: ProfileVersion = None):
        self.writer = writer
        self.protocol_version = protocol_version if protocol_version is not None else ProtocolVersion.current()
        self.profile_version = profile_version if profile_version is not None else ProfileVersion.current()

    def file_header(self, file_size: int) -> FileHeader:
        if file_size < HEADER_SIZE:
            data_size = HEADER_SIZE - CRC_SIZE  # Placeholder, nothing written yet
        else:
            data_size = file_size - HEADER_SIZE - CRC_SIZE

        header = FileHeader(HEADER_SIZE, self.protocol_version.header_value(), self.profile_version.header_value(), data_size, FileHeader.DATA_TYPE, None)
        return replace(header, crc=crc_calc16(header.content_bytes()))

    def write_header(self) -> FileHeader:
        """
        Writes the file header at offset 0, the data size is derived from the current size of the file
        The header CRC only covers the header, it never takes part in the running CRC of the payload
        """
        header = self.file_header(self.writer.size())
        self.writer.write_at(0, header.to_bytes())
        logger.debug('File header written: data_size=%d, crc=0x%04X', header.data_size, header.crc)
        return header

    def emit_definition(self, crc: int, local_message_type: int, definition: MessageDefinition) -> int:
        crc = self.writer.write(RecordHeader(True, local_message_type).to_bytes(), crc)
        crc = self.writer.write(definition.to_bytes(), crc)
        logger.debug('Definition message written: local=%d, global=%d, fields=%d', local_message_type, definition.global_message_number, definition.number_of_fields)
        return crc

    def emit_data(self, crc: int, local_message_type: int, message: Message) -> int:
        crc = self.writer.write(RecordHeader(False, local_message_type).to_bytes(), crc)
        crc = self.writer.write(message.to_bytes(), crc)
        logger.debug('Data message written: local=%d, %s', local_message_type, type(message).__name__)
        return crc

    def emit_message(self, crc: int, message: Message) -> int:
        """
        Every message is preceded by its own definition on the same local message type
        """
        crc = self.emit_definition(crc, Encoder.LOCAL_MESSAGE_TYPE, message.message_definition())
        return self.emit_data(crc, Encoder.LOCAL_MESSAGE_TYPE, message)

    def write_crc(self, crc: int) -> None:
        self.writer.append(UnsignedInt16.to_bytes(crc))
        logger.debug('File CRC written: 0x%04X', crc)

    def encode_messages(self, messages: Iterable[Message]) -> FileHeader:
        self.write_header()

        crc = CRC_SEED
        for message in messages:
            crc = self.emit_message(crc, message)

        self.write_crc(crc)
        return self.write_header()

    @staticmethod
    def encode_fit_file(file_name: str, messages: Iterable[Message]) -> FileHeader:
        with open(file_name, 'wb') as file:
            encoder = Encoder(ByteWriter(file))
            header = encoder.encode_messages(messages)

        logger.info('Encoded %s: %d bytes of data', file_name, header.data_size)
        return header
