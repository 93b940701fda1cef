# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Type, Optional

from FITWriter.base_types import BaseType, UnsignedInt8, UnsignedInt16, UnsignedInt32


class Architecture(Enum):
    LittleEndian = 0
    BigEndian = 1


@dataclass(frozen=True)
class RecordHeader:
    DEFINITION_MESSAGE_BIT = 0x40
    LOCAL_MESSAGE_TYPE_MASK = 0x0F

    is_definition_message: bool
    local_message_type: int

    def to_bytes(self) -> bytes:
        byte = self.local_message_type & RecordHeader.LOCAL_MESSAGE_TYPE_MASK  # 1st to 4th bits
        if self.is_definition_message:
            byte = byte | RecordHeader.DEFINITION_MESSAGE_BIT  # 7th bit
        return bytes([byte])


@dataclass(frozen=True)
class FieldDefinition:
    number: int
    size: int
    base_type: Type[BaseType]

    def to_bytes(self) -> bytes:
        return bytes([self.number, self.size, self.base_type.metadata.base_type_field])


@dataclass(frozen=True)
class MessageDefinition:
    global_message_number: int
    field_definitions: Tuple[FieldDefinition, ...]
    reserved_byte: int = 0
    architecture: Architecture = Architecture.LittleEndian

    @property
    def number_of_fields(self) -> int:
        return len(self.field_definitions)

    def data_size(self) -> int:
        """
        Size in bytes of the content of a data message following this definition
        """
        return sum(field_definition.size for field_definition in self.field_definitions)

    def to_bytes(self) -> bytes:
        return b''.join([
            UnsignedInt8.to_bytes(self.reserved_byte),
            UnsignedInt8.to_bytes(self.architecture.value),
            UnsignedInt16.to_bytes(self.global_message_number),
            UnsignedInt8.to_bytes(self.number_of_fields),
        ] + [field_definition.to_bytes() for field_definition in self.field_definitions])


@dataclass(frozen=True)
class FileHeader:
    SIZE = 14
    DATA_TYPE = '.FIT'

    header_size: int
    protocol_version: int
    profile_version: int
    data_size: int
    data_type: str
    crc: Optional[int]

    def content_bytes(self) -> bytes:
        """
        Header bytes covered by the header CRC, everything except the CRC itself
        """
        return b''.join([
            UnsignedInt8.to_bytes(self.header_size),
            UnsignedInt8.to_bytes(self.protocol_version),
            UnsignedInt16.to_bytes(self.profile_version),
            UnsignedInt32.to_bytes(self.data_size),
            self.data_type.encode('ascii'),
        ])

    def to_bytes(self) -> bytes:
        return self.content_bytes() + UnsignedInt16.to_bytes(self.crc)
