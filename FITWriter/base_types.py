# Copyright 2019 Joan Puig
# See LICENSE for details


import warnings
from abc import ABC
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np


@dataclass
class TypeMetadata:
    base_type_number: int
    endian_ability: bool
    base_type_field: int
    invalid_value: int
    underlying_bytes: int
    fit_name: str
    numpy_type: type


class FITValueEncodingError(Exception):
    pass


class FITValueEncodingWarning(Warning):
    pass


Value = Union[None, int, float, str, bytes, Sequence]


class BaseType(ABC):
    metadata: TypeMetadata

    @classmethod
    def to_bytes(cls, value: Value, size: Optional[int] = None, scale: float = 1, offset: float = 0) -> bytes:
        """
        Serializes a value to its little endian wire representation, occupying exactly size bytes
        A value of None is written as the invalid value of the type, sequences are written as arrays
        Numeric values are stored as (value + offset) * scale, as described by the FIT profile
        """
        if size is None:
            size = cls.metadata.underlying_bytes

        if size <= 0 or size % cls.metadata.underlying_bytes != 0:
            raise FITValueEncodingError('{} expected to be multiple of {} bytes, {} requested'.format(cls.__name__, cls.metadata.underlying_bytes, size))

        count = size // cls.metadata.underlying_bytes

        if value is None:
            invalid = cls.metadata.invalid_value.to_bytes(cls.metadata.underlying_bytes, 'little')
            return invalid * count

        values = list(value) if isinstance(value, (list, tuple, np.ndarray)) else [value]
        if len(values) != count:
            raise FITValueEncodingError('{} field of {} bytes holds {} values, {} given'.format(cls.__name__, size, count, len(values)))

        scaled = [cls._scale(v, scale, offset) for v in values]
        dtype = np.dtype(cls.metadata.numpy_type).newbyteorder('<')
        return np.array(scaled, dtype=dtype).tobytes()

    @classmethod
    def _scale(cls, value, scale: float, offset: float):
        if value is None:
            return cls.metadata.invalid_value

        if scale != 1 or offset != 0:
            value = (value + offset) * scale

        if np.issubdtype(cls.metadata.numpy_type, np.floating):
            return float(value)

        raw = int(round(value))
        info = np.iinfo(cls.metadata.numpy_type)
        if raw < info.min or raw > info.max:
            raise FITValueEncodingError('{} cannot hold {}, valid range is [{}, {}]'.format(cls.__name__, value, info.min, info.max))

        return raw


class FITEnum(np.uint8, BaseType):
    metadata = TypeMetadata(0, False, 0x00, 0xFF, 1, 'enum', np.uint8)


class SignedInt8(np.int8, BaseType):
    metadata = TypeMetadata(1, False, 0x01, 0x7F, 1, 'sint8', np.int8)


class UnsignedInt8(np.uint8, BaseType):
    metadata = TypeMetadata(2, False, 0x02, 0xFF, 1, 'uint8', np.uint8)


class SignedInt16(np.int16, BaseType):
    metadata = TypeMetadata(3, True, 0x83, 0x7FFF, 2, 'sint16', np.int16)


class UnsignedInt16(np.uint16, BaseType):
    metadata = TypeMetadata(4, True, 0x84, 0xFFFF, 2, 'uint16', np.uint16)


class SignedInt32(np.int32, BaseType):
    metadata = TypeMetadata(5, True, 0x85, 0x7FFFFFFF, 4, 'sint32', np.int32)


class UnsignedInt32(np.uint32, BaseType):
    metadata = TypeMetadata(6, True, 0x86, 0xFFFFFFFF, 4, 'uint32', np.uint32)


class String(str, BaseType):
    metadata = TypeMetadata(7, False, 0x07, 0x00, 1, 'string', str)

    @classmethod
    def to_bytes(cls, value: Value, size: Optional[int] = None, scale: float = 1, offset: float = 0) -> bytes:
        """
        Strings are null terminated and padded with zeros up to the field size
        """
        if size is None:
            raise FITValueEncodingError('String fields require an explicit size')

        raw = (value or '').encode('utf-8')
        if len(raw) > size - 1:
            warnings.warn('String {!r} truncated to {} bytes'.format(value, size - 1), FITValueEncodingWarning)
            raw = raw[:size - 1].decode('utf-8', 'ignore').encode('utf-8')

        return raw.ljust(size, b'\x00')


class Float32(np.float32, BaseType):
    metadata = TypeMetadata(8, True, 0x88, 0xFFFFFFFF, 4, 'float32', np.float32)


class Float64(np.float64, BaseType):
    metadata = TypeMetadata(9, True, 0x89, 0xFFFFFFFFFFFFFFFF, 8, 'float64', np.float64)


class UnsignedInt8z(np.uint8, BaseType):
    metadata = TypeMetadata(10, False, 0x0A, 0x00, 1, 'uint8z', np.uint8)


class UnsignedInt16z(np.uint16, BaseType):
    metadata = TypeMetadata(11, True, 0x8B, 0x0000, 2, 'uint16z', np.uint16)


class UnsignedInt32z(np.uint32, BaseType):
    metadata = TypeMetadata(12, True, 0x8C, 0x00000000, 4, 'uint32z', np.uint32)


class Byte(np.uint8, BaseType):
    metadata = TypeMetadata(13, False, 0x0D, 0xFF, 1, 'byte', np.uint8)

    @classmethod
    def to_bytes(cls, value: Value, size: Optional[int] = None, scale: float = 1, offset: float = 0) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            size = len(value) if size is None else size
            if len(value) != size:
                raise FITValueEncodingError('Byte field of {} bytes, {} given'.format(size, len(value)))
            return bytes(value)

        return super().to_bytes(value, size, scale, offset)


class SignedInt64(np.int64, BaseType):
    metadata = TypeMetadata(14, True, 0x8E, 0x7FFFFFFFFFFFFFFF, 8, 'sint64', np.int64)


class UnsignedInt64(np.uint64, BaseType):
    metadata = TypeMetadata(15, True, 0x8F, 0xFFFFFFFFFFFFFFFF, 8, 'uint64', np.uint64)


class UnsignedInt64z(np.uint64, BaseType):
    metadata = TypeMetadata(16, True, 0x90, 0x0000000000000000, 8, 'uint64z', np.uint64)


BASE_TYPE_NUMBER_TO_CLASS = {
    FITEnum.metadata.base_type_number: FITEnum,
    SignedInt8.metadata.base_type_number: SignedInt8,
    UnsignedInt8.metadata.base_type_number: UnsignedInt8,
    SignedInt16.metadata.base_type_number: SignedInt16,
    UnsignedInt16.metadata.base_type_number: UnsignedInt16,
    SignedInt32.metadata.base_type_number: SignedInt32,
    UnsignedInt32.metadata.base_type_number: UnsignedInt32,
    String.metadata.base_type_number: String,
    Float32.metadata.base_type_number: Float32,
    Float64.metadata.base_type_number: Float64,
    UnsignedInt8z.metadata.base_type_number: UnsignedInt8z,
    UnsignedInt16z.metadata.base_type_number: UnsignedInt16z,
    UnsignedInt32z.metadata.base_type_number: UnsignedInt32z,
    Byte.metadata.base_type_number: Byte,
    SignedInt64.metadata.base_type_number: SignedInt64,
    UnsignedInt64.metadata.base_type_number: UnsignedInt64,
    UnsignedInt64z.metadata.base_type_number: UnsignedInt64z,
}
