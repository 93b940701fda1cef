# Copyright 2019 Joan Puig
# See LICENSE for details


from typing import Iterable


"""
CRC-16 used by FIT files, both for the 14 byte file header and for the trailing file checksum
The checksum is computed one nibble at a time, low nibble first, using a 16 entry lookup table

There is no global accumulator: the current value is passed in and the updated value returned,
callers thread it through every write in the exact order the bytes reach the file
"""


CRC_TABLE = (
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
)

CRC_SEED = 0x0000


def crc_get16(crc: int, byte: int) -> int:
    # Lower four bits
    tmp = CRC_TABLE[crc & 0x000F]
    crc = (crc >> 4) & 0x0FFF
    crc = crc ^ tmp ^ CRC_TABLE[byte & 0x000F]

    # Upper four bits
    tmp = CRC_TABLE[crc & 0x000F]
    crc = (crc >> 4) & 0x0FFF
    crc = crc ^ tmp ^ CRC_TABLE[(byte >> 4) & 0x000F]

    return crc


def crc_update16(crc: int, data: Iterable[int]) -> int:
    for byte in data:
        crc = crc_get16(crc, byte)
    return crc


def crc_calc16(data: Iterable[int]) -> int:
    return crc_update16(CRC_SEED, data)
