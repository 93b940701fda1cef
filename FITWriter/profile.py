# Copyright 2019 Joan Puig
# See LICENSE for details


from enum import Enum


"""
Versions written into the file header
The protocol version byte holds the major version in the upper nibble and the minor version in the lower nibble
The profile version is written as major * 100 + minor
"""


class ProtocolVersion(Enum):
    """
    Enum that keeps track of the known protocol versions
    """
    Version_1_0 = 0x10
    Version_2_0 = 0x20

    def version_str(self) -> str:
        return '{}.{}'.format(self.value >> 4, self.value & 0x0F)

    def header_value(self) -> int:
        return self.value

    @staticmethod
    def current() -> "ProtocolVersion":
        return ProtocolVersion.Version_2_0


class ProfileVersion(Enum):
    """
    Enum that keeps track of the known profile versions
    """
    Version_21_10_00 = 211000
    Version_20_96_00 = 209600

    def version_str(self) -> str:
        """
        Returns a string representation of the version that matches the commonly used format by Garmin
        """
        return self.name[8:].replace("_", ".")

    def header_value(self) -> int:
        """
        Returns the value stored in the profile_version field of the file header, 20.96.00 is stored as 2096
        """
        return self.value // 100

    @staticmethod
    def current() -> "ProfileVersion":
        return ProfileVersion.Version_20_96_00
