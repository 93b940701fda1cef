# Copyright 2019 Joan Puig
# See LICENSE for details


from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, asdict
from typing import Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from FITWriter.types import Manufacturer


"""
Supply side of the encoder: whatever acquires data from the exercise equipment hands over a device identity
and a sequence of samples expressed in real units, with monotonic elapsed times
"""


class TelemetryDecodingError(Exception):
    pass


@dataclass(frozen=True)
class DeviceIdentity:
    serial_number: int = 0
    manufacturer: Union[Manufacturer, int] = 0
    product: int = 0
    product_name: str = ''
    software_version: float = 0
    hardware_version: int = 0


@dataclass(frozen=True)
class TelemetrySample:
    elapsed_time: float = 0.0  # s
    speed: float = 0.0  # m/s
    cadence: float = 0.0  # rpm
    distance: float = 0.0  # m
    power: int = 0  # W
    heart_rate: Optional[int] = None  # bpm


SAMPLE_COLUMNS = tuple(f.name for f in fields(TelemetrySample))


class TelemetrySource(ABC):
    @abstractmethod
    def identity(self) -> DeviceIdentity:
        pass

    @abstractmethod
    def samples(self) -> Tuple[TelemetrySample, ...]:
        pass


class ZeroTelemetrySource(TelemetrySource):
    """
    Placeholder source used when no equipment is connected: an empty identity and a single all zero sample
    """
    def identity(self) -> DeviceIdentity:
        return DeviceIdentity()

    def samples(self) -> Tuple[TelemetrySample, ...]:
        return (TelemetrySample(),)


class StaticTelemetrySource(TelemetrySource):
    def __init__(self, identity: DeviceIdentity, samples: Iterable[TelemetrySample]):
        self._identity = identity
        self._samples = tuple(samples)

    def identity(self) -> DeviceIdentity:
        return self._identity

    def samples(self) -> Tuple[TelemetrySample, ...]:
        return self._samples


class DataFrameTelemetrySource(TelemetrySource):
    """
    Reads samples from a DataFrame, one row per sample, columns named as the TelemetrySample fields
    Missing columns take the TelemetrySample defaults, missing heart rates (NaN) are written as invalid
    """
    def __init__(self, frame: pd.DataFrame, identity: Optional[DeviceIdentity] = None):
        unknown = [column for column in frame.columns if column not in SAMPLE_COLUMNS]
        if unknown:
            raise TelemetryDecodingError('Unknown sample columns: {}'.format(unknown))

        self._frame = frame
        self._identity = identity if identity is not None else DeviceIdentity()

    def identity(self) -> DeviceIdentity:
        return self._identity

    def samples(self) -> Tuple[TelemetrySample, ...]:
        samples = []
        for row in self._frame.to_dict('records'):
            values = {}
            for column, value in row.items():
                if pd.isna(value):
                    continue
                values[column] = int(value) if column == 'heart_rate' else value
            samples.append(TelemetrySample(**values))
        return tuple(samples)


def samples_frame(samples: Iterable[TelemetrySample]) -> pd.DataFrame:
    return pd.DataFrame([asdict(sample) for sample in samples], columns=list(SAMPLE_COLUMNS))


@dataclass(frozen=True)
class TelemetrySummary:
    total_distance: float = 0.0
    avg_speed: float = 0.0
    max_speed: float = 0.0
    avg_power: float = 0.0
    max_power: float = 0.0
    avg_cadence: float = 0.0
    max_cadence: float = 0.0
    avg_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None

    @staticmethod
    def from_frame(frame: pd.DataFrame) -> "TelemetrySummary":
        if frame.empty:
            return TelemetrySummary()

        heart_rate = pd.to_numeric(frame['heart_rate'], errors='coerce')
        has_heart_rate = heart_rate.notna().any()

        return TelemetrySummary(
            total_distance=float(frame['distance'].max()),
            avg_speed=float(frame['speed'].mean()),
            max_speed=float(frame['speed'].max()),
            avg_power=float(frame['power'].mean()),
            max_power=float(frame['power'].max()),
            avg_cadence=float(frame['cadence'].mean()),
            max_cadence=float(frame['cadence'].max()),
            avg_heart_rate=float(heart_rate.mean()) if has_heart_rate else None,
            max_heart_rate=float(heart_rate.max()) if has_heart_rate else None,
        )


INDOOR_BIKE_DATA_SIZE = 21


def decode_indoor_bike_data(payload: bytes) -> TelemetrySample:
    """
    Decodes an Indoor Bike Data notification as sent by the bike into engineering units

    =====  ===========================  ==========
    Bytes  Description                  Resolution
    =====  ===========================  ==========
     2-3   Instantaneous speed (uint16)  0.01 km/h
     6-7   Instantaneous cadence         0.5 rpm
    10-12  Total distance (uint24)       1 m
    13-14  Instantaneous power (sint16)  1 W
    19-20  Elapsed time (uint16)         1 s
    =====  ===========================  ==========
    """
    if len(payload) < INDOOR_BIKE_DATA_SIZE:
        raise TelemetryDecodingError('Indoor bike data expected to be at least {} bytes, {} received'.format(INDOOR_BIKE_DATA_SIZE, len(payload)))

    raw = bytes(payload)
    speed = np.frombuffer(raw, dtype='<u2', count=1, offset=2)[0] * 0.01 / 3.6
    cadence = np.frombuffer(raw, dtype='<u2', count=1, offset=6)[0] * 0.5
    distance = int.from_bytes(raw[10:13], 'little')
    power = np.frombuffer(raw, dtype='<i2', count=1, offset=13)[0]
    elapsed_time = np.frombuffer(raw, dtype='<u2', count=1, offset=19)[0]

    return TelemetrySample(
        elapsed_time=float(elapsed_time),
        speed=float(speed),
        cadence=float(cadence),
        distance=float(distance),
        power=int(power),
    )
