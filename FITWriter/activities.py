# Copyright 2019 Joan Puig
# See LICENSE for details


import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from FITWriter.encoder import Encoder
from FITWriter.messages import Message, FileId, DeviceInfo, Event, Record, Lap, Session, Activity
from FITWriter.model import FileHeader
from FITWriter.telemetry import TelemetrySource, TelemetrySample, TelemetrySummary, ZeroTelemetrySource, samples_frame
from FITWriter.types import to_date_time, Event as EventValue, EventType, File, Sport, SubSport


logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(timezone.utc).astimezone()


class ActivityEncoder:
    """
    Writes an indoor cycling activity as a fixed sequence of messages:
    file id, device info, timer start, one record per sample, timer stop, lap, session and activity

    The start time is read once from the clock, every other timestamp is derived from it and the sample elapsed times
    The stop event comes one record interval after the last sample so it is always later than the start event
    """
    RECORD_INTERVAL = 1  # s

    source: TelemetrySource
    clock: Clock

    def __init__(self, source: Optional[TelemetrySource] = None, clock: Optional[Clock] = None):
        self.source = source if source is not None else ZeroTelemetrySource()
        self.clock = clock if clock is not None else system_clock

    def messages(self) -> Tuple[Message, ...]:
        identity = self.source.identity()
        samples = self.source.samples()
        summary = TelemetrySummary.from_frame(samples_frame(samples))

        now = self.clock()
        start_time = to_date_time(now)
        utc_offset = ActivityEncoder.utc_offset(now)
        record_times = [start_time + int(round(sample.elapsed_time)) for sample in samples]
        stop_time = max(record_times + [start_time]) + ActivityEncoder.RECORD_INTERVAL
        elapsed_time = stop_time - start_time

        messages: List[Message] = [
            FileId(
                serial_number=identity.serial_number,
                time_created=start_time,
                product_name=identity.product_name,
                manufacturer=identity.manufacturer,
                product=identity.product,
                type=File.Activity,
            ),
            DeviceInfo(
                timestamp=start_time,
                serial_number=identity.serial_number,
                product_name=identity.product_name,
                manufacturer=identity.manufacturer,
                product=identity.product,
                software_version=identity.software_version,
                hardware_version=identity.hardware_version,
            ),
            Event(timestamp=start_time, event=EventValue.Timer, event_type=EventType.Start),
        ]

        messages.extend(ActivityEncoder.record(timestamp, sample) for timestamp, sample in zip(record_times, samples))

        messages.extend([
            Event(timestamp=stop_time, event=EventValue.Timer, event_type=EventType.StopAll),
            Lap(
                timestamp=stop_time,
                start_time=start_time,
                total_elapsed_time=elapsed_time,
                total_timer_time=elapsed_time,
                total_distance=summary.total_distance,
                avg_speed=summary.avg_speed,
                max_speed=summary.max_speed,
                avg_power=summary.avg_power,
                max_power=summary.max_power,
                avg_heart_rate=summary.avg_heart_rate,
                max_heart_rate=summary.max_heart_rate,
                avg_cadence=int(summary.avg_cadence),
                max_cadence=int(summary.max_cadence),
                sport=Sport.Cycling,
            ),
            Session(
                timestamp=stop_time,
                start_time=start_time,
                total_elapsed_time=elapsed_time,
                total_timer_time=elapsed_time,
                total_distance=summary.total_distance,
                avg_speed=summary.avg_speed,
                max_speed=summary.max_speed,
                avg_power=summary.avg_power,
                max_power=summary.max_power,
                avg_heart_rate=summary.avg_heart_rate,
                max_heart_rate=summary.max_heart_rate,
                avg_cadence=int(summary.avg_cadence),
                max_cadence=int(summary.max_cadence),
                sport=Sport.Cycling,
                sub_sport=SubSport.IndoorCycling,
            ),
            Activity(
                timestamp=stop_time,
                total_timer_time=elapsed_time,
                local_timestamp=stop_time + utc_offset,
                num_sessions=1,
            ),
        ])

        return tuple(messages)

    @staticmethod
    def utc_offset(now: datetime) -> int:
        # Naive datetimes are taken as UTC
        offset = now.utcoffset()
        return int(offset.total_seconds()) if offset is not None else 0

    @staticmethod
    def record(timestamp: int, sample: TelemetrySample) -> Record:
        # Cadence is kept with a 1/128 rpm resolution, split in whole and fractional parts
        cadence = int(sample.cadence)

        return Record(
            timestamp=timestamp,
            distance=sample.distance,
            speed=sample.speed,
            power=max(sample.power, 0),
            heart_rate=sample.heart_rate,
            cadence=cadence,
            fractional_cadence=sample.cadence - cadence,
        )

    def encode(self, file_name: str) -> FileHeader:
        messages = self.messages()
        logger.info('Encoding activity with %d messages into %s', len(messages), file_name)
        return Encoder.encode_fit_file(file_name, messages)


def encode_activity(file_name: str, source: Optional[TelemetrySource] = None, clock: Optional[Clock] = None) -> FileHeader:
    return ActivityEncoder(source, clock).encode(file_name)
