# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import asdict

import pandas as pd

from FITWriter.activities import ActivityEncoder
from FITWriter.telemetry import DataFrameTelemetrySource, DeviceIdentity, decode_indoor_bike_data
from FITWriter.types import Manufacturer


def main():
    # This sample code shows how to write a FIT activity file from samples held in a DataFrame
    # The last sample is decoded from an Indoor Bike Data notification as received from the bike

    # Modify to fit your directory setup
    file_name = './indoor_ride.fit'

    notification = bytes([
        0x44, 0x02,              # flags
        0xC4, 0x09,              # speed: 25.00 km/h
        0x00, 0x00,              # average speed
        0xB4, 0x00,              # cadence: 90 rpm
        0x00, 0x00,              # average cadence
        0x2C, 0x01, 0x00,        # distance: 300 m
        0xC8, 0x00,              # power: 200 W
        0x00, 0x00,              # average power
        0x00, 0x00,              # expended energy
        0x2B, 0x00,              # elapsed time: 43 s
    ])

    frame = pd.DataFrame({
        'elapsed_time': [0.0, 15.0, 30.0],
        'speed': [0.0, 6.5, 7.0],
        'cadence': [0.0, 85.5, 88.0],
        'distance': [0.0, 95.0, 200.0],
        'power': [0, 180, 190],
        'heart_rate': [None, 120, 128],
    })
    frame.loc[len(frame)] = pd.Series(asdict(decode_indoor_bike_data(notification)))

    identity = DeviceIdentity(serial_number=4130, manufacturer=Manufacturer.Development, product=1, product_name='Echo Bike', software_version=1.0)

    header = ActivityEncoder(DataFrameTelemetrySource(frame, identity)).encode(file_name)

    print(header)


if __name__ == "__main__":
    main()
