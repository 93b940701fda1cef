# Copyright 2019 Joan Puig
# See LICENSE for details


import logging

from FITWriter.activities import encode_activity


def main():
    # This sample code shows how to write a FIT activity file with placeholder values
    # No equipment is connected so a single all zero sample is written

    logging.basicConfig(level=logging.DEBUG)

    # Modify to fit your directory setup
    file_name = './activity.fit'

    header = encode_activity(file_name)

    print(header)


if __name__ == "__main__":
    main()
