#!/usr/bin/env python3
"""
Basic example of inspecting the structure of a TDMS file with tdms_dump.

The file is written with nptdms in a few segments, then its segment
layout is printed and dumped into an XML file next to it.
"""

import numpy as np
from nptdms import ChannelObject, GroupObject, RootObject, TdmsWriter

import tdms_dump


def write_example():
    """Create a simple TDMS file with three segments"""
    print("Writing TDMS file...")

    time = np.linspace(0, 10, 1000)
    temperature = 20 + 5 * np.sin(2 * np.pi * 0.5 * time)
    pressure = 101.3 + 2 * np.cos(2 * np.pi * 0.3 * time)

    # nptdms writes TDMS 1.0 (4712) unless asked for 2.0
    with TdmsWriter("example.tdms", version=4713) as writer:
        writer.write_segment([
            RootObject({"title": "Example TDMS File", "author": "Python Example"}),
            GroupObject("Sensors", {"location": "Lab A", "experiment_id": 42}),
            ChannelObject("Sensors", "Temperature", temperature[:500], {"unit": "°C"}),
            ChannelObject("Sensors", "Pressure", pressure[:500], {"unit": "kPa"}),
        ])
        writer.write_segment([
            ChannelObject("Sensors", "Temperature", temperature[500:]),
            ChannelObject("Sensors", "Pressure", pressure[500:]),
        ])
        writer.write_segment([
            ChannelObject("Sensors", "Enabled", np.ones(1000, dtype=np.int8),
                          {"description": "Added in the last segment"}),
        ])

    print("File written successfully!")


def inspect_example():
    """Print the segment structure of the TDMS file"""
    print("\nInspecting TDMS file...")

    with tdms_dump.TdmsStructureReader("example.tdms") as reader:
        print(f"Segments: {reader.segment_count}")
        print(f"Channels: {reader.channel_count}")

        print("\nFile Properties:")
        for name, value in reader.get_object_properties("/").items():
            print(f"  {name}: {value}")

        print("\nSegments:")
        for segment in reader.segments:
            layout = segment.channel_layout
            print(f"  [{segment.index}] offset {segment.offset}, "
                  f"next segment at {segment.next_segment_absolute}")
            if layout is None:
                continue
            print(f"      raw data {layout.raw_data_start}..{layout.raw_data_end}, "
                  f"{layout.number_of_chunks} chunk(s) of {layout.chunk_size} bytes")
            for channel in layout.channels:
                print(f"      {channel.path}: {channel.number_of_values_in_segment} values "
                      f"of {tdms_dump.name_of(channel.data_type)}")

        print("\nChannels:")
        for channel_path in reader.list_channels():
            print(f"  {channel_path}: {reader.number_of_values(channel_path)} values")

    xml_path = tdms_dump.dump_structure("example.tdms")
    print(f"\nStructure written to {xml_path}")


if __name__ == "__main__":
    write_example()
    inspect_example()
