"""Read JPEG pixel dimensions straight from the marker structure.

No decoding happens here: the marker segments are walked until a Start Of
Frame (SOF) segment is found, and the frame height/width are read from it.
Layout of an SOF segment after its marker::

    length (2, BE) | precision (1) | height (2, BE) | width (2, BE) | ...
"""

import struct
from pathlib import Path
from typing import Union

from .errors import MalformedImageError
from .models import ImageGeometry

SOI = 0xD8
EOI = 0xD9
SOS = 0xDA
TEM = 0x01

# Markers that stand alone, without a length field.
STANDALONE_MARKERS = frozenset({TEM, SOI, EOI, *range(0xD0, 0xD8)})

# SOF0..SOF15 minus DHT (C4), JPG (C8) and DAC (CC).
SOF_MARKERS = frozenset(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}


def extract_geometry(data: bytes) -> ImageGeometry:
    """Return the width/height encoded in the first SOF segment of ``data``.

    Raises MalformedImageError when the buffer is not a JPEG or ends before
    a frame header is found.
    """
    size = len(data)
    if size < 2 or data[0] != 0xFF or data[1] != SOI:
        raise MalformedImageError("Not a JPEG: missing SOI marker")

    pos = 2
    while pos < size:
        if data[pos] != 0xFF:
            raise MalformedImageError(f"Expected a marker at offset {pos}, got 0x{data[pos]:02X}")

        # Any number of 0xFF fill bytes may precede the marker code.
        while pos < size and data[pos] == 0xFF:
            pos += 1
        if pos >= size:
            break
        marker = data[pos]
        pos += 1

        if marker in STANDALONE_MARKERS:
            if marker == EOI:
                break
            continue
        if marker == SOS:
            # Entropy-coded data follows; a frame header would have come first.
            break

        if pos + 2 > size:
            break
        (length,) = struct.unpack_from(">H", data, pos)
        if length < 2:
            raise MalformedImageError(f"Invalid segment length {length} for marker 0x{marker:02X}")
        end = pos + length
        if end > size:
            break

        if marker in SOF_MARKERS:
            if length < 7:
                raise MalformedImageError(f"SOF segment too short ({length} bytes)")
            height, width = struct.unpack_from(">HH", data, pos + 3)
            return ImageGeometry(width=width, height=height)

        pos = end

    raise MalformedImageError("Invalid JPEG: no frame dimensions found")


def read_geometry(path: Union[str, Path]) -> ImageGeometry:
    with open(path, "rb") as f:
        data = f.read()
    try:
        return extract_geometry(data)
    except MalformedImageError as e:
        e.path = str(path)
        raise
