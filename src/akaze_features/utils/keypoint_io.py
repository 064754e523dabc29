"""
Plain text keypoint files

Layout::

    <count> <dimension>
    x y size angle d_0 d_1 ... d_{dimension-1}
    ...

Real descriptors are written as floats, binary descriptors as one decimal
integer per packed byte. The header always matches the records so readers
can preallocate.
"""

import os
from typing import List, Optional, TextIO

import numpy as np

from ..exceptions import SerializationError
from ..models.features import Features, Keypoint

FLOAT_FORMAT = "{:.9g}"


def _format_record(kp: Keypoint, row: np.ndarray, binary: bool) -> str:
    geometry = [FLOAT_FORMAT.format(v) for v in (kp.x, kp.y, kp.size, kp.angle)]
    if binary:
        payload = [str(int(v)) for v in row]
    else:
        payload = [FLOAT_FORMAT.format(float(v)) for v in row]
    return " ".join(geometry + payload)


def write_keypoints(stream: TextIO, features: Features, binary: bool) -> None:
    stream.write(f"{len(features)} {features.dimension}\n")
    for kp, row in zip(features.keypoints, features.descriptors):
        stream.write(_format_record(kp, row, binary) + "\n")


def save_keypoints(path: str, features: Features, binary: bool) -> None:
    """
    Save keypoints and descriptors to a text file

    Args:
        path: Output file; missing parent directories are created
        features: Co-indexed keypoints and descriptors
        binary: Write the payload as packed byte values instead of floats

    Raises:
        SerializationError: The file cannot be opened or written. A partially
            written file is left in place.
    """
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", newline="\n") as f:
            write_keypoints(f, features, binary)
    except OSError as e:
        raise SerializationError(f"cannot write keypoints to {path}: {e}") from e


def load_keypoints(path: str, binary: Optional[bool] = None) -> Features:
    """
    Read a file written by ``save_keypoints``

    Args:
        path: Keypoint file
        binary: Payload type; when None, payloads made only of integers are
            read back as uint8 bytes and anything else as float32. A real
            descriptor file whose values all print as whole numbers (all
            zeros, for instance) is then taken for a binary one, so pass
            the configured type when it is known.

    Raises:
        SerializationError: The file is unreadable or the header does not
            match its records
    """
    try:
        with open(path, "r") as f:
            lines = [line.split() for line in f if line.strip()]
    except OSError as e:
        raise SerializationError(f"cannot read keypoints from {path}: {e}") from e

    if not lines or len(lines[0]) != 2:
        raise SerializationError(f"{path}: missing '<count> <dimension>' header")
    try:
        count, dimension = int(lines[0][0]), int(lines[0][1])
    except ValueError:
        raise SerializationError(f"{path}: malformed header {' '.join(lines[0])!r}")

    records = lines[1:]
    if len(records) != count:
        raise SerializationError(f"{path}: header declares {count} records, found {len(records)}")

    keypoints: List[Keypoint] = []
    payloads: List[List[str]] = []
    for n, fields in enumerate(records, start=2):
        if len(fields) != 4 + dimension:
            raise SerializationError(
                f"{path}:{n}: expected {4 + dimension} values, found {len(fields)}")
        try:
            x, y, size, angle = (float(v) for v in fields[:4])
        except ValueError:
            raise SerializationError(f"{path}:{n}: malformed keypoint geometry")
        keypoints.append(Keypoint(x=x, y=y, size=size, angle=angle))
        payloads.append(fields[4:])

    if binary is None:
        binary = count > 0 and all(v.isdigit() for row in payloads for v in row)
    convert = int if binary else float
    try:
        values = [[convert(v) for v in row] for row in payloads]
        descriptors = np.array(values, dtype=np.uint8 if binary else np.float32)
    except (ValueError, OverflowError) as e:
        raise SerializationError(f"{path}: malformed descriptor value: {e}") from e
    return Features(keypoints, descriptors.reshape(count, dimension))
