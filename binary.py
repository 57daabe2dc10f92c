import struct
from typing import BinaryIO, Tuple
from .bitmath import padding
from .errors import FormatError, Reason


def read_exact(f: BinaryIO, size: int) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise FormatError(
            Reason.TRUNCATED, f"wanted {size} bytes at offset {f.tell() - len(data)}, got {len(data)}")
    return data


def read_struct(f: BinaryIO, fmt: str) -> Tuple:
    """
    Reads and unpacks struct.calcsize(fmt) bytes.
    Raises a FormatError if the stream ends early.
    """
    return struct.unpack(fmt, read_exact(f, struct.calcsize(fmt)))


def write_struct(f: BinaryIO, fmt: str, *values) -> None:
    try:
        data = struct.pack(fmt, *values)
    except struct.error as e:
        raise FormatError(Reason.VALUE_OUT_OF_RANGE,
                          f"cannot pack {values} as {fmt!r}: {e}") from e
    f.write(data)


def read_ascii_string(f: BinaryIO) -> str:
    """Reads a NUL-terminated ASCII string, consuming the terminator."""
    data = bytearray()
    while True:
        c = read_exact(f, 1)
        if c == b'\0':
            break
        data += c
    try:
        return data.decode("ascii")
    except UnicodeDecodeError as e:
        raise FormatError(Reason.BAD_NAME,
                          f"name {bytes(data)!r} is not ASCII") from e


def write_ascii_string(f: BinaryIO, s: str) -> None:
    f.write(s.encode("ascii") + b'\0')


def skip_padding(f: BinaryIO, start: int, alignment: int) -> None:
    """Skips to the next multiple of alignment, counted from start."""
    read_exact(f, padding(f.tell() - start, alignment))


def write_padding(f: BinaryIO, start: int, alignment: int) -> None:
    """Zero-fills up to the next multiple of alignment, counted from start."""
    f.write(bytes(padding(f.tell() - start, alignment)))
