from dataclasses import dataclass, replace
from enum import IntFlag
from typing import BinaryIO, Optional, Tuple
from .binary import read_struct, write_struct
from .errors import FormatError, Reason


class VertexFlags(IntFlag):
    """Vertex attributes present in a record, using the GX attribute bits."""
    MATRIX_INDEX = 1 << 0
    POSITION = 1 << 9
    NORMAL = 1 << 10
    COLOR = 1 << 11
    TEXCOORD = 1 << 13


# (flag, struct format) in record order, after the position
OPTIONAL_FIELDS = (
    (VertexFlags.NORMAL, ">3f"),
    (VertexFlags.COLOR, ">4B"),
    (VertexFlags.TEXCOORD, ">2f"),
    (VertexFlags.MATRIX_INDEX, ">B"),
)
POSITION_FORMAT = ">3f"
POSITION_SIZE = 12
FIELD_SIZES = {
    VertexFlags.NORMAL: 12,
    VertexFlags.COLOR: 4,
    VertexFlags.TEXCOORD: 8,
    VertexFlags.MATRIX_INDEX: 1,
}


@dataclass(frozen=True)
class Vertex:
    position: Tuple[float, float, float]
    normal: Optional[Tuple[float, float, float]] = None
    # RGBA, 0-255 per channel
    color: Optional[Tuple[int, int, int, int]] = None
    texcoord: Optional[Tuple[float, float]] = None
    # 0 or 3, 6, ..., 24, see RenderContext.resolve
    transform_ref: Optional[int] = None

    @property
    def flags(self) -> VertexFlags:
        res = VertexFlags.POSITION
        for flag, _ in OPTIONAL_FIELDS:
            if self._field(flag) is not None:
                res |= flag
        return res

    def restrict(self, flags: VertexFlags) -> "Vertex":
        """Drops the optional fields not listed in flags."""
        return replace(
            self,
            normal=self.normal if flags & VertexFlags.NORMAL else None,
            color=self.color if flags & VertexFlags.COLOR else None,
            texcoord=self.texcoord if flags & VertexFlags.TEXCOORD else None,
            transform_ref=self.transform_ref if flags & VertexFlags.MATRIX_INDEX else None,
        )

    def _field(self, flag: VertexFlags):
        if flag == VertexFlags.NORMAL:
            return self.normal
        if flag == VertexFlags.COLOR:
            return self.color
        if flag == VertexFlags.TEXCOORD:
            return self.texcoord
        assert flag == VertexFlags.MATRIX_INDEX, f"not an optional field: {flag!r}"
        return self.transform_ref


def check_position_flag(flags: int) -> None:
    if not flags & VertexFlags.POSITION:
        raise FormatError(Reason.FLAGS_MISMATCH,
                          f"vertex flags {flags:#x} lack the position")


def size_of_vertex(flags: int) -> int:
    """
    Size of a vertex record with the given attributes.

    >>> size_of_vertex(VertexFlags.POSITION | VertexFlags.NORMAL)
    24
    """
    return POSITION_SIZE + sum(size for flag, size in FIELD_SIZES.items() if flags & flag)


def decode_vertex(f: BinaryIO, flags: int) -> Vertex:
    """Reads one vertex record laid out according to flags."""
    check_position_flag(flags)
    position = read_struct(f, POSITION_FORMAT)
    fields = {}
    for flag, fmt in OPTIONAL_FIELDS:
        if flags & flag:
            fields[flag] = read_struct(f, fmt)
    return Vertex(
        position=position,
        normal=fields.get(VertexFlags.NORMAL),
        color=fields.get(VertexFlags.COLOR),
        texcoord=fields.get(VertexFlags.TEXCOORD),
        transform_ref=fields[VertexFlags.MATRIX_INDEX][0] if VertexFlags.MATRIX_INDEX in fields else None,
    )


def encode_vertex(f: BinaryIO, vertex: Vertex, flags: int, fill_missing: bool = False) -> None:
    """
    Writes one vertex record laid out according to flags.
    The vertex must have exactly the flagged fields,
    unless fill_missing is set, in which case absent flagged fields are zero-filled
    (used for pool records, which share one layout).
    """
    check_position_flag(flags)
    extra = int(vertex.flags) & ~int(flags)
    missing = int(flags) & ~int(vertex.flags)
    if extra or (missing and not fill_missing):
        raise FormatError(Reason.FLAGS_MISMATCH,
                          f"vertex has fields {vertex.flags!r}, record wants {VertexFlags(flags)!r}")
    write_struct(f, POSITION_FORMAT, *vertex.position)
    for flag, fmt in OPTIONAL_FIELDS:
        if not flags & flag:
            continue
        value = vertex._field(flag)
        if value is None:
            f.write(bytes(FIELD_SIZES[flag]))
        elif flag == VertexFlags.MATRIX_INDEX:
            write_struct(f, fmt, value)
        else:
            write_struct(f, fmt, *value)
