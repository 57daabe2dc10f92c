from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, List, Optional, Tuple
from . import gma_format
from .binary import read_struct, write_struct
from .errors import FormatError, Reason
from .render import ModelVertex, RenderContext, Renderer
from .vertex import Vertex, decode_vertex, encode_vertex, size_of_vertex
from .vertex_pool import VertexArena, VertexPool


class StripTag(IntEnum):
    # ends the list of non-indexed strips
    NONE = 0
    FLOAT = 0x98
    UINT16 = 0x99


def strip_tag(is_16bit: bool) -> StripTag:
    return StripTag.UINT16 if is_16bit else StripTag.FLOAT


@dataclass
class TriangleStrip:
    # order matters, it defines the triangles
    vertices: List[Vertex] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.vertices)


# Non-indexed strips: the vertex records are stored inline

def decode_non_indexed(f: BinaryIO, flags: int, is_16bit: bool) -> Optional[TriangleStrip]:
    """
    Reads a tagged strip of inline vertex records.
    Returns None on tag 0, which terminates a list of strips.
    """
    tag_value, = read_struct(f, ">B")
    if tag_value == StripTag.NONE:
        return None
    try:
        tag = StripTag(tag_value)
    except ValueError as e:
        raise FormatError(Reason.UNKNOWN_STRIP_TAG,
                          f"unknown non-indexed strip tag {tag_value:#04x}") from e
    if tag != strip_tag(is_16bit):
        raise FormatError(Reason.PRECISION_MISMATCH,
                          f"strip tagged {tag.name} in a {'16' if is_16bit else '32'} bit model object")
    count, = read_struct(f, ">H")
    return TriangleStrip([decode_vertex(f, flags) for _ in range(count)])


def encode_non_indexed(f: BinaryIO, strip: TriangleStrip, flags: int, is_16bit: bool) -> None:
    write_struct(f, ">BH", strip_tag(is_16bit), len(strip.vertices))
    for vertex in strip.vertices:
        encode_vertex(f, vertex, flags)


def size_of_non_indexed(strip: TriangleStrip, flags: int) -> int:
    return gma_format.NON_INDEXED_STRIP_HEADER_SIZE + len(strip.vertices) * size_of_vertex(flags)


# Indexed strips: a length followed by byte offsets into the vertex pool records

def decode_indexed(f: BinaryIO, is_16bit: bool, arena: VertexArena, flags: int) -> Tuple[List[int], int]:
    """
    Reads one indexed strip, marking the referenced pool vertices as having flags.
    Returns the pool indices and the number of sized integers consumed.
    """
    fmt = gma_format.sized_int_format(is_16bit)
    stride = gma_format.vertex_stride(is_16bit)
    length, = read_struct(f, fmt)
    if length < 0:
        raise FormatError(Reason.VALUE_OUT_OF_RANGE,
                          f"negative indexed strip length {length}")
    indices: List[int] = []
    for _ in range(length):
        offset, = read_struct(f, fmt)
        if offset % stride != 0:
            raise FormatError(Reason.MISALIGNED_VERTEX_OFFSET,
                              f"vertex offset {offset:#x} is not a multiple of {stride:#x}")
        indices.append(arena.reference(offset // stride, flags))
    return indices, 1 + length


def encode_indexed(f: BinaryIO, strip: TriangleStrip, is_16bit: bool, pool: VertexPool) -> None:
    fmt = gma_format.sized_int_format(is_16bit)
    stride = gma_format.vertex_stride(is_16bit)
    write_struct(f, fmt, len(strip.vertices))
    for vertex in strip.vertices:
        write_struct(f, fmt, pool.index_of(vertex) * stride)


def num_ints_of_indexed(strip: TriangleStrip) -> int:
    return 1 + len(strip.vertices)


def size_of_indexed(strip: TriangleStrip, is_16bit: bool) -> int:
    return gma_format.sized_int_size(is_16bit) * num_ints_of_indexed(strip)


def render_strip(strip: TriangleStrip, renderer: Renderer, context: RenderContext) -> None:
    model_vertices: List[ModelVertex] = []
    for vertex in strip.vertices:
        model_vertex = ModelVertex(
            position=vertex.position,
            normal=vertex.normal,
            color=vertex.color,
            texcoord=vertex.texcoord,
        )
        matrix = context.resolve(vertex.transform_ref)
        if matrix is not None:
            model_vertex.position = matrix.transform_position(model_vertex.position)
            if model_vertex.normal is not None:
                model_vertex.normal = matrix.transform_normal(model_vertex.normal)
        model_vertices.append(model_vertex)
    renderer.write_triangle_strip(model_vertices)
