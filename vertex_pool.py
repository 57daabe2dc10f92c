from typing import BinaryIO, Dict, Iterable, Iterator, List
from . import gma_format
from .binary import read_exact
from .errors import FormatError, Reason
from .vertex import Vertex, VertexFlags, decode_vertex, encode_vertex, size_of_vertex


class VertexPool:
    """
    Deduplicated vertices of one model object, in order of first insertion.
    Indexed triangle strips refer to these by index.
    """

    def __init__(self, vertices: Iterable[Vertex] = ()) -> None:
        self._mapping: Dict[Vertex, int] = {}
        self._vertices: List[Vertex] = []
        for vertex in vertices:
            self.upsert(vertex)

    def upsert(self, vertex: Vertex) -> int:
        try:
            return self._mapping[vertex]
        except KeyError:
            idx = len(self._vertices)
            self._vertices.append(vertex)
            self._mapping[vertex] = idx
            return idx

    def index_of(self, vertex: Vertex) -> int:
        try:
            return self._mapping[vertex]
        except KeyError as e:
            raise FormatError(Reason.VERTEX_NOT_IN_POOL,
                              f"indexed triangle strip has a vertex not in the vertex pool: {vertex}") from e

    def copy(self) -> "VertexPool":
        return VertexPool(self._vertices)

    @property
    def flags(self) -> VertexFlags:
        """The attributes a shared pool record has to store."""
        res = VertexFlags.POSITION
        for vertex in self._vertices:
            res |= vertex.flags
        return res

    def __getitem__(self, index: int) -> Vertex:
        return self._vertices[index]

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self._vertices)

    def __repr__(self) -> str:
        return f"VertexPool({self._vertices!r})"


class VertexArena:
    """
    Pool records as read from a file, before the strips referencing them are known.

    A record stores every attribute of the pool layout,
    but a vertex only has the attributes some strip referencing it asks for.
    Strips hold indices into the arena and report their flags through reference(),
    which accumulates them per slot.
    """

    def __init__(self, records: List[Vertex]) -> None:
        self._records = records
        self._flags = [VertexFlags.POSITION] * len(records)

    def __len__(self) -> int:
        return len(self._records)

    def reference(self, index: int, flags: int) -> int:
        if index < 0 or index >= len(self._records):
            raise FormatError(Reason.VERTEX_INDEX_OUT_OF_RANGE,
                              f"vertex index {index} not in [0, {len(self._records)})")
        self._flags[index] |= flags
        return index

    def flags(self, index: int) -> VertexFlags:
        return self._flags[index]

    def vertex(self, index: int) -> Vertex:
        return self._records[index].restrict(self._flags[index])

    def resolve(self) -> List[Vertex]:
        return [self.vertex(i) for i in range(len(self._records))]


def check_pool_layout(flags: int, is_16bit: bool) -> None:
    size = size_of_vertex(flags)
    stride = gma_format.vertex_stride(is_16bit)
    if size > stride:
        raise FormatError(Reason.RECORD_EXCEEDS_STRIDE,
                          f"pool records with flags {flags:#x} need {size} bytes, stride is {stride:#x}")


def decode_pool(f: BinaryIO, count: int, flags: int, is_16bit: bool) -> VertexArena:
    check_pool_layout(flags, is_16bit)
    stride = gma_format.vertex_stride(is_16bit)
    records: List[Vertex] = []
    pad = stride - size_of_vertex(flags)
    for _ in range(count):
        records.append(decode_vertex(f, flags))
        read_exact(f, pad)
    return VertexArena(records)


def encode_pool(f: BinaryIO, pool: VertexPool, is_16bit: bool) -> None:
    flags = pool.flags
    check_pool_layout(flags, is_16bit)
    pad = gma_format.vertex_stride(is_16bit) - size_of_vertex(flags)
    for vertex in pool:
        encode_vertex(f, vertex, flags, fill_missing=True)
        f.write(bytes(pad))
