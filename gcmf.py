from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, List, Tuple
from . import gma_format
from .binary import read_struct, skip_padding, write_padding, write_struct
from .bitmath import align
from .errors import FormatError, Reason
from .geometry import bounding_sphere
from .render import RenderContext, Renderer
from .strip import (TriangleStrip, decode_indexed, decode_non_indexed, encode_indexed, encode_non_indexed,
                    num_ints_of_indexed, render_strip, size_of_indexed, size_of_non_indexed)
from .transform import TransformMatrix
from .vertex import Vertex, VertexFlags, check_position_flag
from .vertex_pool import VertexArena, VertexPool, decode_pool, encode_pool

# magic, section flags, bounding sphere center and radius,
# matrix/mesh/pool counts, zero, pool vertex flags, default matrix slots, zero
HEADER_FORMAT = ">4sI3ffHHHHI8B20x"
# vertex flags, matrix slot overrides, indexed section length in sized integers
MESH_HEADER_FORMAT = ">I8BI"

UNSET_SLOTS = (gma_format.MATRIX_SLOT_UNSET,) * gma_format.MATRIX_SLOT_COUNT


@dataclass
class GcmfMesh:
    """
    A group of triangle strips sharing vertex attributes and matrix slot bindings.
    """
    vertex_flags: VertexFlags = VertexFlags.POSITION
    # overrides for the render context slots, MATRIX_SLOT_UNSET keeps the current binding
    matrix_slots: Tuple[int, ...] = UNSET_SLOTS
    # stored as inline vertex records
    strips: List[TriangleStrip] = field(default_factory=list)
    # stored as offsets into the model object's vertex pool
    indexed_strips: List[TriangleStrip] = field(default_factory=list)

    def all_strips(self) -> Iterator[TriangleStrip]:
        """All strips, in file order."""
        yield from self.strips
        yield from self.indexed_strips

    def _read(self, f: BinaryIO, start: int, is_16bit: bool, arena: VertexArena) -> List[List[int]]:
        """
        Reads the mesh following its header.
        Indexed strips are returned as pool indices since the pool vertices are
        only complete once every mesh referencing them has been read.
        """
        indexed_len: int
        vertex_flags, *slots, indexed_len = read_struct(f, MESH_HEADER_FORMAT)
        self.vertex_flags = VertexFlags(vertex_flags)
        self.matrix_slots = tuple(slots)
        check_position_flag(self.vertex_flags)

        while True:
            strip = decode_non_indexed(f, self.vertex_flags, is_16bit)
            if strip is None:
                break
            self.strips.append(strip)
        skip_padding(f, start, gma_format.ALIGNMENT)

        indexed: List[List[int]] = []
        ints_read = 0
        while ints_read < indexed_len:
            indices, n = decode_indexed(f, is_16bit, arena, self.vertex_flags)
            ints_read += n
            indexed.append(indices)
        if ints_read != indexed_len:
            raise FormatError(Reason.STRIP_OVERRUN,
                              f"indexed strips take {ints_read} integers, section has {indexed_len}")
        skip_padding(f, start, gma_format.ALIGNMENT)
        return indexed

    def write(self, f: BinaryIO, start: int, is_16bit: bool, pool: VertexPool) -> None:
        for strip in self.indexed_strips:
            for vertex in strip.vertices:
                missing = int(self.vertex_flags) & ~int(vertex.flags)
                if missing:
                    raise FormatError(Reason.FLAGS_MISMATCH,
                                      f"indexed strip vertex {vertex} lacks {VertexFlags(missing)!r}")
        write_struct(f, MESH_HEADER_FORMAT, self.vertex_flags, *self.matrix_slots,
                     sum(num_ints_of_indexed(strip) for strip in self.indexed_strips))
        for strip in self.strips:
            encode_non_indexed(f, strip, self.vertex_flags, is_16bit)
        write_struct(f, ">B", 0)
        write_padding(f, start, gma_format.ALIGNMENT)
        for strip in self.indexed_strips:
            encode_indexed(f, strip, is_16bit, pool)
        write_padding(f, start, gma_format.ALIGNMENT)

    def size_of(self, is_16bit: bool) -> int:
        non_indexed = gma_format.MESH_HEADER_SIZE + 1 + \
            sum(size_of_non_indexed(strip, self.vertex_flags) for strip in self.strips)
        indexed = sum(size_of_indexed(strip, is_16bit)
                      for strip in self.indexed_strips)
        return align(non_indexed, gma_format.ALIGNMENT) + align(indexed, gma_format.ALIGNMENT)


@dataclass
class Gcmf:
    """
    A model object: transform matrices plus triangle strips,
    either stored inline or referencing a shared pool of vertices.
    """
    # strip lengths and vertex offsets use 16 bit integers
    is_16bit: bool = False
    transform_matrices: List[TransformMatrix] = field(default_factory=list)
    meshes: List[GcmfMesh] = field(default_factory=list)
    # initial render context bindings
    default_matrix_slots: Tuple[int, ...] = UNSET_SLOTS
    bounding_sphere_center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounding_sphere_radius: float = 0.0
    # Pool order as loaded. Indexed strip vertices missing from it get appended on write.
    vertex_pool: VertexPool = field(default_factory=VertexPool, compare=False)

    @staticmethod
    def from_reader(f: BinaryIO) -> "Gcmf":
        """
        Parses a model object starting at the current position of f.
        Raises a FormatError if the data is malformed or ends early.
        """
        start = f.tell()
        (magic, section_flags, cx, cy, cz, radius, num_matrices, num_meshes,
         num_pool_vertices, _, pool_flags, *default_slots) = read_struct(f, HEADER_FORMAT)
        if magic != gma_format.GCMF_MAGIC:
            raise FormatError(Reason.BAD_MAGIC,
                              f"want {gma_format.GCMF_MAGIC}, got {magic} at offset {start:#x}")
        res = Gcmf(
            is_16bit=bool(section_flags & gma_format.SECTION_FLAG_16BIT),
            default_matrix_slots=tuple(default_slots),
            bounding_sphere_center=(cx, cy, cz),
            bounding_sphere_radius=radius,
        )
        res.transform_matrices = [TransformMatrix.from_reader(f)
                                  for _ in range(num_matrices)]
        skip_padding(f, start, gma_format.ALIGNMENT)

        arena = decode_pool(f, num_pool_vertices, pool_flags, res.is_16bit)
        indexed_per_mesh: List[List[List[int]]] = []
        for _ in range(num_meshes):
            mesh = GcmfMesh()
            indexed_per_mesh.append(mesh._read(f, start, res.is_16bit, arena))
            res.meshes.append(mesh)

        # every strip has reported its flags, the pool vertices are final now
        pool_vertices = arena.resolve()
        for mesh, indexed in zip(res.meshes, indexed_per_mesh):
            mesh.indexed_strips = [
                TriangleStrip([pool_vertices[i] for i in indices])
                for indices in indexed
            ]
        res.vertex_pool = VertexPool(pool_vertices)
        return res

    def build_vertex_pool(self) -> VertexPool:
        pool = self.vertex_pool.copy()
        for mesh in self.meshes:
            for strip in mesh.indexed_strips:
                for vertex in strip.vertices:
                    pool.upsert(vertex)
        return pool

    def check_indexed_flags(self) -> None:
        """
        A decoded pool vertex only keeps the attributes of the meshes referencing it,
        so an indexed strip vertex must not have any others.
        """
        referenced: Dict[Vertex, int] = {}
        for mesh in self.meshes:
            for strip in mesh.indexed_strips:
                for vertex in strip.vertices:
                    referenced[vertex] = referenced.get(vertex, 0) | int(mesh.vertex_flags)
        for vertex, flags in referenced.items():
            extra = int(vertex.flags) & ~flags
            if extra:
                raise FormatError(Reason.FLAGS_MISMATCH,
                                  f"indexed strip vertex {vertex} has {VertexFlags(extra)!r}, "
                                  f"which no mesh referencing it stores")

    def write(self, f: BinaryIO) -> None:
        self.check_indexed_flags()
        start = f.tell()
        pool = self.build_vertex_pool()
        write_struct(
            f, HEADER_FORMAT,
            gma_format.GCMF_MAGIC,
            gma_format.SECTION_FLAG_16BIT if self.is_16bit else 0,
            *self.bounding_sphere_center,
            self.bounding_sphere_radius,
            len(self.transform_matrices),
            len(self.meshes),
            len(pool),
            0,
            pool.flags,
            *self.default_matrix_slots,
        )
        for matrix in self.transform_matrices:
            matrix.write(f)
        write_padding(f, start, gma_format.ALIGNMENT)
        encode_pool(f, pool, self.is_16bit)
        for mesh in self.meshes:
            mesh.write(f, start, self.is_16bit, pool)
        assert f.tell() - start == self.size_of(), \
            f"wrote {f.tell() - start} bytes, but size_of() is {self.size_of()}"

    def size_of(self) -> int:
        """Size in bytes of this model object when written."""
        size = align(gma_format.GCMF_HEADER_SIZE + gma_format.TRANSFORM_MATRIX_SIZE * len(self.transform_matrices),
                     gma_format.ALIGNMENT)
        size += len(self.build_vertex_pool()) * gma_format.vertex_stride(self.is_16bit)
        return size + sum(mesh.size_of(self.is_16bit) for mesh in self.meshes)

    def all_strips(self) -> Iterator[TriangleStrip]:
        for mesh in self.meshes:
            yield from mesh.all_strips()

    @property
    def has_geometry(self) -> bool:
        return any(len(strip) > 0 for strip in self.all_strips())

    def update_bounding_sphere(self) -> None:
        positions = [vertex.position
                     for strip in self.all_strips() for vertex in strip.vertices]
        if not positions:
            self.bounding_sphere_center, self.bounding_sphere_radius = (0.0, 0.0, 0.0), 0.0
            return
        self.bounding_sphere_center, self.bounding_sphere_radius = bounding_sphere(positions)

    def render(self, renderer: Renderer) -> None:
        context = RenderContext(self.transform_matrices, self.default_matrix_slots)
        for mesh in self.meshes:
            context.apply(mesh.matrix_slots)
            for strip in mesh.all_strips():
                render_strip(strip, renderer, context)
