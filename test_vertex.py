import io
import struct
import unittest
from .errors import FormatError, Reason
from .vertex import Vertex, VertexFlags, decode_vertex, encode_vertex, size_of_vertex

ALL_FLAGS = VertexFlags.POSITION | VertexFlags.NORMAL | VertexFlags.COLOR | VertexFlags.TEXCOORD | VertexFlags.MATRIX_INDEX


def encode(vertex: Vertex, flags: int) -> bytes:
    f = io.BytesIO()
    encode_vertex(f, vertex, flags)
    return f.getvalue()


class TestVertexRecord(unittest.TestCase):
    def test_field_order(self):
        vertex = Vertex(
            position=(1.0, 2.0, 3.0),
            normal=(0.0, 1.0, 0.0),
            color=(10, 20, 30, 255),
            texcoord=(0.5, 0.25),
            transform_ref=6,
        )
        want = (struct.pack(">3f", 1, 2, 3) + struct.pack(">3f", 0, 1, 0)
                + bytes([10, 20, 30, 255]) + struct.pack(">2f", 0.5, 0.25) + bytes([6]))
        self.assertEqual(want, encode(vertex, ALL_FLAGS))
        self.assertEqual(37, size_of_vertex(ALL_FLAGS))

    def test_decode(self):
        data = struct.pack(">3f", -1, 0.5, 2) + bytes([1, 2, 3, 4])
        flags = VertexFlags.POSITION | VertexFlags.COLOR
        f = io.BytesIO(data)
        vertex = decode_vertex(f, flags)
        self.assertEqual(Vertex(position=(-1.0, 0.5, 2.0), color=(1, 2, 3, 4)), vertex)
        self.assertEqual(len(data), f.tell())
        self.assertEqual(flags, vertex.flags)

    def test_flagged_field_missing(self):
        vertex = Vertex(position=(0.0, 0.0, 0.0))
        with self.assertRaises(FormatError) as ctx:
            encode(vertex, VertexFlags.POSITION | VertexFlags.NORMAL)
        self.assertEqual(Reason.FLAGS_MISMATCH, ctx.exception.reason)

    def test_unflagged_field_present(self):
        vertex = Vertex(position=(0.0, 0.0, 0.0), texcoord=(0.0, 0.0))
        with self.assertRaises(FormatError) as ctx:
            encode(vertex, VertexFlags.POSITION)
        self.assertEqual(Reason.FLAGS_MISMATCH, ctx.exception.reason)

    def test_position_required(self):
        with self.assertRaises(FormatError) as ctx:
            decode_vertex(io.BytesIO(bytes(32)), VertexFlags.NORMAL)
        self.assertEqual(Reason.FLAGS_MISMATCH, ctx.exception.reason)

    def test_fill_missing(self):
        vertex = Vertex(position=(1.0, 1.0, 1.0))
        f = io.BytesIO()
        encode_vertex(f, vertex, VertexFlags.POSITION | VertexFlags.NORMAL, fill_missing=True)
        self.assertEqual(struct.pack(">3f", 1, 1, 1) + bytes(12), f.getvalue())

    def test_truncated(self):
        with self.assertRaises(FormatError) as ctx:
            decode_vertex(io.BytesIO(bytes(8)), VertexFlags.POSITION)
        self.assertEqual(Reason.TRUNCATED, ctx.exception.reason)

    def test_color_out_of_range(self):
        vertex = Vertex(position=(0.0, 0.0, 0.0), color=(256, 0, 0, 0))
        with self.assertRaises(FormatError) as ctx:
            encode(vertex, VertexFlags.POSITION | VertexFlags.COLOR)
        self.assertEqual(Reason.VALUE_OUT_OF_RANGE, ctx.exception.reason)

    def test_restrict(self):
        vertex = Vertex(position=(0.0, 0.0, 0.0), normal=(1.0, 0.0, 0.0), transform_ref=3)
        restricted = vertex.restrict(VertexFlags.POSITION | VertexFlags.MATRIX_INDEX)
        self.assertEqual(Vertex(position=(0.0, 0.0, 0.0), transform_ref=3), restricted)

    def test_structural_equality(self):
        a = Vertex(position=(1.0, 2.0, 3.0), normal=(0.0, 0.0, 1.0))
        b = Vertex(position=(1.0, 2.0, 3.0), normal=(0.0, 0.0, 1.0))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, Vertex(position=(1.0, 2.0, 3.0)))


if __name__ == "__main__":
    unittest.main()
