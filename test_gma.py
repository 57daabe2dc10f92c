import io
import struct
import unittest
from .errors import FormatError, Reason
from .gcmf import Gcmf, GcmfMesh
from .gma import EmptySlot, GmaArchive, GmaEntry
from .render import CollectingRenderer
from .strip import TriangleStrip
from .vertex import Vertex, VertexFlags

# header only: no matrices, no pool, no meshes
EMPTY_GCMF_SIZE = 0x40


def triangle_model() -> Gcmf:
    return Gcmf(meshes=[GcmfMesh(
        vertex_flags=VertexFlags.POSITION | VertexFlags.COLOR,
        strips=[TriangleStrip([
            Vertex(position=(0.0, 0.0, 0.0), color=(255, 0, 0, 255)),
            Vertex(position=(1.0, 0.0, 0.0), color=(0, 255, 0, 255)),
            Vertex(position=(0.0, 1.0, 0.0), color=(0, 0, 255, 255)),
        ])],
    )])


def sample_archive() -> GmaArchive:
    archive = GmaArchive()
    archive.add(GmaEntry("a", Gcmf()))
    archive.add_empty()
    archive.add(GmaEntry("bc", triangle_model()))
    return archive


class TestGmaLayout(unittest.TestCase):
    def test_header(self):
        data = sample_archive().to_bytes()
        self.assertEqual((3, 0x40), struct.unpack(">2i", data[:8]))
        entries = struct.unpack(">6i", data[8:32])
        self.assertEqual((0, 0, -1, 0, EMPTY_GCMF_SIZE, 2), entries)
        self.assertEqual(b"a\0bc\0\0", data[32:38])
        self.assertEqual(bytes(0x40 - 38), data[38:0x40])
        self.assertEqual(b'GCMF', data[0x40:0x44])
        self.assertEqual(b'GCMF', data[0x40 + EMPTY_GCMF_SIZE:0x44 + EMPTY_GCMF_SIZE])

    def test_size_of(self):
        archive = sample_archive()
        self.assertEqual(len(archive.to_bytes()), archive.size_of())

    def test_name_table_on_boundary_gets_extra_block(self):
        # 8 byte header + 8 byte entry + 47 characters + terminator = 0x40
        archive = GmaArchive([GmaEntry("x" * 47, Gcmf())])
        data = archive.to_bytes()
        self.assertEqual(0x60, archive.size_of_header())
        self.assertEqual(0x60, struct.unpack(">i", data[4:8])[0])
        self.assertEqual(bytes(0x20), data[0x40:0x60])
        self.assertEqual(b'GCMF', data[0x60:0x64])
        self.assertEqual(data, archive.to_bytes())
        self.assertEqual(data, GmaArchive.from_bytes(data).to_bytes())

    def test_name_table_one_short_of_boundary(self):
        # the extra byte exactly fills the block
        archive = GmaArchive([GmaEntry("x" * 46, Gcmf())])
        self.assertEqual(0x40, archive.size_of_header())


class TestGmaRoundTrip(unittest.TestCase):
    def test_empty_slot_position_is_kept(self):
        data = sample_archive().to_bytes()
        archive = GmaArchive.from_bytes(data)
        self.assertEqual(3, len(archive))
        self.assertIsInstance(archive[0], GmaEntry)
        self.assertIsInstance(archive[1], EmptySlot)
        self.assertIsInstance(archive[2], GmaEntry)
        self.assertEqual(["a", "bc"], [e.name for e in archive.entries()])
        self.assertEqual(data, archive.to_bytes())

    def test_decode_equals_original(self):
        archive = sample_archive()
        archive.insert(0, EmptySlot())
        archive.add_empty()
        self.assertEqual(archive, GmaArchive.from_bytes(archive.to_bytes()))

    def test_empty_archive(self):
        archive = GmaArchive()
        data = archive.to_bytes()
        self.assertEqual(0x20, len(data))
        self.assertEqual(archive, GmaArchive.from_bytes(data))

    def test_offsets_are_recomputed(self):
        archive = GmaArchive.from_bytes(sample_archive().to_bytes())
        archive.remove(0)
        data = archive.to_bytes()
        self.assertEqual((-1, 0, 0, 0), struct.unpack(">4i", data[8:24]))
        self.assertEqual(archive, GmaArchive.from_bytes(data))

    def test_reader_position(self):
        data = sample_archive().to_bytes()
        f = io.BytesIO(b"\xff" * 0x20 + data)
        f.seek(0x20)
        self.assertEqual(sample_archive(), GmaArchive.from_reader(f))


class TestGmaErrors(unittest.TestCase):
    def test_none_stream(self):
        with self.assertRaises(ValueError):
            GmaArchive.from_reader(None)
        with self.assertRaises(ValueError):
            sample_archive().write(None)

    def test_none_renderer(self):
        with self.assertRaises(ValueError):
            sample_archive().render(None)

    def test_precondition_is_not_format_error(self):
        self.assertFalse(issubclass(FormatError, ValueError))

    def test_bad_names(self):
        for name in ("", "café", "a\0b"):
            with self.subTest(name=name):
                with self.assertRaises(FormatError) as ctx:
                    GmaArchive([GmaEntry(name, Gcmf())]).to_bytes()
                self.assertEqual(Reason.BAD_NAME, ctx.exception.reason)

    def test_unstored_indexed_field_fails_before_writing(self):
        vertex = Vertex(position=(0.0, 0.0, 0.0), texcoord=(0.5, 0.5))
        model = Gcmf(meshes=[GcmfMesh(indexed_strips=[TriangleStrip([vertex])])])
        f = io.BytesIO()
        with self.assertRaises(FormatError) as ctx:
            GmaArchive([GmaEntry("a", model)]).write(f)
        self.assertEqual(Reason.FLAGS_MISMATCH, ctx.exception.reason)
        self.assertEqual(b"", f.getvalue())

    def test_non_ascii_name_in_file(self):
        data = bytearray(sample_archive().to_bytes())
        data[32] = 0xE9
        with self.assertRaises(FormatError) as ctx:
            GmaArchive.from_bytes(bytes(data))
        self.assertEqual(Reason.BAD_NAME, ctx.exception.reason)

    def test_corrupt_model_fails_whole_archive(self):
        data = bytearray(sample_archive().to_bytes())
        data[0x40 + EMPTY_GCMF_SIZE] = ord('X')
        with self.assertRaises(FormatError) as ctx:
            GmaArchive.from_bytes(bytes(data))
        self.assertEqual(Reason.BAD_MAGIC, ctx.exception.reason)

    def test_truncated(self):
        data = sample_archive().to_bytes()
        with self.assertRaises(FormatError) as ctx:
            GmaArchive.from_bytes(data[:20])
        self.assertEqual(Reason.TRUNCATED, ctx.exception.reason)


class TestNamedObjects(unittest.TestCase):
    def test_geometry_outside_named_objects(self):
        with self.assertRaises(FormatError) as ctx:
            GmaArchive.from_named_objects({"": triangle_model(), "a": Gcmf()})
        self.assertEqual(Reason.GEOMETRY_OUTSIDE_OBJECT, ctx.exception.reason)

    def test_empty_unnamed_object_is_skipped(self):
        archive = GmaArchive.from_named_objects({"a": Gcmf(), "": Gcmf(), "b": triangle_model()})
        self.assertEqual(["a", "b"], [e.name for e in archive.entries()])
        self.assertEqual(2, len(archive))

    def test_duplicate_names_allowed(self):
        archive = GmaArchive([GmaEntry("a", Gcmf()), GmaEntry("a", Gcmf())])
        self.assertEqual(archive, GmaArchive.from_bytes(archive.to_bytes()))


class TestGmaRender(unittest.TestCase):
    def test_objects_match_slots(self):
        renderer = CollectingRenderer()
        sample_archive().render(renderer)
        self.assertEqual(["a", "EmptyObject", "bc"], [o.name for o in renderer.objects])
        self.assertEqual([], renderer.objects[0].strips)
        strip, = renderer.objects[2].strips
        self.assertEqual([(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255)],
                         [v.color for v in strip])


if __name__ == "__main__":
    unittest.main()
