import importlib.util
import os
import tempfile
import unittest
from .test_gma import sample_archive

HAVE_BPY = importlib.util.find_spec("bpy") is not None


@unittest.skipUnless(HAVE_BPY, "needs Blender's bpy module")
class TestImportFile(unittest.TestCase):
    def test_import(self):
        import bpy
        from . import gma_import

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "test.gma")
            with open(path, "wb") as f:
                sample_archive().write(f)
            gma_import.import_file(path)

        collection = bpy.data.collections["gma"]
        names = sorted(o.name for o in collection.objects)
        self.assertEqual(["EmptyObject", "a", "bc"], names)
        self.assertIsNone(collection.objects["EmptyObject"].data)
        mesh = collection.objects["bc"].data
        self.assertEqual(3, len(mesh.vertices))
        self.assertEqual(1, len(mesh.polygons))
        # Y-up (0, 1, 0) becomes Z-up (0, 0, 1)
        self.assertEqual((0.0, 0.0, 1.0), tuple(mesh.vertices[2].co))

    def test_y_up_to_z_up(self):
        from .gma_import import y_up_to_z_up
        self.assertEqual((1, -3, 2), y_up_to_z_up((1, 2, 3)))


if __name__ == "__main__":
    unittest.main()
