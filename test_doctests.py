import doctest
import unittest
from . import bitmath, geometry, render, transform, vertex


class TestDoctests(unittest.TestCase):
    def test_modules(self):
        for module in (bitmath, geometry, render, transform, vertex):
            with self.subTest(module=module.__name__):
                self.assertEqual(0, doctest.testmod(module).failed)


if __name__ == "__main__":
    unittest.main()
