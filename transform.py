from dataclasses import dataclass
from typing import BinaryIO, Tuple
from mathutils import Matrix, Vector
from .binary import read_struct, write_struct

# 3 rows of 4 floats
MATRIX_FORMAT = ">12f"


@dataclass(frozen=True)
class TransformMatrix:
    """
    Affine transform stored as 3 rows of 4 floats,
    rotation/scale in the first three columns, translation in the last one.
    """
    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        assert len(self.values) == 12, \
            f"expected 12 matrix values, got {len(self.values)}"

    @staticmethod
    def identity() -> "TransformMatrix":
        return TransformMatrix.translation((0, 0, 0))

    @staticmethod
    def translation(offset: Tuple[float, float, float]) -> "TransformMatrix":
        x, y, z = offset
        return TransformMatrix((
            1.0, 0.0, 0.0, x,
            0.0, 1.0, 0.0, y,
            0.0, 0.0, 1.0, z,
        ))

    @staticmethod
    def from_reader(f: BinaryIO) -> "TransformMatrix":
        return TransformMatrix(read_struct(f, MATRIX_FORMAT))

    def write(self, f: BinaryIO) -> None:
        write_struct(f, MATRIX_FORMAT, *self.values)

    @property
    def matrix(self) -> Matrix:
        v = self.values
        return Matrix((v[0:4], v[4:8], v[8:12], (0.0, 0.0, 0.0, 1.0)))

    def transform_position(self, position: Tuple[float, float, float]) -> Tuple[float, float, float]:
        """
        >>> TransformMatrix.translation((1, 2, 3)).transform_position((0.5, 0.5, 0.5))
        (1.5, 2.5, 3.5)
        """
        return tuple(self.matrix @ Vector(position))

    def transform_normal(self, normal: Tuple[float, float, float]) -> Tuple[float, float, float]:
        """
        Like transform_position, but without the translation.

        >>> TransformMatrix.translation((1, 2, 3)).transform_normal((0, 1, 0))
        (0.0, 1.0, 0.0)
        """
        return tuple(self.matrix.to_3x3() @ Vector(normal))
