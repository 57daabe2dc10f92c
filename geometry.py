from dataclasses import dataclass
from typing import Sequence, Tuple
from mathutils import Vector


def vector_min(a: Vector, b: Vector) -> Vector:
    """
    Component-wise minimum of two vertex positions.

    >>> vector_min(Vector((0.5, -2.0, 8.0)), Vector((-0.5, 1.0, 16.0)))
    Vector((-0.5, -2.0, 8.0))
    """
    return Vector(tuple(map(min, a, b)))


def vector_max(a: Vector, b: Vector) -> Vector:
    """
    Component-wise maximum of two vertex positions.

    >>> vector_max(Vector((0.5, -2.0, 8.0)), Vector((-0.5, 1.0, 16.0)))
    Vector((0.5, 1.0, 16.0))
    """
    return Vector(tuple(map(max, a, b)))


@dataclass
class AABB:
    min: Vector
    max: Vector

    @staticmethod
    def around(coordinates: Sequence[Sequence[float]]) -> "AABB":
        if len(coordinates) == 0:
            raise ValueError(
                "need at least one coordinate to create a bounding box")
        minimum = Vector(coordinates[0])
        maximum = Vector(minimum)
        for co in coordinates[1:]:
            co = Vector(co)
            minimum = vector_min(minimum, co)
            maximum = vector_max(maximum, co)
        return AABB(minimum, maximum)

    @property
    def center(self) -> Vector:
        return (self.min + self.max) / 2


def bounding_sphere(coordinates: Sequence[Sequence[float]]) -> Tuple[Tuple[float, float, float], float]:
    """
    A sphere around the center of the bounding box containing all coordinates.
    Not the smallest possible one, but that's not what the format requires.

    >>> bounding_sphere([(0, 0, 0), (2, 0, 0)])
    ((1.0, 0.0, 0.0), 1.0)
    """
    center = AABB.around(coordinates).center
    radius = max((Vector(co) - center).length for co in coordinates)
    return tuple(center), radius
