from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generator, List, Optional, Sequence, Tuple
from . import gma_format
from .errors import FormatError, Reason
from .transform import TransformMatrix


@dataclass
class ModelVertex:
    """A fully resolved vertex, as handed to renderers."""
    position: Tuple[float, float, float]
    normal: Optional[Tuple[float, float, float]] = None
    color: Optional[Tuple[int, int, int, int]] = None
    texcoord: Optional[Tuple[float, float]] = None


class Renderer(ABC):
    @abstractmethod
    def begin_object(self, name: str) -> None:
        ...

    @abstractmethod
    def write_triangle_strip(self, vertices: List[ModelVertex]) -> None:
        ...

    @abstractmethod
    def end_object(self) -> None:
        ...


@dataclass
class RenderedObject:
    name: str
    strips: List[List[ModelVertex]] = field(default_factory=list)


class CollectingRenderer(Renderer):
    """Keeps everything it is given, in order."""

    def __init__(self) -> None:
        self.objects: List[RenderedObject] = []
        self._current: Optional[RenderedObject] = None

    def begin_object(self, name: str) -> None:
        assert self._current is None, \
            f"begin_object({name!r}) while {self._current.name!r} is still open"
        self._current = RenderedObject(name)

    def write_triangle_strip(self, vertices: List[ModelVertex]) -> None:
        assert self._current is not None, "triangle strip outside of an object"
        self._current.strips.append(vertices)

    def end_object(self) -> None:
        assert self._current is not None, "end_object() without begin_object()"
        self.objects.append(self._current)
        self._current = None


class RenderContext:
    """
    Binds the 8 matrix-group slots used by vertex transform references
    to indices into a model object's transform matrices.
    Lives for one render pass of one model object.
    """

    def __init__(self, transform_matrices: Sequence[TransformMatrix], slots: Sequence[int]) -> None:
        self._transform_matrices = transform_matrices
        self.slots = [gma_format.MATRIX_SLOT_UNSET] * gma_format.MATRIX_SLOT_COUNT
        self.apply(slots)

    def apply(self, slots: Sequence[int]) -> None:
        """Rebinds every slot whose new value is set, keeps the others."""
        assert len(slots) == gma_format.MATRIX_SLOT_COUNT, \
            f"expected {gma_format.MATRIX_SLOT_COUNT} slots, got {len(slots)}"
        for i, idx in enumerate(slots):
            if idx != gma_format.MATRIX_SLOT_UNSET:
                self.slots[i] = idx

    def resolve(self, transform_ref: Optional[int]) -> Optional[TransformMatrix]:
        """
        Returns the matrix a vertex transform reference points to,
        or None if the vertex is not transformed.
        """
        if not transform_ref:
            return None
        if (transform_ref < 0 or transform_ref > gma_format.MAX_TRANSFORM_REF
                or transform_ref % gma_format.TRANSFORM_REF_STEP != 0):
            raise FormatError(Reason.INVALID_TRANSFORM_REFERENCE,
                              f"transform reference {transform_ref} is not one of 3, 6, ..., {gma_format.MAX_TRANSFORM_REF}")
        slot = transform_ref // gma_format.TRANSFORM_REF_STEP - 1
        idx = self.slots[slot]
        if idx == gma_format.MATRIX_SLOT_UNSET:
            raise FormatError(Reason.TRANSFORM_REFERENCE_NOT_BOUND,
                              f"matrix slot {slot} (reference {transform_ref}) is unset")
        if idx >= len(self._transform_matrices):
            raise FormatError(Reason.TRANSFORM_REFERENCE_NOT_BOUND,
                              f"matrix slot {slot} is bound to matrix {idx}, but there are only {len(self._transform_matrices)}")
        return self._transform_matrices[idx]


def strip_to_triangles(vertices: Sequence) -> Generator[Tuple[int, int, int], None, None]:
    """
    Splits a triangle strip into triangles with consistent winding,
    skipping degenerate ones (used to join strips).

    >>> list(strip_to_triangles("abcd"))
    [(0, 1, 2), (2, 1, 3)]
    >>> list(strip_to_triangles("abbc"))
    []
    """
    for i in range(len(vertices) - 2):
        a, b, c = i, i + 1, i + 2
        if vertices[a] == vertices[b] or vertices[b] == vertices[c] or vertices[a] == vertices[c]:
            continue
        yield (a, b, c) if i % 2 == 0 else (b, a, c)
