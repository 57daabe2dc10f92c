import io
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, List, Mapping, Tuple, Union
from . import config, gma_format
from .binary import read_ascii_string, read_struct, write_ascii_string, write_padding, write_struct
from .bitmath import align
from .errors import FormatError, Reason
from .gcmf import Gcmf
from .render import Renderer


@dataclass
class GmaEntry:
    name: str
    model: Gcmf


@dataclass
class EmptySlot:
    """
    A slot without name or model.
    Kept in place so that external references to slot indices stay valid.
    """


Slot = Union[GmaEntry, EmptySlot]


def check_name(name: str) -> None:
    if not name:
        raise FormatError(Reason.BAD_NAME, "entry names must not be empty")
    if not name.isascii() or '\0' in name:
        raise FormatError(Reason.BAD_NAME,
                          f"entry name {name!r} must be ASCII without NUL characters")


class GmaArchive:
    """
    A .GMA model archive: an ordered list of named model objects,
    possibly interspersed with empty slots.
    """

    def __init__(self, slots: Iterable[Slot] = ()) -> None:
        self.slots: List[Slot] = list(slots)

    # container interface

    def add(self, entry: GmaEntry) -> None:
        self.slots.append(entry)

    def add_empty(self) -> None:
        self.slots.append(EmptySlot())

    def insert(self, index: int, slot: Slot) -> None:
        self.slots.insert(index, slot)

    def remove(self, index: int) -> Slot:
        return self.slots.pop(index)

    def __getitem__(self, index: int) -> Slot:
        return self.slots[index]

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GmaArchive):
            return NotImplemented
        return self.slots == other.slots

    def __repr__(self) -> str:
        return f"GmaArchive({self.slots!r})"

    def entries(self) -> Iterator[GmaEntry]:
        """The non-empty slots, in order."""
        return (slot for slot in self.slots if isinstance(slot, GmaEntry))

    @staticmethod
    def from_named_objects(objects: Mapping[str, Gcmf]) -> "GmaArchive":
        """
        Builds an archive with one entry per named object, in mapping order.
        The unnamed object may only exist if it's empty; it gets no entry.
        """
        res = GmaArchive()
        for name, model in objects.items():
            if name == "":
                if model.has_geometry:
                    raise FormatError(Reason.GEOMETRY_OUTSIDE_OBJECT,
                                      "geometry is not allowed outside of named objects")
                continue
            res.add(GmaEntry(name, model))
        return res

    # decoding

    @staticmethod
    def from_reader(f: BinaryIO) -> "GmaArchive":
        """
        Parses an archive starting at the current position of f.
        Raises a FormatError if the data is not a valid archive.
        """
        if f is None:
            raise ValueError("input stream must not be None")
        start = f.tell()
        num_entries, model_base = read_struct(f, ">2i")
        if num_entries < 0:
            raise FormatError(Reason.VALUE_OUT_OF_RANGE,
                              f"negative entry count {num_entries}")
        offsets: List[Tuple[int, int]] = [read_struct(f, ">2i") for _ in range(num_entries)]
        name_base = f.tell()

        res = GmaArchive()
        for model_offset, name_offset in offsets:
            if model_offset == gma_format.EMPTY_MODEL_OFFSET and name_offset == gma_format.EMPTY_NAME_OFFSET:
                res.add_empty()
                continue
            f.seek(name_base + name_offset)
            name = read_ascii_string(f)
            f.seek(start + model_base + model_offset)
            res.add(GmaEntry(name, Gcmf.from_reader(f)))
        return res

    @staticmethod
    def from_bytes(data: bytes) -> "GmaArchive":
        return GmaArchive.from_reader(io.BytesIO(data))

    # encoding

    def size_of_header(self) -> int:
        entries = gma_format.ARCHIVE_HEADER_SIZE + gma_format.ARCHIVE_ENTRY_SIZE * len(self.slots)
        names = sum(len(entry.name) + 1 for entry in self.entries())
        return align(entries + names + gma_format.NAME_TABLE_EXTRA_BYTES, gma_format.ALIGNMENT)

    def size_of(self) -> int:
        """Size in bytes of this archive when written."""
        return self.size_of_header() + sum(entry.model.size_of() for entry in self.entries())

    def write(self, f: BinaryIO) -> None:
        if f is None:
            raise ValueError("output stream must not be None")
        for entry in self.entries():
            check_name(entry.name)
            entry.model.check_indexed_flags()
        start = f.tell()
        model_base = self.size_of_header()

        write_struct(f, ">2i", len(self.slots), model_base)
        name_offset, model_offset = 0, 0
        for slot in self.slots:
            if isinstance(slot, GmaEntry):
                write_struct(f, ">2i", model_offset, name_offset)
                name_offset += len(slot.name) + 1
                model_offset += slot.model.size_of()
            else:
                write_struct(f, ">2i", gma_format.EMPTY_MODEL_OFFSET, gma_format.EMPTY_NAME_OFFSET)

        for entry in self.entries():
            write_ascii_string(f, entry.name)
        f.write(bytes(gma_format.NAME_TABLE_EXTRA_BYTES))
        write_padding(f, start, gma_format.ALIGNMENT)
        assert f.tell() - start == model_base, \
            f"header is {f.tell() - start} bytes, expected {model_base}"

        for entry in self.entries():
            entry.model.write(f)

    def to_bytes(self) -> bytes:
        f = io.BytesIO()
        self.write(f)
        return f.getvalue()

    # rendering

    def render(self, renderer: Renderer) -> None:
        """
        Renders every slot as one object.
        Empty slots become empty objects, so that renderer objects match slot indices.
        """
        if renderer is None:
            raise ValueError("renderer must not be None")
        for slot in self.slots:
            if isinstance(slot, GmaEntry):
                renderer.begin_object(slot.name)
                slot.model.render(renderer)
            else:
                renderer.begin_object(config.EMPTY_OBJECT_NAME)
            renderer.end_object()
