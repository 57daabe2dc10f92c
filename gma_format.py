# Archive header
# int32 entry count, int32 model base offset
ARCHIVE_HEADER_SIZE = 8
# int32 model offset, int32 name offset
ARCHIVE_ENTRY_SIZE = 8
# marks a slot without name or model
EMPTY_MODEL_OFFSET = -1
EMPTY_NAME_OFFSET = 0
# The official files (e.g. init/sel.gma) get a whole extra block of padding
# when the name table ends exactly on the alignment boundary.
# Writing one more zero byte before aligning reproduces that.
NAME_TABLE_EXTRA_BYTES = 1
ALIGNMENT = 0x20

# Model object (GCMF) chunk
GCMF_MAGIC = b'GCMF'
GCMF_HEADER_SIZE = 0x40
SECTION_FLAG_16BIT = 0x1
TRANSFORM_MATRIX_SIZE = 0x30
# u32 vertex flags, 8 slot overrides, u32 indexed section length
MESH_HEADER_SIZE = 16

# Render context
MATRIX_SLOT_COUNT = 8
# slot is not bound to any transform matrix
MATRIX_SLOT_UNSET = 0xFF
# references are 3, 6, ..., 24 for slots 0-7
TRANSFORM_REF_STEP = 3
MAX_TRANSFORM_REF = TRANSFORM_REF_STEP * MATRIX_SLOT_COUNT

# Triangle strips
# tag byte + u16 vertex count
NON_INDEXED_STRIP_HEADER_SIZE = 3
# byte offsets in indexed strips point into a densely packed record array
VERTEX_STRIDE_32BIT = 0x40
VERTEX_STRIDE_16BIT = 0x20


def vertex_stride(is_16bit: bool) -> int:
    return VERTEX_STRIDE_16BIT if is_16bit else VERTEX_STRIDE_32BIT


def sized_int_format(is_16bit: bool) -> str:
    """struct format of the integers in indexed strips"""
    return ">H" if is_16bit else ">i"


def sized_int_size(is_16bit: bool) -> int:
    return 2 if is_16bit else 4
