from enum import Enum


class Reason(Enum):
    TRUNCATED = "truncated data"
    BAD_MAGIC = "bad magic"
    UNKNOWN_STRIP_TAG = "unknown strip tag"
    PRECISION_MISMATCH = "precision mode mismatch"
    MISALIGNED_VERTEX_OFFSET = "misaligned vertex offset"
    VERTEX_INDEX_OUT_OF_RANGE = "vertex index out of range"
    VERTEX_NOT_IN_POOL = "vertex not in pool"
    FLAGS_MISMATCH = "vertex flags mismatch"
    RECORD_EXCEEDS_STRIDE = "vertex record exceeds stride"
    VALUE_OUT_OF_RANGE = "value out of range"
    INVALID_TRANSFORM_REFERENCE = "invalid transform reference"
    TRANSFORM_REFERENCE_NOT_BOUND = "transform matrix reference not bound"
    BAD_NAME = "bad entry name"
    GEOMETRY_OUTSIDE_OBJECT = "geometry outside of named objects"
    STRIP_OVERRUN = "indexed strips overrun their section"


class FormatError(RuntimeError):
    """
    Raised when data does not follow the GMA format,
    or when in-memory data cannot be represented in it.
    """

    def __init__(self, reason: Reason, message: str) -> None:
        super().__init__(f"{reason.value}: {message}")
        self.reason = reason
        self.message = message
