"""
Conversion parameters and the dispatch grid.

Every kernel runs with a fixed 16x16x1 workgroup. The host covers an image
with ceil(width/16) x ceil(height/16) workgroups, so the grid can overhang
the image on the right and bottom edges; kernels discard those invocations.

Example:
    params = ConversionParams(width=1920, height=1080)
    params.workgroup_count()  # (120, 68, 1)
    params.pack()             # 16 bytes for the uniform buffer
"""

from dataclasses import dataclass
from typing import Tuple
import struct

# Must match @workgroup_size in every conversion shader
WORKGROUP_SIZE: Tuple[int, int, int] = (16, 16, 1)

# width, height, two reserved words
PARAMS_FORMAT = '<4I'
PARAMS_SIZE = struct.calcsize(PARAMS_FORMAT)

_U32_MAX = 0xFFFFFFFF


def ceil_div(value: int, divisor: int) -> int:
    """Integer division rounding up."""
    return (value + divisor - 1) // divisor


def chroma_size(
    width: int,
    height: int,
    horizontal: int = 2,
    vertical: int = 2
) -> Tuple[int, int]:
    """
    Size of a subsampled chroma plane.

    Args:
        width: Luma width in pixels
        height: Luma height in pixels
        horizontal: Horizontal subsampling factor (2 for 4:2:2 and 4:2:0)
        vertical: Vertical subsampling factor (1 for 4:2:2, 2 for 4:2:0)

    Returns:
        (chroma_width, chroma_height), rounded up so odd sizes keep their
        last row/column
    """
    return ceil_div(width, horizontal), ceil_div(height, vertical)


@dataclass(frozen=True)
class ConversionParams:
    """
    Per-dispatch parameter record.

    Mirrors the WGSL uniform struct:

        struct Params {
            width: u32,
            height: u32,
            _reserved0: u32,
            _reserved1: u32,
        }

    width and height are the exact output dimensions. The host sizes the
    output texture and every input plane from the same values.
    """

    width: int
    height: int

    def __post_init__(self):
        for name in ('width', 'height'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int, got {type(value).__name__}")
            if value <= 0 or value > _U32_MAX:
                raise ValueError(f"{name} must be in 1..{_U32_MAX}, got {value}")

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def pack(self) -> bytes:
        """Pack into the 16-byte little-endian uniform layout."""
        return struct.pack(PARAMS_FORMAT, self.width, self.height, 0, 0)

    def workgroup_count(self) -> Tuple[int, int, int]:
        """
        Workgroups needed to cover the image.

        For 1920x1080: (120, 68, 1). The last row of workgroups covers
        1088 rows, so 8 rows of invocations fall outside the image.
        """
        return (
            ceil_div(self.width, WORKGROUP_SIZE[0]),
            ceil_div(self.height, WORKGROUP_SIZE[1]),
            WORKGROUP_SIZE[2],
        )

    def grid_size(self) -> Tuple[int, int]:
        """Invocation grid extent (width, height) including overhang."""
        groups_x, groups_y, _ = self.workgroup_count()
        return groups_x * WORKGROUP_SIZE[0], groups_y * WORKGROUP_SIZE[1]
