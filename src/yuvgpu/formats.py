"""
Camera pixel formats and their GPU plane layouts.

Each supported format maps to a fixed set of input textures, listed in the
order the conversion kernel binds them:

    UYVY   packed   rgba8unorm  (ceil(w/2), h)       U, Y0, V, Y1
    NV21   luma     r8unorm     (w, h)               Y
           chroma   rg8unorm    (ceil(w/2), ceil(h/2))  V, U
    GRAY8  luma     r8unorm     (w, h)               Y

Raw frames are expected tightly packed (no row padding) in the same order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

import numpy as np

from .params import ceil_div, chroma_size


class PixelFormat(Enum):
    """Input encodings the converter accepts."""

    UYVY = 'UYVY'
    NV21 = 'NV21'
    GRAY8 = 'GRAY8'

    @property
    def fourcc(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: Union[str, 'PixelFormat']) -> 'PixelFormat':
        """
        Look up a format by name or common alias.

        Raises:
            ValueError: If the name is not a supported format
        """
        if isinstance(name, cls):
            return name

        key = str(name).strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unsupported pixel format: {name}") from None


_ALIASES: Dict[str, str] = {
    'Y422': 'UYVY',
    'UYNV': 'UYVY',
    'GRAY': 'GRAY8',
    'GREY': 'GRAY8',
    'Y800': 'GRAY8',
    'Y8': 'GRAY8',
}


@dataclass(frozen=True)
class PlaneLayout:
    """One input texture of a format."""

    name: str
    width: int
    height: int
    channels: int
    texture_format: str

    @property
    def nbytes(self) -> int:
        return self.width * self.height * self.channels

    @property
    def shape(self):
        """numpy shape (H, W, C)."""
        return (self.height, self.width, self.channels)


def plane_layouts(fmt: PixelFormat, width: int, height: int) -> List[PlaneLayout]:
    """
    Input texture set for a format, in binding order.

    Args:
        fmt: Pixel format
        width: Output width in pixels
        height: Output height in pixels

    Returns:
        List of PlaneLayout
    """
    fmt = PixelFormat.parse(fmt)

    if fmt is PixelFormat.UYVY:
        # One texel carries two pixels; odd widths still get a full texel
        return [PlaneLayout('packed', ceil_div(width, 2), height, 4, 'rgba8unorm')]

    if fmt is PixelFormat.NV21:
        chroma_w, chroma_h = chroma_size(width, height)
        return [
            PlaneLayout('luma', width, height, 1, 'r8unorm'),
            PlaneLayout('chroma', chroma_w, chroma_h, 2, 'rg8unorm'),
        ]

    return [PlaneLayout('luma', width, height, 1, 'r8unorm')]


def frame_size(fmt: PixelFormat, width: int, height: int) -> int:
    """Byte length of a tightly packed raw frame."""
    return sum(plane.nbytes for plane in plane_layouts(fmt, width, height))


def split_planes(
    fmt: PixelFormat,
    data: Union[bytes, bytearray, memoryview, np.ndarray],
    width: int,
    height: int
) -> List[np.ndarray]:
    """
    View a raw frame as per-plane uint8 arrays.

    Args:
        fmt: Pixel format of the frame
        data: Raw frame bytes, or a uint8 array holding them
        width: Frame width in pixels
        height: Frame height in pixels

    Returns:
        One (H, W, C) uint8 array per plane, in binding order. Arrays are
        views into data where possible.

    Raises:
        TypeError: If data is not bytes-like or a uint8 array
        ValueError: If the byte length does not match the format

    Example:
        luma, chroma = split_planes(PixelFormat.NV21, raw, 640, 480)
        chroma.shape  # (240, 320, 2)
    """
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            raise TypeError(f"Expected dtype uint8, got {data.dtype}")
        flat = np.ascontiguousarray(data).reshape(-1)
    elif isinstance(data, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(data, dtype=np.uint8)
    else:
        raise TypeError(f"Expected bytes or numpy array, got {type(data)}")

    layouts = plane_layouts(fmt, width, height)
    expected_size = sum(plane.nbytes for plane in layouts)
    if flat.size != expected_size:
        raise ValueError(
            f"Data size mismatch for {PixelFormat.parse(fmt).fourcc} "
            f"{width}x{height}: expected {expected_size}, got {flat.size}"
        )

    planes = []
    offset = 0
    for plane in layouts:
        planes.append(flat[offset:offset + plane.nbytes].reshape(plane.shape))
        offset += plane.nbytes

    return planes


def describe_conversion(fmt: PixelFormat) -> str:
    """Processing label for diagnostics, e.g. 'NV21 → RGBA'."""
    return f"{PixelFormat.parse(fmt).fourcc} → RGBA"
