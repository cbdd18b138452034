"""
CPU reference kernels (numpy).

Same contract as the WGSL shaders: the invocation grid is the full set of
workgroups (so it overhangs the image exactly as a GPU dispatch does), every
invocation outside width x height is discarded before it reads or writes,
and each remaining invocation writes one RGBA texel with alpha 1.0.

Surfaces are (H, W, C) arrays. uint8 surfaces are normalized to [0, 1] the
way a unorm texture load does; float surfaces are used as-is. Output is a
float32 (H, W, 4) surface that may be larger than the image.

Example:
    params = ConversionParams(width=640, height=480)
    rgba = convert_nv21(luma, chroma, params)
    pixels = to_rgba8(rgba)
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from .formats import PixelFormat
from .params import ConversionParams


def yuv_to_rgb(y, u, v) -> np.ndarray:
    """
    BT.601 limited range YUV -> RGB.

    Args:
        y, u, v: Normalized samples in [0, 1] (scalars or broadcastable arrays)

    Returns:
        float32 array (..., 3) clamped to [0, 1]
    """
    y = np.asarray(y, dtype=np.float32)
    u = np.asarray(u, dtype=np.float32)
    v = np.asarray(v, dtype=np.float32)

    y_scaled = (y - 16.0 / 255.0) * (255.0 / 219.0)
    u_shift = u - 0.5
    v_shift = v - 0.5

    r = y_scaled + 1.402 * v_shift
    g = y_scaled - 0.344136 * u_shift - 0.714136 * v_shift
    b = y_scaled + 1.772 * u_shift

    rgb = np.stack(np.broadcast_arrays(r, g, b), axis=-1).astype(np.float32)
    return np.clip(rgb, 0.0, 1.0)


def _as_surface(data) -> np.ndarray:
    surface = np.asarray(data)
    if surface.ndim == 2:
        surface = surface[:, :, np.newaxis]
    if surface.ndim != 3:
        raise ValueError(f"Expected (H, W) or (H, W, C) surface, got shape {surface.shape}")

    if surface.dtype == np.uint8:
        return surface.astype(np.float32) / 255.0
    return surface.astype(np.float32, copy=False)


def _prepare_output(output: Optional[np.ndarray], params: ConversionParams) -> np.ndarray:
    if output is None:
        return np.zeros((params.height, params.width, 4), dtype=np.float32)

    if output.ndim != 3 or output.shape[2] != 4:
        raise ValueError(f"Expected (H, W, 4) output surface, got shape {output.shape}")
    if output.shape[0] < params.height or output.shape[1] < params.width:
        raise ValueError(
            f"Output surface {output.shape[1]}x{output.shape[0]} is smaller than "
            f"{params.width}x{params.height}"
        )
    return output


def _invocations(params: ConversionParams) -> Tuple[np.ndarray, np.ndarray]:
    """Coordinates of the invocations that survive the boundary guard."""
    grid_width, grid_height = params.grid_size()
    gy, gx = np.mgrid[0:grid_height, 0:grid_width]

    in_bounds = (gx < params.width) & (gy < params.height)
    return gx[in_bounds], gy[in_bounds]


def _store(output: np.ndarray, x: np.ndarray, y: np.ndarray, rgb: np.ndarray) -> np.ndarray:
    output[y, x, :3] = rgb
    output[y, x, 3] = 1.0
    return output


def convert_uyvy(
    packed,
    params: ConversionParams,
    output: Optional[np.ndarray] = None
) -> np.ndarray:
    """Packed 4:2:2 (U, Y0, V, Y1 per texel) -> RGBA."""
    packed = _as_surface(packed)
    output = _prepare_output(output, params)
    x, y = _invocations(params)

    texel = packed[y, x // 2]
    luma = np.where((x & 1) == 1, texel[:, 3], texel[:, 1])
    rgb = yuv_to_rgb(luma, texel[:, 0], texel[:, 2])

    return _store(output, x, y, rgb)


def convert_nv21(
    luma,
    chroma,
    params: ConversionParams,
    output: Optional[np.ndarray] = None
) -> np.ndarray:
    """Semi-planar 4:2:0 with V, U chroma order -> RGBA."""
    luma = _as_surface(luma)
    chroma = _as_surface(chroma)
    output = _prepare_output(output, params)
    x, y = _invocations(params)

    sample = chroma[y // 2, x // 2]
    rgb = yuv_to_rgb(luma[y, x, 0], u=sample[:, 1], v=sample[:, 0])

    return _store(output, x, y, rgb)


def convert_gray(
    luma,
    params: ConversionParams,
    output: Optional[np.ndarray] = None
) -> np.ndarray:
    """Single-channel luma broadcast to RGB, no colour transform."""
    luma = _as_surface(luma)
    output = _prepare_output(output, params)
    x, y = _invocations(params)

    gray = luma[y, x, 0]
    rgb = np.repeat(gray[:, np.newaxis], 3, axis=1)

    return _store(output, x, y, rgb)


_KERNELS = {
    PixelFormat.UYVY: convert_uyvy,
    PixelFormat.NV21: convert_nv21,
    PixelFormat.GRAY8: convert_gray,
}


def convert(
    fmt: PixelFormat,
    planes: Sequence,
    params: ConversionParams,
    output: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Run the reference kernel for a format.

    Args:
        fmt: Pixel format
        planes: Input surfaces in binding order (see formats.plane_layouts)
        params: Conversion parameters
        output: Optional pre-allocated output surface

    Returns:
        float32 (H, W, 4) output surface
    """
    fmt = PixelFormat.parse(fmt)
    kernel = _KERNELS[fmt]

    expected = 2 if fmt is PixelFormat.NV21 else 1
    if len(planes) != expected:
        raise ValueError(f"{fmt.fourcc} expects {expected} plane(s), got {len(planes)}")

    return kernel(*planes, params, output=output)


def to_rgba8(surface: np.ndarray) -> np.ndarray:
    """Quantize a float surface the way an rgba8unorm store does."""
    return np.round(np.clip(surface, 0.0, 1.0) * 255.0).astype(np.uint8)
