"""
WGSL shader library for yuvgpu.

Example usage:
    from yuvgpu.shaders import SHADERS
    from yuvgpu.formats import PixelFormat

    shader = ComputeShader.from_wgsl(gpu_ctx, SHADERS[PixelFormat.NV21], bindings=...)
"""

from ..formats import PixelFormat
from .color import COLOR_TRANSFORM_WGSL, PARAMS_WGSL
from .convert import (
    UYVY_TO_RGBA_SHADER,
    NV21_TO_RGBA_SHADER,
    GRAY_TO_RGBA_SHADER,
)

ENTRY_POINT = 'main'

SHADERS = {
    PixelFormat.UYVY: UYVY_TO_RGBA_SHADER,
    PixelFormat.NV21: NV21_TO_RGBA_SHADER,
    PixelFormat.GRAY8: GRAY_TO_RGBA_SHADER,
}

__all__ = [
    'COLOR_TRANSFORM_WGSL',
    'PARAMS_WGSL',
    'UYVY_TO_RGBA_SHADER',
    'NV21_TO_RGBA_SHADER',
    'GRAY_TO_RGBA_SHADER',
    'SHADERS',
    'ENTRY_POINT',
]
