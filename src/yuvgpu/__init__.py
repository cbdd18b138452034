"""
yuvgpu: camera pixel format to RGBA conversion with WebGPU compute shaders.

Supported inputs:
- UYVY  (packed 4:2:2)
- NV21  (semi-planar 4:2:0, chroma interleaved V, U)
- GRAY8 (single-channel luma)

All conversions use BT.601 limited range and produce RGBA8.

Example:
    from yuvgpu import GPUContext, FormatConverter, PixelFormat

    gpu_ctx = await GPUContext.create()
    converter = FormatConverter(gpu_ctx)
    rgba = await converter.convert(PixelFormat.UYVY, frame_bytes, 1920, 1080)

CPU reference kernels with the same semantics live in yuvgpu.reference.
"""

from .params import WORKGROUP_SIZE, ConversionParams
from .formats import (
    PixelFormat,
    PlaneLayout,
    plane_layouts,
    frame_size,
    split_planes,
    describe_conversion,
)
from .shaders import (
    COLOR_TRANSFORM_WGSL,
    UYVY_TO_RGBA_SHADER,
    NV21_TO_RGBA_SHADER,
    GRAY_TO_RGBA_SHADER,
)
from .gpu import GPUContext, ComputeShader, GPUTexture
from .converter import FormatConverter, ConversionStats

__version__ = '0.1.0'

__all__ = [
    'WORKGROUP_SIZE',
    'ConversionParams',
    'PixelFormat',
    'PlaneLayout',
    'plane_layouts',
    'frame_size',
    'split_planes',
    'describe_conversion',
    'COLOR_TRANSFORM_WGSL',
    'UYVY_TO_RGBA_SHADER',
    'NV21_TO_RGBA_SHADER',
    'GRAY_TO_RGBA_SHADER',
    'GPUContext',
    'ComputeShader',
    'GPUTexture',
    'FormatConverter',
    'ConversionStats',
]
