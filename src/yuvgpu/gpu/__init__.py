"""
GPU acceleration using WebGPU.

WebGPU automatically selects the best native backend per platform:
- macOS: Metal
- Windows: Direct3D 12
- Linux: Vulkan

Example:
    gpu_ctx = await GPUContext.create()
    texture = GPUTexture.create(gpu_ctx, 1920, 1080)
"""

from .context import GPUContext
from .compute import ComputeShader
from .textures import GPUTexture

__all__ = [
    'GPUContext',
    'ComputeShader',
    'GPUTexture',
]
