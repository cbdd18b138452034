"""
GPU context for managing WebGPU device and queue.

This module provides a high-level context for GPU operations,
abstracting the underlying WebGPU backend.
"""

from typing import Optional, Dict
import os

from .backends.webgpu import WebGPUBackend

try:
    import wgpu
    HAS_WGPU = True
except ImportError:
    HAS_WGPU = False

DEFAULT_POWER_PREFERENCE = 'high-performance'


class GPUContext:
    """
    GPU context for format conversion.

    Owns the WebGPU device and queue. Textures, buffers and pipelines
    created through a context may only be used with that context.

    Example:
        gpu_ctx = await GPUContext.create()
        print(f"Using {gpu_ctx.backend_name} on {gpu_ctx.device_name}")

        texture = gpu_ctx.create_texture(width=1920, height=1080)
    """

    def __init__(self, backend: WebGPUBackend):
        """
        Initialize GPU context (use create() instead).

        Args:
            backend: WebGPU backend instance
        """
        self.backend = backend

    @classmethod
    async def create(
        cls,
        power_preference: Optional[str] = None
    ) -> 'GPUContext':
        """
        Create GPU context (async).

        Args:
            power_preference: 'high-performance' or 'low-power'. Defaults to
                $YUVGPU_POWER_PREFERENCE, then 'high-performance'.

        Returns:
            GPUContext instance

        Raises:
            RuntimeError: If WebGPU not available

        Example:
            gpu_ctx = await GPUContext.create()
        """
        if not HAS_WGPU:
            raise RuntimeError(
                "WebGPU not available. Install with: pip install wgpu"
            )

        if power_preference is None:
            power_preference = os.environ.get(
                'YUVGPU_POWER_PREFERENCE', DEFAULT_POWER_PREFERENCE
            )

        backend = await WebGPUBackend.create(power_preference=power_preference)

        return cls(backend=backend)

    @property
    def device(self) -> 'wgpu.GPUDevice':
        """Get WebGPU device."""
        return self.backend.device

    @property
    def queue(self) -> 'wgpu.GPUQueue':
        """Get WebGPU command queue."""
        return self.backend.queue

    @property
    def backend_name(self) -> str:
        return self.backend.backend_name

    @property
    def device_name(self) -> str:
        """
        Get device name.

        Returns:
            GPU device name (e.g., "Apple M1 Pro", "NVIDIA RTX 4090")
        """
        return self.backend.adapter_info.get('description', 'Unknown GPU')

    @property
    def limits(self) -> Dict[str, int]:
        return self.backend.limits

    def create_buffer(
        self,
        size: int,
        usage: Optional[int] = None,
        label: Optional[str] = None
    ) -> 'wgpu.GPUBuffer':
        """
        Create GPU buffer.

        Args:
            size: Buffer size in bytes
            usage: Buffer usage flags (default: UNIFORM | COPY_DST)
            label: Optional debug label

        Returns:
            WebGPU buffer
        """
        if usage is None:
            usage = wgpu.BufferUsage.UNIFORM | wgpu.BufferUsage.COPY_DST

        return self.backend.create_buffer(size=size, usage=usage, label=label)

    def create_texture(
        self,
        width: int,
        height: int,
        format: str = 'rgba8unorm',
        usage: Optional[int] = None,
        label: Optional[str] = None
    ) -> 'wgpu.GPUTexture':
        """
        Create GPU texture.

        Args:
            width: Texture width in pixels
            height: Texture height in pixels
            format: Texture format (default: 'rgba8unorm')
            usage: Texture usage flags (default: TEXTURE_BINDING | COPY_DST | COPY_SRC)
            label: Optional debug label

        Returns:
            WebGPU texture

        Raises:
            ValueError: If the size exceeds the device's 2D texture limit
        """
        max_dim = self.limits['max_texture_dimension_2d']
        if width > max_dim or height > max_dim:
            raise ValueError(
                f"Texture {width}x{height} exceeds device limit {max_dim}"
            )

        if usage is None:
            usage = (
                wgpu.TextureUsage.TEXTURE_BINDING |
                wgpu.TextureUsage.COPY_DST |
                wgpu.TextureUsage.COPY_SRC
            )

        return self.backend.create_texture(
            width=width,
            height=height,
            format=format,
            usage=usage,
            label=label
        )

    def create_uniform_buffer(self, data: bytes, label: Optional[str] = None) -> 'wgpu.GPUBuffer':
        """
        Create a uniform buffer initialized with packed data.

        Example:
            params_buffer = gpu_ctx.create_uniform_buffer(params.pack())
        """
        buffer = self.create_buffer(
            size=len(data),
            usage=wgpu.BufferUsage.UNIFORM | wgpu.BufferUsage.COPY_DST,
            label=label
        )
        self.queue.write_buffer(buffer, 0, data)
        return buffer

    def __repr__(self) -> str:
        return (
            f"GPUContext(backend={self.backend_name}, "
            f"device={self.device_name})"
        )
