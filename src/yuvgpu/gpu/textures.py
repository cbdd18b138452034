"""
GPU texture wrapper for WebGPU.

Provides upload/download of numpy image planes to/from textures of the
8-bit unorm formats used by the converter.
"""

import numpy as np
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .context import GPUContext

try:
    import wgpu
    HAS_WGPU = True
except ImportError:
    HAS_WGPU = False

# Texel size in bytes (one byte per channel)
TEXEL_SIZES = {
    'r8unorm': 1,
    'rg8unorm': 2,
    'rgba8unorm': 4,
}

# copy_texture_to_buffer requires bytes_per_row to be a multiple of this
COPY_BYTES_PER_ROW_ALIGNMENT = 256


def aligned_bytes_per_row(bytes_per_row: int) -> int:
    alignment = COPY_BYTES_PER_ROW_ALIGNMENT
    return (bytes_per_row + alignment - 1) // alignment * alignment


class GPUTexture:
    """
    GPU texture wrapper for WebGPU.

    Example:
        # Create texture
        texture = GPUTexture.create(gpu_ctx, width=320, height=240, format='rg8unorm')

        # Upload numpy array (H, W, 2)
        texture.write(chroma)

        # Download from GPU
        result = await texture.read()
    """

    def __init__(
        self,
        context: 'GPUContext',
        texture: 'wgpu.GPUTexture',
        width: int,
        height: int,
        format: str
    ):
        """
        Initialize GPU texture (use create() instead).

        Args:
            context: GPU context
            texture: WebGPU texture
            width: Texture width in pixels
            height: Texture height in pixels
            format: Texture format (e.g., 'rgba8unorm')
        """
        self.context = context
        self.texture = texture
        self.width = width
        self.height = height
        self.format = format

    @classmethod
    def create(
        cls,
        context: 'GPUContext',
        width: int,
        height: int,
        format: str = 'rgba8unorm',
        usage: Optional[int] = None,
        label: Optional[str] = None
    ) -> 'GPUTexture':
        """
        Create GPU texture.

        Args:
            context: GPU context
            width: Texture width in pixels
            height: Texture height in pixels
            format: 'r8unorm', 'rg8unorm' or 'rgba8unorm'
            usage: Texture usage flags (default: TEXTURE_BINDING | COPY_DST | COPY_SRC)
            label: Optional debug label

        Returns:
            GPUTexture instance
        """
        if not HAS_WGPU:
            raise RuntimeError("WebGPU not available")

        if format not in TEXEL_SIZES:
            raise ValueError(f"Unsupported texture format: {format}")

        texture = context.create_texture(
            width=width,
            height=height,
            format=format,
            usage=usage,
            label=label
        )

        return cls(
            context=context,
            texture=texture,
            width=width,
            height=height,
            format=format
        )

    @classmethod
    def create_output(
        cls,
        context: 'GPUContext',
        width: int,
        height: int,
        label: Optional[str] = None
    ) -> 'GPUTexture':
        """Create an rgba8unorm storage texture that can be read back."""
        return cls.create(
            context,
            width=width,
            height=height,
            format='rgba8unorm',
            usage=(
                wgpu.TextureUsage.STORAGE_BINDING |
                wgpu.TextureUsage.COPY_SRC |
                wgpu.TextureUsage.COPY_DST
            ),
            label=label
        )

    @property
    def channels(self) -> int:
        return TEXEL_SIZES[self.format]

    @property
    def size(self):
        return self.width, self.height

    def write(self, data: np.ndarray) -> None:
        """
        Upload numpy array to GPU texture.

        Args:
            data: NumPy array (H, W) or (H, W, C), dtype uint8, where C is
                the texture's channel count
        """
        if not isinstance(data, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(data)}")

        if data.dtype != np.uint8:
            raise TypeError(f"Expected dtype uint8, got {data.dtype}")

        if data.ndim == 2:
            data = data[:, :, np.newaxis]

        expected_shape = (self.height, self.width, self.channels)
        if data.shape != expected_shape:
            raise ValueError(
                f"Data shape mismatch: expected {expected_shape}, got {data.shape}"
            )

        if not data.flags['C_CONTIGUOUS']:
            data = np.ascontiguousarray(data)

        self.context.queue.write_texture(
            {
                "texture": self.texture,
                "mip_level": 0,
                "origin": (0, 0, 0),
            },
            data,
            {
                "offset": 0,
                "bytes_per_row": self.width * self.channels,
                "rows_per_image": self.height,
            },
            (self.width, self.height, 1)
        )

    def fill(self, value: Sequence[int]) -> None:
        """Fill every texel with one value, e.g. a sentinel colour."""
        if len(value) != self.channels:
            raise ValueError(f"Expected {self.channels} channel values, got {len(value)}")

        data = np.empty((self.height, self.width, self.channels), dtype=np.uint8)
        data[:, :] = value
        self.write(data)

    async def read(self) -> np.ndarray:
        """
        Download GPU texture to numpy array (async).

        Returns:
            NumPy array (H, W, C), dtype uint8
        """
        bytes_per_row = self.width * self.channels
        padded_bytes_per_row = aligned_bytes_per_row(bytes_per_row)
        buffer_size = padded_bytes_per_row * self.height

        staging_buffer = self.context.create_buffer(
            size=buffer_size,
            usage=wgpu.BufferUsage.COPY_DST | wgpu.BufferUsage.MAP_READ
        )

        encoder = self.context.device.create_command_encoder()
        encoder.copy_texture_to_buffer(
            {
                "texture": self.texture,
                "mip_level": 0,
                "origin": (0, 0, 0),
            },
            {
                "buffer": staging_buffer,
                "offset": 0,
                "bytes_per_row": padded_bytes_per_row,
                "rows_per_image": self.height,
            },
            (self.width, self.height, 1)
        )
        self.context.queue.submit([encoder.finish()])

        await staging_buffer.map_async(wgpu.MapMode.READ)
        try:
            data = np.frombuffer(staging_buffer.read_mapped(), dtype=np.uint8).copy()
        finally:
            staging_buffer.unmap()
            staging_buffer.destroy()

        # Drop row padding
        data = data.reshape((self.height, padded_bytes_per_row))[:, :bytes_per_row]
        return np.ascontiguousarray(data).reshape((self.height, self.width, self.channels))

    def __repr__(self) -> str:
        return f"GPUTexture(width={self.width}, height={self.height}, format={self.format})"
