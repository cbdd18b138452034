"""
Camera frame to RGBA conversion on the GPU.

FormatConverter owns one compute pipeline per pixel format (compiled on
first use) and a 16-byte uniform buffer for the conversion parameters. It
is the host side of the kernels' contract: it sizes every input and output
texture from the same width/height, checks that before dispatch, and
dispatches ceil(width/16) x ceil(height/16) workgroups.

Example:
    gpu_ctx = await GPUContext.create()
    converter = FormatConverter(gpu_ctx)

    rgba = await converter.convert(PixelFormat.NV21, raw_bytes, 1280, 720)
    rgba.shape  # (720, 1280, 4)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import logging
import time

import numpy as np

from .formats import PixelFormat, describe_conversion, plane_layouts, split_planes
from .gpu.compute import ComputeShader
from .gpu.context import GPUContext
from .gpu.textures import GPUTexture
from .params import WORKGROUP_SIZE, ConversionParams
from .shaders import ENTRY_POINT, SHADERS

logger = logging.getLogger("yuvgpu.converter")


def binding_layout(fmt: PixelFormat) -> List[Dict[str, object]]:
    """
    Bind group layout for a kernel: input textures, output, params.

    UYVY and GRAY8 use bindings 0-2, NV21 uses 0-3.
    """
    inputs = len(plane_layouts(fmt, 1, 1))
    bindings: List[Dict[str, object]] = [
        {'binding': i, 'type': 'texture'} for i in range(inputs)
    ]
    bindings.append({'binding': inputs, 'type': 'storage_texture', 'format': 'rgba8unorm'})
    bindings.append({'binding': inputs + 1, 'type': 'uniform'})
    return bindings


def check_workgroup_limits(limits: Dict[str, int]) -> None:
    """
    Make sure the device can run the conversion workgroup.

    Raises:
        RuntimeError: If a workgroup dimension or the invocation count is too large
    """
    size_x, size_y, _ = WORKGROUP_SIZE
    if (
        limits['max_compute_workgroup_size_x'] < size_x or
        limits['max_compute_workgroup_size_y'] < size_y or
        limits['max_compute_invocations_per_workgroup'] < size_x * size_y
    ):
        raise RuntimeError(
            f"Device cannot run a {size_x}x{size_y} workgroup (limits: {limits})"
        )


@dataclass
class ConversionStats:
    """Timings for the last convert() call."""

    format: PixelFormat
    width: int
    height: int
    # Plane split and texture upload, in microseconds
    upload_time_us: int = 0
    # Dispatch until the RGBA readback is mapped, in microseconds
    gpu_conversion_time_us: int = 0
    # RGBA output size in bytes
    frame_size_decoded: int = 0
    upload_bandwidth_mbps: float = 0.0

    @property
    def processing(self) -> str:
        return describe_conversion(self.format)


class FormatConverter:
    """
    Converts UYVY, NV21 and GRAY8 frames to RGBA8 with WebGPU compute shaders.

    Not thread-safe: use one converter per thread, or serialize calls.
    """

    def __init__(self, context: GPUContext):
        """
        Args:
            context: GPU context that owns every texture passed to dispatch()

        Raises:
            RuntimeError: If the device cannot run a 16x16 workgroup
        """
        check_workgroup_limits(context.limits)

        self.context = context
        self._shaders: Dict[PixelFormat, ComputeShader] = {}
        self._params_buffer = context.create_uniform_buffer(
            ConversionParams(width=1, height=1).pack(), label='conversion-params'
        )
        self.last_stats: Optional[ConversionStats] = None

    def shader(self, fmt: PixelFormat) -> ComputeShader:
        """Compute shader for a format, compiled on first use."""
        fmt = PixelFormat.parse(fmt)

        shader = self._shaders.get(fmt)
        if shader is None:
            shader = ComputeShader.from_wgsl(
                self.context,
                shader_code=SHADERS[fmt],
                entry_point=ENTRY_POINT,
                bindings=binding_layout(fmt),
                label=f"{fmt.fourcc.lower()}-to-rgba"
            )
            self._shaders[fmt] = shader

        return shader

    def create_inputs(self, fmt: PixelFormat, width: int, height: int) -> List[GPUTexture]:
        """Allocate the input textures a format needs, in binding order."""
        return [
            GPUTexture.create(
                self.context,
                width=plane.width,
                height=plane.height,
                format=plane.texture_format,
                label=plane.name
            )
            for plane in plane_layouts(fmt, width, height)
        ]

    def upload(
        self,
        fmt: PixelFormat,
        data,
        width: int,
        height: int
    ) -> List[GPUTexture]:
        """
        Split a raw frame into planes and upload them.

        Raises:
            ValueError: If the frame size does not match the format
        """
        planes = split_planes(fmt, data, width, height)
        textures = self.create_inputs(fmt, width, height)

        for texture, plane in zip(textures, planes):
            texture.write(plane)

        return textures

    def _check_textures(
        self,
        fmt: PixelFormat,
        inputs: Sequence[GPUTexture],
        output: GPUTexture,
        params: ConversionParams
    ) -> None:
        layouts = plane_layouts(fmt, params.width, params.height)

        if len(inputs) != len(layouts):
            raise ValueError(
                f"{fmt.fourcc} expects {len(layouts)} input texture(s), got {len(inputs)}"
            )

        # Reads are not bounds-checked in the kernel, so extents must agree exactly
        for texture, plane in zip(inputs, layouts):
            if texture.size != (plane.width, plane.height) or texture.format != plane.texture_format:
                raise ValueError(
                    f"{fmt.fourcc} {plane.name} plane must be {plane.width}x{plane.height} "
                    f"{plane.texture_format}, got {texture.width}x{texture.height} {texture.format}"
                )

        if output.format != 'rgba8unorm':
            raise ValueError(f"Output texture must be rgba8unorm, got {output.format}")
        width, height = params.size
        if output.width < width or output.height < height:
            raise ValueError(
                f"Output texture {output.width}x{output.height} is smaller than "
                f"{width}x{height}"
            )

    def dispatch(
        self,
        fmt: PixelFormat,
        inputs: Sequence[GPUTexture],
        output: GPUTexture,
        params: ConversionParams
    ) -> None:
        """
        Run one conversion kernel.

        Args:
            fmt: Pixel format of the inputs
            inputs: Input textures in binding order (see create_inputs())
            output: rgba8unorm storage texture, at least width x height
            params: Conversion parameters

        Raises:
            ValueError: If texture extents disagree with params
        """
        fmt = PixelFormat.parse(fmt)
        self._check_textures(fmt, inputs, output, params)

        shader = self.shader(fmt)
        self.context.queue.write_buffer(self._params_buffer, 0, params.pack())

        bindings = {i: texture.texture for i, texture in enumerate(inputs)}
        bindings[len(inputs)] = output.texture
        bindings[len(inputs) + 1] = self._params_buffer

        shader.dispatch(workgroup_count=params.workgroup_count(), bindings=bindings)

    async def convert(
        self,
        fmt: PixelFormat,
        data,
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Convert one raw frame to RGBA (async).

        Args:
            fmt: Pixel format (or name, e.g. 'NV21')
            data: Tightly packed raw frame (bytes or uint8 array)
            width: Frame width in pixels
            height: Frame height in pixels

        Returns:
            NumPy array (height, width, 4), dtype uint8
        """
        fmt = PixelFormat.parse(fmt)
        params = ConversionParams(width=width, height=height)

        start = time.perf_counter()
        inputs = self.upload(fmt, data, width, height)
        uploaded = time.perf_counter()

        output = GPUTexture.create_output(self.context, width, height, label='rgba-output')
        self.dispatch(fmt, inputs, output, params)
        rgba = await output.read()
        finished = time.perf_counter()

        upload_seconds = uploaded - start
        upload_bytes = sum(plane.nbytes for plane in plane_layouts(fmt, width, height))
        self.last_stats = ConversionStats(
            format=fmt,
            width=width,
            height=height,
            upload_time_us=int(upload_seconds * 1e6),
            gpu_conversion_time_us=int((finished - uploaded) * 1e6),
            frame_size_decoded=rgba.nbytes,
            upload_bandwidth_mbps=(
                upload_bytes / (1024 * 1024) / upload_seconds if upload_seconds > 0 else 0.0
            ),
        )
        logger.debug(
            "%s %dx%d: upload %d us, gpu %d us",
            self.last_stats.processing,
            width,
            height,
            self.last_stats.upload_time_us,
            self.last_stats.gpu_conversion_time_us,
        )

        return rgba

    def __repr__(self) -> str:
        compiled = ', '.join(fmt.fourcc for fmt in self._shaders)
        return f"FormatConverter(context={self.context}, compiled=[{compiled}])"
