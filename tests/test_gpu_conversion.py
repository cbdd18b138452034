"""
End-to-end tests of the WebGPU conversion kernels.

Skipped when no WebGPU adapter can be created.
"""

import numpy as np
import pytest
import wgpu

from yuvgpu import reference
from yuvgpu.converter import FormatConverter
from yuvgpu.formats import PixelFormat, frame_size, split_planes
from yuvgpu.gpu.textures import GPUTexture
from yuvgpu.params import PARAMS_SIZE, ConversionParams

SENTINEL = (1, 2, 3, 4)


def assert_close(actual, expected, tolerance=2):
    diff = np.abs(np.asarray(actual, dtype=np.int16) - np.asarray(expected, dtype=np.int16))
    assert diff.max() <= tolerance, f"{actual} != {expected}"


def random_frame(rng, fmt, width, height):
    return rng.integers(0, 256, size=frame_size(fmt, width, height), dtype=np.uint8)


@pytest.mark.asyncio
async def test_uyvy_white_black(gpu_context):
    """4x1 UYVY: even pixels take Y0 (white), odd pixels Y1 (black)."""
    converter = FormatConverter(gpu_context)
    raw = bytes([128, 235, 128, 16] * 2)

    rgba = await converter.convert(PixelFormat.UYVY, raw, 4, 1)

    assert rgba.shape == (1, 4, 4)
    assert_close(rgba[0, 0], [255, 255, 255, 255])
    assert_close(rgba[0, 1], [0, 0, 0, 255])
    assert_close(rgba[0, 2], [255, 255, 255, 255])
    assert_close(rgba[0, 3], [0, 0, 0, 255])


@pytest.mark.asyncio
async def test_nv21_uniform_white(gpu_context):
    converter = FormatConverter(gpu_context)
    raw = bytes([235] * 4 + [128, 128])

    rgba = await converter.convert(PixelFormat.NV21, raw, 2, 2)

    assert (rgba == rgba[0, 0]).all()
    assert_close(rgba[0, 0], [255, 255, 255, 255])


@pytest.mark.asyncio
async def test_gray_identity(gpu_context):
    converter = FormatConverter(gpu_context)

    rgba = await converter.convert(PixelFormat.GRAY8, bytes([128] * 6), 3, 2)

    assert (rgba == np.array([128, 128, 128, 255], dtype=np.uint8)).all()


@pytest.mark.asyncio
async def test_nv21_channel_swap(gpu_context):
    """Swapping V and U in the chroma plane changes the colour."""
    converter = FormatConverter(gpu_context)
    luma = bytes([128] * 4)

    vu = await converter.convert(PixelFormat.NV21, luma + bytes([200, 60]), 2, 2)
    uv = await converter.convert(PixelFormat.NV21, luma + bytes([60, 200]), 2, 2)

    assert not np.array_equal(vu, uv)
    # Strong V is red
    assert vu[0, 0, 0] > vu[0, 0, 2]


@pytest.mark.asyncio
@pytest.mark.parametrize('fmt', list(PixelFormat))
async def test_matches_reference(gpu_context, rng, fmt):
    """GPU output agrees with the CPU kernels, including odd sizes."""
    converter = FormatConverter(gpu_context)
    width, height = 37, 21
    raw = random_frame(rng, fmt, width, height)

    rgba = await converter.convert(fmt, raw, width, height)

    expected = reference.to_rgba8(
        reference.convert(fmt, split_planes(fmt, raw, width, height),
                          ConversionParams(width=width, height=height))
    )
    assert rgba.shape == (height, width, 4)
    assert (rgba[..., 3] == 255).all()
    assert_close(rgba, expected, tolerance=1)


@pytest.mark.asyncio
@pytest.mark.parametrize('fmt', list(PixelFormat))
async def test_overhang_not_written(gpu_context, rng, fmt):
    """Out-of-image invocations leave a sentinel-filled output untouched."""
    converter = FormatConverter(gpu_context)
    params = ConversionParams(width=17, height=5)
    grid_width, grid_height = params.grid_size()

    inputs = converter.upload(fmt, random_frame(rng, fmt, 17, 5), 17, 5)
    output = GPUTexture.create_output(gpu_context, grid_width, grid_height)
    output.fill(SENTINEL)

    converter.dispatch(fmt, inputs, output, params)
    result = await output.read()

    assert (result[:5, :17, 3] == 255).all()
    assert (result[5:] == SENTINEL).all()
    assert (result[:, 17:] == SENTINEL).all()


@pytest.mark.asyncio
@pytest.mark.parametrize('fmt', list(PixelFormat))
async def test_deterministic(gpu_context, rng, fmt):
    converter = FormatConverter(gpu_context)
    raw = random_frame(rng, fmt, 33, 18)

    first = await converter.convert(fmt, raw, 33, 18)
    second = await converter.convert(fmt, raw, 33, 18)

    assert first.tobytes() == second.tobytes()


@pytest.mark.asyncio
async def test_rejects_mismatched_input(gpu_context):
    """Input extents must agree with the params before dispatch."""
    converter = FormatConverter(gpu_context)
    inputs = converter.create_inputs(PixelFormat.NV21, 8, 8)
    output = GPUTexture.create_output(gpu_context, 16, 16)

    with pytest.raises(ValueError, match="luma plane must be 16x16"):
        converter.dispatch(PixelFormat.NV21, inputs, output, ConversionParams(16, 16))


@pytest.mark.asyncio
async def test_rejects_small_output(gpu_context):
    converter = FormatConverter(gpu_context)
    inputs = converter.create_inputs(PixelFormat.GRAY8, 16, 16)
    output = GPUTexture.create_output(gpu_context, 8, 16)

    with pytest.raises(ValueError, match="smaller than"):
        converter.dispatch(PixelFormat.GRAY8, inputs, output, ConversionParams(16, 16))


@pytest.mark.asyncio
async def test_rejects_wrong_chroma_format(gpu_context):
    """NV21 chroma must be rg8unorm even when the extent is right."""
    converter = FormatConverter(gpu_context)
    inputs = converter.create_inputs(PixelFormat.NV21, 16, 16)
    inputs[1] = GPUTexture.create(gpu_context, 8, 8, format='r8unorm')
    output = GPUTexture.create_output(gpu_context, 16, 16)

    with pytest.raises(ValueError, match="chroma plane must be 8x8 rg8unorm"):
        converter.dispatch(PixelFormat.NV21, inputs, output, ConversionParams(16, 16))


@pytest.mark.asyncio
async def test_input_texture_readback(gpu_context):
    """Input textures can be read back as written."""
    texture = GPUTexture.create(gpu_context, 4, 2, format='rg8unorm')
    data = np.arange(16, dtype=np.uint8).reshape((2, 4, 2))

    texture.write(data)

    assert np.array_equal(await texture.read(), data)


@pytest.mark.asyncio
async def test_uniform_buffer(gpu_context):
    params = ConversionParams(width=640, height=480)

    buffer = gpu_context.create_uniform_buffer(params.pack(), label='params')

    assert buffer.size == PARAMS_SIZE
    assert buffer.usage & wgpu.BufferUsage.UNIFORM
    assert buffer.usage & wgpu.BufferUsage.COPY_DST


@pytest.mark.asyncio
async def test_params_buffer_reused(gpu_context):
    """One uniform buffer serves every dispatch."""
    converter = FormatConverter(gpu_context)
    buffer = converter._params_buffer

    await converter.convert(PixelFormat.GRAY8, bytes(4 * 2), 4, 2)
    await converter.convert(PixelFormat.NV21, bytes(frame_size(PixelFormat.NV21, 6, 4)), 6, 4)

    assert converter._params_buffer is buffer
    assert buffer.size == PARAMS_SIZE


@pytest.mark.asyncio
async def test_rejects_wrong_frame_size(gpu_context):
    converter = FormatConverter(gpu_context)

    with pytest.raises(ValueError, match="Data size mismatch"):
        await converter.convert(PixelFormat.UYVY, bytes(10), 4, 2)


@pytest.mark.asyncio
async def test_pipelines_cached(gpu_context):
    converter = FormatConverter(gpu_context)
    assert converter.shader(PixelFormat.NV21) is converter.shader('nv21')


@pytest.mark.asyncio
async def test_stats(gpu_context):
    converter = FormatConverter(gpu_context)
    await converter.convert(PixelFormat.GRAY8, bytes(64 * 32), 64, 32)

    stats = converter.last_stats
    assert stats.format is PixelFormat.GRAY8
    assert stats.frame_size_decoded == 64 * 32 * 4
    assert stats.processing == 'GRAY8 → RGBA'
    assert stats.gpu_conversion_time_us >= 0
