"""Shared fixtures for yuvgpu tests."""

import numpy as np
import pytest
import pytest_asyncio

from yuvgpu import GPUContext


@pytest_asyncio.fixture
async def gpu_context():
    """WebGPU context, or skip when no adapter is available."""
    try:
        return await GPUContext.create()
    except RuntimeError as e:
        pytest.skip(f"WebGPU not available: {e}")


@pytest.fixture
def rng():
    return np.random.default_rng(601)
