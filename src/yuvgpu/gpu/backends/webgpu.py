"""
WebGPU backend implementation.

Provides unified GPU access using WebGPU, which automatically selects
the best native backend per platform:
- macOS: Metal
- Windows: Direct3D 12
- Linux: Vulkan
"""

from typing import Optional, Dict, Any
import logging

try:
    import wgpu
    HAS_WGPU = True
except ImportError:
    HAS_WGPU = False
    wgpu = None

logger = logging.getLogger("yuvgpu.gpu")


class WebGPUBackend:
    """
    WebGPU adapter, device and queue.

    Example:
        backend = await WebGPUBackend.create()
        print(f"Using {backend.backend_name} on {backend.adapter_info['description']}")
    """

    def __init__(
        self,
        adapter: 'wgpu.GPUAdapter',
        device: 'wgpu.GPUDevice',
        queue: 'wgpu.GPUQueue'
    ):
        """
        Initialize WebGPU backend (use create() instead).

        Args:
            adapter: WebGPU adapter
            device: WebGPU device
            queue: WebGPU command queue
        """
        self.adapter = adapter
        self.device = device
        self.queue = queue

        self._adapter_info: Optional[Dict[str, Any]] = None

    @classmethod
    async def create(
        cls,
        power_preference: str = 'high-performance'
    ) -> 'WebGPUBackend':
        """
        Create WebGPU backend (async).

        Args:
            power_preference: 'high-performance' or 'low-power'

        Returns:
            WebGPUBackend instance

        Raises:
            RuntimeError: If WebGPU not available or initialization fails
        """
        if not HAS_WGPU:
            raise RuntimeError(
                "WebGPU not available. Install with: pip install wgpu"
            )

        if power_preference not in ('high-performance', 'low-power'):
            raise ValueError(f"Invalid power preference: {power_preference}")

        try:
            adapter = await wgpu.gpu.request_adapter_async(
                power_preference=power_preference
            )
        except Exception as e:
            raise RuntimeError(f"Failed to initialize WebGPU: {e}") from e

        if adapter is None:
            raise RuntimeError("Failed to request WebGPU adapter")

        try:
            device = await adapter.request_device_async()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize WebGPU: {e}") from e

        if device is None:
            raise RuntimeError("Failed to request WebGPU device")

        backend = cls(adapter=adapter, device=device, queue=device.queue)
        logger.info(
            "Using %s (%s)",
            backend.adapter_info['description'],
            backend.backend_name,
        )
        return backend

    @property
    def adapter_info(self) -> Dict[str, Any]:
        """
        Get adapter information.

        Returns:
            Dictionary with adapter details:
            - description: GPU name (e.g., "Apple M1 Pro")
            - backend_type: "Metal", "D3D12", "Vulkan", ...
            - adapter_type: "DiscreteGPU", "IntegratedGPU", "CPU", ...
        """
        if self._adapter_info is None:
            info = dict(getattr(self.adapter, 'info', None) or {})
            self._adapter_info = {
                'description': info.get('device') or info.get('description') or 'Unknown GPU',
                'backend_type': info.get('backend_type', 'Unknown'),
                'adapter_type': info.get('adapter_type', 'Unknown'),
            }

        return self._adapter_info

    @property
    def backend_name(self) -> str:
        """Native API behind WebGPU, as reported by the adapter."""
        return str(self.adapter_info['backend_type'])

    @property
    def limits(self) -> Dict[str, int]:
        """
        Get device limits relevant to conversion.

        Returns:
            Dictionary with:
            - max_texture_dimension_2d: Largest frame edge
            - max_compute_workgroup_size_x/y: Must be >= 16
            - max_compute_invocations_per_workgroup: Must be >= 256
        """
        limits = self.device.limits
        return {
            'max_texture_dimension_2d': limits.get('max-texture-dimension-2d', 8192),
            'max_compute_workgroup_size_x': limits.get('max-compute-workgroup-size-x', 256),
            'max_compute_workgroup_size_y': limits.get('max-compute-workgroup-size-y', 256),
            'max_compute_invocations_per_workgroup': limits.get(
                'max-compute-invocations-per-workgroup', 256
            ),
        }

    def create_buffer(
        self,
        size: int,
        usage: 'wgpu.BufferUsage',
        label: Optional[str] = None
    ) -> 'wgpu.GPUBuffer':
        """
        Create GPU buffer.

        Args:
            size: Buffer size in bytes
            usage: Buffer usage flags (e.g., wgpu.BufferUsage.UNIFORM)
            label: Optional debug label

        Returns:
            WebGPU buffer
        """
        return self.device.create_buffer(
            size=size,
            usage=usage,
            label=label or ''
        )

    def create_texture(
        self,
        width: int,
        height: int,
        format: str = 'rgba8unorm',
        usage: Optional['wgpu.TextureUsage'] = None,
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
        """
        if usage is None:
            usage = (
                wgpu.TextureUsage.TEXTURE_BINDING |
                wgpu.TextureUsage.COPY_DST |
                wgpu.TextureUsage.COPY_SRC
            )

        return self.device.create_texture(
            size=(width, height, 1),
            format=format,
            usage=usage,
            dimension='2d',
            label=label or ''
        )

    def __repr__(self) -> str:
        info = self.adapter_info
        return (
            f"WebGPUBackend(backend={self.backend_name}, "
            f"device={info.get('description', 'Unknown')})"
        )
