"""
Compute shader wrapper for WebGPU.

Provides high-level API for compiling WGSL compute shaders that read
textures and write a storage texture, and for dispatching them.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Any
import logging

if TYPE_CHECKING:
    from .context import GPUContext

try:
    import wgpu
    HAS_WGPU = True
except ImportError:
    HAS_WGPU = False

logger = logging.getLogger("yuvgpu.gpu")


class ComputeShader:
    """
    WebGPU compute shader wrapper.

    Example:
        shader = ComputeShader.from_wgsl(
            gpu_ctx,
            shader_code=UYVY_TO_RGBA_SHADER,
            entry_point='main',
            bindings=[
                {'binding': 0, 'type': 'texture'},                                # packed input
                {'binding': 1, 'type': 'storage_texture', 'format': 'rgba8unorm'}, # output
                {'binding': 2, 'type': 'uniform'},                                # params
            ]
        )

        shader.dispatch(
            workgroup_count=(120, 68, 1),  # For 1920x1080 with workgroup_size=(16, 16)
            bindings={
                0: input_texture,
                1: output_texture,
                2: params_buffer,
            }
        )
    """

    def __init__(
        self,
        context: 'GPUContext',
        pipeline: 'wgpu.GPUComputePipeline',
        bind_group_layout: 'wgpu.GPUBindGroupLayout',
        label: str = ''
    ):
        """
        Initialize compute shader (use from_wgsl() instead).

        Args:
            context: GPU context
            pipeline: WebGPU compute pipeline
            bind_group_layout: Bind group layout for shader bindings
            label: Debug label
        """
        self.context = context
        self.pipeline = pipeline
        self.bind_group_layout = bind_group_layout
        self.label = label

    @classmethod
    def from_wgsl(
        cls,
        context: 'GPUContext',
        shader_code: str,
        entry_point: str = 'main',
        bindings: Optional[List[Dict[str, Any]]] = None,
        label: str = ''
    ) -> 'ComputeShader':
        """
        Create compute shader from WGSL code.

        Args:
            context: GPU context
            shader_code: WGSL shader source code
            entry_point: Shader entry point function name (default: 'main')
            bindings: List of binding descriptors:
                [
                    {'binding': 0, 'type': 'texture'},
                    {'binding': 1, 'type': 'storage_texture', 'format': 'rgba8unorm'},
                    {'binding': 2, 'type': 'uniform'},
                ]
            label: Debug label for the module and pipeline

        Returns:
            ComputeShader instance

        Raises:
            RuntimeError: If WebGPU not available
            ValueError: If a binding descriptor is invalid
        """
        if not HAS_WGPU:
            raise RuntimeError("WebGPU not available")

        shader_module = context.device.create_shader_module(code=shader_code, label=label)

        if bindings is None:
            bindings = []

        bind_group_layout_entries = []
        for binding_desc in bindings:
            binding_num = binding_desc['binding']
            binding_type = binding_desc.get('type', 'texture')

            if binding_type == 'texture':
                # Sampled input, read with textureLoad
                bind_group_layout_entries.append({
                    "binding": binding_num,
                    "visibility": wgpu.ShaderStage.COMPUTE,
                    "texture": {
                        "sample_type": wgpu.TextureSampleType.float,
                        "view_dimension": wgpu.TextureViewDimension.d2,
                    }
                })
            elif binding_type == 'storage_texture':
                bind_group_layout_entries.append({
                    "binding": binding_num,
                    "visibility": wgpu.ShaderStage.COMPUTE,
                    "storage_texture": {
                        "access": wgpu.StorageTextureAccess.write_only,
                        "format": binding_desc.get('format', wgpu.TextureFormat.rgba8unorm),
                        "view_dimension": wgpu.TextureViewDimension.d2,
                    }
                })
            elif binding_type == 'uniform':
                bind_group_layout_entries.append({
                    "binding": binding_num,
                    "visibility": wgpu.ShaderStage.COMPUTE,
                    "buffer": {
                        "type": wgpu.BufferBindingType.uniform,
                    }
                })
            else:
                raise ValueError(f"Unsupported binding type: {binding_type}")

        bind_group_layout = context.device.create_bind_group_layout(
            entries=bind_group_layout_entries
        )

        pipeline_layout = context.device.create_pipeline_layout(
            bind_group_layouts=[bind_group_layout]
        )

        pipeline = context.device.create_compute_pipeline(
            layout=pipeline_layout,
            compute={
                "module": shader_module,
                "entry_point": entry_point,
            },
            label=label
        )

        logger.info("Compiled compute pipeline %r", label or entry_point)

        return cls(
            context=context,
            pipeline=pipeline,
            bind_group_layout=bind_group_layout,
            label=label
        )

    @staticmethod
    def _resource(resource: Any) -> Any:
        """Bind group resource for a texture, texture view or buffer."""
        if isinstance(resource, wgpu.GPUTexture):
            return resource.create_view()
        if isinstance(resource, wgpu.GPUBuffer):
            return {"buffer": resource, "offset": 0, "size": resource.size}
        return resource

    def dispatch(
        self,
        workgroup_count: Tuple[int, int, int],
        bindings: Dict[int, Any]
    ) -> None:
        """
        Dispatch compute shader.

        Args:
            workgroup_count: Number of workgroups to dispatch (x, y, z)
            bindings: Dictionary mapping binding number to a texture,
                texture view or buffer
        """
        bind_group = self.context.device.create_bind_group(
            layout=self.bind_group_layout,
            entries=[
                {"binding": binding_num, "resource": self._resource(resource)}
                for binding_num, resource in sorted(bindings.items())
            ]
        )

        encoder = self.context.device.create_command_encoder()

        compute_pass = encoder.begin_compute_pass()
        compute_pass.set_pipeline(self.pipeline)
        compute_pass.set_bind_group(0, bind_group)
        compute_pass.dispatch_workgroups(*workgroup_count)
        compute_pass.end()

        self.context.queue.submit([encoder.finish()])

    def __repr__(self) -> str:
        return f"ComputeShader(label={self.label!r}, pipeline={self.pipeline})"
