"""
Pixel format conversion shaders for WebGPU.

One compute entry point ('main') per input format, each writing RGBA8.
All shaders follow the same contract:
- @workgroup_size(16, 16, 1), dispatched as ceil(w/16) x ceil(h/16) x 1
- The first statement discards invocations outside params.width/height
- Exactly one textureStore per in-bounds invocation, alpha = 1.0

Bindings (group 0):
    UYVY:  0 packed input,  1 output,  2 params
    NV21:  0 luma input,    1 chroma input,  2 output,  3 params
    GRAY8: 0 luma input,    1 output,  2 params
"""

from .color import COLOR_TRANSFORM_WGSL, PARAMS_WGSL

# Packed 4:2:2, one rgba8unorm texel = U, Y0, V, Y1 for a pair of pixels
UYVY_TO_RGBA_SHADER = PARAMS_WGSL + COLOR_TRANSFORM_WGSL + """
@group(0) @binding(0) var input_packed: texture_2d<f32>;
@group(0) @binding(1) var output_texture: texture_storage_2d<rgba8unorm, write>;
@group(0) @binding(2) var<uniform> params: Params;

@compute @workgroup_size(16, 16, 1)
fn main(@builtin(global_invocation_id) gid: vec3<u32>) {
    let x = gid.x;
    let y = gid.y;

    if (x >= params.width || y >= params.height) {
        return;
    }

    let packed = textureLoad(input_packed, vec2<u32>(x / 2u, y), 0);

    // Even pixel takes Y0, odd pixel takes Y1; chroma is shared
    let luma = select(packed.g, packed.a, (x & 1u) == 1u);
    let rgb = yuv_to_rgb(luma, packed.r, packed.b);

    textureStore(output_texture, vec2<u32>(x, y), vec4<f32>(rgb, 1.0));
}
"""

# Semi-planar 4:2:0 with the chroma plane interleaved as V, U
NV21_TO_RGBA_SHADER = PARAMS_WGSL + COLOR_TRANSFORM_WGSL + """
@group(0) @binding(0) var input_luma: texture_2d<f32>;
@group(0) @binding(1) var input_chroma: texture_2d<f32>;
@group(0) @binding(2) var output_texture: texture_storage_2d<rgba8unorm, write>;
@group(0) @binding(3) var<uniform> params: Params;

@compute @workgroup_size(16, 16, 1)
fn main(@builtin(global_invocation_id) gid: vec3<u32>) {
    let x = gid.x;
    let y = gid.y;

    if (x >= params.width || y >= params.height) {
        return;
    }

    let luma = textureLoad(input_luma, vec2<u32>(x, y), 0).r;
    let chroma = textureLoad(input_chroma, vec2<u32>(x / 2u, y / 2u), 0);

    // NV21: first channel is V, second is U
    let rgb = yuv_to_rgb(luma, chroma.g, chroma.r);

    textureStore(output_texture, vec2<u32>(x, y), vec4<f32>(rgb, 1.0));
}
"""

GRAY_TO_RGBA_SHADER = PARAMS_WGSL + """
@group(0) @binding(0) var input_luma: texture_2d<f32>;
@group(0) @binding(1) var output_texture: texture_storage_2d<rgba8unorm, write>;
@group(0) @binding(2) var<uniform> params: Params;

@compute @workgroup_size(16, 16, 1)
fn main(@builtin(global_invocation_id) gid: vec3<u32>) {
    let x = gid.x;
    let y = gid.y;

    if (x >= params.width || y >= params.height) {
        return;
    }

    let gray = textureLoad(input_luma, vec2<u32>(x, y), 0).r;

    textureStore(output_texture, vec2<u32>(x, y), vec4<f32>(gray, gray, gray, 1.0));
}
"""
