"""
Shared WGSL snippets for the conversion shaders.

These are prepended to each kernel's source rather than compiled on their
own.
"""

# Uniform record bound by every conversion kernel (16 bytes)
PARAMS_WGSL = """
struct Params {
    width: u32,
    height: u32,
    _reserved0: u32,
    _reserved1: u32,
}
"""

# BT.601 limited range YUV -> RGB, inputs and outputs normalized to [0, 1]
COLOR_TRANSFORM_WGSL = """
fn yuv_to_rgb(y: f32, u: f32, v: f32) -> vec3<f32> {
    let y_scaled = (y - 16.0 / 255.0) * (255.0 / 219.0);
    let u_shift = u - 0.5;
    let v_shift = v - 0.5;

    let r = y_scaled + 1.402 * v_shift;
    let g = y_scaled - 0.344136 * u_shift - 0.714136 * v_shift;
    let b = y_scaled + 1.772 * u_shift;

    return clamp(vec3<f32>(r, g, b), vec3<f32>(0.0), vec3<f32>(1.0));
}
"""
