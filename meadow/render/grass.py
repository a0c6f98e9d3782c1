from __future__ import annotations

import numpy as np

# Per-instance layout: model matrix (16 floats, column-major) + colour (4 floats)
INSTANCE_FLOATS = 20


def grass_shader_sources(glsl_version: int) -> tuple[str, str]:
    """Simple instanced grass shader (no textures, lowpoly).

    Instance layout: in_i_model(mat4), in_i_color(vec4). The batch position
    comes in as a uniform so instance matrices stay chunk-local.
    """
    prefix = f"#version {glsl_version}\n"

    vert = prefix + """
in vec3 in_pos;
in vec3 in_norm;

in mat4 in_i_model;
in vec4 in_i_color;

uniform mat4 u_proj;
uniform mat4 u_view;
uniform vec3 u_batch_pos;

out vec3 v_world_pos;
out vec3 v_norm;
out vec4 v_color;

void main() {
    vec4 p = in_i_model * vec4(in_pos, 1.0);
    p.xyz += u_batch_pos;
    v_world_pos = p.xyz;
    v_norm = normalize(mat3(in_i_model) * in_norm);
    v_color = in_i_color;
    gl_Position = u_proj * u_view * p;
}
"""

    frag = prefix + """
in vec3 v_world_pos;
in vec3 v_norm;
in vec4 v_color;

uniform vec3 u_light_dir;

out vec4 f_color;

void main() {
    vec3 n = normalize(v_norm);
    vec3 l = normalize(u_light_dir);
    // blades are thin: light both faces
    float diff = abs(dot(n, l));

    // darker toward the root
    float root = smoothstep(0.0, 0.6, v_world_pos.y);
    vec3 base = vec3(0.18, 0.42, 0.12) * v_color.rgb * mix(0.55, 1.0, root);

    float ambient = 0.45;
    f_color = vec4(base * (ambient + 0.8 * diff), v_color.a);
}
"""

    return vert, frag


def build_blade_mesh(blades: int = 3, height: float = 0.6, width: float = 0.06) -> tuple[np.ndarray, np.ndarray]:
    """Return (vbo, ibo) for a small tuft of crossed grass blades.

    Vertex layout: pos(3), norm(3) float32. Each blade is a tapered quad
    (two triangles) rotated around Y.
    """
    verts: list[list[float]] = []
    idx: list[int] = []

    for b in range(int(blades)):
        a = (b / blades) * np.pi
        dx, dz = float(np.cos(a) * width), float(np.sin(a) * width)
        nx, nz = float(-np.sin(a)), float(np.cos(a))
        base = len(verts)
        verts.append([-dx, 0.0, -dz, nx, 0.0, nz])
        verts.append([dx, 0.0, dz, nx, 0.0, nz])
        verts.append([-dx * 0.4, height * 0.7, -dz * 0.4, nx, 0.3, nz])
        verts.append([dx * 0.4, height * 0.7, dz * 0.4, nx, 0.3, nz])
        verts.append([0.0, height, 0.0, nx, 0.5, nz])
        idx.extend([base, base + 1, base + 2, base + 1, base + 3, base + 2, base + 2, base + 3, base + 4])

    vbo = np.array(verts, dtype=np.float32)
    ibo = np.array(idx, dtype=np.uint32)
    return vbo, ibo


def pack_instance(transform: np.ndarray, color) -> np.ndarray:
    """Row-major 4x4 + rgba -> INSTANCE_FLOATS float32 (matrix stored column-major for GLSL)."""
    m = np.asarray(transform, dtype=np.float32).reshape(4, 4)
    c = np.asarray(color, dtype=np.float32).reshape(4)
    return np.concatenate([m.T.reshape(-1), c]).astype(np.float32)
