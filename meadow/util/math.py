from __future__ import annotations
import numpy as np

def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t

def translate_scale(x: float, y: float, z: float, s: float) -> np.ndarray:
    """Return translate(x,y,z) @ scale(s) as a row-major 4x4 matrix.

    Scale is applied first, so the translation itself is not scaled.
    """
    m = np.eye(4, dtype=np.float32)
    m[0, 0] = s; m[1, 1] = s; m[2, 2] = s
    m[0, 3] = x; m[1, 3] = y; m[2, 3] = z
    return m

def normalize(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    if n == 0:
        return v
    return v / n

def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Return a column-major view matrix suitable for OpenGL."""
    f = normalize(target - eye)
    s = normalize(np.cross(f, up))
    u = np.cross(s, f)

    m = np.eye(4, dtype=np.float32)
    m[0, 0] = s[0]; m[1, 0] = s[1]; m[2, 0] = s[2]
    m[0, 1] = u[0]; m[1, 1] = u[1]; m[2, 1] = u[2]
    m[0, 2] = -f[0]; m[1, 2] = -f[1]; m[2, 2] = -f[2]
    m[3, 0] = -np.dot(s, eye)
    m[3, 1] = -np.dot(u, eye)
    m[3, 2] = np.dot(f, eye)
    return m

def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Return a column-major projection matrix suitable for OpenGL."""
    f = 1.0 / np.tan(np.deg2rad(fov_deg) / 2.0)
    m = np.zeros((4, 4), dtype=np.float32)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = -1.0
    m[3, 2] = (2.0 * far * near) / (near - far)
    return m
