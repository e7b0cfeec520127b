"""
Small vector and quaternion helpers on top of numpy.

Quaternions are stored as np.array([x, y, z, w]) to match the convention of
the scene graph the camera model mirrors.
"""
import math

import numpy as np

EPSILON = 1e-9

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])
WORLD_UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, -1.0])  # camera looks down local -Z
FACING = np.array([0.0, 0.0, 1.0])    # objects face local +Z


def vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def normalize(v) -> np.ndarray:
    """Unit vector, or a zero vector when the input is degenerate."""
    v = np.asarray(v, dtype=float)
    n = float(np.linalg.norm(v))
    if n < EPSILON:
        return np.zeros_like(v)
    return v / n


def lerp(a, b, t: float):
    return a + (b - a) * t


def quat_normalize(q) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    n = float(np.linalg.norm(q))
    if n < EPSILON:
        return IDENTITY_QUAT.copy()
    return q / n


def quat_multiply(a, b) -> np.ndarray:
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_rotate(q, v) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    u = q[:3]
    w = q[3]
    v = vec3(v)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    axis = normalize(vec3(axis))
    s = math.sin(angle / 2.0)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, math.cos(angle / 2.0)])


def quat_from_euler(x: float, y: float, z: float) -> np.ndarray:
    """Intrinsic XYZ rotation order."""
    qx = quat_from_axis_angle((1, 0, 0), x)
    qy = quat_from_axis_angle((0, 1, 0), y)
    qz = quat_from_axis_angle((0, 0, 1), z)
    return quat_multiply(quat_multiply(qx, qy), qz)


def quat_from_matrix(m) -> np.ndarray:
    m = np.asarray(m, dtype=float)
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = 0.5 / math.sqrt(trace + 1.0)
        q = [(m[2, 1] - m[1, 2]) * s, (m[0, 2] - m[2, 0]) * s, (m[1, 0] - m[0, 1]) * s, 0.25 / s]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = [0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s, (m[2, 1] - m[1, 2]) / s]
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = [(m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s, (m[0, 2] - m[2, 0]) / s]
    else:
        s = 2.0 * math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = [(m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s, (m[1, 0] - m[0, 1]) / s]
    return quat_normalize(q)


def quat_to_matrix(q) -> np.ndarray:
    x, y, z, w = quat_normalize(q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def look_at_quaternion(eye, target, up=WORLD_UP):
    """
    Orientation that points local -Z from eye towards target.

    Returns None when eye and target coincide.
    """
    z_axis = normalize(vec3(eye) - vec3(target))
    if not z_axis.any():
        return None
    x_axis = normalize(np.cross(vec3(up), z_axis))
    if not x_axis.any():
        # Looking straight along up: nudge the reference axis
        x_axis = normalize(np.cross(np.array([0.0, 0.0, 1.0]), z_axis))
        if not x_axis.any():
            x_axis = np.array([1.0, 0.0, 0.0])
    y_axis = np.cross(z_axis, x_axis)
    return quat_from_matrix(np.column_stack((x_axis, y_axis, z_axis)))


def quat_from_unit_vectors(v_from, v_to) -> np.ndarray:
    """Shortest rotation taking direction v_from onto v_to."""
    a = normalize(vec3(v_from))
    b = normalize(vec3(v_to))
    if not a.any() or not b.any():
        return IDENTITY_QUAT.copy()
    d = float(np.dot(a, b))
    if d < -1.0 + 1e-6:
        axis = np.cross(np.array([1.0, 0.0, 0.0]), a)
        if np.linalg.norm(axis) < 1e-6:
            axis = np.cross(np.array([0.0, 1.0, 0.0]), a)
        return quat_from_axis_angle(axis, math.pi)
    c = np.cross(a, b)
    return quat_normalize(np.array([c[0], c[1], c[2], 1.0 + d]))


def quat_slerp(a, b, t: float) -> np.ndarray:
    a = quat_normalize(a)
    b = quat_normalize(b)
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b
    cos_half = float(np.dot(a, b))
    if cos_half < 0.0:
        b = -b
        cos_half = -cos_half
    if cos_half > 1.0 - 1e-6:
        return quat_normalize(lerp(a, b, t))
    half = math.acos(cos_half)
    sin_half = math.sin(half)
    wa = math.sin((1.0 - t) * half) / sin_half
    wb = math.sin(t * half) / sin_half
    return quat_normalize(a * wa + b * wb)
