"""
Open-FEA Parts: Vector and Transform Helpers
============================================

Small numpy helpers shared by the solver, builders and parent geometries.
Points are length-3 float arrays; transforms are 4x4 homogeneous matrices.
"""

from typing import Iterable

import numpy as np


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    return np.array([x, y, z], dtype=float)


def length(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; a zero vector stays zero."""
    mag = np.linalg.norm(v)
    if mag == 0.0:
        return np.zeros(3)
    return np.asarray(v, dtype=float) / mag


def signed_angle(a: np.ndarray, b: np.ndarray, ref: np.ndarray) -> float:
    """
    Angle that rotates a onto b about ref, in (-pi, pi].

    Positive when the rotation is counter-clockwise looking down ref.
    """
    cross = np.cross(a, b)
    return float(np.arctan2(np.dot(cross, ref), np.dot(a, b)))


def rodrigues(v: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rotate v by angle (radians) about the unit axis."""
    cos_t, sin_t = np.cos(angle), np.sin(angle)
    return (
        v * cos_t
        + np.cross(axis, v) * sin_t
        + axis * np.dot(axis, v) * (1.0 - cos_t)
    )


def point_line_distance(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    """Perpendicular distance from p to the infinite line through a and b."""
    edge = b - a
    edge_len = np.linalg.norm(edge)
    if edge_len == 0.0:
        return length(p - a)
    return float(np.linalg.norm(np.cross(p - a, p - b)) / edge_len)


# --- 4x4 homogeneous transforms -------------------------------------------

def translation(offset: Iterable[float]) -> np.ndarray:
    mat = np.eye(4)
    mat[:3, 3] = np.asarray(list(offset), dtype=float)
    return mat


def rotation_about(axis: np.ndarray, angle_deg: float) -> np.ndarray:
    """Rotation matrix about an arbitrary axis through the origin."""
    axis = normalize(np.asarray(axis, dtype=float))
    theta = np.radians(angle_deg)
    cos_t, sin_t = np.cos(theta), np.sin(theta)
    x, y, z = axis
    cross = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    mat = np.eye(4)
    mat[:3, :3] = cos_t * np.eye(3) + sin_t * cross + (1.0 - cos_t) * np.outer(axis, axis)
    return mat


def rotation_x(angle_deg: float) -> np.ndarray:
    return rotation_about(vec3(1.0, 0.0, 0.0), angle_deg)


def rotation_y(angle_deg: float) -> np.ndarray:
    return rotation_about(vec3(0.0, 1.0, 0.0), angle_deg)


def rotation_z(angle_deg: float) -> np.ndarray:
    return rotation_about(vec3(0.0, 0.0, 1.0), angle_deg)


def mirror(plane: str) -> np.ndarray:
    """Reflection across a principal plane ("xy", "xz" or "yz")."""
    axis_index = {"yz": 0, "xz": 1, "xy": 2}[plane.lower()]
    mat = np.eye(4)
    mat[axis_index, axis_index] = -1.0
    return mat


def affine_inverse(mat: np.ndarray) -> np.ndarray:
    return np.linalg.inv(mat)


def is_reflection(mat: np.ndarray) -> bool:
    return bool(np.linalg.det(mat[:3, :3]) < 0.0)


def apply(mat: np.ndarray, point: np.ndarray) -> np.ndarray:
    """Transform a single point (or an (N, 3) array of points)."""
    pts = np.asarray(point, dtype=float)
    if pts.ndim == 1:
        return mat[:3, :3] @ pts + mat[:3, 3]
    return pts @ mat[:3, :3].T + mat[:3, 3]
