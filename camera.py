# camera.py
"""
Perspective camera with damped orbit controls, and the viewport it draws to.

The orbit behaviour follows the usual turntable model: the camera sits on a
sphere around a target point, mouse drags add to a pending rotation delta,
and every update() applies a fraction of that delta and lets the rest decay.
"""
import logging
import math
from typing import Optional, Tuple

import numpy as np

from constants import (
    CAMERA_FAR, CAMERA_FOV, CAMERA_NEAR, CAMERA_START_POSITION, CAMERA_TARGET,
    MAX_PIXEL_RATIO, ORBIT_DAMPING_FACTOR, ORBIT_MAX_DISTANCE,
    ORBIT_MIN_DISTANCE, ORBIT_POLAR_EPSILON, ORBIT_ROTATE_SPEED,
    ORBIT_ZOOM_SCALE
)

# --- Data Contracts ---
#
# class OrbitCamera:
#   - rotate(dx, dy, viewport_height): queue a rotation from a mouse drag of
#     (dx, dy) pixels. Dragging the full viewport height is one full turn.
#   - zoom(steps): dolly in (steps > 0) or out (steps < 0).
#   - update() -> bool: apply damping; True if the camera moved.
#   - view_matrix() -> (4, 4) float64 world-to-camera transform.
#   - Invariants: distance to target stays in [min_distance, max_distance];
#     polar angle stays strictly inside (0, pi).
#
# class Viewport:
#   - resize(width, height): logical size in pixels. Updates camera aspect.
#   - output_size: (width, height) * pixel_ratio, pixel_ratio <= 2.

_MOVE_EPSILON = 1e-6


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Right-handed view matrix; the camera looks down its -Z axis."""
    z_axis = eye - target
    z_axis = z_axis / np.linalg.norm(z_axis)
    x_axis = np.cross(up, z_axis)
    norm = np.linalg.norm(x_axis)
    if norm < 1e-12:
        # Looking straight along `up`; pick any perpendicular.
        x_axis = np.array([1.0, 0.0, 0.0])
    else:
        x_axis = x_axis / norm
    y_axis = np.cross(z_axis, x_axis)

    view = np.identity(4)
    view[0, :3] = x_axis
    view[1, :3] = y_axis
    view[2, :3] = z_axis
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def perspective(fov_degrees: float, aspect: float, near: float, far: float) -> np.ndarray:
    """OpenGL-style projection matrix."""
    f = 1.0 / math.tan(math.radians(fov_degrees) / 2.0)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


class OrbitCamera:
    """
    A perspective camera orbiting a fixed target.
    """
    def __init__(
        self,
        aspect: float = 1.0,
        fov: float = CAMERA_FOV,
        near: float = CAMERA_NEAR,
        far: float = CAMERA_FAR,
        position: Tuple[float, float, float] = CAMERA_START_POSITION,
        target: Tuple[float, float, float] = CAMERA_TARGET,
        damping_factor: float = ORBIT_DAMPING_FACTOR,
    ):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.target = np.array(target, dtype=np.float64)
        self.up = np.array([0.0, 1.0, 0.0])
        self.damping_factor = damping_factor
        self.rotate_speed = ORBIT_ROTATE_SPEED
        self.zoom_scale = ORBIT_ZOOM_SCALE
        self.min_distance = ORBIT_MIN_DISTANCE
        self.max_distance = ORBIT_MAX_DISTANCE

        offset = np.array(position, dtype=np.float64) - self.target
        self.radius = float(np.linalg.norm(offset))
        self.theta = math.atan2(offset[0], offset[2])
        self.phi = math.acos(max(-1.0, min(1.0, offset[1] / self.radius)))

        self._delta_theta = 0.0
        self._delta_phi = 0.0
        self._scale = 1.0
        self.position = np.array(position, dtype=np.float64)

        logging.debug(
            f"Camera initialized at {tuple(self.position)} "
            f"(fov {fov}, near {near}, far {far})."
        )

    @property
    def focal_length(self) -> float:
        """Projection scale for the vertical axis, 1 / tan(fov / 2)."""
        return 1.0 / math.tan(math.radians(self.fov) / 2.0)

    def set_aspect(self, aspect: float) -> None:
        self.aspect = aspect

    def rotate(self, dx: float, dy: float, viewport_height: float) -> None:
        height = max(1.0, float(viewport_height))
        self._delta_theta -= 2.0 * math.pi * dx / height * self.rotate_speed
        self._delta_phi -= 2.0 * math.pi * dy / height * self.rotate_speed

    def zoom(self, steps: float) -> None:
        self._scale *= self.zoom_scale ** steps

    def update(self) -> bool:
        """Applies pending rotation and zoom. Returns True if the camera moved."""
        if self.damping_factor > 0:
            self.theta += self._delta_theta * self.damping_factor
            self.phi += self._delta_phi * self.damping_factor
        else:
            self.theta += self._delta_theta
            self.phi += self._delta_phi

        self.phi = max(ORBIT_POLAR_EPSILON, min(math.pi - ORBIT_POLAR_EPSILON, self.phi))
        self.radius = max(self.min_distance, min(self.max_distance, self.radius * self._scale))

        if self.damping_factor > 0:
            self._delta_theta *= 1.0 - self.damping_factor
            self._delta_phi *= 1.0 - self.damping_factor
        else:
            self._delta_theta = 0.0
            self._delta_phi = 0.0
        self._scale = 1.0

        sin_phi_radius = math.sin(self.phi) * self.radius
        new_position = self.target + np.array([
            sin_phi_radius * math.sin(self.theta),
            math.cos(self.phi) * self.radius,
            sin_phi_radius * math.cos(self.theta),
        ])
        moved = float(np.sum((new_position - self.position) ** 2)) > _MOVE_EPSILON ** 2
        self.position = new_position
        return moved

    def view_matrix(self) -> np.ndarray:
        return look_at(self.position, self.target, self.up)

    def projection_matrix(self) -> np.ndarray:
        return perspective(self.fov, self.aspect, self.near, self.far)


class Viewport:
    """
    The scene area of the window: logical size, pixel ratio and output size.
    """
    def __init__(self, width: int, height: int, camera: OrbitCamera, device_pixel_ratio: float = 1.0):
        self.camera = camera
        self.device_pixel_ratio = device_pixel_ratio
        self.width = 1
        self.height = 1
        self.resize(width, height)

    @property
    def pixel_ratio(self) -> float:
        return min(self.device_pixel_ratio, MAX_PIXEL_RATIO)

    @property
    def output_size(self) -> Tuple[int, int]:
        ratio = self.pixel_ratio
        return max(1, int(round(self.width * ratio))), max(1, int(round(self.height * ratio)))

    def resize(self, width: int, height: int, device_pixel_ratio: Optional[float] = None) -> None:
        """Updates the logical size and the camera's aspect ratio."""
        # A minimized window can report a zero size.
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        if device_pixel_ratio is not None:
            self.device_pixel_ratio = device_pixel_ratio
        self.camera.set_aspect(self.width / self.height)
        logging.debug(
            f"Viewport resized to {self.width}x{self.height} "
            f"(pixel ratio {self.pixel_ratio}, output {self.output_size})."
        )
