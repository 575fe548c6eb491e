# renderer.py
"""
Software point renderer.

Projects a PointSet through the OrbitCamera and splats every visible star
into an RGB framebuffer. Both steps are Numba kernels; the rest of this
module only prepares arrays for them.
"""
import numpy as np
from numba import jit

from camera import OrbitCamera, Viewport
from constants import BACKGROUND_COLOR
from galaxy import PointSet

# --- Data Contracts ---
#
# render_points(point_set, rotation_y, camera, viewport, background) -> np.ndarray:
#   - Inputs:
#     - point_set: read only; its material flags pick size attenuation and
#       additive blending.
#     - rotation_y: orientation of the point set about the vertical axis.
#     - background: RGB tuple, 0-255.
#   - Outputs: float32 framebuffer of shape (out_w, out_h, 3), values in
#     [0, 1], laid out the way pygame.surfarray expects (x first).
#   - Side Effects: None. The point set is never modified.


@jit(nopython=True)
def _project_points_numba(
    positions, rotation_y, view, focal, aspect, near, far,
    width, height, point_size, attenuate, out_xy, out_side, out_weight
):
    """
    Numba-jitted projection of every point to output pixel coordinates.

    Points outside the near/far range get a side of 0 and are skipped by the
    splat kernel.
    """
    cos_r = np.cos(rotation_y)
    sin_r = np.sin(rotation_y)
    half_w = width * 0.5
    half_h = height * 0.5

    for i in range(positions.shape[0]):
        x = positions[i, 0]
        y = positions[i, 1]
        z = positions[i, 2]

        # Object rotation about +Y
        wx = x * cos_r + z * sin_r
        wy = y
        wz = -x * sin_r + z * cos_r

        cx = view[0, 0] * wx + view[0, 1] * wy + view[0, 2] * wz + view[0, 3]
        cy = view[1, 0] * wx + view[1, 1] * wy + view[1, 2] * wz + view[1, 3]
        cz = view[2, 0] * wx + view[2, 1] * wy + view[2, 2] * wz + view[2, 3]

        depth = -cz
        if depth <= near or depth >= far:
            out_side[i] = 0
            continue

        ndc_x = (focal / aspect) * cx / depth
        ndc_y = focal * cy / depth
        out_xy[i, 0] = (ndc_x + 1.0) * half_w
        out_xy[i, 1] = (1.0 - ndc_y) * half_h

        if attenuate:
            pixels = point_size * half_h / depth
        else:
            pixels = point_size

        if pixels < 1.0:
            # Sub-pixel stars keep one pixel but only add their area's worth.
            out_side[i] = 1
            out_weight[i] = pixels * pixels
        else:
            out_side[i] = int(pixels + 0.5)
            out_weight[i] = 1.0


@jit(nopython=True)
def _splat_points_numba(framebuffer, xy, sides, weights, colors, additive):
    """
    Numba-jitted square splat of projected points. No depth test.
    """
    width = framebuffer.shape[0]
    height = framebuffer.shape[1]
    for i in range(xy.shape[0]):
        side = sides[i]
        if side == 0:
            continue
        x0 = int(np.floor(xy[i, 0] - side * 0.5 + 0.5))
        y0 = int(np.floor(xy[i, 1] - side * 0.5 + 0.5))
        x1 = min(x0 + side, width)
        y1 = min(y0 + side, height)
        x0 = max(x0, 0)
        y0 = max(y0, 0)
        w = weights[i]
        for px in range(x0, x1):
            for py in range(y0, y1):
                for c in range(3):
                    if additive:
                        framebuffer[px, py, c] += colors[i, c] * w
                    else:
                        framebuffer[px, py, c] = colors[i, c]


def render_points(
    point_set: PointSet,
    rotation_y: float,
    camera: OrbitCamera,
    viewport: Viewport,
    background=BACKGROUND_COLOR,
) -> np.ndarray:
    """
    Draws the point set into a new framebuffer sized to the viewport output.
    """
    out_w, out_h = viewport.output_size
    framebuffer = np.empty((out_w, out_h, 3), dtype=np.float32)
    framebuffer[:, :] = np.asarray(background, dtype=np.float32) / 255.0

    count = point_set.count
    if count == 0:
        return framebuffer

    xy = np.empty((count, 2), dtype=np.float64)
    sides = np.zeros(count, dtype=np.int64)
    weights = np.zeros(count, dtype=np.float64)

    _project_points_numba(
        point_set.positions, float(rotation_y), camera.view_matrix(),
        camera.focal_length, camera.aspect, camera.near, camera.far,
        float(out_w), float(out_h), float(point_set.size),
        point_set.size_attenuation, xy, sides, weights
    )
    _splat_points_numba(framebuffer, xy, sides, weights, point_set.colors, point_set.additive_blending)
    np.clip(framebuffer, 0.0, 1.0, out=framebuffer)
    return framebuffer


def to_rgb8(framebuffer: np.ndarray) -> np.ndarray:
    """Converts a [0, 1] float framebuffer to uint8 for blitting."""
    return (framebuffer * 255.0 + 0.5).astype(np.uint8)
