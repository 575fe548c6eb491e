# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They cover the
window, the camera, the point material and the parameter panel. The galaxy
parameters themselves are part of the run configuration (config.json), with
the defaults below used when a key is missing.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a resizable window of DEFAULT_WINDOW_SIZE.
FULLSCREEN = False
DEFAULT_WINDOW_SIZE = (1600, 900)
UI_PANEL_WIDTH = 400
FPS = 60
BACKGROUND_COLOR = (0, 0, 0)
WINDOW_TITLE = "Galaxy Generator"

# Output resolution never exceeds twice the logical size.
MAX_PIXEL_RATIO = 2.0

# --- Camera ---
CAMERA_FOV = 75.0  # vertical, degrees
CAMERA_NEAR = 0.1
CAMERA_FAR = 100.0
CAMERA_START_POSITION = (3.0, 3.0, 3.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)

# --- Orbit controls ---
ORBIT_DAMPING_FACTOR = 0.05
ORBIT_ROTATE_SPEED = 1.0
ORBIT_ZOOM_SCALE = 0.95  # per wheel step
ORBIT_MIN_DISTANCE = 0.5
ORBIT_MAX_DISTANCE = 60.0
# Keeps the polar angle off the poles so the view never flips.
ORBIT_POLAR_EPSILON = 1e-6

# --- Point material ---
SIZE_ATTENUATION = True
ADDITIVE_BLENDING = True
DEPTH_WRITE = False
VERTEX_COLORS = True

# Radius is clamped to this at the parameter boundary.
MIN_GALAXY_RADIUS = 1e-3

DEFAULT_GALAXY_PARAMETERS = {
    "count": 1000,
    "size": 0.02,
    "radius": 4.0,
    "branches": 3,
    "spin": 0.2,
    "randomness": 0.2,
    "inside_color": "#ff0000",
    "outside_color": "#0000ff",
    "rotate": 0.0,
}

# --- Parameter panel ---
# (key, label, minimum, maximum, step). Color pickers have no range.
SLIDER_CONTROLS = [
    ("count", "Total stars", 100, 100000, 100),
    ("size", "Star size", 0.001, 0.1, 0.001),
    ("radius", "Branch distance", 1, 20, 1),
    ("branches", "Total branches", 3, 20, 1),
    ("spin", "Branch spin", -3, 3, 0.001),
    ("randomness", "Branch thickness", 0, 2, 0.01),
]
COLOR_CONTROLS = [
    ("inside_color", "In-colour"),
    ("outside_color", "Out-colour"),
]
ROTATE_CONTROL = ("rotate", "Spin speed", -5, 5, 0.1)

# Panel order as the controls appear on screen.
CONTROL_ORDER = [
    "count", "size", "radius", "branches", "spin", "randomness",
    "inside_color", "outside_color", "rotate",
]

# Alpha for the UI panel background
UI_BACKGROUND_ALPHA = 180
