"""
Configuration & Global Constants
================================
This module serves as the central registry for the wheel's tuning constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (frame rate, decay factor, launch
   limit, material colors) from being scattered through the render loop and
   the motion model.
2. Defaults: It defines the values a freshly constructed wheel starts with,
   before any range/orientation/boundary mode is set by the host application.

Exports:
    FPS (float): Target cadence of the render loop.
    FRAME_INTERVAL_S (float): Wait between idle or coasting frames.
    DEFAULT_* : Initial wheel configuration.
"""
from thumbwheel.model.enums import BoundaryMode, Orientation

# ------------------------------------------------------------------------------
# Render loop
# ------------------------------------------------------------------------------
FPS: float = 60.0
FRAME_INTERVAL_S: float = 1.0 / FPS

# Listener fires once every N presented frames (12 Hz at 60 FPS)
NOTIFY_EVERY_N_FRAMES: int = 5

# Upper bound for the start-up handshake with the render thread
STARTUP_TIMEOUT_S: float = 10.0

# ------------------------------------------------------------------------------
# Wheel defaults
# ------------------------------------------------------------------------------
DEFAULT_MIN_VALUE: float = 0.0
DEFAULT_MAX_VALUE: float = 100.0
DEFAULT_RATIO: float = 1.0
DEFAULT_ORIENTATION: Orientation = Orientation.HORIZONTAL
DEFAULT_BOUNDARY_MODE: BoundaryMode = BoundaryMode.REPEAT

# Size hint, in logical pixels along the long side
DEFAULT_WHEEL_DIAMETER: int = 100
WHEEL_THICKNESS_RATIO: float = 0.25

# ------------------------------------------------------------------------------
# Motion model
# ------------------------------------------------------------------------------
DRAG_GAIN: float = 100.0  # degrees per full widget extent
MAX_LAUNCH_DELTA: float = 80.0  # degrees / frame
DECAY_FACTOR: float = 0.85
STOP_THRESHOLD: float = 0.1
VALUE_RESOLUTION_FACTOR: float = 0.4

# ------------------------------------------------------------------------------
# Lighting
# ------------------------------------------------------------------------------
LIGHT_POSITION: tuple[float, float, float] = (0.0, 0.0, 10.0)
LIGHT_DIFFUSE: tuple[float, float, float] = (1.0, 1.0, 1.0)
LIGHT_SPECULAR: tuple[float, float, float] = (1.0, 1.0, 1.0)
MATERIAL_SHININESS: float = 100.0
BACKGROUND_COLOR: tuple[float, float, float] = (0.0, 0.0, 0.0)
