"""thumbwheel - a 3D thumbwheel widget for PySide6.

Drag the wheel to change a value; released, it keeps spinning with decaying
momentum. Rendering runs in a background thread.
"""

__version__ = "0.1.0"
