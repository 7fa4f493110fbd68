"""
The MODEL layer contains pure data structures and the wheel's physics.
It has NO knowledge of the GUI (Qt) or the Visualization (PyVista).
It deals with Geometry, Motion and Configuration.
"""
