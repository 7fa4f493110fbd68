"""
The VIEW layer: the Qt widget and the rendering backends it draws with.
"""
