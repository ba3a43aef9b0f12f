"""
tkinter adapters for the preview: repaint-driven tick source and label player
"""

from .animation_player import AnimationPlayer, TkTickSource

__all__ = [
    'AnimationPlayer',
    'TkTickSource',
]
