"""
NanoSprite Workbench
Frame-rect compositing and animation preview for 4x2 sprite sheets
"""

__version__ = "0.1.0"
