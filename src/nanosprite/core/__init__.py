"""
Core module for NanoSprite Workbench
Frame rects, compositing, overlays, animation timing and payload handling
"""

from .errors import NanoSpriteError, InvalidGeometry, DecodeFailure, SchedulerMisuse
from .frame_rects import FrameRect, FrameSequence, default_rect
from .frame_compositor import FrameLayout, compose, render_frame
from .overlay_renderer import OverlayPlan, plan_overlays, render_preview
from .animation_scheduler import AnimationCursor, AnimationScheduler
from .grid_anchor import generate_anchor, generate_anchor_payload
from .payload import normalize, decode_image, try_decode_image, encode_image
from .session import SpriteSheet, SpriteSheetSession
from .sprite_sheet_handler import SpriteSheetHandler
from .collaborator import build_generation_parts, build_refine_parts, extract_image_payload, spatial_guide_note

__all__ = [
    'NanoSpriteError',
    'InvalidGeometry',
    'DecodeFailure',
    'SchedulerMisuse',
    'FrameRect',
    'FrameSequence',
    'default_rect',
    'FrameLayout',
    'compose',
    'render_frame',
    'OverlayPlan',
    'plan_overlays',
    'render_preview',
    'AnimationCursor',
    'AnimationScheduler',
    'generate_anchor',
    'generate_anchor_payload',
    'normalize',
    'decode_image',
    'try_decode_image',
    'encode_image',
    'SpriteSheet',
    'SpriteSheetSession',
    'SpriteSheetHandler',
    'build_generation_parts',
    'build_refine_parts',
    'extract_image_payload',
    'spatial_guide_note',
]
