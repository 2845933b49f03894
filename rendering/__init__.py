"""Rendering and display modules."""

from .overlay_controller import DisplayState, OverlayController
from .overlay_window import OverlayWindow

__all__ = ['DisplayState', 'OverlayController', 'OverlayWindow']
