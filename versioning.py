"""Centralised version and naming information for FlashFrame.

This module is the single source of truth for application version,
executable name, and human-readable metadata so we do not duplicate
strings across the codebase.
"""
from __future__ import annotations


APP_NAME: str = "FlashFrame"
APP_EXE_NAME: str = "FlashFrame"
APP_VERSION: str = "1.0.0"
APP_DESCRIPTION: str = "FlashFrame - periodically flashes a full-screen image, optionally pausing media playback while it is shown."
APP_WINDOW_TITLE: str = "Image Display Configurator"


__all__ = [
    "APP_NAME",
    "APP_EXE_NAME",
    "APP_VERSION",
    "APP_DESCRIPTION",
    "APP_WINDOW_TITLE",
]
