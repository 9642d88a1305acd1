"""Configuration data structures for the debug storage reader."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ViewerConfig:
    """Static options used by the view widgets and the inspector window."""

    app_name: str = "DebugStorageReader"
    app_version: str = "1.0"
    window_title: str = "Storage Inspector"
    window_width: int = 720
    window_height: int = 640
    pending_text: str = "Retrieving data..."
    failed_text: str = "Failed to retrieve data"
    value_max_lines: int = 2
    value_max_chars: int = 160
    list_batch_size: int = 50


@dataclass(slots=True)
class StyleConfig:
    """Simple grouping of UI styling constants."""

    bg_primary: str = "#2E3440"
    bg_secondary: str = "#3B4252"
    bg_tertiary: str = "#434C5E"
    fg_primary: str = "#D8DEE9"
    fg_secondary: str = "#ECEFF4"
    fg_subtle: str = "#A0A8B7"
    accent_primary: str = "#88C0D0"
    accent_secondary: str = "#5E81AC"
    error: str = "#BF616A"
    border: str = "#4C566A"
    font_family: str = "Segoe UI, sans-serif"
    font_size: int = 14
    font_mono: str = "Courier New, monospace"


__all__ = ["ViewerConfig", "StyleConfig"]
