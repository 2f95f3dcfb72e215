"""Placeholder interpolation and body resolution helpers."""

from .body import get_body_from_file_or_inlined
from .interpolation import interpolate_placeholders


__all__ = ["get_body_from_file_or_inlined", "interpolate_placeholders"]
