"""Glyph atlas packing, text layout, blur, UTF-8 decoding and image cache keys."""

__version__ = "0.1.0"
__all__ = ["atlas", "utf8", "blur", "stash", "text", "image"]