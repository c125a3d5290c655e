"""Pixel-level duplicate and near-duplicate image detection."""

__version__ = "0.1.0"
