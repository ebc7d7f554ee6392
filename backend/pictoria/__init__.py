"""Pictoria AI backend: model training and image generation on hosted providers."""

__version__ = "0.1.0"
