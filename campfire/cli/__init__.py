"""Command-line interface for Campfire."""

from .main import app, main

__all__ = ['app', 'main']
