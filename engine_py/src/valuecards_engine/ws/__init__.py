"""
WebSocket server and event handling for the value cards game.
"""

from .events import *
from .server import app

__all__ = ["app"]
