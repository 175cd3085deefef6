"""
HTTP front-end for the infoscreen.
"""

from .server import create_app, ScreenServer

__all__ = ["create_app", "ScreenServer"]
