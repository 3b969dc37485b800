"""
UI package
Terminal listener for scheduler notifications
"""

from .console import ConsoleNowPlaying

__all__ = ['ConsoleNowPlaying']
