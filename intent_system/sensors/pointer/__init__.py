"""
Pointer Module for the Intent System
Pointer position with a 2-second activity timeout
"""

from .tracker import PointerTracker, PointerConfig

__all__ = [
    'PointerTracker',
    'PointerConfig',
]

__version__ = '1.0.0'
