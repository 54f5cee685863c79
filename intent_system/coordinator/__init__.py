"""
Intent System Coordinator
Shared session clock and bounded buffers used by every feed
"""

from .clock import SessionClock
from .buffers import RingBuffer

__all__ = [
    'SessionClock',
    'RingBuffer',
]

__version__ = '1.0.0'
