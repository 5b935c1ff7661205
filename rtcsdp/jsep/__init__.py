"""JSEP (JavaScript Session Establishment Protocol) session model for WebRTC."""

from .session import *
from .capabilities import *
