"""Media transport engine interfaces and offer/answer negotiation."""

from .base import *
from .negotiation import *
