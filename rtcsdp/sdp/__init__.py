"""Implementation of Session Description Protocol (SDP)."""

from .enums import *
from .attributes import *
from .attribute_map import *
from .common import *
from .media import *
from .session import *
from .time import *
