"""Implementation of Session Description Protocol (SDP) parsing and serialization."""

from .common import *
from .enums import *
from .media import *
from .session import *
from .time import *
