"""A small shell that hosts a text-mode application in the terminal."""

import logging

from .__about__ import __version__
from .app import *
from .core import *
from .event import *
from .screen import *
from .session import *
from .terminal import *
from .ui import *

logging.getLogger(__name__).addHandler(logging.NullHandler())
