from .in_memory_gateway import *  # NOQA
from .mapper import *  # NOQA
