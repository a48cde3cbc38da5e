# -*- coding: utf-8 -*-
# (c) Nelen & Schuurmans

from .base.domain import *  # NOQA
from .base.infrastructure import *  # NOQA
from .base.application import *  # NOQA

# fmt: off
__version__ = '0.0.1.dev0'
# fmt: on
