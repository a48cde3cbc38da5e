from .paginator import *  # NOQA
