from .api_provider import *  # NOQA
from .batch import *  # NOQA
from .exceptions import *  # NOQA
from .pagination_walker import *  # NOQA
from .vm_client import *  # NOQA
