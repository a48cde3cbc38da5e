from .exceptions import *  # NOQA
from .filter import *  # NOQA
from .gateway import *  # NOQA
from .numbers import *  # NOQA
from .order_query import *  # NOQA
from .page_key import *  # NOQA
from .pagination import *  # NOQA
from .types import *  # NOQA
from .value_object import *  # NOQA
