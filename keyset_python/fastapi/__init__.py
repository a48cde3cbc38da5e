from .error_responses import *  # NOQA
from .request_query import *  # NOQA
from .response import *  # NOQA
from .security import *  # NOQA
from .service import *  # NOQA
