# (c) Nelen & Schuurmans

from decimal import Decimal
from typing import Any
from typing import Union
from uuid import UUID

__all__ = ["Json", "Id", "Numeric"]


Json = dict[str, Any]
Id = Union[int, str, UUID]
Numeric = Union[int, float, Decimal]
