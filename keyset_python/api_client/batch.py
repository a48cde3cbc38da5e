import asyncio
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence
from typing import Any
from typing import TypeVar

from keyset_python import ValueObject

__all__ = ["StaticCall", "batch_call"]

C = TypeVar("C")
R = TypeVar("R")


class StaticCall(ValueObject):
    target: str
    function: str
    args: Any = None


async def batch_call(func: Callable[[C], Awaitable[R]], calls: Sequence[C]) -> list[R]:
    """Run func for all calls concurrently, results in the order of 'calls'.

    All or nothing: the first call that fails cancels the ones still running
    and its exception is raised; the other results are discarded.
    """
    tasks = [asyncio.ensure_future(func(call)) for call in calls]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        # wait for the cancellations so that no task outlives the batch
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
