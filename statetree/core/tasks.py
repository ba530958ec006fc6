"""
Async results for action dispatch.

Every action handler result becomes an asyncio.Future with a single
settlement. Fan-out over several handlers waits for all of them and then
succeeds or fails as a whole.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, List, Sequence


def to_future(call: Callable[[], Any]) -> "asyncio.Future[Any]":
    """
    Invoke call() now and coerce its outcome into a Future.

    Awaitables are scheduled on the running loop; plain values resolve
    immediately; a synchronous exception becomes a rejected Future.

    Raises:
        RuntimeError: If no event loop is running
    """
    loop = asyncio.get_running_loop()
    try:
        result = call()
    except Exception as err:
        fut = loop.create_future()
        fut.set_exception(err)
        return fut

    if inspect.isawaitable(result):
        return asyncio.ensure_future(result)

    fut = loop.create_future()
    fut.set_result(result)
    return fut


async def settle_all(futures: Sequence[Awaitable[Any]]) -> List[Any]:
    """
    Wait for every future to settle, then return all results or raise.

    Unlike a bare gather(), a failure does not short-circuit: the call
    returns only after the slowest future, then raises the first error in
    registration order.
    """
    results = await asyncio.gather(*futures, return_exceptions=True)
    for res in results:
        if isinstance(res, BaseException):
            raise res
    return list(results)
