import inspect
from typing import Any, Callable, Optional


async def notify(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    """Invoke a sync or async callback and wait for it to finish."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
