from datetime import datetime
from functools import wraps
from typing import Any, Callable, TypeVar

from loguru import logger

T = TypeVar("T", bound=Callable)


def monitor_execution(label: str = None):
    """Monitor function execution time and status"""

    def decorator(func: T) -> T:
        name = label or func.__qualname__

        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            start_time = datetime.now()
            try:
                result = await func(*args, **kwargs)
                execution_time = (datetime.now() - start_time).total_seconds()
                logger.info(f"{name} executed successfully in {execution_time:.2f}s")
                return result
            except Exception as e:
                execution_time = (datetime.now() - start_time).total_seconds()
                logger.error(f"{name} failed after {execution_time:.2f}s: {e}")
                raise

        return wrapper

    return decorator
