"""
Retry utilities with exponential backoff.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.
    
    Attributes:
        max_attempts: Maximum number of attempts, including the first
        initial_delay_ms: Delay before the first retry
        max_delay_ms: Maximum delay between retries
        backoff_multiplier: Multiplier for exponential backoff
        retry_on: Exception types to retry on
        on_retry: Callback invoked with (attempt, exception) before each retry
    """
    max_attempts: int = 2
    initial_delay_ms: int = 1000
    max_delay_ms: int = 30000
    backoff_multiplier: float = 2.0
    retry_on: Tuple[Type[Exception], ...] = (Exception,)
    on_retry: Optional[Callable[[int, Exception], None]] = None


async def retry_async(
    func: Callable[..., Awaitable[T]],
    config: RetryConfig,
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Execute an async function with retry logic.
    
    Exceptions outside ``config.retry_on`` propagate immediately.
    
    Args:
        func: Async function to execute
        config: Retry configuration
        *args: Function arguments
        **kwargs: Function keyword arguments
        
    Returns:
        Function result
        
    Raises:
        The last exception if all attempts fail
    """
    last_exception: Optional[Exception] = None
    delay_ms: float = config.initial_delay_ms
    attempts = max(1, config.max_attempts)
    
    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except config.retry_on as e:
            last_exception = e
            
            if attempt == attempts - 1:
                break
            
            logger.warning(
                f"Attempt {attempt + 1}/{attempts} failed: {e}. "
                f"Retrying in {int(delay_ms)}ms..."
            )
            
            if config.on_retry:
                config.on_retry(attempt + 1, e)
            
            await asyncio.sleep(delay_ms / 1000)
            delay_ms = min(delay_ms * config.backoff_multiplier, config.max_delay_ms)
    
    raise last_exception  # type: ignore[misc]
