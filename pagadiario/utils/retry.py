import random
import time
from typing import Callable, Tuple, Type, TypeVar

from loguru import logger

T = TypeVar("T")


def retry_with_backoff(
        fn: Callable[[], T],
        max_retries: int = 3,
        base_delay: float = 1.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call `fn`, retrying on `retry_on` errors.

    delay(attempt) = base_delay * 2**attempt + jitter(0..1s)
    The last error is re-raised after `max_retries` retries.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except retry_on as e:
            if attempt >= max_retries:
                raise
            delay = base_delay * (2 ** attempt) + random.random()
            logger.warning(
                "Attempt {}/{} failed ({}); retrying in {:.2f}s",
                attempt + 1, max_retries + 1, e, delay,
            )
            sleep(delay)
            attempt += 1
