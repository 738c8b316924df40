import logging
import time
from typing import Callable, Optional

from core.errors import NetworkFailure

from .rate_limit import throttle_delay
from .transport import TransportResponse

MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0
logger = logging.getLogger("dashboard.retry")


class RetryPolicy:
    """Re-issues throttled, failed and 5xx requests with backoff.

    ``retry`` counts re-issues already made, so a request is sent at most
    ``max_retries + 1`` times. The caller always sees one logical call: the
    first 2xx response, or the last response/failure once retries run out.
    """

    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        initial_delay: float = INITIAL_RETRY_DELAY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.clock = clock

    def should_retry(self, status_code: Optional[int], retry: int) -> bool:
        """``status_code`` is None for a network failure."""
        if retry >= self.max_retries:
            return False
        if status_code is None:
            return True
        return status_code == 429 or status_code >= 500

    def backoff(self, retry: int) -> float:
        return self.initial_delay * (2 ** retry)

    def delay(self, response: Optional[TransportResponse], retry: int) -> float:
        if response is not None and response.status_code == 429:
            hinted = throttle_delay(response.headers, now=self.clock())
            if hinted is not None:
                return hinted
        return self.backoff(retry)

    def run(self, send: Callable[[], TransportResponse]) -> TransportResponse:
        retry = 0
        while True:
            try:
                response = send()
            except NetworkFailure as exc:
                if not self.should_retry(None, retry):
                    raise
                wait = self.delay(None, retry)
                logger.warning(
                    "%s; retrying after %.1fs (attempt %s/%s)", exc.message, wait, retry + 1, self.max_retries
                )
            else:
                if response.ok or not self.should_retry(response.status_code, retry):
                    return response
                wait = self.delay(response, retry)
                if response.status_code == 429:
                    logger.warning("Rate limited; retrying after %.1fs", wait)
                else:
                    logger.warning(
                        "Server error (%s); retrying after %.1fs (attempt %s/%s)",
                        response.status_code,
                        wait,
                        retry + 1,
                        self.max_retries,
                    )
            self._sleep(wait)
            retry += 1

    def _sleep(self, seconds: float) -> None:
        time.sleep(seconds)
