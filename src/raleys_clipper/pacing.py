import random
import time

# Per-character typing delay, in milliseconds
TYPING_DELAY_MS = (50, 200)

# The login form drops the first submit if typed into before it settles
FORM_SETTLE_MS = 1000


class Pacer:
    """Randomized delays used to pace logins and clip requests."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def pick(self, min_ms: int, max_ms: int) -> int:
        """Pick a delay uniformly from the closed range [min_ms, max_ms]."""
        if max_ms <= min_ms:
            return max(min_ms, 0)
        return self._rng.randint(min_ms, max_ms)

    def sleep(self, ms: int) -> None:
        if ms > 0:
            time.sleep(ms / 1000)

    def pause(self, min_ms: int, max_ms: int) -> int:
        delay = self.pick(min_ms, max_ms)
        self.sleep(delay)
        return delay


class NoDelayPacer(Pacer):
    """Pacer that records requested delays instead of sleeping."""

    def __init__(self, rng: random.Random | None = None):
        super().__init__(rng)
        self.delays: list[int] = []

    def sleep(self, ms: int) -> None:
        self.delays.append(ms)
