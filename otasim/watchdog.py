"""A tick-driven watchdog timer."""

DEFAULT_MAX_TICKS = 5


class WatchdogReset(Exception):
    """The watchdog expired because it was not kicked in time."""

    def __init__(self):
        super().__init__("WATCHDOG RESET (firmware unresponsive)")


class Watchdog:
    """Counts ticks while active and resets once ``max_ticks`` pass unkicked."""

    def __init__(self, max_ticks=DEFAULT_MAX_TICKS):
        self.max_ticks = max_ticks
        self.ticks = 0
        self.active = False

    def start(self):
        """Enable the watchdog with a fresh counter."""
        self.ticks = 0
        self.active = True

    def kick(self):
        """Restart the countdown if the watchdog is running."""
        if self.active:
            self.ticks = 0

    def tick(self):
        """Advance time by one tick; raise WatchdogReset when it expires."""
        if not self.active:
            return
        self.ticks += 1
        if self.ticks >= self.max_ticks:
            raise WatchdogReset()

    def stop(self):
        """Disable the watchdog."""
        self.active = False