import time

from formconvert.config.settings import Settings
from formconvert.database.repositories.conversion_repository import ConversionRepository
from formconvert.logging.logger import Log
from formconvert.worker.conversion_runner import ConversionRunner


class Worker:
    """Poll loop: sleep -> pick -> dispatch."""

    def __init__(
        self,
        conversion_repo: ConversionRepository,
        runner: ConversionRunner,
        settings: Settings,
    ) -> None:
        self._conversion_repo = conversion_repo
        self._runner = runner
        self._settings = settings

    def run(self, max_conversions: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_conversions is set, stop after that many have been dispatched
        (for testing).
        """
        Log.info("Worker started, polling for pending conversions")
        dispatched = 0
        try:
            while True:
                if max_conversions is not None and dispatched >= max_conversions:
                    break
                conversion_id = self._next_pending_id()
                if conversion_id:
                    self._runner.run(conversion_id)
                    dispatched += 1
                else:
                    Log.debug("No pending conversions, sleeping")
                    time.sleep(self._settings.poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _next_pending_id(self) -> str | None:
        """Look up the next pending conversion. Gracefully handle DB errors."""
        try:
            return self._conversion_repo.find_next_pending_id()
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
