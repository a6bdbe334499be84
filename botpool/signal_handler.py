"""SignalHandler - handles system signals and shutdown coordination."""

import logging
import signal


class SignalHandler:
    """Handler for system signals and shutdown coordination."""

    def __init__(self) -> None:
        self.shutdown_initiated = False

    def stop(self) -> None:
        """Request an orderly shutdown of the driver loop."""
        self.shutdown_initiated = True

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        """Set up signal handlers for graceful shutdown on SIGINT/SIGTERM."""

        def handler(signum: int, _frame: object | None) -> None:  # noqa: D401
            if self.shutdown_initiated:
                return
            logging.warning(
                f"🛑 Signal received - initiating shutdown (signal={signum})"
            )
            # The driver loop notices the flag on its next tick.
            self.shutdown_initiated = True

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
