"""Poll daemon: refreshes the weather snapshot on a fixed interval.

One PollPipeline lives for the whole process, so the last good snapshot
survives failed polls. Failures back off exponentially up to
``poll.max_backoff_minutes``.

Usage:
    python -m weatherfeed daemon --config ops/configs/default.yaml
    python -m weatherfeed daemon --interval 900   # every 15 minutes
    python -m weatherfeed daemon --status
"""

import json
import logging
import os
import signal
import time
from datetime import UTC, datetime
from pathlib import Path

from weatherfeed.config.schema import WeatherConfig
from weatherfeed.pipeline.poll_pipeline import PollPipeline
from weatherfeed.reporting.formatters import summary_to_dict

logger = logging.getLogger(__name__)

STATE_DIR = Path("data")
STATE_FILE = STATE_DIR / "daemon_state.json"
LOG_DIR = Path("logs")
MAX_LOG_FILES = 100  # Keep last 100 poll logs
STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class PollDaemon:
    """Runs the poll pipeline in a loop with backoff and signal handling."""

    def __init__(
        self,
        config: WeatherConfig,
        interval: int | None = None,
        pipeline: PollPipeline | None = None,
    ):
        self.config = config
        self.interval = (
            interval if interval is not None else config.poll.interval_minutes * 60
        )
        self.max_backoff = config.poll.max_backoff_minutes * 60
        self.pipeline = pipeline or PollPipeline(config)
        self._running = False
        self._consecutive_failures = 0
        self._total_polls = 0
        self._total_successes = 0
        self._total_failures = 0
        self._started_at: str | None = None
        self._last_success_at: str | None = None

    def start(self) -> None:
        """Start the daemon loop."""
        self._setup_signals()
        self._running = True
        self._started_at = datetime.now(UTC).isoformat()

        logger.info(
            "Daemon started, interval=%ds pid=%d location=%.5f,%.5f",
            self.interval, os.getpid(),
            self.config.location.longitude, self.config.location.latitude,
        )
        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        finally:
            self._cleanup()

    def _loop(self) -> None:
        """Main poll loop with backoff on failures."""
        while self._running:
            poll_start = time.monotonic()
            if self._run_one_poll():
                self._consecutive_failures = 0
                wait = self.interval
            else:
                self._consecutive_failures += 1
                wait = self._backoff()
                logger.warning(
                    "Poll failed (%d consecutive), backing off %ds",
                    self._consecutive_failures, wait,
                )

            self._save_state()

            # Sleep in 1-second increments so we can respond to signals
            elapsed = time.monotonic() - poll_start
            sleep_until = time.monotonic() + max(0, wait - elapsed)
            while self._running and time.monotonic() < sleep_until:
                time.sleep(1)

    def _backoff(self) -> int:
        return min(self.interval * (2 ** self._consecutive_failures), self.max_backoff)

    def _run_one_poll(self) -> bool:
        """Execute a single poll. Returns True if the snapshot was refreshed."""
        self._total_polls += 1
        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / f"poll_{timestamp}.log")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        try:
            logger.info("=== Poll #%d starting ===", self._total_polls)
            summary = self.pipeline.run()
            if not summary.ok:
                self._total_failures += 1
                logger.error(
                    "Poll #%d failed at %s: %s",
                    self._total_polls, summary.failed_stage, summary.error_code,
                )
                return False
            self._total_successes += 1
            self._last_success_at = datetime.now(UTC).isoformat()
            logger.info(
                "Poll #%d OK, %d hourly / %d daily entries",
                self._total_polls, summary.hourly_count, summary.daily_count,
            )
            return True

        except Exception:
            self._total_failures += 1
            logger.exception("Poll #%d crashed", self._total_polls)
            return False

        finally:
            root_logger.removeHandler(file_handler)
            file_handler.close()
            self._rotate_logs()

    def _rotate_logs(self) -> None:
        # timestamped names sort oldest first
        for stale in sorted(LOG_DIR.glob("poll_*.log"))[:-MAX_LOG_FILES]:
            stale.unlink(missing_ok=True)

    def _handle_stop(self, signum: int, frame: object) -> None:
        logger.info(
            "%s received, stopping after the current poll",
            signal.Signals(signum).name,
        )
        self._running = False

    def _setup_signals(self) -> None:
        for sig in STOP_SIGNALS:
            signal.signal(sig, self._handle_stop)

    def _save_state(self) -> None:
        """Persist daemon stats for status reporting."""
        last = self.pipeline.last_summary
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "interval": self.interval,
            "total_polls": self._total_polls,
            "total_successes": self._total_successes,
            "total_failures": self._total_failures,
            "consecutive_failures": self._consecutive_failures,
            "last_success_at": self._last_success_at,
            "last_poll": summary_to_dict(last) if last is not None else None,
            "last_update": datetime.now(UTC).isoformat(),
        }
        STATE_DIR.mkdir(parents=True, exist_ok=True)
        STATE_FILE.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        self._save_state()
        logger.info(
            "Daemon stopped, %d polls (%d ok, %d failed)",
            self._total_polls, self._total_successes, self._total_failures,
        )


_STATUS_ROWS = [
    ("PID", "pid"),
    ("Started", "started_at"),
    ("Total polls", "total_polls"),
    ("Successes", "total_successes"),
    ("Failures", "total_failures"),
    ("Consecutive failures", "consecutive_failures"),
    ("Last update", "last_update"),
]


def _pid_alive(pid: object) -> bool:
    try:
        os.kill(int(pid), 0)
    except (ProcessLookupError, PermissionError, ValueError, TypeError):
        return False
    return True


def daemon_status() -> int:
    """Print the last saved daemon state. Returns 1 when nothing was saved."""
    if not STATE_FILE.exists():
        print("No daemon state found")
        return 1

    state = json.loads(STATE_FILE.read_text())
    alive = _pid_alive(state.get("pid"))
    print(f"Daemon {'running' if alive else 'stopped'}, polling every {state.get('interval', '?')}s")
    for label, key in _STATUS_ROWS:
        print(f"  {label}: {state.get(key, '?')}")
    print(f"  Last success: {state.get('last_success_at') or 'never'}")

    last = state.get("last_poll") or {}
    if last and not last.get("ok"):
        print(f"  Last error: {last.get('failed_stage')}: {last.get('error_code')}")
    return 0
