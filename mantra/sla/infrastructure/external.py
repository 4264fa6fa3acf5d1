"""
SLA External Service Integrations
==================================

External services for SLA monitoring:
- YAML rules file watcher
- APScheduler for the periodic SLA sweep
"""

import threading
from pathlib import Path
from typing import Awaitable, Callable, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from mantra.core import ConfigurationException
from mantra.shared.infrastructure.logging import get_logger
from mantra.sla.application import IRulesProvider
from mantra.sla.domain import HelpdeskRules

logger = get_logger(__name__)

RULES_FROM_FILE = "file"
RULES_DEFAULTS = "defaults"
RULES_NOT_LOADED = "not_loaded"


class RulesFileHandler(FileSystemEventHandler):
    """Watchdog event handler for rules file changes."""

    def __init__(self, manager: "RulesConfigManager", config_path: Path):
        self.manager = manager
        self.config_path = config_path
        super().__init__()

    def on_modified(self, event):
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.config_path.resolve():
            logger.info("Rules file changed", extra={"path": str(event.src_path)})
            self.manager.reload()


class RulesConfigManager(IRulesProvider):
    """
    Thread-safe helpdesk rules holder with hot-reload support.

    Uses watchdog to monitor the YAML file and swap in new rules without
    restarting the service. A bad edit keeps the previous rules.
    """

    def __init__(self, default_timezone: Optional[str] = None):
        self._rules: Optional[HelpdeskRules] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None
        self._default_timezone = default_timezone
        self._source = RULES_NOT_LOADED

    def load(self, path: Path) -> HelpdeskRules:
        """
        Initial rules load.

        Raises:
            ConfigurationException: if the file exists but is invalid
        """
        self._path = Path(path)
        try:
            rules = self._load_from_file(self._path)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            raise ConfigurationException(
                f"Invalid helpdesk rules file: {self._path}", {"error": str(exc)}
            ) from exc
        self._install(rules)
        return self.get_rules()

    def _defaults(self) -> HelpdeskRules:
        if self._default_timezone:
            return HelpdeskRules(display_timezone=self._default_timezone)
        return HelpdeskRules()

    def _install(self, rules: Optional[HelpdeskRules]) -> None:
        with self._lock:
            self._rules = rules
            self._source = RULES_FROM_FILE if rules is not None else RULES_DEFAULTS

    def _load_from_file(self, path: Path) -> Optional[HelpdeskRules]:
        """Rules from ``path``, or None when the file does not exist."""
        if not path.exists():
            logger.warning("Rules file not found, using defaults", extra={"path": str(path)})
            return None

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if self._default_timezone and isinstance(data, dict) and "display_timezone" not in data:
            data["display_timezone"] = self._default_timezone
        return HelpdeskRules.model_validate(data)

    def reload(self) -> bool:
        """Reload rules from file. Returns False and keeps the old rules on error."""
        if self._path is None:
            return False

        try:
            new_rules = self._load_from_file(self._path)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.error("Failed to reload helpdesk rules", extra={"error": str(e)})
            return False

        self._install(new_rules)
        logger.info("Helpdesk rules reloaded", extra={"source": self._source})
        return True

    def start_watching(self) -> None:
        """
        Start watching the rules file for changes.

        Skipped when the file does not exist or the platform has no
        file watching support.
        """
        if self._path is None:
            raise RuntimeError("Rules not loaded. Call load() first.")

        if not self._path.exists():
            logger.info("Rules file doesn't exist, skipping file watch", extra={"path": str(self._path)})
            return

        try:
            self._observer = Observer()
            handler = RulesFileHandler(self, self._path)
            self._observer.schedule(handler, str(self._path.parent.resolve()), recursive=False)
            self._observer.start()
            logger.info("Started watching rules file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning("File watching not available, using static rules", extra={"error": str(e)})
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def source(self) -> str:
        """Where the active rules came from: the file, the defaults, or nowhere yet."""
        return self._source

    def get_rules(self) -> HelpdeskRules:
        with self._lock:
            if self._rules is None:
                return self._defaults()
            return self._rules


class SLAScheduler:
    """
    Wrapper for APScheduler running the SLA sweep.

    An interval of zero disables the job.
    """

    def __init__(self, interval_seconds: int = 60):
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func: Callable[[], Awaitable[object]]) -> None:
        """Start the scheduler with the given job function."""
        if self._running:
            logger.warning("SLA scheduler already running")
            return
        if self.interval_seconds <= 0:
            logger.info("SLA scheduler disabled")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id="sla_sweep",
            name="SLA Sweep Job",
            misfire_grace_time=60,
            max_instances=1,
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True

        logger.info("SLA scheduler started", extra={"interval_seconds": self.interval_seconds})

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("SLA scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running
