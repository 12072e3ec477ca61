"""signal2noise - composition root wiring the store, clock and workflow together."""

import logging

from signal2noise.core.clock import Clock, SystemClock
from signal2noise.core.config import Settings, settings
from signal2noise.core.logging import configure_logfire
from signal2noise.core.state_store import StateStore, StorageDiagnostic
from signal2noise.core.storage import BlobStorage, FileBlobStorage
from signal2noise.services.workflow_service import Navigator, TaskWorkflow, WorkflowPhase


logger = logging.getLogger(__name__)


class Signal2NoiseApp:
    """One user's triage application, ready for a presentation layer to drive."""

    def __init__(
        self,
        *,
        app_settings: Settings | None = None,
        storage: BlobStorage | None = None,
        clock: Clock | None = None,
        navigator: Navigator | None = None,
    ) -> None:
        """Wire dependencies; nothing is read from storage until ``start``.

        Args:
            app_settings: Settings to use; defaults to the environment-loaded settings
            storage: Durable device; defaults to a file under ``data_dir``
            clock: Time source; defaults to the system clock
            navigator: Receives screen changes from the workflow
        """
        self.settings = app_settings or settings
        self.clock: Clock = clock or SystemClock()
        self.storage: BlobStorage = storage or FileBlobStorage(self.settings.data_dir, self.settings.storage_key)
        self.store = StateStore(self.storage)
        self.workflow = TaskWorkflow(self.store, clock=self.clock, navigator=navigator)
        self.store.on_storage_failure(self._log_durability_warning)

    def start(self, *, configure_logging: bool = True) -> WorkflowPhase:
        """Restore saved state and resume the workflow where the user left off.

        Storage problems never stop startup; the session runs in memory and
        the failure is reported through ``store.on_storage_failure``.
        """
        if configure_logging:
            configure_logfire(self.settings)

        logger.info("startup_begin", extra={"storage": type(self.storage).__name__})
        restored = self.store.restore()
        logger.info("startup_restore", extra={"restored": restored, "durable": self.store.last_storage_error is None})

        phase = self.workflow.resume()
        logger.info("startup_complete", extra={"phase": str(phase)})
        return phase

    @staticmethod
    def _log_durability_warning(diagnostic: StorageDiagnostic) -> None:
        logger.warning(
            "durability_compromised",
            extra={"operation": diagnostic.operation, "error_code": diagnostic.error.code},
        )
