"""Typed, path-addressable state container with change notification and persistence.

The state is an ``AppState`` model. External callers address it through
dotted paths (``"analytics.streakRecord"``), resolved through a table of
getter/setter closures generated from the schema, so only paths that exist
in the schema are addressable. Values cross the store boundary as deep
copies in both directions: mutating a value returned by ``get`` never changes
the store without an explicit ``set``.
"""

import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, get_origin

from pydantic import BaseModel, ValidationError

from signal2noise.core.config import constants
from signal2noise.core.errors import ErrorResponse, UnknownPathError, classify_storage_error
from signal2noise.core.events import PATH_SEPARATOR, SubscriberRegistry, Subscriber, Unsubscribe
from signal2noise.core.logging import log_with_context, span
from signal2noise.core.storage import BlobStorage, InMemoryBlobStorage
from signal2noise.domain.state import DAY_SESSION_FIELDS, AppState


logger = logging.getLogger(__name__)


class StorageDiagnostic(BaseModel):
    """Observable record of a swallowed persistence failure."""

    operation: str  # "persist" or "restore"
    error: ErrorResponse
    detail: str
    occurred_at: datetime


StorageFailureListener = Callable[[StorageDiagnostic], None]


@dataclass(frozen=True)
class _PathAccessor:
    """Getter/setter pair for one addressable path."""

    canonical: str
    getter: Callable[[AppState], Any]
    setter: Callable[[AppState, Any], None]


def _build_accessors(model: type[BaseModel]) -> dict[str, _PathAccessor]:
    """Walk the schema and produce accessors keyed by every path spelling.

    Each field is reachable by its camelCase alias and by its snake_case
    name, at every nesting level. The canonical spelling is the alias path.
    """
    table: dict[str, _PathAccessor] = {}

    def walk(
        current: type[BaseModel],
        prefixes: list[tuple[str, str]],
        resolve_parent: Callable[[AppState], Any],
    ) -> None:
        for name, info in current.model_fields.items():
            alias = info.alias or name
            spellings = {alias, name}

            def getter(root: AppState, _name: str = name) -> Any:
                return getattr(resolve_parent(root), _name)

            def setter(root: AppState, value: Any, _name: str = name) -> None:
                setattr(resolve_parent(root), _name, value)

            canonical = PATH_SEPARATOR.join([p[0] for p in prefixes] + [alias])
            accessor = _PathAccessor(canonical=canonical, getter=getter, setter=setter)
            for spelled in _spellings(prefixes, spellings):
                table[spelled] = accessor

            annotation = info.annotation
            if get_origin(annotation) is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
                walk(annotation, [*prefixes, (alias, name)], getter)

    walk(model, [], lambda root: root)
    return table


def _spellings(prefixes: list[tuple[str, str]], leaf: set[str]) -> list[str]:
    paths = [""]
    for alias, name in prefixes:
        paths = [f"{p}{s}{PATH_SEPARATOR}" for p in paths for s in {alias, name}]
    return [f"{p}{s}" for p in paths for s in leaf]


_ACCESSORS = _build_accessors(AppState)


def _field_alias(name: str) -> str:
    info = AppState.model_fields[name]
    return info.alias or name


class StateStore:
    """Hierarchical state container for one user's triage session.

    Not thread-safe: all calls must come from a single logical actor.
    """

    def __init__(self, storage: BlobStorage | None = None, *, initial: AppState | None = None) -> None:
        """Initialize the store.

        Args:
            storage: Durable blob device; defaults to an in-memory device
            initial: Starting state; defaults to a fresh ``AppState``
        """
        self._storage: BlobStorage = storage if storage is not None else InMemoryBlobStorage()
        self._state = initial.model_copy(deep=True) if initial is not None else AppState()
        self._subscribers = SubscriberRegistry()
        self._storage_listeners: list[StorageFailureListener] = []
        self.last_storage_error: StorageDiagnostic | None = None
        self.is_durable = True

    # Path access

    @staticmethod
    def paths() -> list[str]:
        """All canonical (camelCase) addressable paths."""
        return sorted({accessor.canonical for accessor in _ACCESSORS.values()})

    def get(self, path: str) -> Any:
        """Return a copy of the value at ``path``, or None if the path does not exist."""
        accessor = _ACCESSORS.get(path)
        if accessor is None:
            return None
        return copy.deepcopy(accessor.getter(self._state))

    def set(self, path: str, value: Any) -> None:
        """Assign ``value`` at ``path`` and notify subscribers.

        Subscribers on ``path`` fire first, then subscribers on each ancestor
        path from nearest to root. When ``settings.autoSave`` is on, the
        whole state is persisted afterwards.

        Raises:
            UnknownPathError: If ``path`` is not part of the state schema
            pydantic.ValidationError: If ``value`` does not fit the schema at ``path``
        """
        accessor = _ACCESSORS.get(path)
        if accessor is None:
            msg = f"Unknown state path: {path}"
            raise UnknownPathError(msg)

        accessor.setter(self._state, copy.deepcopy(value))
        logger.debug("State updated at %s", accessor.canonical)

        self._subscribers.publish(accessor.canonical, self.get)

        if self._state.settings.auto_save:
            self.persist()

    def subscribe(self, path: str, callback: Subscriber) -> Unsubscribe:
        """Register ``callback(value, path)`` for changes at or below ``path``.

        Returns:
            A handle that removes exactly this registration
        """
        accessor = _ACCESSORS.get(path)
        canonical = accessor.canonical if accessor is not None else path
        return self._subscribers.subscribe(canonical, callback)

    def snapshot(self) -> dict[str, Any]:
        """Full copy of the state as a camelCase JSON-compatible mapping."""
        return self._state.model_dump(mode="json", by_alias=True)

    def reset_day(self) -> None:
        """Clear the day session and persist. Streak data and analytics survive."""
        with span("state_store.reset_day"):
            defaults = AppState()
            for name in DAY_SESSION_FIELDS:
                setattr(self._state, name, getattr(defaults, name))
            for name in DAY_SESSION_FIELDS:
                self._subscribers.publish(_field_alias(name), self.get)
            self.persist()
            logger.info("Day session reset")

    # Persistence

    def on_storage_failure(self, listener: StorageFailureListener) -> Unsubscribe:
        """Register a listener for swallowed persistence failures."""
        self._storage_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._storage_listeners:
                self._storage_listeners.remove(listener)

        return _unsubscribe

    def persist(self) -> bool:
        """Write the whole state to the storage device.

        Failures are logged and reported to storage-failure listeners, never
        raised; the in-memory state stays authoritative.

        Returns:
            True if the blob was written
        """
        with span("state_store.persist"):
            try:
                payload = self._state.model_dump_json(by_alias=True).encode(constants.STATE_ENCODING)
                self._storage.write_blob(payload)
            except Exception as e:
                self.is_durable = False
                self._report_storage_failure("persist", e)
                return False

            self.is_durable = True
            logger.debug("Persisted state (%d bytes)", len(payload))
            return True

    def restore(self) -> bool:
        """Load saved state over the defaults.

        Merging is shallow: each top-level key in the saved blob replaces the
        default section wholesale, and keys absent from the blob keep their
        defaults. Every replaced section is validated against its model, so
        nested keys missing from a saved section take the model defaults.
        Unknown top-level keys are ignored. A section that fails validation
        keeps its default and is reported as a storage failure.

        Returns:
            True if saved state was found and applied
        """
        with span("state_store.restore"):
            try:
                blob = self._storage.read_blob()
                if blob is None:
                    logger.info("No saved state found, starting from defaults")
                    return False
                saved = json.loads(blob.decode(constants.STATE_ENCODING))
                if not isinstance(saved, dict):
                    msg = f"Invalid JSON state: expected an object, got {type(saved).__name__}"
                    raise ValueError(msg)
            except Exception as e:
                self._report_storage_failure("restore", e)
                return False

            merged: dict[str, Any] = AppState().model_dump(by_alias=True)
            for key, section in saved.items():
                accessor = _ACCESSORS.get(key)
                if accessor is None or PATH_SEPARATOR in accessor.canonical:
                    logger.debug("Ignoring unknown top-level key in saved state: %s", key)
                    continue
                try:
                    AppState.model_validate({accessor.canonical: section})
                except ValidationError as e:
                    self._report_storage_failure("restore", e)
                    continue
                merged[accessor.canonical] = section

            self._state = AppState.model_validate(merged)
            log_with_context(logger, "info", "Restored saved state", sections=sorted(saved))

            for name in AppState.model_fields:
                self._subscribers.publish(_field_alias(name), self.get)
            return True

    def _report_storage_failure(self, operation: str, error: Exception) -> None:
        diagnostic = StorageDiagnostic(
            operation=operation,
            error=classify_storage_error(error),
            detail=str(error),
            occurred_at=datetime.now(),
        )
        self.last_storage_error = diagnostic
        logger.error(
            "Failed to %s state: %s",
            operation,
            error,
            extra={"operation": operation, "error_code": diagnostic.error.code},
        )
        for listener in list(self._storage_listeners):
            try:
                listener(diagnostic)
            except Exception:
                logger.exception("Storage failure listener raised")
