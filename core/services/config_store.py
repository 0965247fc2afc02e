# =============================================================================
# core/services/config_store.py - Configuration Document Store
# =============================================================================
# Sole owner of the persisted { profile, projects } document.
#
# - load(): read the document; missing -> create empty; corrupt -> empty (logged)
# - save(): validate shape, then atomic replace (temp file + fsync + os.replace)
# - mutate(fn): one load -> fn(document) -> save cycle at a time
#
# All mutating operations must go through mutate(). The asyncio lock is the
# single-writer queue: cycles never interleave, so two concurrent writers
# (e.g. a profile update and a project delete) can't lose each other's change.
# Readers skip the lock; atomic replace means they never see a partial file.
#
# Blocking file I/O runs in worker threads with a bounded timeout. A write
# that times out is NOT cancelled: its thread runs to completion and the
# writer lock is only released once it has finished.
# =============================================================================

import asyncio
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, TypeVar
from uuid import uuid4

from pydantic import ValidationError

from app.exceptions import ConfigInvalidError, StorageUnavailableError
from core.models.document import ConfigDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigStore:
    """
    File-backed store for the site configuration document.

    One instance per document; the application shares a single instance
    (see app.dependencies.get_config_store).

    Example:
        store = ConfigStore("data")
        document = await store.load()

        def add_tag(doc: ConfigDocument) -> None:
            doc.projects[0].tags.append("new")

        await store.mutate(add_tag)
    """

    def __init__(
        self,
        data_dir: str | Path,
        config_filename: str = "config.json",
        uploads_dirname: str = "uploads",
        uploads_url_prefix: str = "/data/uploads",
        timeout: float = 10.0,
    ):
        self.data_dir = Path(data_dir)
        self.config_path = self.data_dir / config_filename
        self.uploads_dir = self.data_dir / uploads_dirname
        self.uploads_url_prefix = uploads_url_prefix.rstrip("/")
        self.timeout = timeout

        # Single-writer queue for load-mutate-save cycles
        self._write_lock = asyncio.Lock()
        # Guards file replacement and the create-if-missing path across threads
        self._file_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Public async API
    # -------------------------------------------------------------------------

    async def load(self) -> ConfigDocument:
        """
        Load the current document.

        Returns:
            The stored document, or an empty one if none exists / it is corrupt

        Raises:
            StorageUnavailableError: On I/O failure or timeout
        """
        return await self._run_io("load", self._load_document)

    async def save(self, document: ConfigDocument | dict[str, Any]) -> None:
        """
        Replace the stored document.

        Queued behind any in-flight mutation.

        Raises:
            ConfigInvalidError: If the document fails shape validation
            StorageUnavailableError: On I/O failure or timeout
        """
        await self._run_exclusive("save", lambda: self._save_document(document))

    async def mutate(self, mutator: Callable[[ConfigDocument], T]) -> T:
        """
        Run one serialized load -> mutator(document) -> save cycle.

        The mutator edits the document in place and returns the value handed
        back to the caller. If it raises, nothing is written.

        Args:
            mutator: Pure function over the loaded document

        Returns:
            Whatever the mutator returned

        Raises:
            Any error raised by the mutator
            ConfigInvalidError: If the mutated document fails validation
            StorageUnavailableError: On I/O failure or timeout
        """
        return await self._run_exclusive("mutate", lambda: self._run_cycle(mutator))

    async def save_upload(self, filename: str, data: bytes) -> str:
        """
        Store uploaded image bytes under the uploads directory.

        Args:
            filename: Target filename (no directory components)
            data: Raw image bytes

        Returns:
            Public path of the stored file, e.g. /data/uploads/profile-1-2.png
        """
        safe_name = Path(filename).name
        if not safe_name or safe_name != filename:
            raise ValueError(f"Upload filename must be a bare name: {filename!r}")

        target = self.uploads_dir / safe_name
        await self._run_io("upload", lambda: self._write_atomic(target, data))
        logger.info(f"Stored upload: {safe_name} ({len(data)} bytes)")
        return f"{self.uploads_url_prefix}/{safe_name}"

    async def discard_upload(self, public_path: str) -> None:
        """Remove an upload stored by save_upload (used when its write is rolled back)."""
        target = self.uploads_dir / Path(public_path).name

        def remove() -> None:
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove orphaned upload {target.name}: {e}")

        await self._run_io("upload", remove)

    def ensure_layout(self) -> None:
        """Create the data and uploads directories if missing."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError("init", str(e))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def validate(document: ConfigDocument | dict[str, Any]) -> dict[str, Any]:
        """
        Check the document shape before it is written.

        Returns:
            The JSON-ready payload

        Raises:
            ConfigInvalidError: If the document is not a mapping, projects is
                not a list, or an entity fails its schema
        """
        if isinstance(document, ConfigDocument):
            # Mutators may have assigned wrong types in place; dump leniently
            payload = document.model_dump(by_alias=True, mode="json", warnings=False)
        else:
            payload = document

        if not isinstance(payload, dict):
            raise ConfigInvalidError("document must be an object")
        if not isinstance(payload.get("projects"), list):
            raise ConfigInvalidError("projects must be a list")

        try:
            ConfigDocument.model_validate(payload)
        except ValidationError as e:
            raise ConfigInvalidError(f"{e.error_count()} invalid field(s)")

        return payload

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    async def _run_io(self, operation: str, func: Callable[[], T]) -> T:
        """Run blocking I/O in a thread with the store timeout."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(func), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Storage {operation} timed out after {self.timeout}s")
            raise StorageUnavailableError(operation, "timed out")

    async def _run_exclusive(self, operation: str, func: Callable[[], T]) -> T:
        """
        Run func in a worker thread while holding the writer lock.

        The lock is released by the thread's completion callback rather than
        by the caller, so a timed-out or cancelled caller never lets the next
        writer start before this one has finished.
        """
        try:
            await asyncio.wait_for(self._write_lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Storage {operation} timed out waiting for the writer queue")
            raise StorageUnavailableError(operation, "timed out waiting for writer")

        try:
            cycle = asyncio.ensure_future(asyncio.to_thread(func))
        except BaseException:
            self._write_lock.release()
            raise
        cycle.add_done_callback(self._release_writer)

        try:
            return await asyncio.wait_for(asyncio.shield(cycle), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Storage {operation} exceeded {self.timeout}s; "
                "the write continues in the background"
            )
            cycle.add_done_callback(self._log_late_cycle)
            raise StorageUnavailableError(operation, "timed out")

    def _release_writer(self, cycle: asyncio.Future) -> None:
        self._write_lock.release()

    @staticmethod
    def _log_late_cycle(cycle: asyncio.Future) -> None:
        if cycle.cancelled():
            return
        error = cycle.exception()
        if error is not None:
            logger.error(f"Background write failed after timeout: {error}")
        else:
            logger.info("Background write completed after timeout")

    # -------------------------------------------------------------------------
    # Blocking primitives (run in worker threads)
    # -------------------------------------------------------------------------

    def _run_cycle(self, mutator: Callable[[ConfigDocument], T]) -> T:
        document = self._load_document()
        result = mutator(document)
        self._save_document(document)
        return result

    def _read_text(self) -> str:
        return self.config_path.read_text(encoding="utf-8")

    def _load_document(self) -> ConfigDocument:
        try:
            raw = self._read_text()
        except FileNotFoundError:
            raw = self._create_if_missing()
            if raw is None:
                return ConfigDocument.empty()
        except OSError as e:
            logger.error(f"Failed to read config document: {e}")
            raise StorageUnavailableError("load", str(e))

        try:
            return ConfigDocument.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            # Fail open: serve an empty document rather than an error
            logger.error(f"Config document is corrupt, using empty document: {e}")
            return ConfigDocument.empty()

    def _create_if_missing(self) -> str | None:
        """
        Persist the empty document if there is still no file.

        Returns None when the empty document was written, or the file
        content if another thread created it first.
        """
        with self._file_lock:
            if self.config_path.exists():
                try:
                    return self._read_text()
                except OSError as e:
                    raise StorageUnavailableError("load", str(e))

            payload = ConfigDocument.empty().to_json_dict()
            self._write_atomic(self.config_path, self._encode(payload), locked=True)
            logger.info(f"Created empty config document: {self.config_path.name}")
            return None

    def _save_document(self, document: ConfigDocument | dict[str, Any]) -> None:
        payload = self.validate(document)
        self._write_atomic(self.config_path, self._encode(payload))
        logger.info(
            f"Saved config document ({len(payload['projects'])} projects, "
            f"profile={'set' if payload.get('profile') else 'none'})"
        )

    @staticmethod
    def _encode(payload: dict[str, Any]) -> bytes:
        return (json.dumps(payload, indent=2, ensure_ascii=False) + "\n").encode("utf-8")

    def _write_atomic(self, path: Path, data: bytes, locked: bool = False) -> None:
        """
        Write data to path via a temp file and os.replace.

        A crash at any point leaves either the old file or the new one.
        """
        tmp_path = path.with_name(f".{path.name}.{uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if locked:
                os.replace(tmp_path, path)
            else:
                with self._file_lock:
                    os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path.name}: {e}")
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not remove temp file {tmp_path.name}")
            raise StorageUnavailableError("save", str(e))
