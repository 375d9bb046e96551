"""
Upload coordinator.

Validates a session configuration, discovers the files and drives each one
through the job pipeline under a bounded concurrency budget.
Follows Dependency Inversion Principle - every collaborator is injected.
"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..events import EventEmitter
from ..exceptions import (
    StorjException,
    ConfigurationError,
    ResourceExhaustionError,
)
from ..keyring import KeyRing
from .concurrency import ConcurrencyController
from .discovery import FileDiscovery
from .models import UploadSessionConfig, UploadSession, UploadJob, UploadSummary
from .pipeline import JobPipeline
from .protocols import StorageClient, CipherStreamFactory, ResourceSignal
from .registry import JobRegistry
from .retry import RetryStrategy
from .services import EncryptionService, TokenService, StorageService, ReplicationService
from .watchdog import ResourceWatchdog, MemorySignal
from .workspace import WorkspaceManager

logger = logging.getLogger('storjpy.upload.coordinator')


class UploadCoordinator:
    """
    Coordinates multi-file upload sessions.

    Uses dependency injection for all collaborators, making it:
    - Testable (fake client, key ring and resource signal)
    - Extensible (swap cipher factory or retry strategy)

    Progress is logged and also published as 'progress' events on
    the events emitter.
    """

    def __init__(
        self,
        client: StorageClient,
        keyring: KeyRing,
        cipher_factory: Optional[CipherStreamFactory] = None,
        resource_signal: Optional[ResourceSignal] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        workspace_dir: Optional[Union[str, Path]] = None,
        discovery: Optional[FileDiscovery] = None,
        events: Optional[EventEmitter] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            client: Storage bridge client
            keyring: Key ring receiving secrets of stored files
            cipher_factory: Encrypt transform factory (AES-256-CTR if None)
            resource_signal: Low-resource signal (free-memory polling if None)
            retry_strategy: Delay policy for token retries (immediate if None)
            workspace_dir: Parent directory for temporary workspaces
            discovery: File discovery implementation
            events: Emitter for progress events
        """
        self._client = client
        self._keyring = keyring
        self._cipher_factory = cipher_factory
        self._resource_signal = resource_signal
        self._retry_strategy = retry_strategy
        self._workspace_dir = workspace_dir
        self._discovery = discovery or FileDiscovery()
        self.events = events or EventEmitter()

    async def start(self, config: UploadSessionConfig) -> UploadSummary:
        """
        Run an upload session.

        Configuration and discovery failures are returned in the summary
        before any job is created. Per-file failures abort that file only.

        Args:
            config: Session configuration

        Returns:
            Terminal summary; error holds the first session-fatal condition
        """
        session = UploadSession(config=config)

        try:
            config.validate()
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            return UploadSummary(discovered_count=0, uploaded_count=0, error=e)

        self._log_cautions(config)

        result = self._discovery.discover(config.selectors)
        if not result.ok:
            logger.error(str(result.error))
            return UploadSummary(discovered_count=0, uploaded_count=0, error=result.error)

        session.files = result.paths
        logger.info(f"{session.discovered_count} file(s) to upload.")

        run = _SessionRun(self, session)
        return await run.execute()

    def _log_cautions(self, config: UploadSessionConfig) -> None:
        if config.file_concurrency > config.RECOMMENDED_MAX_CONCURRENCY:
            logger.warning(
                f"A file concurrency of {config.file_concurrency} may result in issues!"
            )
        if config.redundancy == 0:
            logger.warning(
                f"A redundancy of {config.redundancy} means files will not be mirrored!"
            )

    def _build_pipeline(
        self,
        registry: JobRegistry,
        workspaces: WorkspaceManager,
        config: UploadSessionConfig
    ) -> JobPipeline:
        return JobPipeline(
            registry=registry,
            workspaces=workspaces,
            encryption=EncryptionService(self._cipher_factory, config.chunk_size),
            tokens=TokenService(self._client, config.max_token_retries, self._retry_strategy),
            storage=StorageService(self._client, self._keyring),
            replication=ReplicationService(self._client),
            bucket=config.bucket,
            redundancy=config.redundancy,
            events=self.events
        )

    def _build_watchdog(self, config: UploadSessionConfig) -> ResourceWatchdog:
        signal = self._resource_signal
        if signal is None and config.watchdog.enabled:
            signal = MemorySignal()
        return ResourceWatchdog(signal, config.watchdog)


class _SessionRun:
    """State of one start() call: registry, pipeline, slots and job tasks."""

    def __init__(self, coordinator: UploadCoordinator, session: UploadSession):
        config = session.config
        self.session = session
        self.registry = JobRegistry(session)
        self.workspaces = WorkspaceManager(coordinator._workspace_dir)
        self.controller = ConcurrencyController(config.file_concurrency)
        self.pipeline = coordinator._build_pipeline(self.registry, self.workspaces, config)
        self.watchdog = coordinator._build_watchdog(config)
        self.last_file: Optional[Path] = None
        self._tasks: List[asyncio.Task] = []
        self._admission: Optional[asyncio.Task] = None

    async def execute(self) -> UploadSummary:
        logger.info("Generating encryption key...")
        self.watchdog.start(self._on_resource_exhausted)
        try:
            self._admission = asyncio.create_task(self._admit_all())
            try:
                await self._admission
            except asyncio.CancelledError:
                if not self.pipeline.aborted:
                    raise
            await self._drain()
        finally:
            self.watchdog.stop()
            for task in self._tasks:
                if not task.done():
                    task.cancel()
            released = self.workspaces.release_all()
            if released:
                logger.info(f"Released {released} open workspace(s)")

        return UploadSummary(
            discovered_count=self.session.discovered_count,
            uploaded_count=self.session.uploaded_count,
            aborted_count=self.session.aborted_count,
            error=self.pipeline.abort_error,
            last_file=self.last_file,
            jobs=self.registry.jobs()
        )

    async def _admit_all(self) -> None:
        for path in self.session.files:
            await self.controller.acquire()
            if self.pipeline.aborted:
                self.controller.release()
                break
            job = self.registry.create(path)
            self._tasks.append(asyncio.create_task(self._run_job(job)))

    async def _run_job(self, job: UploadJob) -> None:
        try:
            await self.pipeline.run(job)
        finally:
            self.last_file = job.source_path
            self.controller.release()

    async def _drain(self) -> None:
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                raise result

        if self.pipeline.aborted:
            self._abort_remaining(self.pipeline.abort_error)

    def _abort_remaining(self, error: StorjException) -> None:
        admitted = {job.source_path for job in self.registry.jobs()}
        for path in self.session.files:
            if path not in admitted:
                self.pipeline.fail(self.registry.create(path), error)

    def _on_resource_exhausted(self, error: ResourceExhaustionError) -> None:
        if self.pipeline.aborted:
            return
        logger.error(f"{error} Aborting {len(self.registry.open_jobs())} open job(s)")
        self.pipeline.abort(error)
        # Admitted jobs finish their current step and abort on their own.
        if self._admission is not None:
            self._admission.cancel()
