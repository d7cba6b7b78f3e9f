"""
===============================================================================
CRC CARD — application/provisioning.py
===============================================================================

Components:
  - ProvisioningService
  - DomainRegistrationScheduler

Responsibilities:
  - Run the cloud side effects of SEES creation/deletion as best-effort
    secondary steps: the primary database operation never fails because of
    them.
  - Persist provisioned resources (static app, DNS zone, name servers) on the
    record once the provider answers.
  - Register the custom domain as an explicit deferred task: wait, then call
    the provider (tenacity retry up to max_attempts), keeping a per-task
    status that can be queried.
  - Cancel pending deferred tasks on shutdown.

Collaborators:
  - domain.services.CloudProvisioner (blocking SDK calls, run via
    asyncio.to_thread)
  - domain.repositories.SeesRepository.attach_cloud_resources
  - tenacity.AsyncRetrying
  - crosscutting.metrics (provisioning / domain registration outcomes)

Constraints:
  - Failures are logged and counted, never re-raised to the request.
  - Task status lives in process memory; it is lost on restart.
===============================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set
from uuid import uuid4

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ..crosscutting.exceptions import CloudProvisioningError, SeesConsoleError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_domain_registration, record_provisioning
from ..domain.entities import Sees
from ..domain.repositories import SeesRepository
from ..domain.services import CloudProvisioner, project_name_for


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Deferred custom domain registration
# =============================================================================


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class DomainRegistrationTask:
    id: str
    static_app_name: str
    domain: str
    status: TaskStatus = TaskStatus.PENDING
    attempts: int = 0
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "taskId": self.id,
            "staticAppName": self.static_app_name,
            "domain": self.domain,
            "status": self.status.value,
            "attempts": self.attempts,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying custom domain registration",
        extra={
            "attempt": retry_state.attempt_number,
            "error": str(exc) if exc else None,
        },
    )


class DomainRegistrationScheduler:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      DomainRegistrationScheduler

    Responsibilities:
      - schedule(): start a detached task and return its snapshot
      - status(): current snapshot of a task (or None); finished tasks are
        evicted once older than the retention window
      - shutdown(): cancel unfinished tasks and wait for them

    Collaborators:
      - CloudProvisioner.register_custom_domain
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        provisioner: CloudProvisioner,
        *,
        delay_seconds: float,
        max_attempts: int = 1,
        retry_wait_initial_seconds: float = 1.0,
        retry_wait_max_seconds: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        retention_seconds: float = 3600.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._provisioner = provisioner
        self._delay_seconds = max(0.0, float(delay_seconds))
        self._max_attempts = max_attempts
        self._retry_wait_initial = retry_wait_initial_seconds
        self._retry_wait_max = retry_wait_max_seconds
        self._sleep = sleep
        self._retention = timedelta(seconds=max(0.0, float(retention_seconds)))
        self._clock = clock
        self._tasks: Dict[str, DomainRegistrationTask] = {}
        self._running: Set[asyncio.Task] = set()

    def schedule(self, static_app_name: str, domain: str) -> DomainRegistrationTask:
        self._evict_finished()
        task = DomainRegistrationTask(
            id=str(uuid4()),
            static_app_name=static_app_name,
            domain=domain,
            created_at=self._clock(),
        )
        self._tasks[task.id] = task
        runner = asyncio.create_task(
            self._run(task.id), name=f"domain-registration-{task.id}"
        )
        self._running.add(runner)
        runner.add_done_callback(self._running.discard)
        logger.info(
            "Custom domain registration scheduled",
            extra={
                "task_id": task.id,
                "static_app_name": static_app_name,
                "domain": domain,
                "delay_seconds": self._delay_seconds,
            },
        )
        return task

    def status(self, task_id: str) -> Optional[DomainRegistrationTask]:
        self._evict_finished()
        return self._tasks.get(task_id)

    async def wait_idle(self) -> None:
        """Wait until every scheduled task has finished."""
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def shutdown(self) -> None:
        pending = [t for t in self._running if not t.done()]
        if not pending:
            return
        logger.info(
            "Cancelling pending domain registrations", extra={"count": len(pending)}
        )
        for runner in pending:
            runner.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _evict_finished(self) -> None:
        """Drop finished tasks once they are older than the retention window."""
        cutoff = self._clock() - self._retention
        expired = [
            task_id
            for task_id, task in self._tasks.items()
            if task.finished_at is not None and task.finished_at <= cutoff
        ]
        for task_id in expired:
            del self._tasks[task_id]

    def _update(self, task_id: str, **changes) -> DomainRegistrationTask:
        task = replace(self._tasks[task_id], **changes)
        self._tasks[task_id] = task
        return task

    async def _register_once(self, task_id: str) -> None:
        task = self._tasks[task_id]
        self._update(task_id, attempts=task.attempts + 1)
        await asyncio.to_thread(
            self._provisioner.register_custom_domain,
            task.static_app_name,
            task.domain,
        )

    async def _run(self, task_id: str) -> None:
        try:
            await self._sleep(self._delay_seconds)
            self._update(task_id, status=TaskStatus.RUNNING)

            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential_jitter(
                    initial=self._retry_wait_initial,
                    max=self._retry_wait_max,
                    jitter=self._retry_wait_initial,
                ),
                retry=retry_if_exception_type(CloudProvisioningError),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    await self._register_once(task_id)
        except asyncio.CancelledError:
            self._update(
                task_id, status=TaskStatus.CANCELLED, finished_at=self._clock()
            )
            record_domain_registration(TaskStatus.CANCELLED.value)
            raise
        except SeesConsoleError as exc:
            self._fail(task_id, exc.message)
        except Exception as exc:
            # R: Detached task: nobody awaits it, so nothing may escape unlogged.
            logger.exception(
                "Unexpected error in custom domain registration",
                extra={"task_id": task_id},
            )
            self._fail(task_id, str(exc) or type(exc).__name__)
        else:
            task = self._update(
                task_id, status=TaskStatus.SUCCEEDED, finished_at=self._clock()
            )
            record_domain_registration(TaskStatus.SUCCEEDED.value)
            logger.info(
                "Custom domain registered",
                extra={
                    "task_id": task_id,
                    "domain": task.domain,
                    "attempts": task.attempts,
                },
            )

    def _fail(self, task_id: str, message: str) -> None:
        task = self._update(
            task_id, status=TaskStatus.FAILED, error=message, finished_at=self._clock()
        )
        record_domain_registration(TaskStatus.FAILED.value)
        logger.error(
            "Custom domain registration failed",
            extra={
                "task_id": task_id,
                "domain": task.domain,
                "attempts": task.attempts,
                "error": message,
            },
        )


# =============================================================================
# Provisioning (best-effort)
# =============================================================================


@dataclass(frozen=True)
class ProvisioningOutcome:
    sees: Sees
    domain_task: Optional[DomainRegistrationTask] = None


class ProvisioningService:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      ProvisioningService

    Responsibilities:
      - provision_for(): DNS zone + static app, persist them, schedule the
        custom domain registration
      - teardown_for(): delete cloud resources of a record

    Collaborators:
      - CloudProvisioner, SeesRepository, DomainRegistrationScheduler
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        provisioner: CloudProvisioner,
        sees_repository: SeesRepository,
        scheduler: DomainRegistrationScheduler,
    ) -> None:
        self._provisioner = provisioner
        self._sees = sees_repository
        self._scheduler = scheduler

    @property
    def scheduler(self) -> DomainRegistrationScheduler:
        return self._scheduler

    async def provision_for(self, sees: Sees) -> ProvisioningOutcome:
        if not self._provisioner.is_configured():
            record_provisioning("provision", "skipped")
            logger.info(
                "Cloud provisioning not configured, skipping",
                extra={"sees_id": sees.id},
            )
            return ProvisioningOutcome(sees=sees)

        domain = sees.target_domain
        try:
            resources = await asyncio.to_thread(
                self._provisioner.provision, domain, project_name_for(domain)
            )
            if resources is None:
                record_provisioning("provision", "skipped")
                return ProvisioningOutcome(sees=sees)

            updated = await self._sees.attach_cloud_resources(
                sees.id,
                static_app_name=resources.static_app_name,
                static_app_url=resources.static_app_url,
                dns_zone_name=resources.dns_zone_name,
                name_servers=list(resources.name_servers),
            )
        except SeesConsoleError as exc:
            record_provisioning("provision", "failed")
            logger.error(
                "Cloud provisioning failed, record kept without resources",
                extra={
                    "sees_id": sees.id,
                    "error_id": exc.error_id,
                    "error": exc.message,
                },
            )
            return ProvisioningOutcome(sees=sees)
        except Exception:
            # R: the record is already committed; no provider error may undo that.
            record_provisioning("provision", "failed")
            logger.exception(
                "Unexpected cloud provisioning error, record kept without resources",
                extra={"sees_id": sees.id},
            )
            return ProvisioningOutcome(sees=sees)

        record_provisioning("provision", "succeeded")
        current = updated or sees
        task = self._scheduler.schedule(resources.static_app_name, domain)
        return ProvisioningOutcome(sees=current, domain_task=task)

    async def teardown_for(self, sees: Sees) -> bool:
        if not (sees.static_app_name or sees.dns_zone_name):
            return False
        if not self._provisioner.is_configured():
            record_provisioning("teardown", "skipped")
            return False
        try:
            await asyncio.to_thread(
                self._provisioner.teardown,
                sees.dns_zone_name or "",
                sees.static_app_name or "",
            )
        except SeesConsoleError as exc:
            record_provisioning("teardown", "failed")
            logger.error(
                "Cloud teardown failed, deleting record anyway",
                extra={
                    "sees_id": sees.id,
                    "error_id": exc.error_id,
                    "error": exc.message,
                },
            )
            return False
        except Exception:
            record_provisioning("teardown", "failed")
            logger.exception(
                "Unexpected cloud teardown error, deleting record anyway",
                extra={"sees_id": sees.id},
            )
            return False
        record_provisioning("teardown", "succeeded")
        return True
