"""
Name: Provisioning Tests

Responsibilities:
  - provision_for: skipped when not configured, any provider failure keeps
    the record, success attaches resources and schedules the custom domain
  - teardown_for: best effort
  - DomainRegistrationScheduler: delay, retries, failure, cancellation and
    eviction of finished tasks
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from sees_console.application.provisioning import (
    DomainRegistrationScheduler,
    ProvisioningService,
    TaskStatus,
)
from sees_console.domain.entities import SeesCreate
from sees_console.infrastructure.repositories.in_memory import InMemorySeesRepository

pytestmark = pytest.mark.unit


class _RecordingSleep:
    def __init__(self) -> None:
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _scheduler(provisioner, *, max_attempts=1, sleep=None):
    return DomainRegistrationScheduler(
        provisioner,
        delay_seconds=30,
        max_attempts=max_attempts,
        retry_wait_initial_seconds=0,
        retry_wait_max_seconds=0,
        sleep=sleep or _RecordingSleep(),
    )


async def _record(repo: InMemorySeesRepository, domain: str = "example.co.jp"):
    return await repo.create_sees(
        SeesCreate(
            title="Closing",
            target_domain=domain,
            redirect_url="https://example.org",
            template_variables={},
        )
    )


# ============================================================================
# ProvisioningService
# ============================================================================


async def test_provision_skipped_when_not_configured(fake_provisioner):
    fake_provisioner.configured = False
    repo = InMemorySeesRepository()
    service = ProvisioningService(fake_provisioner, repo, _scheduler(fake_provisioner))
    sees = await _record(repo)

    outcome = await service.provision_for(sees)

    assert outcome.sees == sees
    assert outcome.domain_task is None
    assert fake_provisioner.provisioned == []


async def test_provision_attaches_resources_and_schedules(fake_provisioner):
    repo = InMemorySeesRepository()
    scheduler = _scheduler(fake_provisioner)
    service = ProvisioningService(fake_provisioner, repo, scheduler)
    sees = await _record(repo)

    outcome = await service.provision_for(sees)
    await scheduler.wait_idle()

    assert fake_provisioner.provisioned == [("example.co.jp", "example-co-jp")]
    assert outcome.sees.static_app_name == "stapp-example-co-jp-dev-je-001-abcde"
    assert outcome.sees.dns_zone_name == "example.co.jp"
    assert outcome.sees.name_servers == [
        "ns1-01.azure-dns.com.",
        "ns2-01.azure-dns.net.",
    ]
    stored = await repo.get_sees(sees.id)
    assert stored.static_app_name == outcome.sees.static_app_name
    assert fake_provisioner.registered == [
        ("stapp-example-co-jp-dev-je-001-abcde", "example.co.jp")
    ]
    assert scheduler.status(outcome.domain_task.id).status is TaskStatus.SUCCEEDED


async def test_provision_failure_keeps_record_unchanged(fake_provisioner):
    fake_provisioner.fail_provision = True
    repo = InMemorySeesRepository()
    service = ProvisioningService(fake_provisioner, repo, _scheduler(fake_provisioner))
    sees = await _record(repo)

    outcome = await service.provision_for(sees)

    assert outcome.sees == sees
    assert outcome.domain_task is None
    stored = await repo.get_sees(sees.id)
    assert stored.static_app_name is None
    assert stored.ns_records == []


async def test_unexpected_provider_error_keeps_record(fake_provisioner):
    fake_provisioner.provision_error = ValueError("Invalid tenant id provided")
    repo = InMemorySeesRepository()
    service = ProvisioningService(fake_provisioner, repo, _scheduler(fake_provisioner))
    sees = await _record(repo)

    outcome = await service.provision_for(sees)

    assert outcome.sees == sees
    assert outcome.domain_task is None
    assert (await repo.get_sees(sees.id)).static_app_name is None


async def test_teardown_without_resources_is_noop(fake_provisioner):
    repo = InMemorySeesRepository()
    service = ProvisioningService(fake_provisioner, repo, _scheduler(fake_provisioner))
    sees = await _record(repo)

    assert await service.teardown_for(sees) is False
    assert fake_provisioner.torn_down == []


async def test_teardown_failure_is_swallowed(fake_provisioner):
    repo = InMemorySeesRepository()
    scheduler = _scheduler(fake_provisioner)
    service = ProvisioningService(fake_provisioner, repo, scheduler)
    provisioned = (await service.provision_for(await _record(repo))).sees
    await scheduler.wait_idle()
    fake_provisioner.fail_teardown = True

    assert await service.teardown_for(provisioned) is False
    assert fake_provisioner.torn_down == [
        ("example.co.jp", "stapp-example-co-jp-dev-je-001-abcde")
    ]


# ============================================================================
# DomainRegistrationScheduler
# ============================================================================


async def test_scheduler_waits_the_configured_delay(fake_provisioner):
    sleep = _RecordingSleep()
    scheduler = _scheduler(fake_provisioner, sleep=sleep)

    task = scheduler.schedule("stapp-a", "a.example")
    assert task.status is TaskStatus.PENDING
    await scheduler.wait_idle()

    assert sleep.calls == [30]
    done = scheduler.status(task.id)
    assert done.status is TaskStatus.SUCCEEDED
    assert done.attempts == 1
    assert done.finished_at is not None


async def test_scheduler_single_attempt_marks_failure(fake_provisioner):
    fake_provisioner.register_failures = 1
    scheduler = _scheduler(fake_provisioner)

    task = scheduler.schedule("stapp-a", "a.example")
    await scheduler.wait_idle()

    failed = scheduler.status(task.id)
    assert failed.status is TaskStatus.FAILED
    assert failed.attempts == 1
    assert failed.error == "Custom domain registration failed"


async def test_scheduler_retries_when_configured(fake_provisioner):
    fake_provisioner.register_failures = 2
    scheduler = _scheduler(fake_provisioner, max_attempts=3)

    task = scheduler.schedule("stapp-a", "a.example")
    await scheduler.wait_idle()

    done = scheduler.status(task.id)
    assert done.status is TaskStatus.SUCCEEDED
    assert done.attempts == 3
    assert len(fake_provisioner.registered) == 3


async def test_scheduler_shutdown_cancels_pending(fake_provisioner):
    async def never(_seconds: float) -> None:
        await asyncio.Event().wait()

    scheduler = _scheduler(fake_provisioner, sleep=never)
    task = scheduler.schedule("stapp-a", "a.example")
    await asyncio.sleep(0)

    await scheduler.shutdown()

    assert scheduler.status(task.id).status is TaskStatus.CANCELLED
    assert fake_provisioner.registered == []


def test_scheduler_rejects_zero_attempts(fake_provisioner):
    with pytest.raises(ValueError):
        DomainRegistrationScheduler(fake_provisioner, delay_seconds=0, max_attempts=0)


async def test_task_to_dict_uses_camel_case(fake_provisioner):
    scheduler = _scheduler(fake_provisioner)
    task = scheduler.schedule("stapp-a", "a.example")
    await scheduler.wait_idle()

    data = task.to_dict()
    assert set(data) == {
        "taskId",
        "staticAppName",
        "domain",
        "status",
        "attempts",
        "error",
        "createdAt",
        "finishedAt",
    }
    assert data["status"] == "pending"
    assert data["finishedAt"] is None
    assert scheduler.status(task.id).to_dict()["status"] == "succeeded"


async def test_unexpected_teardown_error_is_swallowed(fake_provisioner):
    repo = InMemorySeesRepository()
    scheduler = _scheduler(fake_provisioner)
    service = ProvisioningService(fake_provisioner, repo, scheduler)
    provisioned = (await service.provision_for(await _record(repo))).sees
    await scheduler.wait_idle()
    fake_provisioner.teardown_error = ValueError("Invalid tenant id provided")

    assert await service.teardown_for(provisioned) is False


async def test_finished_tasks_are_evicted_after_retention(fake_provisioner):
    now = [datetime(2025, 1, 1, tzinfo=timezone.utc)]
    scheduler = DomainRegistrationScheduler(
        fake_provisioner,
        delay_seconds=0,
        sleep=_RecordingSleep(),
        retention_seconds=600,
        clock=lambda: now[0],
    )
    task = scheduler.schedule("stapp-a", "a.example")
    await scheduler.wait_idle()

    now[0] += timedelta(seconds=599)
    assert scheduler.status(task.id).status is TaskStatus.SUCCEEDED

    now[0] += timedelta(seconds=1)
    assert scheduler.status(task.id) is None


async def test_unfinished_tasks_are_never_evicted(fake_provisioner):
    async def never(_seconds: float) -> None:
        await asyncio.Event().wait()

    now = [datetime(2025, 1, 1, tzinfo=timezone.utc)]
    scheduler = DomainRegistrationScheduler(
        fake_provisioner,
        delay_seconds=30,
        sleep=never,
        retention_seconds=0,
        clock=lambda: now[0],
    )
    task = scheduler.schedule("stapp-a", "a.example")
    await asyncio.sleep(0)

    now[0] += timedelta(days=1)
    assert scheduler.status(task.id).status is TaskStatus.PENDING

    await scheduler.shutdown()
