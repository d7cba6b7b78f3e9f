"""
Name: SEES Use Case Tests

Responsibilities:
  - Authorization is checked before any mutation
  - Required fields and template values are validated
  - Draft cleanup and best-effort provisioning after create
  - Update / delete / render semantics
"""

import pytest

from sees_console.application.provisioning import TaskStatus
from sees_console.application.template_engine import sample_values
from sees_console.application.usecases.sees import (
    CreateSeesInput,
    UpdateSeesInput,
)
from sees_console.container import assemble
from sees_console.crosscutting.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from sees_console.identity.users import SessionUser, UserRole
from sees_console.infrastructure.kv.in_memory import InMemoryKeyValueStore
from sees_console.infrastructure.repositories.in_memory import (
    InMemorySeesRepository,
    InMemoryUserRepository,
)

pytestmark = pytest.mark.unit


def _actor(role: UserRole) -> SessionUser:
    return SessionUser(
        user_id="3f1d2c4e-0000-4000-8000-000000000001",
        name="Actor",
        email="actor@example.com",
        role=role,
    )


def _input(**overrides) -> CreateSeesInput:
    data = dict(
        title="Closing notice",
        target_domain="Example.CO.JP",
        redirect_url="https://example.org",
        template_variables=sample_values(),
        note="  ",
        name_servers=[" ns1.example.net ", ""],
    )
    data.update(overrides)
    return CreateSeesInput(**data)


@pytest.fixture
def cloud_container(settings, fake_provisioner):
    return assemble(
        settings,
        store=InMemoryKeyValueStore(),
        users=InMemoryUserRepository(),
        sees=InMemorySeesRepository(),
        provisioner=fake_provisioner,
    )


# ============================================================================
# create
# ============================================================================


async def test_viewer_cannot_create_and_nothing_is_written(container):
    use_case = container.create_sees_use_case()

    with pytest.raises(AuthorizationError):
        await use_case.execute(actor=_actor(UserRole.VIEWER), data=_input())

    assert await container.sees.list_sees() == []


async def test_anonymous_create_is_unauthenticated(container):
    with pytest.raises(AuthenticationError):
        await container.create_sees_use_case().execute(actor=None, data=_input())


async def test_create_normalizes_fields(container):
    result = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    sees = result.sees
    assert sees.id == 1
    assert sees.display_id == "0001"
    assert sees.target_domain == "example.co.jp"
    assert sees.note is None
    assert sees.name_servers == ["ns1.example.net"]
    assert result.domain_task is None


async def test_create_requires_fields(container):
    with pytest.raises(ValidationError) as exc_info:
        await container.create_sees_use_case().execute(
            actor=_actor(UserRole.EDITOR),
            data=_input(title="", redirect_url=None, template_variables=None),
        )

    assert exc_info.value.errors == [
        "title is required",
        "redirectUrl is required",
        "templateVariables is required",
    ]
    assert await container.sees.list_sees() == []


async def test_create_rejects_invalid_template_values(container):
    values = sample_values()
    values["REDIRECT_URL"] = "not-a-url"

    with pytest.raises(ValidationError) as exc_info:
        await container.create_sees_use_case().execute(
            actor=_actor(UserRole.EDITOR), data=_input(template_variables=values)
        )

    assert exc_info.value.errors == ["Redirect URL must be a valid URL"]


async def test_duplicate_domain_conflicts(container):
    use_case = container.create_sees_use_case()
    await use_case.execute(actor=_actor(UserRole.EDITOR), data=_input())

    with pytest.raises(ConflictError):
        await use_case.execute(
            actor=_actor(UserRole.EDITOR), data=_input(target_domain="example.co.jp")
        )


async def test_create_consumes_the_draft(container):
    draft = await container.drafts.save(
        title="t", target_domain="example.co.jp", redirect_url="https://x.example"
    )

    await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input(draft_id=draft.id)
    )

    assert await container.drafts.get(draft.id) is None


# ============================================================================
# update / delete / render
# ============================================================================


async def test_update_changes_mutable_fields(container):
    created = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )
    values = sample_values()
    values["SERVICE_NAME"] = "Renamed"

    result = await container.update_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR),
        sees_id=created.sees.id,
        data=UpdateSeesInput(
            redirect_url="https://new.example.org",
            template_variables=values,
            note="moved",
        ),
    )

    assert result.sees.redirect_url == "https://new.example.org"
    assert result.sees.note == "moved"
    assert result.sees.template_variables["SERVICE_NAME"] == "Renamed"
    assert result.sees.target_domain == "example.co.jp"


async def test_update_requires_redirect_and_values(container):
    created = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    with pytest.raises(ValidationError):
        await container.update_sees_use_case().execute(
            actor=_actor(UserRole.EDITOR),
            sees_id=created.sees.id,
            data=UpdateSeesInput(redirect_url="", template_variables=None),
        )


async def test_update_missing_record(container):
    with pytest.raises(NotFoundError):
        await container.update_sees_use_case().execute(
            actor=_actor(UserRole.EDITOR),
            sees_id=99,
            data=UpdateSeesInput(
                redirect_url="https://x.example", template_variables=sample_values()
            ),
        )


async def test_viewer_cannot_delete(container):
    created = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    with pytest.raises(AuthorizationError):
        await container.delete_sees_use_case().execute(
            actor=_actor(UserRole.VIEWER), sees_id=created.sees.id
        )

    assert await container.sees.get_sees(created.sees.id) is not None


async def test_delete_removes_record(container):
    created = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    result = await container.delete_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), sees_id=created.sees.id
    )

    assert result.deleted is True
    assert result.cloud_resources_removed is False
    with pytest.raises(NotFoundError):
        await container.get_sees_use_case().execute(created.sees.id)


async def test_render_substitutes_stored_values(container):
    created = await container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    html = (await container.render_sees_use_case().execute(created.sees.id)).html

    assert "<title>東京都サンプルサービス</title>" in html
    assert "window.location.href = 'https://www.metro.tokyo.lg.jp/'" in html


async def test_list_is_newest_first(container):
    use_case = container.create_sees_use_case()
    await use_case.execute(actor=_actor(UserRole.EDITOR), data=_input())
    await use_case.execute(
        actor=_actor(UserRole.EDITOR), data=_input(target_domain="second.example")
    )

    items = (await container.list_sees_use_case().execute()).items

    assert [s.target_domain for s in items] == ["second.example", "example.co.jp"]


# ============================================================================
# Cloud provisioning (best effort)
# ============================================================================


async def test_create_provisions_and_schedules_domain(
    cloud_container, fake_provisioner
):
    result = await cloud_container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )
    await cloud_container.scheduler.wait_idle()

    assert result.sees.static_app_name == "stapp-example-co-jp-dev-je-001-abcde"
    assert result.sees.name_servers == [
        "ns1-01.azure-dns.com.",
        "ns2-01.azure-dns.net.",
    ]
    task = cloud_container.scheduler.status(result.domain_task.id)
    assert task.status is TaskStatus.SUCCEEDED
    assert fake_provisioner.registered == [
        ("stapp-example-co-jp-dev-je-001-abcde", "example.co.jp")
    ]


async def test_provisioning_failure_keeps_the_record(cloud_container, fake_provisioner):
    fake_provisioner.fail_provision = True

    result = await cloud_container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )

    assert result.domain_task is None
    stored = await cloud_container.sees.get_sees(result.sees.id)
    assert stored.static_app_name is None
    assert stored.name_servers == ["ns1.example.net"]


async def test_delete_tears_down_cloud_resources(cloud_container, fake_provisioner):
    created = await cloud_container.create_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), data=_input()
    )
    await cloud_container.scheduler.wait_idle()

    result = await cloud_container.delete_sees_use_case().execute(
        actor=_actor(UserRole.EDITOR), sees_id=created.sees.id
    )

    assert result.cloud_resources_removed is True
    assert fake_provisioner.torn_down == [
        ("example.co.jp", "stapp-example-co-jp-dev-je-001-abcde")
    ]
