"""
Term attachments and manual pendency resolution
"""
import pytest

from app.core.errors import EntityNotFound, ReasonRequired
from app.models import ActionType, AuditTarget
from app.models.user import RESOLVED_MANUALLY
from app.services import assignment, audit, registry, terms


@pytest.fixture
async def delivered(store, actor, seed):
    """A device checked out to a user, with its delivery term"""
    user = await seed.user()
    device = await seed.device()
    result = await assignment.checkout(store, actor, "Device", device.id, user.id)
    return user, device, result.term


async def test_attach_and_fetch_file(store, actor, delivered):
    user, _, term = delivered

    await terms.attach_file(store, actor, term.id, "https://files/termo-1.pdf")

    assert term.has_file
    assert await terms.fetch_term_file(store, term.id) == "https://files/termo-1.pdf"
    entry = (await audit.list_history(store, user.id))[0]
    assert entry.action == ActionType.UPDATE.value
    assert entry.previous_data["terms"][0]["fileUrl"] is None
    assert entry.new_data["terms"][0]["fileUrl"] == "https://files/termo-1.pdf"


async def test_remove_file_requires_reason(store, actor, delivered):
    user, _, term = delivered
    await terms.attach_file(store, actor, term.id, "https://files/termo-1.pdf")

    with pytest.raises(ReasonRequired):
        await terms.remove_file(store, actor, term.id, "")

    await terms.remove_file(store, actor, term.id, "Arquivo ilegível")
    term = await store.get_term(term.id)
    assert term.file_url is None
    assert "Arquivo ilegível" in (await audit.list_history(store, user.id))[0].notes


async def test_resolve_pendency_logs_user_system_and_device(store, actor, delivered):
    user, device, term = delivered

    await terms.resolve_pendency(store, actor, term.id, "Termo assinado extraviado")

    term = await store.get_term(term.id)
    assert term.file_url.startswith(RESOLVED_MANUALLY)
    assert term.is_resolved and not term.has_file

    for asset_id in (user.id, "system", device.id):
        entry = (await audit.list_history(store, asset_id))[0]
        assert entry.action == ActionType.RESOLVE_PENDENCY.value
        assert "extraviado" in entry.notes
    system_entry = (await audit.list_history(store, "system"))[0]
    assert system_entry.asset_type == AuditTarget.SYSTEM.value

    with pytest.raises(EntityNotFound):
        await terms.fetch_term_file(store, term.id)


async def test_resolve_pendency_requires_reason(store, actor, delivered, log_count):
    _, _, term = delivered
    before = await log_count()

    with pytest.raises(ReasonRequired):
        await terms.resolve_pendency(store, actor, term.id, None)
    assert await log_count() == before


async def test_fetch_invoice(store, actor):
    device = await registry.create_device(
        store, actor, {"asset_tag": "PAT-9", "purchase_invoice_url": "https://files/nf-9.pdf"}
    )
    bare = await registry.create_device(store, actor, {"asset_tag": "PAT-10"})

    assert await terms.fetch_invoice(store, device.id) == "https://files/nf-9.pdf"
    with pytest.raises(EntityNotFound):
        await terms.fetch_invoice(store, bare.id)
