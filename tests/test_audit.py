"""
Audit trail: recording, ordering, listing, description and clearing
"""
from datetime import datetime

import pytest

from app.core.errors import EntityNotFound
from app.models import ActionType, AuditTarget
from app.services import audit, registry


async def _record(store, actor, asset_id, action=ActionType.UPDATE, notes=None, **snapshots):
    async with store.transaction(asset_id):
        entry = audit.record_event(
            store,
            asset_id=asset_id,
            asset_type=AuditTarget.DEVICE,
            action=action,
            actor=actor,
            target_name=asset_id,
            notes=notes,
            **snapshots,
        )
    return entry


async def test_snapshots_are_copied_at_record_time(store, actor):
    snapshot = {"status": "Disponível", "accessories": [{"name": "Capa"}]}
    entry = await _record(store, actor, "dev-1", previous_data=snapshot)

    snapshot["accessories"].append({"name": "Mouse"})

    assert entry.previous_data == {"status": "Disponível", "accessories": [{"name": "Capa"}]}
    assert entry.admin_user == "Admin Teste"


async def test_history_is_newest_first_with_insertion_order_on_ties(store, actor, db_session):
    first = await _record(store, actor, "dev-1", notes="primeiro")
    second = await _record(store, actor, "dev-1", notes="segundo")
    await _record(store, actor, "dev-2", notes="outro ativo")
    same_instant = datetime(2024, 1, 1, 12, 0, 0)
    first.timestamp = second.timestamp = same_instant
    await db_session.commit()

    history = await audit.list_history(store, "dev-1")

    assert [entry.notes for entry in history] == ["segundo", "primeiro"]


async def test_list_logs_limit_and_search(store, actor):
    for index in range(5):
        await _record(store, actor, f"dev-{index}", notes=f"nota {index}")
    await _record(store, actor, "dev-x", notes="Troca de tela")

    assert len(await audit.list_logs(store, limit=3)) == 3
    found = await audit.list_logs(store, limit=50, search="tela")
    assert [entry.asset_id for entry in found] == ["dev-x"]


async def test_get_log_unknown_id(store):
    with pytest.raises(EntityNotFound):
        await audit.get_log(store, 999)


async def test_clear_logs_leaves_one_system_entry(store, actor, log_count):
    for index in range(3):
        await _record(store, actor, f"dev-{index}")

    removed = await audit.clear_logs(store, actor)

    assert removed == 3
    assert await log_count() == 1
    remaining = await audit.list_logs(store, limit=10)
    assert remaining[0].asset_type == AuditTarget.SYSTEM.value
    assert remaining[0].action == ActionType.DELETE.value
    assert "3" in remaining[0].notes


async def test_describe_log_resolves_current_names(store, actor, seed):
    sales = await seed.sector("Vendas")
    support = await seed.sector("Suporte")
    user = await registry.create_user(
        store, actor, {"full_name": "João Souza", "cpf": "222", "sector_id": sales.id}
    )
    await registry.update_user(store, actor, user.id, {"sector_id": support.id})

    update_entry = (await audit.list_history(store, user.id))[0]
    entry, rows = await audit.describe_log(store, update_entry.id)

    assert entry.action == ActionType.UPDATE.value
    assert [row["rawKey"] for row in rows] == ["sectorId"]
    assert rows[0]["field"] == "Setor"
    assert (rows[0]["oldDisplay"], rows[0]["newDisplay"]) == ("Vendas", "Suporte")
