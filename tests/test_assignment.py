"""
Assignment coordinator: checkout and check-in across assets, holders, terms and audit
"""
import asyncio

import pytest

from app.core.errors import (
    AlreadyInactive,
    AssetNotAvailable,
    AssetNotInUse,
    EntityNotFound,
    HasActiveAssets,
    SimLinkedToDevice,
)
from app.models import AccessoryType, ActionType, DeviceStatus, TermType
from app.services import assignment, audit, lifecycle, registry

AVAILABLE = DeviceStatus.AVAILABLE.value
IN_USE = DeviceStatus.IN_USE.value


def assert_holder_invariant(*assets):
    for asset in assets:
        assert (asset.status == IN_USE) == (asset.current_user_id is not None)


async def test_checkout_then_checkin_round_trip(store, actor, seed):
    user = await seed.user()
    device = await seed.device()

    await assignment.checkout(store, actor, "Device", device.id, user.id, notes="Novo notebook")
    assert (device.status, device.current_user_id) == (IN_USE, user.id)
    assert_holder_invariant(device)

    await assignment.checkin(store, actor, "Device", device.id, notes="Sem avarias")
    assert (device.status, device.current_user_id) == (AVAILABLE, None)
    assert_holder_invariant(device)

    user = await store.get_user(user.id)
    assert [term.type for term in user.terms] == [TermType.DELIVERY.value, TermType.RETURN.value]

    history = await audit.list_history(store, device.id)
    assert [entry.action for entry in history] == [
        ActionType.CHECKIN.value,
        ActionType.CHECKOUT.value,
    ]
    checkout_entry = history[1]
    assert checkout_entry.previous_data["status"] == AVAILABLE
    assert checkout_entry.new_data == {
        "status": IN_USE,
        "currentUserId": user.id,
        "holderName": "Maria Silva",
    }
    assert history[0].id > checkout_entry.id


async def test_checkout_requires_available_asset(store, actor, seed, log_count):
    holder = await seed.user("Ana", "1")
    other = await seed.user("Bia", "2")
    device = await seed.device(status=IN_USE, current_user_id=holder.id)
    device_id, holder_id, other_id = device.id, holder.id, other.id

    with pytest.raises(AssetNotAvailable):
        await assignment.checkout(store, actor, "Device", device_id, other_id)

    device = await store.get_device(device_id)
    assert device.current_user_id == holder_id
    assert await log_count() == 0


async def test_checkout_to_inactive_user_is_rejected(store, actor, seed):
    user = await seed.user(active=False)
    device = await seed.device()
    device_id, user_id = device.id, user.id

    with pytest.raises(AlreadyInactive):
        await assignment.checkout(store, actor, "Device", device_id, user_id)
    assert (await store.get_device(device_id)).status == AVAILABLE


async def test_checkout_to_unknown_user_is_rejected(store, actor, seed):
    device = await seed.device()
    device_id = device.id

    with pytest.raises(EntityNotFound):
        await assignment.checkout(store, actor, "Device", device_id, "missing-user")


async def test_checkin_requires_asset_in_use(store, actor, seed, log_count):
    device = await seed.device()

    with pytest.raises(AssetNotInUse):
        await assignment.checkin(store, actor, "Device", device.id)
    assert await log_count() == 0


async def test_checkout_carries_linked_sim_and_checkin_frees_it(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim()
    device = await seed.device(linked_sim_id=sim.id)

    await assignment.checkout(store, actor, "Device", device.id, user.id)
    assert (sim.status, sim.current_user_id) == (IN_USE, user.id)

    await assignment.checkin(store, actor, "Device", device.id)
    assert (sim.status, sim.current_user_id) == (AVAILABLE, None)
    assert device.linked_sim_id == sim.id
    assert_holder_invariant(device, sim)

    sim_history = await audit.list_history(store, sim.id)
    assert [entry.action for entry in sim_history] == [
        ActionType.CHECKIN.value,
        ActionType.CHECKOUT.value,
    ]
    # the device history only carries its own two events
    assert len(await audit.list_history(store, device.id)) == 2


async def test_checkin_frees_linked_sim_assigned_before_linking(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim(status=IN_USE, current_user_id=user.id)
    device = await seed.device(status=IN_USE, current_user_id=user.id, linked_sim_id=sim.id)

    await assignment.checkin(store, actor, "Device", device.id)

    sim = await store.get_sim(sim.id)
    assert (sim.status, sim.current_user_id) == (AVAILABLE, None)


async def test_linked_sim_cannot_move_on_its_own(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim()
    await seed.device(linked_sim_id=sim.id)
    sim_id, user_id = sim.id, user.id

    with pytest.raises(SimLinkedToDevice):
        await assignment.checkout(store, actor, "Sim", sim_id, user_id)
    with pytest.raises(SimLinkedToDevice):
        await assignment.checkin(store, actor, "Sim", sim_id)


async def test_direct_sim_checkout_and_checkin(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim("11 98888-7777")

    result = await assignment.checkout(store, actor, "Sim", sim.id, user.id)
    assert result.term.asset_details == "[CHIP: 11 98888-7777]"
    assert result.term.asset_kind == "Sim"

    await assignment.checkin(store, actor, "Sim", sim.id)
    assert (sim.status, sim.current_user_id) == (AVAILABLE, None)


async def test_checkin_with_inactivation_orders_events(store, actor, seed):
    user = await seed.user()
    device = await seed.device()
    await assignment.checkout(store, actor, "Device", device.id, user.id)

    result = await assignment.checkin(
        store, actor, "Device", device.id, inactivate_user_after=True
    )

    assert result.user.active is False
    assert device.current_user_id is None

    device_history = await audit.list_history(store, device.id)
    user_history = await audit.list_history(store, user.id)
    checkin_entry = device_history[0]
    inactivate_entry = user_history[0]
    assert checkin_entry.action == ActionType.CHECKIN.value
    assert inactivate_entry.action == ActionType.INACTIVATE.value
    # separate events, the device release first
    assert checkin_entry.id < inactivate_entry.id
    assert inactivate_entry.previous_data["active"] is True
    assert inactivate_entry.new_data["active"] is False


async def test_checkin_with_inactivation_blocked_by_other_holdings(store, actor, seed, log_count):
    user = await seed.user()
    first = await seed.device("TAG-1")
    second = await seed.device("TAG-2")
    user_id, first_id = user.id, first.id
    await assignment.checkout(store, actor, "Device", first_id, user_id)
    await assignment.checkout(store, actor, "Device", second.id, user_id)
    logs_before = await log_count()

    with pytest.raises(HasActiveAssets):
        await assignment.checkin(store, actor, "Device", first_id, inactivate_user_after=True)

    first = await store.get_device(first_id)
    assert (first.status, first.current_user_id) == (IN_USE, user_id)
    assert (await store.get_user(user_id)).active is True
    assert await log_count() == logs_before


async def test_checkin_with_inactivation_counts_linked_sim_as_released(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim()
    device = await seed.device(linked_sim_id=sim.id)
    await assignment.checkout(store, actor, "Device", device.id, user.id)

    result = await assignment.checkin(
        store, actor, "Device", device.id, inactivate_user_after=True
    )

    assert result.user.active is False
    assert sim.current_user_id is None


async def test_accessories_are_replaced_with_fresh_items(store, actor, seed, db_session):
    charger = AccessoryType(name="Carregador")
    db_session.add(charger)
    await db_session.commit()
    user = await seed.user()
    device = await seed.device()

    await assignment.checkout(
        store, actor, "Device", device.id, user.id,
        accessories=[{"accessory_type_id": charger.id, "name": "Carregador"}],
    )
    first_ids = {item.id for item in device.accessories}
    await assignment.checkin(store, actor, "Device", device.id)
    await assignment.checkout(
        store, actor, "Device", device.id, user.id,
        accessories=[{"accessory_type_id": charger.id, "name": "Carregador"},
                     {"accessory_type_id": None, "name": "Capa"}],
    )

    assert [item.name for item in device.accessories] == ["Carregador", "Capa"]
    assert not first_ids & {item.id for item in device.accessories}
    history = await audit.list_history(store, device.id)
    assert history[0].new_data["accessories"][1] == {"accessoryTypeId": None, "name": "Capa"}


async def test_term_description_is_frozen_at_checkout(store, actor, seed):
    model = await seed.model("ThinkPad T14")
    user = await seed.user()
    device = await seed.device("PAT-100", model_id=model.id, serial_number=None)

    result = await assignment.checkout(store, actor, "Device", device.id, user.id)
    await registry.update_device(store, actor, device.id, {"asset_tag": "PAT-200"})

    term = await store.get_term(result.term.id)
    assert term.asset_details == "[TAG: PAT-100 | S/N: S/S | IMEI: IMEI-PAT-100] ThinkPad T14"
    assert term.asset_id == device.id


async def test_returned_checklist_is_recorded_not_enforced(store, actor, seed):
    user = await seed.user()
    device = await seed.device()
    await assignment.checkout(store, actor, "Device", device.id, user.id)

    await assignment.checkin(
        store, actor, "Device", device.id,
        returned_checklist={"Carregador": True, "Capa": False},
    )

    assert device.status == AVAILABLE
    entry = (await audit.list_history(store, device.id))[0]
    assert entry.new_data["returnedChecklist"] == {"Carregador": True, "Capa": False}
    assert "Capa: FALTANDO" in entry.notes


async def test_sync_sector_copies_holder_sector(store, actor, seed):
    sector = await seed.sector("Vendas")
    user = await seed.user(sector_id=sector.id)
    device = await seed.device()

    await assignment.checkout(store, actor, "Device", device.id, user.id, sync_sector=True)

    assert device.sector_id == sector.id
    entry = (await audit.list_history(store, device.id))[0]
    assert entry.previous_data["sectorId"] is None
    assert entry.new_data["sectorId"] == sector.id


async def test_retired_device_cannot_be_checked_out(store, actor, seed):
    user = await seed.user()
    device = await seed.device()
    await lifecycle.retire_device(store, actor, device.id, "Sucata")

    with pytest.raises(AssetNotAvailable):
        await assignment.checkout(store, actor, "Device", device.id, user.id)


async def test_checkout_waits_for_the_linked_sim_lock(store, actor, seed):
    user = await seed.user()
    sim = await seed.sim()
    device = await seed.device(linked_sim_id=sim.id)
    user_id, sim_id, device_id = user.id, sim.id, device.id

    async with store.locks.hold(sim_id):
        pending = asyncio.create_task(
            assignment.checkout(store, actor, "Device", device_id, user_id)
        )
        await asyncio.sleep(0.05)
        assert not pending.done()

    result = await pending
    assert (result.asset.status, result.asset.current_user_id) == (IN_USE, user_id)
    claimed = await store.get_sim(sim_id)
    assert (claimed.status, claimed.current_user_id) == (IN_USE, user_id)
