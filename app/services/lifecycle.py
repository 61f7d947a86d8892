"""
Lifecycle engine for devices, SIM cards and users.

Device: Available <-> InUse (assignment coordinator), Available <-> Maintenance,
any non-retired state -> Retired, Retired -> Available (restore).
SIM card: Available <-> InUse, either directly or mirroring the device it is
linked to. User: Active <-> Inactive, inactivation only with no holdings.

Every precondition is checked before the first write; a refused operation
leaves no entity change and no audit entry behind.
"""

import logging
from typing import Optional

from app.core.errors import (
    AlreadyActive,
    AlreadyInactive,
    AlreadyRetired,
    AssetNotAvailable,
    DeviceRetired,
    DomainError,
    HasActiveAssets,
    NotRetired,
    PreconditionFailed,
    ReasonRequired,
    SimAlreadyLinked,
    StillInUse,
)
from app.models import ActionType, AuditTarget, Device, DeviceStatus, SimCard, User
from app.services.actor import Actor
from app.services.audit import record_event
from app.services.store import AssetStore

logger = logging.getLogger(__name__)

AVAILABLE = DeviceStatus.AVAILABLE.value
IN_USE = DeviceStatus.IN_USE.value
MAINTENANCE = DeviceStatus.MAINTENANCE.value
RETIRED = DeviceStatus.RETIRED.value


def refuse(error: DomainError, entity_id: str) -> DomainError:
    logger.warning("%s refused for %s: %s", error.code, entity_id, error.message)
    return error


def require_reason(reason: Optional[str], entity_id: str) -> str:
    if not reason or not reason.strip():
        raise refuse(ReasonRequired(), entity_id)
    return reason.strip()


def device_label(device: Device) -> str:
    return device.asset_tag or device.imei or device.serial_number or device.id


# --- SIM cascades (run inside the caller's transaction) ---------------------

def free_sim(store: AssetStore, actor: Actor, sim: SimCard, notes: str,
             action: ActionType = ActionType.UPDATE) -> bool:
    """Make a SIM Available with no holder. Returns False when nothing changed."""
    if sim.status == AVAILABLE and sim.current_user_id is None:
        return False
    before = sim.snapshot()
    sim.status = AVAILABLE
    sim.current_user_id = None
    record_event(
        store,
        asset_id=sim.id,
        asset_type=AuditTarget.SIM,
        action=action,
        actor=actor,
        target_name=sim.phone_number,
        notes=notes,
        previous_data=before,
        new_data=sim.snapshot(),
    )
    return True


def claim_sim(store: AssetStore, actor: Actor, sim: SimCard, user_id: str, notes: str,
              action: ActionType = ActionType.UPDATE) -> bool:
    """Mirror a device holder onto its linked SIM"""
    if sim.status == IN_USE and sim.current_user_id == user_id:
        return False
    before = sim.snapshot()
    sim.status = IN_USE
    sim.current_user_id = user_id
    record_event(
        store,
        asset_id=sim.id,
        asset_type=AuditTarget.SIM,
        action=action,
        actor=actor,
        target_name=sim.phone_number,
        notes=notes,
        previous_data=before,
        new_data=sim.snapshot(),
    )
    return True


# --- Devices ------------------------------------------------------------------

def ensure_linked_sim_unchanged(device: Device, locked_sim_id: Optional[str]) -> None:
    # The SIM lock was taken on the id read before the transaction
    if device.linked_sim_id != locked_sim_id:
        raise refuse(
            PreconditionFailed("O chip vinculado ao dispositivo mudou durante a operação"), device.id
        )


async def retire_device(store: AssetStore, actor: Actor, device_id: str, reason: str) -> Device:
    """Retire a device, releasing its holder and unlinking its SIM"""
    linked_sim_id = await store.linked_sim_of(device_id)
    async with store.transaction(device_id, linked_sim_id):
        device = await store.get_device(device_id)
        ensure_linked_sim_unchanged(device, linked_sim_id)
        if device.status == RETIRED:
            raise refuse(AlreadyRetired(), device_id)
        reason = require_reason(reason, device_id)

        before = device.snapshot()
        if device.linked_sim_id:
            sim = await store.find(SimCard, device.linked_sim_id)
            if sim is not None:
                free_sim(store, actor, sim, f"Liberado pelo descarte do dispositivo {device_label(device)}")
        device.linked_sim_id = None
        device.status = RETIRED
        device.current_user_id = None

        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.DEVICE,
            action=ActionType.DELETE,
            actor=actor,
            target_name=device_label(device),
            notes=f"Motivo: {reason}",
            previous_data=before,
            new_data=device.snapshot(),
            backup_data=before,
        )
    logger.info("Device %s retired by %s", device_id, actor)
    return device


async def restore_device(store: AssetStore, actor: Actor, device_id: str, reason: str) -> Device:
    async with store.transaction(device_id):
        device = await store.get_device(device_id)
        if device.status != RETIRED:
            raise refuse(NotRetired(), device_id)
        reason = require_reason(reason, device_id)

        before = device.snapshot()
        device.status = AVAILABLE
        device.current_user_id = None

        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.DEVICE,
            action=ActionType.RESTORE,
            actor=actor,
            target_name=device_label(device),
            notes=f"Motivo: {reason}",
            previous_data=before,
            new_data=device.snapshot(),
        )
    logger.info("Device %s restored by %s", device_id, actor)
    return device


async def toggle_maintenance(store: AssetStore, actor: Actor, device_id: str,
                             notes: str = None) -> Device:
    """Available -> Maintenance or Maintenance -> Available"""
    async with store.transaction(device_id):
        device = await store.get_device(device_id)
        if device.status == IN_USE:
            raise refuse(StillInUse(), device_id)
        if device.status == RETIRED:
            raise refuse(DeviceRetired(), device_id)

        before = device.snapshot()
        if device.status == MAINTENANCE:
            device.status = AVAILABLE
            action = ActionType.MAINTENANCE_END
        else:
            device.status = MAINTENANCE
            action = ActionType.MAINTENANCE_START

        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.DEVICE,
            action=action,
            actor=actor,
            target_name=device_label(device),
            notes=notes,
            previous_data=before,
            new_data=device.snapshot(),
        )
    logger.info("Device %s %s by %s", device_id, action.value, actor)
    return device


async def set_linked_sim(store: AssetStore, actor: Actor, device_id: str,
                         sim_id: Optional[str]) -> Device:
    """Link, swap or unlink the SIM card of a device.

    The replaced SIM is freed. The new SIM is claimed for the device holder
    only when the device is in use; an idle device links without claiming.
    """
    sim_id = sim_id or None
    old_sim_id = await store.linked_sim_of(device_id)
    async with store.transaction(device_id, old_sim_id, sim_id):
        device = await store.get_device(device_id)
        ensure_linked_sim_unchanged(device, old_sim_id)
        if device.linked_sim_id == sim_id:
            return device
        if sim_id and device.status == RETIRED:
            raise refuse(DeviceRetired(), device_id)

        new_sim = None
        if sim_id:
            new_sim = await store.get_sim(sim_id)
            owner = await store.device_linked_to(sim_id)
            if owner is not None and owner.id != device.id:
                raise refuse(SimAlreadyLinked(), sim_id)
            holder = device.current_user_id if device.status == IN_USE else None
            if new_sim.status == IN_USE and new_sim.current_user_id != holder:
                raise refuse(
                    AssetNotAvailable("O chip está em uso por outro colaborador"), sim_id
                )

        before = device.snapshot()
        label = device_label(device)
        if device.linked_sim_id:
            old_sim = await store.find(SimCard, device.linked_sim_id)
            if old_sim is not None:
                free_sim(store, actor, old_sim, f"Desvinculado do dispositivo {label}")
        device.linked_sim_id = sim_id
        if new_sim is not None and device.status == IN_USE:
            claim_sim(store, actor, new_sim, device.current_user_id, f"Vinculado ao dispositivo {label}")

        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.DEVICE,
            action=ActionType.UPDATE,
            actor=actor,
            target_name=label,
            notes="Chip vinculado" if sim_id else "Chip desvinculado",
            previous_data=before,
            new_data=device.snapshot(),
        )
    logger.info("Device %s linked SIM set to %s by %s", device_id, sim_id, actor)
    return device


# --- Users ----------------------------------------------------------------------

async def inactivate_user(store: AssetStore, actor: Actor, user: User, notes: str) -> None:
    """Inactivate inside the caller's transaction, after holdings were released"""
    if not user.active:
        raise refuse(AlreadyInactive(), user.id)
    if await store.count_holdings(user.id):
        raise refuse(HasActiveAssets(), user.id)

    before = user.snapshot()
    user.active = False
    record_event(
        store,
        asset_id=user.id,
        asset_type=AuditTarget.USER,
        action=ActionType.INACTIVATE,
        actor=actor,
        target_name=user.full_name,
        notes=notes,
        previous_data=before,
        new_data=user.snapshot(),
    )


def activate_user(store: AssetStore, actor: Actor, user: User, reason: str) -> None:
    if user.active:
        raise refuse(AlreadyActive(), user.id)
    reason = require_reason(reason, user.id)

    before = user.snapshot()
    user.active = True
    record_event(
        store,
        asset_id=user.id,
        asset_type=AuditTarget.USER,
        action=ActionType.ACTIVATE,
        actor=actor,
        target_name=user.full_name,
        notes=reason,
        previous_data=before,
        new_data=user.snapshot(),
    )


async def _apply_active(store: AssetStore, actor: Actor, user: User, active: bool,
                        reason: Optional[str]) -> None:
    if active:
        activate_user(store, actor, user, reason)
    else:
        await inactivate_user(store, actor, user, reason or "Inativação Manual")


async def set_user_active(store: AssetStore, actor: Actor, user_id: str, active: bool,
                          reason: str = None) -> User:
    async with store.transaction(user_id):
        user = await store.get_user(user_id)
        await _apply_active(store, actor, user, active, reason)
    logger.info("User %s %s by %s", user_id, "activated" if active else "inactivated", actor)
    return user


async def toggle_user_active(store: AssetStore, actor: Actor, user_id: str,
                             reason: str = None) -> User:
    """Flip the active flag. Inactivation requires no holdings, reactivation a reason."""
    async with store.transaction(user_id):
        user = await store.get_user(user_id)
        active = not user.active
        await _apply_active(store, actor, user, active, reason)
    logger.info("User %s %s by %s", user_id, "activated" if active else "inactivated", actor)
    return user
