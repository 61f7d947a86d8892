"""
Registry: create/update/delete of devices, SIM cards, users, software
accounts, catalog entities and maintenance records.

Each write produces exactly one audit event in the same transaction.
Create events carry newData only, updates carry both full records, and
deletions carry previousData and backupData. Integrity checks run before
any mutation.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Tuple

from sqlalchemy import Date, DateTime, func, select

from app.core.errors import (
    AmbiguousOwnership,
    DuplicateValue,
    EntityNotFound,
    MissingIdentifier,
    NotRestorable,
    RecordInUse,
    SimLinkedToDevice,
    StillInUse,
)
from app.models import (
    AccessoryType,
    ActionType,
    AssetType,
    AuditTarget,
    Brand,
    CustomField,
    Device,
    DeviceAccessory,
    DeviceModel,
    MaintenanceRecord,
    Sector,
    SimCard,
    SoftwareAccount,
    User,
)
from app.models.base import camel_case, new_id
from app.services.actor import Actor
from app.services.audit import get_log, record_event
from app.services.lifecycle import AVAILABLE, device_label, refuse
from app.services.store import AssetStore

logger = logging.getLogger(__name__)

DEVICE_FIELDS = {
    "model_id", "serial_number", "asset_tag", "internal_code", "imei", "pulsus_id",
    "sector_id", "cost_center", "purchase_date", "purchase_cost", "invoice_number",
    "supplier", "purchase_invoice_url", "custom_data",
}
SIM_FIELDS = {"phone_number", "operator", "iccid", "plan_details"}
USER_FIELDS = {
    "full_name", "cpf", "rg", "pis", "address", "email", "sector_id", "internal_code",
    "has_pending_issues", "pending_issues_note",
}
ACCOUNT_FIELDS = {
    "name", "type", "login", "password", "access_url", "status",
    "user_id", "device_id", "sector_id", "notes",
}
MAINTENANCE_FIELDS = {"type", "date", "description", "cost", "provider", "invoice_url"}


class CatalogKind:
    """One catalog table exposed by the registry"""

    def __init__(self, model, target: AuditTarget, fields: Iterable[str], references=()):
        self.model = model
        self.target = target
        self.fields = set(fields)
        # Columns that point at this table and block deletion
        self.references = references


CATALOG = {
    "brands": CatalogKind(Brand, AuditTarget.BRAND, ["name"], [DeviceModel.brand_id]),
    "models": CatalogKind(
        DeviceModel, AuditTarget.MODEL, ["name", "brand_id", "type_id", "image_url"],
        [Device.model_id],
    ),
    "asset-types": CatalogKind(
        AssetType, AuditTarget.TYPE, ["name", "custom_field_ids"], [DeviceModel.type_id]
    ),
    "sectors": CatalogKind(
        Sector, AuditTarget.SECTOR, ["name"],
        [Device.sector_id, User.sector_id, SoftwareAccount.sector_id],
    ),
    "accessory-types": CatalogKind(
        AccessoryType, AuditTarget.ACCESSORY, ["name"], [DeviceAccessory.accessory_type_id]
    ),
    "custom-fields": CatalogKind(CustomField, AuditTarget.CUSTOM_FIELD, ["name"]),
}

# Tables a Delete entry can be restored into
RESTORABLE = {
    AuditTarget.SIM.value: SimCard,
    AuditTarget.ACCOUNT.value: SoftwareAccount,
}
RESTORABLE.update({kind.target.value: kind.model for kind in CATALOG.values()})


def catalog_kind(kind: str) -> CatalogKind:
    try:
        return CATALOG[kind]
    except KeyError:
        raise EntityNotFound(f"Catálogo desconhecido: {kind}")


# --- helpers ------------------------------------------------------------------

def _apply(instance, changes: dict, allowed: Iterable[str]) -> None:
    for key, value in changes.items():
        if key in allowed:
            setattr(instance, key, value)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


async def _ensure_unique(store: AssetStore, model, checks: List[Tuple], exclude_id: str = None):
    for column, value, label in checks:
        if await store.exists_with(model, column, value, exclude_id):
            raise refuse(DuplicateValue(f"{label} já cadastrado: {value}"), str(value))


async def _created(store, actor, instance, target: AuditTarget, name: str, notes: str = None):
    # Column defaults are only applied on flush
    await store.flush()
    record_event(
        store,
        asset_id=instance.id,
        asset_type=target,
        action=ActionType.CREATE,
        actor=actor,
        target_name=name,
        notes=notes,
        new_data=instance.snapshot(),
    )


def _updated(store, actor, instance, before: dict, target: AuditTarget, name: str,
             notes: str = None):
    record_event(
        store,
        asset_id=instance.id,
        asset_type=target,
        action=ActionType.UPDATE,
        actor=actor,
        target_name=name,
        notes=notes,
        previous_data=before,
        new_data=instance.snapshot(),
    )


def _deleted(store, actor, entity_id: str, before: dict, target: AuditTarget, name: str,
             notes: str = None):
    record_event(
        store,
        asset_id=entity_id,
        asset_type=target,
        action=ActionType.DELETE,
        actor=actor,
        target_name=name,
        notes=notes,
        previous_data=before,
        backup_data=before,
    )


async def _all(store: AssetStore, query) -> list:
    result = await store.session.execute(query)
    return list(result.scalars().all())


# --- Devices -------------------------------------------------------------------

async def list_devices(store: AssetStore, status: str = None, user_id: str = None) -> List[Device]:
    query = select(Device)
    if status:
        query = query.where(Device.status == status)
    if user_id:
        query = query.where(Device.current_user_id == user_id)
    return await _all(store, query.order_by(Device.asset_tag))


async def _device_checks(store, data: dict, exclude_id: str = None):
    await _ensure_unique(store, Device, [
        (Device.asset_tag, data.get("asset_tag"), "Patrimônio"),
        (Device.imei, data.get("imei"), "IMEI"),
    ], exclude_id)


async def create_device(store: AssetStore, actor: Actor, data: dict) -> Device:
    if all(_blank(data.get(key)) for key in ("asset_tag", "serial_number", "imei")):
        raise refuse(MissingIdentifier("Informe patrimônio, número de série ou IMEI"), "device")

    device_id = new_id()
    async with store.transaction(device_id):
        await _device_checks(store, data)
        device = Device(id=device_id, status=AVAILABLE, custom_data={}, accessories=[])
        _apply(device, data, DEVICE_FIELDS)
        device.created_by = actor.name
        for item in data.get("accessories") or []:
            device.accessories.append(
                DeviceAccessory(id=new_id(), accessory_type_id=item.get("accessory_type_id"),
                                name=item["name"])
            )
        store.add(device)
        await _created(store, actor, device, AuditTarget.DEVICE, device_label(device))
    logger.info("Device %s created by %s", device_id, actor)
    return device


async def update_device(store: AssetStore, actor: Actor, device_id: str, changes: dict) -> Device:
    """Update registry fields. Status, holder and linked SIM go through the lifecycle engine."""
    async with store.transaction(device_id):
        device = await store.get_device(device_id)
        await _device_checks(store, changes, exclude_id=device_id)
        before = device.snapshot()
        _apply(device, changes, DEVICE_FIELDS)
        if all(_blank(getattr(device, key)) for key in ("asset_tag", "serial_number", "imei")):
            raise refuse(MissingIdentifier("Informe patrimônio, número de série ou IMEI"), device_id)
        device.updated_by = actor.name
        _updated(store, actor, device, before, AuditTarget.DEVICE, device_label(device))
    logger.info("Device %s updated by %s", device_id, actor)
    return device


# --- SIM cards -----------------------------------------------------------------

async def list_sims(store: AssetStore, status: str = None) -> List[SimCard]:
    query = select(SimCard)
    if status:
        query = query.where(SimCard.status == status)
    return await _all(store, query.order_by(SimCard.phone_number))


async def _sim_checks(store, data: dict, exclude_id: str = None):
    await _ensure_unique(store, SimCard, [
        (SimCard.phone_number, data.get("phone_number"), "Número"),
        (SimCard.iccid, data.get("iccid"), "ICCID"),
    ], exclude_id)


async def create_sim(store: AssetStore, actor: Actor, data: dict) -> SimCard:
    if _blank(data.get("phone_number")):
        raise refuse(MissingIdentifier("Informe o número da linha"), "sim")

    sim_id = new_id()
    async with store.transaction(sim_id):
        await _sim_checks(store, data)
        sim = SimCard(id=sim_id, status=AVAILABLE)
        _apply(sim, data, SIM_FIELDS)
        sim.created_by = actor.name
        store.add(sim)
        await _created(store, actor, sim, AuditTarget.SIM, sim.phone_number)
    logger.info("SIM %s created by %s", sim_id, actor)
    return sim


async def update_sim(store: AssetStore, actor: Actor, sim_id: str, changes: dict) -> SimCard:
    if "phone_number" in changes and _blank(changes["phone_number"]):
        raise refuse(MissingIdentifier("Informe o número da linha"), sim_id)

    async with store.transaction(sim_id):
        sim = await store.get_sim(sim_id)
        await _sim_checks(store, changes, exclude_id=sim_id)
        before = sim.snapshot()
        _apply(sim, changes, SIM_FIELDS)
        sim.updated_by = actor.name
        _updated(store, actor, sim, before, AuditTarget.SIM, sim.phone_number)
    logger.info("SIM %s updated by %s", sim_id, actor)
    return sim


async def delete_sim(store: AssetStore, actor: Actor, sim_id: str, reason: str = None) -> None:
    """Hard delete, only for an available SIM that no device links to"""
    async with store.transaction(sim_id):
        sim = await store.get_sim(sim_id)
        if await store.device_linked_to(sim_id) is not None:
            raise refuse(SimLinkedToDevice(), sim_id)
        if sim.status != AVAILABLE or sim.current_user_id:
            raise refuse(StillInUse("O chip está em uso e precisa ser devolvido primeiro"), sim_id)
        before = sim.snapshot()
        await store.delete(sim)
        _deleted(store, actor, sim_id, before, AuditTarget.SIM, sim.phone_number, reason)
    logger.info("SIM %s deleted by %s", sim_id, actor)


# --- Users ----------------------------------------------------------------------

async def list_users(store: AssetStore, active: bool = None) -> List[User]:
    query = select(User)
    if active is not None:
        query = query.where(User.active == active)
    return await _all(store, query.order_by(User.full_name))


async def _user_checks(store, data: dict, exclude_id: str = None):
    await _ensure_unique(store, User, [
        (User.cpf, data.get("cpf"), "CPF"),
        (User.email, data.get("email"), "E-mail"),
    ], exclude_id)


async def create_user(store: AssetStore, actor: Actor, data: dict) -> User:
    if _blank(data.get("cpf")):
        raise refuse(MissingIdentifier("Informe o CPF"), "user")
    if _blank(data.get("full_name")):
        raise refuse(MissingIdentifier("Informe o nome completo"), "user")

    user_id = new_id()
    async with store.transaction(user_id):
        await _user_checks(store, data)
        user = User(id=user_id, active=True, has_pending_issues=False, terms=[])
        _apply(user, data, USER_FIELDS)
        user.created_by = actor.name
        store.add(user)
        await _created(store, actor, user, AuditTarget.USER, user.full_name)
    logger.info("User %s created by %s", user_id, actor)
    return user


async def update_user(store: AssetStore, actor: Actor, user_id: str, changes: dict) -> User:
    """Update registry fields. Active state goes through the lifecycle engine."""
    for key in ("cpf", "full_name"):
        if key in changes and _blank(changes[key]):
            raise refuse(MissingIdentifier(), user_id)

    async with store.transaction(user_id):
        user = await store.get_user(user_id)
        await _user_checks(store, changes, exclude_id=user_id)
        before = user.snapshot()
        _apply(user, changes, USER_FIELDS)
        user.updated_by = actor.name
        _updated(store, actor, user, before, AuditTarget.USER, user.full_name)
    logger.info("User %s updated by %s", user_id, actor)
    return user


# --- Software accounts ------------------------------------------------------------

def _check_ownership(account: SoftwareAccount):
    if account.user_id and account.device_id:
        raise refuse(AmbiguousOwnership(), account.id)


async def list_accounts(store: AssetStore, user_id: str = None,
                        device_id: str = None) -> List[SoftwareAccount]:
    query = select(SoftwareAccount)
    if user_id:
        query = query.where(SoftwareAccount.user_id == user_id)
    if device_id:
        query = query.where(SoftwareAccount.device_id == device_id)
    return await _all(store, query.order_by(SoftwareAccount.name))


async def get_account(store: AssetStore, account_id: str) -> SoftwareAccount:
    return await store.get(SoftwareAccount, account_id, "Conta")


async def _check_owners_exist(store: AssetStore, account: SoftwareAccount):
    if account.user_id:
        await store.get_user(account.user_id)
    if account.device_id:
        await store.get_device(account.device_id)


async def create_account(store: AssetStore, actor: Actor, data: dict) -> SoftwareAccount:
    if _blank(data.get("login")):
        raise refuse(MissingIdentifier("Informe o login da conta"), "account")

    account_id = new_id()
    async with store.transaction(account_id):
        account = SoftwareAccount(id=account_id, status="Ativo")
        _apply(account, data, ACCOUNT_FIELDS)
        _check_ownership(account)
        await _check_owners_exist(store, account)
        account.created_by = actor.name
        store.add(account)
        await _created(store, actor, account, AuditTarget.ACCOUNT, account.name)
    logger.info("Account %s created by %s", account_id, actor)
    return account


async def update_account(store: AssetStore, actor: Actor, account_id: str,
                         changes: dict) -> SoftwareAccount:
    async with store.transaction(account_id):
        account = await get_account(store, account_id)
        if changes.get("user_id") and changes.get("device_id"):
            raise refuse(AmbiguousOwnership(), account_id)
        before = account.snapshot()
        _apply(account, changes, ACCOUNT_FIELDS)
        _check_ownership(account)
        await _check_owners_exist(store, account)
        account.updated_by = actor.name
        _updated(store, actor, account, before, AuditTarget.ACCOUNT, account.name)
    logger.info("Account %s updated by %s", account_id, actor)
    return account


async def delete_account(store: AssetStore, actor: Actor, account_id: str) -> None:
    async with store.transaction(account_id):
        account = await get_account(store, account_id)
        before = account.snapshot()
        await store.delete(account)
        _deleted(store, actor, account_id, before, AuditTarget.ACCOUNT, account.name)
    logger.info("Account %s deleted by %s", account_id, actor)


# --- Catalog ------------------------------------------------------------------------

async def list_catalog(store: AssetStore, kind: str) -> list:
    entry = catalog_kind(kind)
    return await _all(store, select(entry.model).order_by(entry.model.name))


async def get_catalog_entry(store: AssetStore, kind: str, entry_id: str):
    return await store.get(catalog_kind(kind).model, entry_id, "Registro")


async def _catalog_name_check(store, entry: CatalogKind, data: dict, exclude_id: str = None):
    # Model names repeat across brands
    if entry.model is DeviceModel:
        return
    await _ensure_unique(store, entry.model, [(entry.model.name, data.get("name"), "Nome")],
                         exclude_id)


async def create_catalog_entry(store: AssetStore, actor: Actor, kind: str, data: dict):
    entry = catalog_kind(kind)
    if _blank(data.get("name")):
        raise refuse(MissingIdentifier("Informe o nome"), kind)

    entry_id = new_id()
    async with store.transaction(f"{kind}:{data['name']}", entry_id):
        await _catalog_name_check(store, entry, data)
        instance = entry.model(id=entry_id)
        _apply(instance, data, entry.fields)
        instance.created_by = actor.name
        store.add(instance)
        await _created(store, actor, instance, entry.target, instance.name)
    logger.info("%s %s created by %s", entry.model.__name__, entry_id, actor)
    return instance


async def update_catalog_entry(store: AssetStore, actor: Actor, kind: str, entry_id: str,
                               changes: dict):
    entry = catalog_kind(kind)
    if "name" in changes and _blank(changes["name"]):
        raise refuse(MissingIdentifier("Informe o nome"), entry_id)

    async with store.transaction(entry_id):
        instance = await store.get(entry.model, entry_id, "Registro")
        await _catalog_name_check(store, entry, changes, exclude_id=entry_id)
        before = instance.snapshot()
        _apply(instance, changes, entry.fields)
        instance.updated_by = actor.name
        _updated(store, actor, instance, before, entry.target, instance.name)
    logger.info("%s %s updated by %s", entry.model.__name__, entry_id, actor)
    return instance


async def delete_catalog_entry(store: AssetStore, actor: Actor, kind: str, entry_id: str) -> None:
    entry = catalog_kind(kind)
    async with store.transaction(entry_id):
        instance = await store.get(entry.model, entry_id, "Registro")
        for column in entry.references:
            result = await store.session.execute(
                select(func.count()).select_from(column.table).where(column == entry_id)
            )
            if result.scalar():
                raise refuse(RecordInUse(), entry_id)
        before = instance.snapshot()
        await store.delete(instance)
        _deleted(store, actor, entry_id, before, entry.target, instance.name)
    logger.info("%s %s deleted by %s", entry.model.__name__, entry_id, actor)


# --- Maintenance records --------------------------------------------------------------

async def list_maintenances(store: AssetStore, device_id: str) -> List[MaintenanceRecord]:
    await store.get_device(device_id)
    return await _all(
        store,
        select(MaintenanceRecord)
        .where(MaintenanceRecord.device_id == device_id)
        .order_by(MaintenanceRecord.date.desc()),
    )


async def add_maintenance(store: AssetStore, actor: Actor, device_id: str,
                          data: dict) -> MaintenanceRecord:
    """Attach a maintenance record; the event is logged on the device's history"""
    async with store.transaction(device_id):
        device = await store.get_device(device_id)
        record = MaintenanceRecord(id=new_id(), device_id=device.id)
        _apply(record, data, MAINTENANCE_FIELDS)
        if record.date is None:
            record.date = datetime.utcnow()
        record.created_by = actor.name
        store.add(record)
        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.MAINTENANCE,
            action=ActionType.CREATE,
            actor=actor,
            target_name=device_label(device),
            notes=record.description,
            new_data=record.snapshot(),
        )
    logger.info("Maintenance %s added to device %s by %s", record.id, device_id, actor)
    return record


async def delete_maintenance(store: AssetStore, actor: Actor, record_id: str) -> None:
    record = await store.get(MaintenanceRecord, record_id, "Manutenção")
    async with store.transaction(record.device_id, record_id):
        device = await store.get_device(record.device_id)
        before = record.snapshot()
        await store.delete(record)
        record_event(
            store,
            asset_id=device.id,
            asset_type=AuditTarget.MAINTENANCE,
            action=ActionType.DELETE,
            actor=actor,
            target_name=device_label(device),
            notes=before.get("description"),
            previous_data=before,
            backup_data=before,
        )
    logger.info("Maintenance %s deleted by %s", record_id, actor)


# --- Restore from the audit trail ---------------------------------------------------

def _from_snapshot(model, snapshot: dict):
    """Rebuild a row from a camelCase snapshot"""
    values = {}
    for column in model.__table__.columns:
        key = camel_case(column.key)
        if key not in snapshot:
            continue
        value = snapshot[key]
        if isinstance(value, str) and isinstance(column.type, DateTime):
            value = datetime.fromisoformat(value)
        elif isinstance(value, str) and isinstance(column.type, Date):
            value = date.fromisoformat(value[:10])
        values[column.key] = value
    return model(**values)


def _unique_checks(model, instance) -> List[Tuple]:
    return [
        (column, getattr(instance, column.key), column.key)
        for column in model.__table__.columns
        if column.unique and not column.primary_key
    ]


async def restore_from_log(store: AssetStore, actor: Actor, log_id: int):
    """Re-create a deleted SIM card, software account or catalog entry from backupData"""
    entry = await get_log(store, log_id)
    model = RESTORABLE.get(entry.asset_type)
    if entry.action != ActionType.DELETE.value or not entry.backup_data or model is None:
        raise refuse(NotRestorable(), str(log_id))

    async with store.transaction(entry.asset_id):
        if await store.find(model, entry.asset_id) is not None:
            raise refuse(DuplicateValue("O registro já existe"), entry.asset_id)
        instance = _from_snapshot(model, entry.backup_data)
        instance.id = entry.asset_id
        if model is SimCard:
            instance.status = AVAILABLE
            instance.current_user_id = None
        await _ensure_unique(store, model, _unique_checks(model, instance))
        if model is SoftwareAccount:
            _check_ownership(instance)
        instance.created_by = actor.name
        store.add(instance)
        record_event(
            store,
            asset_id=instance.id,
            asset_type=AuditTarget(entry.asset_type),
            action=ActionType.RESTORE,
            actor=actor,
            target_name=entry.target_name,
            notes=f"Restaurado a partir do log #{entry.id}",
            new_data=instance.snapshot(),
        )
    logger.info("%s %s restored from log %s by %s", model.__name__, entry.asset_id, log_id, actor)
    return instance
