"""
Assignment coordinator: checkout (entrega) and check-in (devolução).

Both verbs touch the asset, its linked SIM, the holder, a new Term and the
audit trail inside one store transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Union

from app.core.errors import (
    AlreadyInactive,
    AssetNotAvailable,
    AssetNotInUse,
    HasActiveAssets,
    SimLinkedToDevice,
)
from app.models import (
    ActionType,
    AssetKind,
    AuditTarget,
    Device,
    DeviceAccessory,
    DeviceModel,
    SimCard,
    Term,
    TermType,
    User,
)
from app.models.base import new_id
from app.services.actor import Actor
from app.services.audit import record_event
from app.services.lifecycle import (
    AVAILABLE,
    IN_USE,
    claim_sim,
    device_label,
    ensure_linked_sim_unchanged,
    free_sim,
    inactivate_user,
    refuse,
)
from app.services.store import AssetStore

logger = logging.getLogger(__name__)

Asset = Union[Device, SimCard]


@dataclass
class AssignmentResult:
    asset: Asset
    user: User
    term: Term


def _kind(kind) -> AssetKind:
    return kind if isinstance(kind, AssetKind) else AssetKind(kind)


def _model_for(kind: AssetKind):
    return Device if kind == AssetKind.DEVICE else SimCard


def _audit_target(kind: AssetKind) -> AuditTarget:
    return AuditTarget.DEVICE if kind == AssetKind.DEVICE else AuditTarget.SIM


def _asset_label(kind: AssetKind, asset: Asset) -> str:
    return device_label(asset) if kind == AssetKind.DEVICE else asset.phone_number


async def _linked_sim_key(store: AssetStore, kind: AssetKind, asset_id: str) -> Optional[str]:
    if kind != AssetKind.DEVICE:
        return None
    return await store.linked_sim_of(asset_id)


async def describe_asset(store: AssetStore, kind, asset: Asset) -> str:
    """Point-in-time description stored on a Term, never recomputed later"""
    if _kind(kind) == AssetKind.SIM:
        return f"[CHIP: {asset.phone_number}]"
    model = await store.find(DeviceModel, asset.model_id)
    return "[TAG: {} | S/N: {} | IMEI: {}] {}".format(
        asset.asset_tag or "S/T",
        asset.serial_number or "S/S",
        asset.imei or "S/I",
        model.name if model else "Dispositivo",
    )


def _append_term(store: AssetStore, user: User, term_type: TermType, kind: AssetKind,
                 asset: Asset, description: str) -> Term:
    term = Term(
        id=new_id(),
        type=term_type.value,
        asset_details=description,
        asset_kind=kind.value,
        asset_id=asset.id,
        date=datetime.utcnow(),
    )
    user.terms.append(term)
    store.add(term)
    return term


def _checklist_note(checklist: Optional[Dict[str, bool]]) -> str:
    if not checklist:
        return ""
    items = [f"{label}: {'OK' if ok else 'FALTANDO'}" for label, ok in checklist.items()]
    return "Checklist de devolução: " + ", ".join(items)


def _join_notes(*parts: Optional[str]) -> str:
    return " | ".join(part for part in parts if part)


async def checkout(
    store: AssetStore,
    actor: Actor,
    kind,
    asset_id: str,
    user_id: str,
    notes: str = None,
    accessories: Optional[List[dict]] = None,
    sync_sector: bool = False,
) -> AssignmentResult:
    """Assign an available asset to an active user.

    ``accessories`` replaces the device's accessory list with freshly minted
    items; ``None`` leaves the current list untouched. A device carries its
    linked SIM along to the same holder.
    """
    kind = _kind(kind)
    sim_id = await _linked_sim_key(store, kind, asset_id)
    async with store.transaction(asset_id, user_id, sim_id):
        asset = await store.get(_model_for(kind), asset_id,
                                "Dispositivo" if kind == AssetKind.DEVICE else "Chip")
        linked_sim = None
        if kind == AssetKind.SIM:
            if await store.device_linked_to(asset.id) is not None:
                raise refuse(SimLinkedToDevice(), asset_id)
        else:
            ensure_linked_sim_unchanged(asset, sim_id)
            linked_sim = await store.find(SimCard, asset.linked_sim_id)
        if asset.status != AVAILABLE:
            raise refuse(AssetNotAvailable(), asset_id)
        if linked_sim is not None and linked_sim.status == IN_USE \
                and linked_sim.current_user_id != user_id:
            raise refuse(
                AssetNotAvailable("O chip vinculado está em uso por outro colaborador"), asset_id
            )

        user = await store.get_user(user_id)
        if not user.active:
            raise refuse(
                AlreadyInactive("Colaborador inativo não pode receber ativos"), user_id
            )

        before = asset.snapshot()
        new_data = {}
        if kind == AssetKind.DEVICE:
            if sync_sector and user.sector_id and asset.sector_id != user.sector_id:
                asset.sector_id = user.sector_id
                new_data["sectorId"] = user.sector_id
            if accessories is not None:
                asset.accessories = [
                    DeviceAccessory(
                        id=new_id(),
                        accessory_type_id=item.get("accessory_type_id"),
                        name=item["name"],
                    )
                    for item in accessories
                ]
                new_data["accessories"] = [
                    {"accessoryTypeId": item.get("accessory_type_id"), "name": item["name"]}
                    for item in accessories
                ]

        asset.status = IN_USE
        asset.current_user_id = user.id
        new_data.update(status=IN_USE, currentUserId=user.id, holderName=user.full_name)

        label = _asset_label(kind, asset)
        if linked_sim is not None:
            claim_sim(store, actor, linked_sim, user.id,
                      f"Entregue junto com o dispositivo {label}", ActionType.CHECKOUT)

        description = await describe_asset(store, kind, asset)
        term = _append_term(store, user, TermType.DELIVERY, kind, asset, description)

        record_event(
            store,
            asset_id=asset.id,
            asset_type=_audit_target(kind),
            action=ActionType.CHECKOUT,
            actor=actor,
            target_name=label,
            notes=_join_notes(f"Entregue para {user.full_name}", notes),
            previous_data=before,
            new_data=new_data,
        )
    logger.info("%s %s checked out to %s by %s", kind.value, asset_id, user_id, actor)
    return AssignmentResult(asset=asset, user=user, term=term)


async def checkin(
    store: AssetStore,
    actor: Actor,
    kind,
    asset_id: str,
    notes: str = None,
    returned_checklist: Optional[Dict[str, bool]] = None,
    inactivate_user_after: bool = False,
) -> AssignmentResult:
    """Return an in-use asset from its current holder.

    A device's linked SIM is freed with it. The checklist is recorded, never
    enforced. With ``inactivate_user_after`` the holder is inactivated once
    nothing is attributed to them anymore, as a separate audit event.
    """
    kind = _kind(kind)
    model = _model_for(kind)
    # Lock keys must be known before the entity read
    holder_id = await store.holder_of(model, asset_id)
    sim_id = await _linked_sim_key(store, kind, asset_id)

    async with store.transaction(asset_id, holder_id, sim_id):
        asset = await store.get(model, asset_id,
                                "Dispositivo" if kind == AssetKind.DEVICE else "Chip")
        linked_sim = None
        if kind == AssetKind.SIM:
            if await store.device_linked_to(asset.id) is not None:
                raise refuse(SimLinkedToDevice(), asset_id)
        else:
            ensure_linked_sim_unchanged(asset, sim_id)
            linked_sim = await store.find(SimCard, asset.linked_sim_id)
        if asset.status != IN_USE or not asset.current_user_id:
            raise refuse(AssetNotInUse(), asset_id)
        if asset.current_user_id != holder_id:
            raise refuse(AssetNotInUse("O responsável pelo ativo mudou durante a operação"), asset_id)

        user = await store.get_user(holder_id)
        if inactivate_user_after:
            if not user.active:
                raise refuse(AlreadyInactive(), user.id)
            released = 1
            if linked_sim is not None and linked_sim.current_user_id == user.id:
                released += 1
            if await store.count_holdings(user.id) > released:
                raise refuse(
                    HasActiveAssets("O colaborador possui outros ativos em posse"), user.id
                )

        before = asset.snapshot()
        label = _asset_label(kind, asset)
        if linked_sim is not None:
            free_sim(store, actor, linked_sim,
                     f"Devolvido junto com o dispositivo {label}", ActionType.CHECKIN)

        asset.status = AVAILABLE
        asset.current_user_id = None
        new_data = {"status": AVAILABLE, "currentUserId": None, "holderName": None}
        if returned_checklist:
            new_data["returnedChecklist"] = dict(returned_checklist)

        description = await describe_asset(store, kind, asset)
        term = _append_term(store, user, TermType.RETURN, kind, asset, description)

        record_event(
            store,
            asset_id=asset.id,
            asset_type=_audit_target(kind),
            action=ActionType.CHECKIN,
            actor=actor,
            target_name=label,
            notes=_join_notes(
                f"Devolvido por {user.full_name}", notes, _checklist_note(returned_checklist)
            ),
            previous_data=before,
            new_data=new_data,
        )

        if inactivate_user_after:
            await inactivate_user(store, actor, user, f"Inativado na devolução de {label}")

    logger.info("%s %s checked in from %s by %s", kind.value, asset_id, holder_id, actor)
    if inactivate_user_after:
        logger.info("User %s inactivated after check-in by %s", holder_id, actor)
    return AssignmentResult(asset=asset, user=user, term=term)
