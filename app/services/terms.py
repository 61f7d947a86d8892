"""
Scanned copies and pendency resolution of delivery/return terms
"""

import logging
from typing import Optional

from app.core.errors import EntityNotFound, MissingIdentifier
from app.models import ActionType, AssetKind, AuditTarget, Device, Term
from app.models.user import RESOLVED_MANUALLY
from app.services.actor import Actor
from app.services.audit import record_event
from app.services.lifecycle import device_label, refuse, require_reason
from app.services.store import AssetStore

logger = logging.getLogger(__name__)


def _term_label(term: Term) -> str:
    return f"Termo de {term.type}: {term.asset_details}"


async def attach_file(store: AssetStore, actor: Actor, term_id: str, file_url: str) -> Term:
    if not file_url or not file_url.strip():
        raise refuse(MissingIdentifier("Informe o arquivo do termo"), term_id)

    term = await store.get_term(term_id)
    async with store.transaction(term.user_id, term_id):
        user = await store.get_user(term.user_id)
        before = user.snapshot()
        term.file_url = file_url.strip()
        record_event(
            store,
            asset_id=user.id,
            asset_type=AuditTarget.USER,
            action=ActionType.UPDATE,
            actor=actor,
            target_name=user.full_name,
            notes=f"Anexo adicionado ao {_term_label(term)}",
            previous_data=before,
            new_data=user.snapshot(),
        )
    logger.info("File attached to term %s by %s", term_id, actor)
    return term


async def remove_file(store: AssetStore, actor: Actor, term_id: str, reason: str) -> Term:
    term = await store.get_term(term_id)
    reason = require_reason(reason, term_id)
    async with store.transaction(term.user_id, term_id):
        user = await store.get_user(term.user_id)
        before = user.snapshot()
        term.file_url = None
        record_event(
            store,
            asset_id=user.id,
            asset_type=AuditTarget.USER,
            action=ActionType.UPDATE,
            actor=actor,
            target_name=user.full_name,
            notes=f"Anexo removido do {_term_label(term)}. Motivo: {reason}",
            previous_data=before,
            new_data=user.snapshot(),
        )
    logger.info("File removed from term %s by %s", term_id, actor)
    return term


async def resolve_pendency(store: AssetStore, actor: Actor, term_id: str, reason: str) -> Term:
    """Close a missing-file pendency without a scanned copy.

    The event is written on the user, on the system trail and, when the term
    still points at an existing device, on that device's history.
    """
    term = await store.get_term(term_id)
    reason = require_reason(reason, term_id)
    device_id = term.asset_id if term.asset_kind == AssetKind.DEVICE.value else None

    async with store.transaction(term.user_id, term_id, device_id):
        user = await store.get_user(term.user_id)
        device: Optional[Device] = await store.find(Device, device_id)
        term.file_url = f"{RESOLVED_MANUALLY} {reason}"
        notes = f"Pendência do {_term_label(term)} resolvida manualmente. Motivo: {reason}"

        record_event(
            store,
            asset_id=user.id,
            asset_type=AuditTarget.USER,
            action=ActionType.RESOLVE_PENDENCY,
            actor=actor,
            target_name=user.full_name,
            notes=notes,
        )
        record_event(
            store,
            asset_id="system",
            asset_type=AuditTarget.SYSTEM,
            action=ActionType.RESOLVE_PENDENCY,
            actor=actor,
            target_name=user.full_name,
            notes=notes,
        )
        if device is not None:
            record_event(
                store,
                asset_id=device.id,
                asset_type=AuditTarget.DEVICE,
                action=ActionType.RESOLVE_PENDENCY,
                actor=actor,
                target_name=device_label(device),
                notes=notes,
            )
    logger.info("Pendency of term %s resolved by %s", term_id, actor)
    return term


async def fetch_term_file(store: AssetStore, term_id: str) -> str:
    term = await store.get_term(term_id)
    if not term.has_file:
        raise EntityNotFound("O termo não possui arquivo anexado")
    return term.file_url


async def fetch_invoice(store: AssetStore, device_id: str) -> str:
    device = await store.get_device(device_id)
    if not device.purchase_invoice_url:
        raise EntityNotFound("O dispositivo não possui nota fiscal anexada")
    return device.purchase_invoice_url
