"""
Diff resolution between two audit snapshots.

``resolve_diff`` computes the field-level changes between a previousData and
a newData snapshot; ``resolve_value`` renders one raw value for display,
resolving foreign keys through indexed lookup tables. Nothing in this module
performs I/O and nothing in it raises on bad input: a malformed snapshot
degrades to an "unresolvable" row so one broken entry never hides the rest
of a history view.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

EMPTY_MARKER = "(vazio)"
UNRESOLVABLE_MARKER = "(não resolvível)"
UNRESOLVABLE_KEY = "_snapshot"

# Placeholders written by older clients for "no value"
EMPTY_SENTINELS = {"", "---", "null", "undefined", "S/T", "S/S", "S/I"}

ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
CURRENCY_FIELDS = {"purchaseCost", "cost"}
ACTIVE_FIELDS = {"active"}
CUSTOM_DATA_FIELD = "customData"

FIELD_LABELS = {
    "id": "ID",
    "modelId": "Modelo",
    "serialNumber": "Número de Série",
    "assetTag": "Patrimônio",
    "internalCode": "Código Interno",
    "imei": "IMEI",
    "pulsusId": "ID Pulsus",
    "status": "Status",
    "currentUserId": "Responsável",
    "userId": "Colaborador",
    "holderName": "Nome do Responsável",
    "sectorId": "Setor",
    "costCenter": "Centro de Custo",
    "linkedSimId": "Chip Vinculado",
    "accessories": "Acessórios",
    "purchaseDate": "Data de Compra",
    "purchaseCost": "Valor de Compra",
    "invoiceNumber": "Nota Fiscal",
    "supplier": "Fornecedor",
    "purchaseInvoiceUrl": "Anexo da Nota",
    "customData": "Campos Personalizados",
    "phoneNumber": "Número da Linha",
    "operator": "Operadora",
    "iccid": "ICCID",
    "planDetails": "Plano de Dados",
    "fullName": "Nome Completo",
    "cpf": "CPF",
    "rg": "RG",
    "pis": "PIS",
    "address": "Endereço",
    "email": "E-mail",
    "active": "Situação",
    "hasPendingIssues": "Possui Pendências",
    "pendingIssuesNote": "Observação de Pendência",
    "name": "Nome",
    "type": "Tipo",
    "login": "Login",
    "password": "Senha",
    "accessUrl": "URL de Acesso",
    "deviceId": "Dispositivo",
    "notes": "Observações",
    "brandId": "Marca",
    "typeId": "Tipo de Ativo",
    "imageUrl": "Imagem",
    "customFieldIds": "Campos do Tipo",
    "accessoryTypeId": "Tipo de Acessório",
    "date": "Data",
    "description": "Descrição",
    "provider": "Fornecedor do Serviço",
    "invoiceUrl": "Anexo",
    "returnedChecklist": "Checklist de Devolução",
    "terms": "Termos",
}


@dataclass
class LookupTables:
    """Current-state id -> display name indexes used to resolve foreign keys"""

    sectors: Dict[str, str] = field(default_factory=dict)
    users: Dict[str, str] = field(default_factory=dict)
    sims: Dict[str, str] = field(default_factory=dict)
    devices: Dict[str, str] = field(default_factory=dict)
    models: Dict[str, str] = field(default_factory=dict)
    brands: Dict[str, str] = field(default_factory=dict)
    asset_types: Dict[str, str] = field(default_factory=dict)
    accessory_types: Dict[str, str] = field(default_factory=dict)
    custom_fields: Dict[str, str] = field(default_factory=dict)

    def table_for(self, raw_key: str) -> Optional[Dict[str, str]]:
        return {
            "sectorId": self.sectors,
            "linkedSimId": self.sims,
            "currentUserId": self.users,
            "userId": self.users,
            "modelId": self.models,
            "deviceId": self.devices,
            "brandId": self.brands,
            "typeId": self.asset_types,
            "accessoryTypeId": self.accessory_types,
        }.get(raw_key)


@dataclass
class DiffRow:
    field: str
    raw_key: str
    old: Any
    new: Any

    def to_dict(self):
        return {"field": self.field, "rawKey": self.raw_key, "old": self.old, "new": self.new}


def label_for(raw_key: str) -> str:
    return FIELD_LABELS.get(raw_key, raw_key)


def _canonical(value) -> str:
    # Sorted keys make the comparison structural rather than order-sensitive
    return json.dumps(value, sort_keys=True, default=str, ensure_ascii=False)


def parse_snapshot(raw) -> Tuple[Optional[dict], bool]:
    """Return (mapping, ok). ``None`` is a valid empty snapshot."""
    if raw is None:
        return {}, True
    if isinstance(raw, dict):
        return raw, True
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        if not raw.strip():
            return {}, True
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None, False
        if parsed is None:
            return {}, True
        if isinstance(parsed, dict):
            return parsed, True
    return None, False


def resolve_diff(previous_data, new_data) -> List[DiffRow]:
    """Field-level changes between two snapshots (JSON strings or dicts)"""
    before, before_ok = parse_snapshot(previous_data)
    after, after_ok = parse_snapshot(new_data)
    if not (before_ok and after_ok):
        return [
            DiffRow(
                field=UNRESOLVABLE_MARKER,
                raw_key=UNRESOLVABLE_KEY,
                old=previous_data if not before_ok else None,
                new=new_data if not after_ok else None,
            )
        ]

    keys = list(before)
    keys += [key for key in after if key not in before]

    rows = []
    for key in keys:
        if not isinstance(key, str) or key.startswith("_"):
            continue  # system fields such as _adminUser
        old, new = before.get(key), after.get(key)
        if _canonical(old) != _canonical(new):
            rows.append(DiffRow(field=label_for(key), raw_key=key, old=old, new=new))
    return rows


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() in EMPTY_SENTINELS:
        return True
    if isinstance(value, (list, dict)) and not value:
        return True
    return False


def _format_date(value) -> str:
    text = str(value)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    if len(text) <= 10:
        return parsed.strftime("%d/%m/%Y")
    return parsed.strftime("%d/%m/%Y %H:%M")


def _format_currency(value) -> str:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return str(value)
    # 1234.5 -> "R$ 1.234,50"
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def _format_custom_data(value, lookups: LookupTables) -> str:
    data = value
    if isinstance(value, str):
        try:
            data = json.loads(value)
        except ValueError:
            return value
    if not isinstance(data, dict):
        return str(value)
    parts = [
        f"{lookups.custom_fields.get(field_id, field_id)}: {field_value}"
        for field_id, field_value in data.items()
    ]
    return "; ".join(parts) if parts else EMPTY_MARKER


def _format_default(value) -> str:
    if isinstance(value, bool):
        return "Sim" if value else "Não"
    if isinstance(value, (dict, list)):
        return _canonical(value)
    return str(value)


def resolve_value(raw_key: str, value, lookups: LookupTables = None) -> str:
    """Display string for one snapshot value. Never raises."""
    lookups = lookups or LookupTables()
    try:
        if _is_empty(value):
            return EMPTY_MARKER
        if "date" in raw_key.lower() or (isinstance(value, str) and ISO_DATE_PREFIX.match(value)):
            return _format_date(value)
        if raw_key in CURRENCY_FIELDS:
            return _format_currency(value)
        table = lookups.table_for(raw_key)
        if table is not None:
            return table.get(str(value), str(value))
        if raw_key in ACTIVE_FIELDS:
            return "Ativo" if value in (True, 1, "true", "1") else "Inativo"
        if raw_key == CUSTOM_DATA_FIELD:
            return _format_custom_data(value, lookups)
        return _format_default(value)
    except Exception:  # a single bad value must not abort the history view
        return UNRESOLVABLE_MARKER


def render_diff(previous_data, new_data, lookups: LookupTables = None) -> List[dict]:
    """Diff rows with both raw and display values"""
    rendered = []
    for row in resolve_diff(previous_data, new_data):
        entry = row.to_dict()
        if row.raw_key == UNRESOLVABLE_KEY:
            entry["oldDisplay"] = entry["newDisplay"] = UNRESOLVABLE_MARKER
        else:
            entry["oldDisplay"] = resolve_value(row.raw_key, row.old, lookups)
            entry["newDisplay"] = resolve_value(row.raw_key, row.new, lookups)
        rendered.append(entry)
    return rendered
