"""
Builds the id-indexed lookup tables the diff resolver renders foreign keys with
"""

from sqlalchemy import select

from app.models import (
    Sector, User, SimCard, Device, DeviceModel, Brand, AssetType, AccessoryType, CustomField
)
from app.services.diff import LookupTables
from app.services.store import AssetStore


async def _index(store: AssetStore, id_column, name_column) -> dict:
    result = await store.session.execute(select(id_column, name_column))
    return {row[0]: row[1] or row[0] for row in result.all()}


async def load_lookup_tables(store: AssetStore) -> LookupTables:
    return LookupTables(
        sectors=await _index(store, Sector.id, Sector.name),
        users=await _index(store, User.id, User.full_name),
        sims=await _index(store, SimCard.id, SimCard.phone_number),
        devices=await _index(store, Device.id, Device.asset_tag),
        models=await _index(store, DeviceModel.id, DeviceModel.name),
        brands=await _index(store, Brand.id, Brand.name),
        asset_types=await _index(store, AssetType.id, AssetType.name),
        accessory_types=await _index(store, AccessoryType.id, AccessoryType.name),
        custom_fields=await _index(store, CustomField.id, CustomField.name),
    )
