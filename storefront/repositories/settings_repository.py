"""
Store Settings Repository (single row, created on first read)
"""
import copy
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.settings import StoreSettings
from storefront.models import StoreSettings as SettingsRow
from storefront.models.settings import (
    DEFAULT_SETTINGS_ID,
    DEFAULT_SHIPPING_SETTINGS,
    DEFAULT_PAYMENT_SETTINGS,
    DEFAULT_TAX_SETTINGS,
)

JSON_DEFAULTS = {
    "shipping_settings": DEFAULT_SHIPPING_SETTINGS,
    "payment_settings": DEFAULT_PAYMENT_SETTINGS,
    "tax_settings": DEFAULT_TAX_SETTINGS,
}


class SettingsRepository:

    def __init__(self, db: Session):
        self.db = db

    def _get_or_create_row(self) -> SettingsRow:
        row = self.db.get(SettingsRow, DEFAULT_SETTINGS_ID)
        if row is None:
            row = SettingsRow(
                id=DEFAULT_SETTINGS_ID,
                **{field: copy.deepcopy(default) for field, default in JSON_DEFAULTS.items()}
            )
            self.db.add(row)
            self.db.commit()
        return row

    def get(self) -> StoreSettings:
        row = self._get_or_create_row()
        settings = StoreSettings.model_validate({
            **{column.name: getattr(row, column.name) for column in SettingsRow.__table__.columns},
            **{field: getattr(row, field) or copy.deepcopy(default) for field, default in JSON_DEFAULTS.items()},
        })
        return settings

    def update(self, data: Dict[str, Any]) -> StoreSettings:
        row = self._get_or_create_row()
        for field, value in data.items():
            if field in JSON_DEFAULTS:
                # Merge so a partial block does not wipe sibling keys
                merged = copy.deepcopy(getattr(row, field) or JSON_DEFAULTS[field])
                merged.update(value)
                value = merged
            setattr(row, field, value)
        self.db.commit()
        return self.get()
