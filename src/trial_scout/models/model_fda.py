"""openFDA drug label view models."""

import hashlib
from typing import Any

from pydantic import BaseModel

from trial_scout.constants import DAILYMED_SETID_URL, PRODUCT_TYPE_COLORS, STATUS_COLORS
from trial_scout.helpers.record_access import dig, first

_PALETTE: tuple[str, ...] = tuple(STATUS_COLORS.values())


def manufacturer_color(manufacturer: str) -> str:
    """Deterministically map a manufacturer name onto the status palette."""
    digest = hashlib.sha256(manufacturer.encode()).hexdigest()
    return _PALETTE[int(digest, 16) % len(_PALETTE)]


class DrugLabelCard(BaseModel):
    """One SPL drug label, flattened for display."""

    label_id: str = ""
    brand_name: str = ""
    generic_name: str = ""
    manufacturer: str = ""
    product_type: str = ""
    route: str = ""
    effective_time: str = ""
    indications: str | None = None
    warnings: str | None = None
    dosage: str | None = None

    @property
    def url(self) -> str:
        return f"{DAILYMED_SETID_URL}{self.label_id}"

    @property
    def title(self) -> str:
        if self.brand_name and self.generic_name:
            return f"{self.brand_name} ({self.generic_name})"
        return self.brand_name or self.generic_name or self.label_id

    @property
    def color(self) -> str:
        """Fixed color for known product types, else a manufacturer hash."""
        if self.product_type in PRODUCT_TYPE_COLORS:
            return PRODUCT_TYPE_COLORS[self.product_type]
        return manufacturer_color(self.manufacturer)

    @classmethod
    def from_record(cls, label: dict[str, Any]) -> "DrugLabelCard":
        """Build a DrugLabelCard from a raw openFDA label result."""
        return cls(
            label_id=dig(label, "set_id") or dig(label, "id", ""),
            brand_name=first(dig(label, "openfda.brand_name"), ""),
            generic_name=first(dig(label, "openfda.generic_name"), ""),
            manufacturer=first(dig(label, "openfda.manufacturer_name"), ""),
            product_type=first(dig(label, "openfda.product_type"), ""),
            route=", ".join(dig(label, "openfda.route", [])),
            effective_time=dig(label, "effective_time", ""),
            indications=first(dig(label, "indications_and_usage")),
            warnings=first(dig(label, "warnings")) or first(dig(label, "boxed_warning")),
            dosage=first(dig(label, "dosage_and_administration")),
        )
