"""Pricing settings — the shop-wide price list, stored as a single record.

Until staff save their own settings, the defaults below apply.
"""

from datetime import UTC, datetime

from protean import handle
from protean.fields import DateTime, Float, String
from protean.utils.globals import current_domain

from laundry.domain import laundry


@laundry.event(part_of="PricingSettings")
class PricingSettingsUpdated:
    __version__ = "v1"

    minimum_weight = Float(required=True)
    minimum_price = Float(required=True)
    price_per_pound = Float(required=True)
    same_day_extra_cents_per_pound = Float(required=True)
    same_day_minimum_charge = Float(required=True)
    updated_by = String()
    updated_at = DateTime(required=True)


@laundry.aggregate
class PricingSettings:
    minimum_weight = Float(default=8.0, min_value=0.0)
    minimum_price = Float(default=8.0, min_value=0.0)
    price_per_pound = Float(default=1.25, min_value=0.0)
    same_day_extra_cents_per_pound = Float(default=0.33, min_value=0.0)
    same_day_minimum_charge = Float(default=5.0, min_value=0.0)
    updated_by = String(max_length=100)
    updated_at = DateTime()

    def update(self, updated_by=None, **values):
        for name, value in values.items():
            if value is not None:
                setattr(self, name, value)
        self.updated_by = updated_by
        self.updated_at = datetime.now(UTC)
        self.raise_(
            PricingSettingsUpdated(
                minimum_weight=self.minimum_weight,
                minimum_price=self.minimum_price,
                price_per_pound=self.price_per_pound,
                same_day_extra_cents_per_pound=self.same_day_extra_cents_per_pound,
                same_day_minimum_charge=self.same_day_minimum_charge,
                updated_by=updated_by,
                updated_at=self.updated_at,
            )
        )


def load_settings() -> PricingSettings:
    """The saved settings, or an unsaved record carrying the defaults."""
    stored = current_domain.repository_for(PricingSettings)._dao.query.all().items
    if stored:
        return stored[0]
    return PricingSettings()


@laundry.command(part_of="PricingSettings")
class UpdatePricingSettings:
    """Change any subset of the price list. Existing orders keep their totals until repriced."""

    minimum_weight = Float(min_value=0.0)
    minimum_price = Float(min_value=0.0)
    price_per_pound = Float(min_value=0.0)
    same_day_extra_cents_per_pound = Float(min_value=0.0)
    same_day_minimum_charge = Float(min_value=0.0)
    updated_by = String(max_length=100)


@laundry.command_handler(part_of=PricingSettings)
class PricingSettingsHandler:
    @handle(UpdatePricingSettings)
    def update_pricing_settings(self, command):
        settings = load_settings()
        settings.update(
            updated_by=command.updated_by,
            minimum_weight=command.minimum_weight,
            minimum_price=command.minimum_price,
            price_per_pound=command.price_per_pound,
            same_day_extra_cents_per_pound=command.same_day_extra_cents_per_pound,
            same_day_minimum_charge=command.same_day_minimum_charge,
        )
        current_domain.repository_for(PricingSettings).add(settings)
        return str(settings.id)
