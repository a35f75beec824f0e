"""Extra items — catalog add-ons such as softener or hang-dry.

An item with ``per_weight_unit`` set is priced proportionally to the order's
total weight (e.g. $5 per 15 lbs); otherwise it is charged per unit.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry


@laundry.aggregate
class ExtraItem:
    name = String(required=True, max_length=200)
    description = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    per_weight_unit = Float(min_value=0.0)
    is_active = Boolean(default=True)

    @property
    def is_weight_based(self) -> bool:
        return bool(self.per_weight_unit) and self.per_weight_unit > 0

    def update(self, **values):
        for name, value in values.items():
            if value is not None:
                setattr(self, name, value)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": [f"{self.name} is already inactive"]})
        self.is_active = False


def load_catalog() -> dict[str, ExtraItem]:
    """All catalog items keyed by id, inactive ones included so old orders still price."""
    items = current_domain.repository_for(ExtraItem)._dao.query.all().items
    return {str(item.id): item for item in items}


@laundry.command(part_of="ExtraItem")
class AddExtraItem:
    name = String(required=True, max_length=200)
    description = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    per_weight_unit = Float(min_value=0.0)


@laundry.command(part_of="ExtraItem")
class UpdateExtraItem:
    item_id = Identifier(required=True)
    name = String(max_length=200)
    description = String(max_length=500)
    price = Float(min_value=0.0)
    per_weight_unit = Float(min_value=0.0)


@laundry.command(part_of="ExtraItem")
class DeactivateExtraItem:
    item_id = Identifier(required=True)


@laundry.command_handler(part_of=ExtraItem)
class ExtraItemHandler:
    @handle(AddExtraItem)
    def add_extra_item(self, command):
        item = ExtraItem(
            name=command.name,
            description=command.description,
            price=command.price,
            per_weight_unit=command.per_weight_unit,
        )
        current_domain.repository_for(ExtraItem).add(item)
        return str(item.id)

    @handle(UpdateExtraItem)
    def update_extra_item(self, command):
        repo = current_domain.repository_for(ExtraItem)
        item = repo.get(command.item_id)
        item.update(
            name=command.name,
            description=command.description,
            price=command.price,
            per_weight_unit=command.per_weight_unit,
        )
        repo.add(item)

    @handle(DeactivateExtraItem)
    def deactivate_extra_item(self, command):
        repo = current_domain.repository_for(ExtraItem)
        item = repo.get(command.item_id)
        item.deactivate()
        repo.add(item)
