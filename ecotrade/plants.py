"""Plant tracking and maintenance rewards."""
import math
from datetime import date, datetime

from ecotrade import ledger
from ecotrade.errors import ValidationError, require, as_number
from ecotrade.models import (db, User, Product, Order, Plant, PlantGrowthRecord, GrowthStage,
                             HealthStatus, MaintenanceType, PointReason, get_or_raise)

# (upper bound in days since planting, stage)
GROWTH_STAGES = (
    (14, GrowthStage.SEEDLING),
    (45, GrowthStage.YOUNG_PLANT),
    (90, GrowthStage.MATURE_PLANT),
)

BASE_POINTS = {
    MaintenanceType.WATER: 3,
    MaintenanceType.FERTILIZE: 5,
    MaintenanceType.PRUNE: 5,
    MaintenanceType.REPOT: 15,
    MaintenanceType.OTHER: 2,
}

# regular-care bonus: (min days, max days, bonus points) since the previous care
ON_SCHEDULE_BONUS = {
    MaintenanceType.WATER: (5, 9, 2),
    MaintenanceType.FERTILIZE: (25, 35, 5),
}

GROWTH_POINTS_PER_CM = 2


def growth_stage_for(planting_date, today=None):
    if planting_date is None:
        return None
    days = ((today or date.today()) - planting_date).days
    for limit, stage in GROWTH_STAGES:
        if days < limit:
            return stage
    return GrowthStage.FULLY_GROWN


def maintenance_points(kind, previous, today=None):
    """Points for one maintenance action.

    ``previous`` is the date the same care was last given (``None`` if
    never); only watering and fertilizing look at it.
    """
    points = BASE_POINTS[kind]
    window = ON_SCHEDULE_BONUS.get(kind)
    if window and previous is not None:
        low, high, bonus = window
        if low <= ((today or date.today()) - previous).days <= high:
            points += bonus
    return points


def growth_points(previous_height, new_height):
    if previous_height is None or new_height is None or new_height <= previous_height:
        return 0
    return math.ceil((new_height - previous_height) * GROWTH_POINTS_PER_CM)


def _parse_date(value, field):
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Field {field} must be an ISO date')


def _parse_datetime(value, field):
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Field {field} must be an ISO datetime')


def _parse_enum(enum_cls, value, field):
    if value is None or isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if str(value).lower() in (member.value.lower(), member.name.lower()):
            return member
    raise ValidationError(f'Unknown {field}: {value}')


def _apply(plant, data):
    if 'name' in data:
        plant.name = data['name']
    for field in ('species', 'plant_name', 'image_url', 'notes'):
        if field in data:
            setattr(plant, field, data[field])
    for field in ('planting_date', 'last_watered', 'last_fertilized'):
        if field in data:
            setattr(plant, field, _parse_date(data[field], field))
    if 'purchase_date' in data:
        plant.purchase_date = _parse_datetime(data['purchase_date'], 'purchase_date')
    if 'growth_stage' in data:
        plant.growth_stage = _parse_enum(GrowthStage, data['growth_stage'], 'growth_stage')
    if 'health_status' in data:
        plant.health_status = _parse_enum(HealthStatus, data['health_status'], 'health_status')
    if 'current_height_cm' in data:
        height = data['current_height_cm']
        plant.current_height_cm = None if height is None else as_number(height, 'current_height_cm')


def list_plants():
    return [p.to_dict() for p in Plant.query.order_by(Plant.id).all()]


def get_plant(plant_id):
    return get_or_raise(Plant, plant_id, 'Plant').to_dict()


def list_user_plants(user_id):
    return [p.to_dict() for p in Plant.query.filter_by(user_id=user_id).order_by(Plant.id)]


def growth_records(plant_id):
    plant = get_or_raise(Plant, plant_id, 'Plant')
    return [r.to_dict() for r in plant.growth_records]


def create_plant(data):
    user_id, _ = require(data, 'user_id', 'name')
    user = get_or_raise(User, user_id, 'User')
    product = None
    if data.get('product_id') is not None:
        product = get_or_raise(Product, data['product_id'], 'Product')

    plant = Plant(user=user, product=product,
                  growth_stage=GrowthStage.SEEDLING, health_status=HealthStatus.GOOD)
    db.session.add(plant)
    _apply(plant, data)
    if plant.planting_date is None:
        plant.planting_date = date.today()
    if plant.purchase_date is None:
        plant.purchase_date = datetime.utcnow()

    db.session.commit()
    return plant.to_dict()


def update_plant(plant_id, data):
    plant = get_or_raise(Plant, plant_id, 'Plant')

    if data.get('user_id') is not None and data['user_id'] != plant.user_id:
        plant.user = get_or_raise(User, data['user_id'], 'User')
    if 'product_id' in data and data['product_id'] != plant.product_id:
        plant.product = (get_or_raise(Product, data['product_id'], 'Product')
                         if data['product_id'] is not None else None)

    _apply(plant, data)
    db.session.commit()
    return plant.to_dict()


def water_plant(plant_id):
    plant = get_or_raise(Plant, plant_id, 'Plant')
    plant.last_watered = date.today()
    db.session.commit()
    return plant.to_dict()


def fertilize_plant(plant_id):
    plant = get_or_raise(Plant, plant_id, 'Plant')
    plant.last_fertilized = date.today()
    db.session.commit()
    return plant.to_dict()


def delete_plant(plant_id):
    plant = get_or_raise(Plant, plant_id, 'Plant')
    db.session.delete(plant)
    db.session.commit()


def record_maintenance(plant_id, maintenance_type, notes=None, new_height=None, num_leaves=None):
    plant = get_or_raise(Plant, plant_id, 'Plant')
    today = date.today()
    kind = MaintenanceType.parse(maintenance_type)

    if new_height is not None:
        new_height = as_number(new_height, 'current_height_cm')
    if num_leaves is not None:
        num_leaves = as_number(num_leaves, 'num_leaves', int)

    record = PlantGrowthRecord(plant=plant, record_date=today, maintenance_type=kind,
                               height_cm=new_height, num_leaves=num_leaves, notes=notes)
    db.session.add(record)

    grown = 0
    if new_height is not None:
        previous_height = plant.current_height_cm
        grown = growth_points(previous_height, new_height)
        plant.current_height_cm = new_height

    if kind is MaintenanceType.WATER:
        earned = maintenance_points(kind, plant.last_watered, today)
        plant.last_watered = today
    elif kind is MaintenanceType.FERTILIZE:
        earned = maintenance_points(kind, plant.last_fertilized, today)
        plant.last_fertilized = today
    else:
        earned = maintenance_points(kind, None, today)

    stage = growth_stage_for(plant.planting_date, today)
    if stage is not None:
        plant.growth_stage = stage

    if grown > 0:
        ledger.credit(plant.user, grown, PointReason.PLANT_GROWTH,
                      f'Plant growth: {new_height - previous_height:.1f} cm for {plant.name}')
    ledger.credit(plant.user, earned, PointReason.PLANT_MAINTENANCE,
                  f'Plant maintenance: {maintenance_type} for {plant.name}')

    db.session.commit()

    result = plant.to_dict()
    result['points_awarded'] = {'maintenance': earned, 'growth': grown}
    return result


def _order_plant_name(product, order, sequence, quantity):
    plastic_info = 'with plastic' if order.use_plastic else 'eco-friendly'
    name = f'{product.name} (Order #{order.id}, {order.order_date.date().isoformat()}, {plastic_info}'
    if quantity > 1:
        name += f', #{sequence} of {quantity}'
    return name + ')'


def plants_from_orders(user_id):
    """Make sure every plant unit the user has ordered is tracked as a Plant.

    Plants are keyed by (user, order, product, sequence), so calling this
    repeatedly only creates the units that are still missing.
    """
    user = get_or_raise(User, user_id, 'User')
    result = []

    for order in Order.query.filter_by(user_id=user.id).order_by(Order.id):
        # units of one product are numbered across all of its lines in the order
        units = {}
        for item in order.items:
            if item.product is not None and item.product.is_plant:
                product, quantity = units.get(item.product_id, (item.product, 0))
                units[item.product_id] = (product, quantity + item.quantity)

        for product, quantity in units.values():
            existing = Plant.query.filter_by(user_id=user.id, source_order_id=order.id,
                                             product_id=product.id).all()
            taken = {p.order_sequence for p in existing}
            result.extend(sorted(existing, key=lambda p: p.order_sequence or 0))

            for sequence in range(1, quantity + 1):
                if sequence in taken:
                    continue
                plant = Plant(
                    user=user,
                    product=product,
                    source_order_id=order.id,
                    order_sequence=sequence,
                    name=_order_plant_name(product, order, sequence, quantity),
                    species=product.description,
                    planting_date=date.today(),
                    purchase_date=order.order_date,
                    growth_stage=GrowthStage.SEEDLING,
                    health_status=HealthStatus.GOOD,
                    image_url=product.image_url,
                )
                db.session.add(plant)
                taken.add(sequence)
                result.append(plant)

    db.session.commit()
    return [p.to_dict() for p in result]
