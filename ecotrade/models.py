# models.py
import enum
from datetime import datetime, date

from flask_sqlalchemy import SQLAlchemy

from ecotrade.errors import NotFound

db = SQLAlchemy()


class ProductCategory(enum.Enum):
    PLANTS = 'PLANTS'
    SEEDS = 'SEEDS'
    POTS = 'POTS'
    TOOLS = 'TOOLS'
    FERTILIZERS = 'FERTILIZERS'
    ACCESSORIES = 'ACCESSORIES'
    ECO_FRIENDLY_PRODUCTS = 'ECO_FRIENDLY_PRODUCTS'


class OrderStatus(enum.Enum):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    SHIPPED = 'SHIPPED'
    DELIVERED = 'DELIVERED'
    CANCELLED = 'CANCELLED'


class SubmissionStatus(enum.Enum):
    PENDING = 'PENDING'
    VERIFIED = 'VERIFIED'
    REJECTED = 'REJECTED'


class GrowthStage(enum.Enum):
    SEEDLING = 'Seedling'
    YOUNG_PLANT = 'Young Plant'
    MATURE_PLANT = 'Mature Plant'
    FULLY_GROWN = 'Fully Grown'


class HealthStatus(enum.Enum):
    EXCELLENT = 'Excellent'
    GOOD = 'Good'
    FAIR = 'Fair'
    POOR = 'Poor'


class MaintenanceType(enum.Enum):
    WATER = 'water'
    FERTILIZE = 'fertilize'
    PRUNE = 'prune'
    REPOT = 'repot'
    OTHER = 'other'

    @classmethod
    def parse(cls, label):
        # unknown labels are still recorded, as generic maintenance
        try:
            return cls((label or '').strip().lower())
        except ValueError:
            return cls.OTHER


class PointReason(enum.Enum):
    ORDER_REDEMPTION = 'ORDER_REDEMPTION'
    ORDER_DELIVERY = 'ORDER_DELIVERY'
    ORDER_PLASTIC_BONUS = 'ORDER_PLASTIC_BONUS'
    PLANT_MAINTENANCE = 'PLANT_MAINTENANCE'
    PLANT_GROWTH = 'PLANT_GROWTH'
    PLASTIC_VERIFIED = 'PLASTIC_VERIFIED'
    WELCOME_BONUS = 'WELCOME_BONUS'
    MANUAL_ADJUSTMENT = 'MANUAL_ADJUSTMENT'


def _iso(value):
    return value.isoformat() if value is not None else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200))
    username = db.Column(db.String(80), unique=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(256), nullable=False)
    eco_points = db.Column(db.Integer, nullable=False, default=0)
    role = db.Column(db.String(20), nullable=False, default='USER')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    orders = db.relationship('Order', backref='user', lazy=True, cascade='all, delete-orphan')
    plants = db.relationship('Plant', backref='user', lazy=True, cascade='all, delete-orphan')
    plastic_submissions = db.relationship('PlasticSubmission', backref='user', lazy=True,
                                          cascade='all, delete-orphan')
    point_transactions = db.relationship('PointTransaction', backref='user', lazy=True,
                                         cascade='all, delete-orphan')

    def __repr__(self):
        return f'<User {self.username}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'full_name': self.full_name,
            'username': self.username,
            'email': self.email,
            'eco_points': self.eco_points,
            'role': self.role,
        }


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=False, default='')
    price = db.Column(db.Float, nullable=False)
    eco_points_cost = db.Column(db.Integer, nullable=False, default=0)
    eco_points_reward = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(300))
    category = db.Column(db.Enum(ProductCategory), nullable=False)
    is_plant = db.Column(db.Boolean, nullable=False, default=False)

    def __repr__(self):
        return f'<Product {self.name} ({self.stock})>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'eco_points_cost': self.eco_points_cost,
            'eco_points_reward': self.eco_points_reward,
            'stock': self.stock,
            'image_url': self.image_url,
            'category': self.category.value,
            'is_plant': self.is_plant,
        }


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    total_amount = db.Column(db.Float, nullable=False, default=0.0)
    order_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    eco_points_earned = db.Column(db.Integer, nullable=False, default=0)
    eco_points_used = db.Column(db.Integer, nullable=False, default=0)
    use_plastic = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    shipping_address = db.Column(db.String(500))
    payment_method = db.Column(db.String(50))

    items = db.relationship('OrderItem', backref='order', lazy=True,
                            cascade='all, delete-orphan', order_by='OrderItem.id')

    def __repr__(self):
        return f'<Order #{self.id} {self.status.value}>'

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'total_amount': self.total_amount,
            'order_date': _iso(self.order_date),
            'eco_points_earned': self.eco_points_earned,
            'eco_points_used': self.eco_points_used,
            'use_plastic': self.use_plastic,
            'status': self.status.value,
            'shipping_address': self.shipping_address,
            'payment_method': self.payment_method,
            'items': [item.to_dict() for item in self.items],
        }


class OrderItem(db.Model):
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, nullable=False)
    redeemed_with_points = db.Column(db.Boolean, nullable=False, default=False)

    product = db.relationship('Product', backref=db.backref('order_items', lazy=True))

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product.name if self.product else None,
            'quantity': self.quantity,
            'price': self.price,
            'redeemed_with_points': self.redeemed_with_points,
        }


class Plant(db.Model):
    __tablename__ = 'plants'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'source_order_id', 'product_id', 'order_sequence',
                            name='uq_plants_order_unit'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'))
    # set only for plants generated from an order line
    source_order_id = db.Column(db.Integer, db.ForeignKey('orders.id', ondelete='SET NULL'))
    order_sequence = db.Column(db.Integer)

    name = db.Column(db.String(300), nullable=False)
    species = db.Column(db.String(1000))
    plant_name = db.Column(db.String(200))
    planting_date = db.Column(db.Date)
    purchase_date = db.Column(db.DateTime, default=datetime.utcnow)
    last_watered = db.Column(db.Date)
    last_fertilized = db.Column(db.Date)
    growth_stage = db.Column(db.Enum(GrowthStage), default=GrowthStage.SEEDLING)
    health_status = db.Column(db.Enum(HealthStatus), default=HealthStatus.GOOD)
    current_height_cm = db.Column(db.Float)
    image_url = db.Column(db.String(300))
    notes = db.Column(db.Text)

    product = db.relationship('Product', backref=db.backref('plants', lazy=True))
    growth_records = db.relationship('PlantGrowthRecord', backref='plant', lazy=True,
                                     cascade='all, delete-orphan', order_by='PlantGrowthRecord.id')

    def __repr__(self):
        return f'<Plant {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'product_id': self.product_id,
            'product_name': self.product.name if self.product else None,
            'source_order_id': self.source_order_id,
            'order_sequence': self.order_sequence,
            'name': self.name,
            'species': self.species,
            'plant_name': self.plant_name,
            'planting_date': _iso(self.planting_date),
            'purchase_date': _iso(self.purchase_date),
            'last_watered': _iso(self.last_watered),
            'last_fertilized': _iso(self.last_fertilized),
            'growth_stage': self.growth_stage.value if self.growth_stage else None,
            'health_status': self.health_status.value if self.health_status else None,
            'current_height_cm': self.current_height_cm,
            'image_url': self.image_url,
            'notes': self.notes,
        }


class PlantGrowthRecord(db.Model):
    __tablename__ = 'plant_growth_records'

    id = db.Column(db.Integer, primary_key=True)
    plant_id = db.Column(db.Integer, db.ForeignKey('plants.id'), nullable=False)
    record_date = db.Column(db.Date, nullable=False, default=date.today)
    maintenance_type = db.Column(db.Enum(MaintenanceType))
    height_cm = db.Column(db.Float)
    num_leaves = db.Column(db.Integer)
    image_url = db.Column(db.String(300))
    notes = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'plant_id': self.plant_id,
            'record_date': _iso(self.record_date),
            'maintenance_type': self.maintenance_type.value if self.maintenance_type else None,
            'height_cm': self.height_cm,
            'num_leaves': self.num_leaves,
            'image_url': self.image_url,
            'notes': self.notes,
        }


class PlasticSubmission(db.Model):
    __tablename__ = 'plastic_submissions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    weight = db.Column(db.Float, nullable=False)
    plastic_type = db.Column(db.String(50))
    image_url = db.Column(db.String(300))
    description = db.Column(db.String(1000))
    location = db.Column(db.String(200))
    submission_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    eco_points = db.Column(db.Float, nullable=False, default=0.0)
    status = db.Column(db.Enum(SubmissionStatus), nullable=False, default=SubmissionStatus.PENDING)
    verification_date = db.Column(db.DateTime)
    verification_notes = db.Column(db.Text)

    def __repr__(self):
        return f'<PlasticSubmission {self.plastic_type} - {self.weight}kg>'

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'weight': self.weight,
            'plastic_type': self.plastic_type,
            'image_url': self.image_url,
            'description': self.description,
            'location': self.location,
            'submission_date': _iso(self.submission_date),
            'eco_points': self.eco_points,
            'status': self.status.value,
            'verification_date': _iso(self.verification_date),
            'verification_notes': self.verification_notes,
        }


class PointTransaction(db.Model):
    __tablename__ = 'point_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    delta = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Enum(PointReason), nullable=False)
    detail = db.Column(db.String(300))
    balance_after = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'delta': self.delta,
            'reason': self.reason.value,
            'detail': self.detail,
            'balance_after': self.balance_after,
            'created_at': _iso(self.created_at),
        }


def get_or_raise(model, ident, label=None):
    obj = db.session.get(model, ident) if ident is not None else None
    if obj is None:
        raise NotFound(f'{label or model.__name__} not found with id: {ident}')
    return obj
