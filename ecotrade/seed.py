# seed.py
from datetime import date, timedelta

from flask import current_app
from werkzeug.security import generate_password_hash

from ecotrade import ledger, plastic
from ecotrade.models import (db, User, Product, ProductCategory, Plant, PlasticSubmission,
                             GrowthStage, HealthStatus, SubmissionStatus, PointReason)

DEMO_USERS = [
    {'username': 'john_doe', 'email': 'john@example.com', 'password': 'password',
     'name': 'John', 'full_name': 'John Doe', 'eco_points': 100},
    {'username': 'jane_smith', 'email': 'jane@example.com', 'password': 'password',
     'name': 'Jane', 'full_name': 'Jane Smith', 'eco_points': 150},
    {'username': 'admin', 'email': 'admin@example.com', 'password': 'admin',
     'name': 'Admin', 'full_name': 'Admin User', 'eco_points': 500, 'role': 'ADMIN'},
]

DEMO_PRODUCTS = [
    {'name': 'Bamboo Toothbrush', 'price': 5.99, 'eco_points_cost': 50, 'eco_points_reward': 10,
     'stock': 100, 'category': ProductCategory.ACCESSORIES,
     'description': 'Eco-friendly bamboo toothbrush with natural bristles'},
    {'name': 'Reusable Water Bottle', 'price': 19.99, 'eco_points_cost': 150, 'eco_points_reward': 20,
     'stock': 50, 'category': ProductCategory.ACCESSORIES,
     'description': 'Stainless steel bottle that replaces single-use plastic'},
    {'name': 'Monstera Plant', 'price': 29.99, 'eco_points_cost': 250, 'eco_points_reward': 30,
     'stock': 20, 'category': ProductCategory.PLANTS, 'is_plant': True,
     'description': 'Monstera deliciosa'},
    {'name': 'Snake Plant', 'price': 24.99, 'eco_points_cost': 200, 'eco_points_reward': 25,
     'stock': 25, 'category': ProductCategory.PLANTS, 'is_plant': True,
     'description': 'Dracaena trifasciata'},
    {'name': 'Organic Plant Fertilizer', 'price': 12.99, 'eco_points_cost': 100,
     'eco_points_reward': 15, 'stock': 40, 'category': ProductCategory.FERTILIZERS,
     'description': 'Slow-release organic fertilizer for indoor plants'},
]


def seed_data():
    """Load demo data once. Returns False when the database already has users."""
    log = current_app.logger
    if User.query.count() > 0:
        log.info('Database already seeded, skipping')
        return False

    accounts = {}
    for data in DEMO_USERS:
        data = dict(data)
        password = data.pop('password')
        points = data.pop('eco_points')
        user = User(password=generate_password_hash(password), eco_points=0, **data)
        db.session.add(user)
        db.session.flush()
        ledger.credit(user, points, PointReason.WELCOME_BONUS, 'Demo account balance')
        accounts[user.username] = user

    catalog = {}
    for data in DEMO_PRODUCTS:
        product = Product(**data)
        db.session.add(product)
        catalog[product.name] = product

    john, jane = accounts['john_doe'], accounts['jane_smith']
    today = date.today()

    db.session.add(Plant(
        user=john, product=catalog['Monstera Plant'], name='My Monstera',
        species=catalog['Monstera Plant'].description, planting_date=today - timedelta(days=10),
        growth_stage=GrowthStage.SEEDLING, health_status=HealthStatus.GOOD,
        current_height_cm=15.0,
    ))
    db.session.add(Plant(
        user=jane, product=catalog['Snake Plant'], name='Office Snake Plant',
        species=catalog['Snake Plant'].description, planting_date=today - timedelta(days=60),
        growth_stage=GrowthStage.MATURE_PLANT, health_status=HealthStatus.GOOD,
        current_height_cm=40.0,
    ))

    for user, weight, kind, status in [
        (john, 2.5, 'PET', SubmissionStatus.PENDING),
        (jane, 1.8, 'HDPE', SubmissionStatus.PENDING),
        (john, 3.0, 'PVC', SubmissionStatus.REJECTED),
    ]:
        db.session.add(PlasticSubmission(
            user=user, weight=weight, plastic_type=kind, status=status,
            eco_points=plastic.calculate_eco_points(weight, kind),
            location='Community recycling point',
        ))

    db.session.commit()
    log.info('Seeded %d users and %d products', len(accounts), len(catalog))
    return True
