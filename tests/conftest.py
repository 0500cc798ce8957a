import pytest

from ecotrade.app import create_app
from ecotrade.config import TestingConfig
from ecotrade.models import db, User, Product, ProductCategory


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(name='Ana', username='ana', email='ana@example.com',
                password='not-a-real-hash', eco_points=100)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_product(app):
    def _make(name='Bamboo Toothbrush', stock=10, price=5.0, reward=10, is_plant=False,
              category=ProductCategory.ACCESSORIES):
        product = Product(name=name, description=f'{name} description', price=price,
                          eco_points_cost=50, eco_points_reward=reward, stock=stock,
                          category=category, is_plant=is_plant)
        db.session.add(product)
        db.session.commit()
        return product
    return _make
