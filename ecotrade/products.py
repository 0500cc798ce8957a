# products.py
from ecotrade.errors import InvalidOperation, ValidationError, require, as_number
from ecotrade.models import db, Product, ProductCategory, get_or_raise


def parse_category(value):
    try:
        return ProductCategory(str(value).upper())
    except ValueError:
        raise ValidationError(f'Unknown product category: {value}')


def _apply(product, data):
    if 'name' in data:
        product.name = data['name']
    if 'description' in data:
        product.description = data['description'] or ''
    if 'price' in data:
        product.price = as_number(data['price'], 'price')
    if 'eco_points_cost' in data:
        product.eco_points_cost = as_number(data['eco_points_cost'], 'eco_points_cost', int)
    if 'eco_points_reward' in data:
        product.eco_points_reward = as_number(data['eco_points_reward'], 'eco_points_reward', int)
    if 'stock' in data:
        stock = as_number(data['stock'], 'stock', int)
        if stock < 0:
            raise ValidationError('Stock cannot be negative')
        product.stock = stock
    if 'image_url' in data:
        product.image_url = data['image_url']
    if 'category' in data:
        product.category = parse_category(data['category'])
    if 'is_plant' in data:
        product.is_plant = bool(data['is_plant'])


def list_products():
    return [p.to_dict() for p in Product.query.order_by(Product.id).all()]


def get_product(product_id):
    return get_or_raise(Product, product_id, 'Product').to_dict()


def list_by_category(category):
    category = parse_category(category)
    return [p.to_dict() for p in Product.query.filter_by(category=category).order_by(Product.id)]


def list_plants():
    return [p.to_dict() for p in Product.query.filter_by(is_plant=True).order_by(Product.id)]


def create_product(data):
    require(data, 'name', 'price', 'category')
    product = Product(eco_points_cost=0, eco_points_reward=0, stock=0, is_plant=False)
    _apply(product, data)
    db.session.add(product)
    db.session.commit()
    return product.to_dict()


def update_product(product_id, data):
    product = get_or_raise(Product, product_id, 'Product')
    _apply(product, data)
    db.session.commit()
    return product.to_dict()


def update_product_image(product_id, image_url):
    if not image_url:
        raise ValidationError('image_url is required')
    product = get_or_raise(Product, product_id, 'Product')
    product.image_url = image_url
    db.session.commit()
    return product.to_dict()


def delete_product(product_id):
    product = get_or_raise(Product, product_id, 'Product')
    if product.order_items:
        raise InvalidOperation('Product is referenced by existing orders and cannot be deleted')
    db.session.delete(product)
    db.session.commit()
