# routes.py
from datetime import datetime

from flask import Blueprint, request, jsonify, session, send_file

from ecotrade import ledger, orders, plants, plastic, products, reports, users
from ecotrade.errors import ValidationError, as_number

api = Blueprint('api', __name__, url_prefix='/api')


def _body():
    return request.get_json(silent=True) or {}


def _points_arg():
    points = request.args.get('points')
    if points is None:
        points = _body().get('points')
    if points is None:
        raise ValidationError('Missing required parameter: points')
    return as_number(points, 'points', int)


@api.route('/')
def index():
    return {'message': 'EcoTrade API running'}


# Auth

@api.route('/auth/register', methods=['POST'])
def register():
    user = users.register(_body())
    session['user_id'] = user['id']
    return jsonify(user), 201


@api.route('/auth/login', methods=['POST'])
def login():
    data = _body()
    user = users.authenticate(data.get('email'), data.get('password'))
    session['user_id'] = user.id
    session['user_role'] = user.role
    return jsonify(user.to_dict())


@api.route('/auth/logout', methods=['POST'])
def logout():
    session.clear()
    return {'success': True}


# Users and EcoPoints

@api.route('/users', methods=['GET'])
def list_users():
    return jsonify(users.list_users())


@api.route('/users', methods=['POST'])
def create_user():
    return jsonify(users.create_user(_body())), 201


@api.route('/users/<int:user_id>', methods=['GET'])
def get_user(user_id):
    return jsonify(users.get_user(user_id))


@api.route('/users/<int:user_id>', methods=['PUT'])
def update_user(user_id):
    return jsonify(users.update_user(user_id, _body()))


@api.route('/users/<int:user_id>', methods=['DELETE'])
def delete_user(user_id):
    users.delete_user(user_id)
    return '', 204


@api.route('/users/<int:user_id>/eco-points/add', methods=['PUT'])
def add_eco_points(user_id):
    return jsonify(ledger.add_eco_points(user_id, _points_arg(), detail=_body().get('reason')))


@api.route('/users/<int:user_id>/eco-points/use', methods=['PUT'])
def use_eco_points(user_id):
    return jsonify(ledger.use_eco_points(user_id, _points_arg(), detail=_body().get('reason')))


@api.route('/users/<int:user_id>/eco-points/history', methods=['GET'])
def eco_points_history(user_id):
    return jsonify(ledger.history(user_id))


# Products

@api.route('/products', methods=['GET'])
def list_products():
    return jsonify(products.list_products())


@api.route('/products/plants', methods=['GET'])
def list_plant_products():
    return jsonify(products.list_plants())


@api.route('/products/category/<category>', methods=['GET'])
def list_products_by_category(category):
    return jsonify(products.list_by_category(category))


@api.route('/products', methods=['POST'])
def create_product():
    return jsonify(products.create_product(_body())), 201


@api.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    return jsonify(products.get_product(product_id))


@api.route('/products/<int:product_id>', methods=['PUT'])
def update_product(product_id):
    return jsonify(products.update_product(product_id, _body()))


@api.route('/products/<int:product_id>/image', methods=['PATCH'])
def update_product_image(product_id):
    return jsonify(products.update_product_image(product_id, _body().get('image_url')))


@api.route('/products/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    products.delete_product(product_id)
    return '', 204


# Orders

@api.route('/orders', methods=['GET'])
def list_orders():
    return jsonify(orders.list_orders())


@api.route('/orders', methods=['POST'])
def create_order():
    return jsonify(orders.create_order(_body())), 201


@api.route('/orders/user/<int:user_id>', methods=['GET'])
def list_user_orders(user_id):
    return jsonify(orders.list_user_orders(user_id))


@api.route('/orders/<int:order_id>', methods=['GET'])
def get_order(order_id):
    return jsonify(orders.get_order(order_id))


@api.route('/orders/<int:order_id>', methods=['PUT'])
def update_order(order_id):
    return jsonify(orders.update_order(order_id, _body()))


@api.route('/orders/<int:order_id>/confirm', methods=['PUT'])
def confirm_order(order_id):
    return jsonify(orders.confirm_order(order_id))


@api.route('/orders/<int:order_id>/ship', methods=['PUT'])
def ship_order(order_id):
    return jsonify(orders.ship_order(order_id))


@api.route('/orders/<int:order_id>/deliver', methods=['PUT'])
def deliver_order(order_id):
    return jsonify(orders.deliver_order(order_id))


@api.route('/orders/<int:order_id>/cancel', methods=['PUT'])
def cancel_order(order_id):
    return jsonify(orders.cancel_order(order_id))


@api.route('/orders/<int:order_id>', methods=['DELETE'])
def delete_order(order_id):
    orders.delete_order(order_id)
    return '', 204


# Plants

@api.route('/plants', methods=['GET'])
def list_plants():
    return jsonify(plants.list_plants())


@api.route('/plants', methods=['POST'])
def create_plant():
    return jsonify(plants.create_plant(_body())), 201


@api.route('/plants/user/<int:user_id>', methods=['GET'])
def list_user_plants(user_id):
    return jsonify(plants.list_user_plants(user_id))


@api.route('/plants/user/<int:user_id>/orders', methods=['GET'])
def plants_from_orders(user_id):
    return jsonify(plants.plants_from_orders(user_id))


@api.route('/plants/<int:plant_id>', methods=['GET'])
def get_plant(plant_id):
    return jsonify(plants.get_plant(plant_id))


@api.route('/plants/<int:plant_id>', methods=['PUT'])
def update_plant(plant_id):
    return jsonify(plants.update_plant(plant_id, _body()))


@api.route('/plants/<int:plant_id>', methods=['DELETE'])
def delete_plant(plant_id):
    plants.delete_plant(plant_id)
    return '', 204


@api.route('/plants/<int:plant_id>/water', methods=['POST'])
def water_plant(plant_id):
    return jsonify(plants.water_plant(plant_id))


@api.route('/plants/<int:plant_id>/fertilize', methods=['POST'])
def fertilize_plant(plant_id):
    return jsonify(plants.fertilize_plant(plant_id))


@api.route('/plants/<int:plant_id>/record-maintenance', methods=['POST'])
def record_maintenance(plant_id):
    data = _body()
    if not data.get('maintenance_type'):
        raise ValidationError('Missing required field(s): maintenance_type')
    return jsonify(plants.record_maintenance(
        plant_id,
        data['maintenance_type'],
        notes=data.get('notes'),
        new_height=data.get('current_height_cm'),
        num_leaves=data.get('num_leaves'),
    ))


@api.route('/plants/<int:plant_id>/growth-records', methods=['GET'])
def plant_growth_records(plant_id):
    return jsonify(plants.growth_records(plant_id))


# Plastic submissions

@api.route('/plastic-submissions', methods=['GET'])
def list_submissions():
    return jsonify(plastic.list_submissions())


@api.route('/plastic-submissions', methods=['POST'])
def create_submission():
    return jsonify(plastic.create_submission(_body())), 201


@api.route('/plastic-submissions/user/<int:user_id>', methods=['GET'])
def list_user_submissions(user_id):
    return jsonify(plastic.list_user_submissions(user_id))


@api.route('/plastic-submissions/<int:submission_id>', methods=['GET'])
def get_submission(submission_id):
    return jsonify(plastic.get_submission(submission_id))


@api.route('/plastic-submissions/<int:submission_id>/verify', methods=['PUT'])
def verify_submission(submission_id):
    return jsonify(plastic.verify_submission(submission_id, _body().get('notes')))


@api.route('/plastic-submissions/<int:submission_id>/reject', methods=['PUT'])
def reject_submission(submission_id):
    return jsonify(plastic.reject_submission(submission_id, _body().get('notes')))


@api.route('/plastic-submissions/<int:submission_id>', methods=['DELETE'])
def delete_submission(submission_id):
    plastic.delete_submission(submission_id)
    return '', 204


# Reports

@api.route('/reports/summary', methods=['GET'])
def report_summary():
    return jsonify(reports.summary())


@api.route('/reports/sustainability.pdf', methods=['GET'])
def report_pdf():
    return send_file(
        reports.build_pdf(),
        as_attachment=True,
        download_name=f"ecotrade_report_{datetime.now().strftime('%Y%m%d_%H%M')}.pdf",
        mimetype='application/pdf'
    )
