from ecotrade.models import db


def test_index(client):
    assert client.get('/api/').get_json()['message'] == 'EcoTrade API running'


def test_register_login_logout(client):
    response = client.post('/api/auth/register', json={'name': 'Kim', 'email': 'kim@example.com',
                                                        'password': 'pw'})
    assert response.status_code == 201
    assert response.get_json()['eco_points'] == 100

    response = client.post('/api/auth/login', json={'email': 'kim@example.com', 'password': 'pw'})
    assert response.status_code == 200
    with client.session_transaction() as sess:
        assert sess['user_id'] == response.get_json()['id']

    response = client.post('/api/auth/login', json={'email': 'kim@example.com', 'password': 'no'})
    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'error': 'Invalid email or password'}

    assert client.post('/api/auth/logout').get_json() == {'success': True}


def test_duplicate_registration_is_conflict(client, user):
    response = client.post('/api/users', json={'name': 'Ana', 'email': 'ana@example.com',
                                               'password': 'x'})
    assert response.status_code == 409


def test_order_scenario(client, user, make_product):
    product = make_product(stock=10)

    response = client.post('/api/orders', json={
        'user_id': user.id,
        'items': [{'product_id': product.id, 'quantity': 3}],
    })
    assert response.status_code == 201
    order = response.get_json()
    assert order['status'] == 'PENDING'
    db.session.refresh(product)
    assert product.stock == 7

    assert client.put(f"/api/orders/{order['id']}/confirm").status_code == 200
    response = client.put(f"/api/orders/{order['id']}/deliver")
    assert response.status_code == 409
    assert response.get_json()['success'] is False
    assert client.get(f"/api/orders/{order['id']}").get_json()['status'] == 'CONFIRMED'

    assert client.delete(f"/api/orders/{order['id']}").status_code == 400
    assert client.put(f"/api/orders/{order['id']}/cancel").get_json()['status'] == 'CANCELLED'
    assert client.delete(f"/api/orders/{order['id']}").status_code == 204


def test_order_insufficient_stock_is_conflict(client, user, make_product):
    product = make_product(stock=2)

    response = client.post('/api/orders', json={
        'user_id': user.id,
        'items': [{'product_id': product.id, 'quantity': 3}],
    })

    assert response.status_code == 409
    assert 'Insufficient stock' in response.get_json()['error']


def test_missing_entities_are_404(client):
    assert client.get('/api/orders/1').status_code == 404
    assert client.get('/api/plants/1').status_code == 404
    assert client.put('/api/plastic-submissions/1/verify', json={}).status_code == 404
    assert client.get('/api/users/1').get_json() == {'success': False,
                                                     'error': 'User not found with id: 1'}


def test_eco_points_endpoints(client, user):
    response = client.put(f'/api/users/{user.id}/eco-points/add?points=20')
    assert response.get_json()['eco_points'] == 120

    response = client.put(f'/api/users/{user.id}/eco-points/use?points=500')
    assert response.status_code == 400

    response = client.put(f'/api/users/{user.id}/eco-points/use', json={'points': 20})
    assert response.get_json()['eco_points'] == 100

    history = client.get(f'/api/users/{user.id}/eco-points/history').get_json()
    assert [h['delta'] for h in history] == [-20, 20]

    assert client.put(f'/api/users/{user.id}/eco-points/add').status_code == 400


def test_plastic_workflow(client, user):
    response = client.post('/api/plastic-submissions', json={'user_id': user.id, 'weight': 2.5,
                                                              'plastic_type': 'PET'})
    submission = response.get_json()
    assert submission['eco_points'] == 30.0

    response = client.put(f"/api/plastic-submissions/{submission['id']}/verify",
                          json={'notes': 'ok'})
    assert response.get_json()['status'] == 'VERIFIED'
    assert client.get(f'/api/users/{user.id}').get_json()['eco_points'] == 130

    response = client.put(f"/api/plastic-submissions/{submission['id']}/reject", json={})
    assert response.status_code == 409


def test_plant_maintenance_endpoint(client, user):
    plant = client.post('/api/plants', json={'user_id': user.id, 'name': 'Basil',
                                             'current_height_cm': 4}).get_json()

    response = client.post(f"/api/plants/{plant['id']}/record-maintenance",
                           json={'maintenance_type': 'water', 'notes': 'morning',
                                 'current_height_cm': 6})
    body = response.get_json()
    assert response.status_code == 200
    assert body['points_awarded'] == {'maintenance': 3, 'growth': 4}

    records = client.get(f"/api/plants/{plant['id']}/growth-records").get_json()
    assert records[0]['notes'] == 'morning'

    response = client.post(f"/api/plants/{plant['id']}/record-maintenance", json={})
    assert response.status_code == 400


def test_products_endpoints(client):
    response = client.post('/api/products', json={'name': 'Snake Plant', 'price': 24.99,
                                                  'category': 'plants', 'is_plant': True,
                                                  'stock': 5})
    assert response.status_code == 201
    product = response.get_json()
    assert product['category'] == 'PLANTS'

    assert len(client.get('/api/products/plants').get_json()) == 1
    assert client.get('/api/products/category/TOOLS').get_json() == []
    assert client.get('/api/products/category/SPACESHIPS').status_code == 400

    response = client.patch(f"/api/products/{product['id']}/image",
                            json={'image_url': '/images/snake.jpg'})
    assert response.get_json()['image_url'] == '/images/snake.jpg'

    response = client.put(f"/api/products/{product['id']}", json={'stock': -1})
    assert response.status_code == 400


def test_reports(client, user):
    client.post('/api/plastic-submissions', json={'user_id': user.id, 'weight': 2,
                                                  'plastic_type': 'PET'})
    submission = client.post('/api/plastic-submissions',
                             json={'user_id': user.id, 'weight': 1, 'plastic_type': 'HDPE'})
    client.put(f"/api/plastic-submissions/{submission.get_json()['id']}/verify", json={})

    summary = client.get('/api/reports/summary').get_json()
    assert summary['verified_plastic_kg'] == 1.0
    assert summary['submissions'] == {'PENDING': 1, 'VERIFIED': 1, 'REJECTED': 0}
    assert summary['plastic_by_type'] == [{'type': 'HDPE', 'total_kg': 1.0, 'percentage': 100.0}]

    response = client.get('/api/reports/sustainability.pdf')
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.data.startswith(b'%PDF')


def test_seed_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed'])
    assert 'Demo data created' in result.output

    result = runner.invoke(args=['seed'])
    assert 'nothing to do' in result.output


def test_product_with_orders_cannot_be_deleted(client, user, make_product):
    ordered = make_product(stock=5)
    spare = make_product(name='Spare', stock=5)
    client.post('/api/orders', json={'user_id': user.id,
                                     'items': [{'product_id': ordered.id, 'quantity': 1}]})

    response = client.delete(f'/api/products/{ordered.id}')
    assert response.status_code == 400
    assert response.get_json()['success'] is False
    assert client.get(f'/api/products/{ordered.id}').status_code == 200

    assert client.delete(f'/api/products/{spare.id}').status_code == 204
    assert client.get(f'/api/products/{spare.id}').status_code == 404


def test_fractional_points_rejected(client, user):
    response = client.put(f'/api/users/{user.id}/eco-points/add', json={'points': 2.5})

    assert response.status_code == 400
    assert client.get(f'/api/users/{user.id}').get_json()['eco_points'] == 100


def test_json_keys_keep_declared_order(app, client, user):
    assert app.json.sort_keys is False
    body = client.get(f'/api/users/{user.id}').get_data(as_text=True)
    assert body.index('"id"') < body.index('"email"')
