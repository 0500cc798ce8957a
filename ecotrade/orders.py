"""Order lifecycle.

PENDING -> CONFIRMED -> SHIPPED -> DELIVERED, and any non-terminal state
-> CANCELLED. Stock is taken when the order is created and given back on
cancellation; reward points are paid on delivery.
"""
from ecotrade import ledger
from ecotrade.errors import (InsufficientStock, InvalidOperation, InvalidStateTransition,
                             ValidationError, require, as_number)
from ecotrade.models import (db, User, Product, Order, OrderItem, OrderStatus, PointReason,
                             get_or_raise)

# status required before each transition
PREDECESSORS = {
    OrderStatus.CONFIRMED: (OrderStatus.PENDING,),
    OrderStatus.SHIPPED: (OrderStatus.CONFIRMED,),
    OrderStatus.DELIVERED: (OrderStatus.SHIPPED,),
    OrderStatus.CANCELLED: (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
}

PLASTIC_POINTS_PER_KG = 10


def _transition(order, target):
    if order.status not in PREDECESSORS[target]:
        verb = target.value.lower()
        raise InvalidStateTransition(
            f'Order cannot be {verb} in current status: {order.status.value}')
    order.status = target


def _shipping_address(payment):
    return '{}, {}, {}, {} - {}'.format(
        payment.get('name', ''),
        payment.get('address', ''),
        payment.get('city', ''),
        payment.get('state', ''),
        payment.get('pincode', ''),
    )


def list_orders():
    return [o.to_dict() for o in Order.query.order_by(Order.id).all()]


def get_order(order_id):
    return get_or_raise(Order, order_id, 'Order').to_dict()


def list_user_orders(user_id):
    return [o.to_dict() for o in Order.query.filter_by(user_id=user_id).order_by(Order.id)]


def create_order(data):
    user_id, items = require(data, 'user_id', 'items')
    if not isinstance(items, list) or not items:
        raise ValidationError('No items in order')

    eco_points_used = as_number(data.get('eco_points_used') or 0, 'eco_points_used', int)
    if eco_points_used < 0:
        raise ValidationError('eco_points_used cannot be negative')
    use_plastic = bool(data.get('use_plastic', False))

    try:
        user = get_or_raise(User, user_id, 'User')
        order = Order(user=user, status=OrderStatus.PENDING, use_plastic=use_plastic,
                      eco_points_used=eco_points_used)
        db.session.add(order)

        payment = data.get('payment_details')
        if payment:
            order.shipping_address = _shipping_address(payment)
            order.payment_method = payment.get('payment_method')

        total = 0.0
        earned = 0
        for line in items:
            product_id, quantity = require(line, 'product_id', 'quantity')
            quantity = as_number(quantity, 'quantity', int)
            if quantity <= 0:
                raise ValidationError('Quantity must be greater than zero')

            product = get_or_raise(Product, product_id, 'Product')
            if quantity > product.stock:
                raise InsufficientStock(f'Insufficient stock for product: {product.name}')

            price = line.get('price')
            price = product.price if price is None else as_number(price, 'price')
            redeemed = bool(line.get('redeemed_with_points', False))

            order.items.append(OrderItem(product=product, quantity=quantity, price=price,
                                         redeemed_with_points=redeemed))
            product.stock -= quantity

            if not redeemed:
                total += price * quantity
            earned += (product.eco_points_reward or 0) * quantity

        order.total_amount = (as_number(data['total_amount'], 'total_amount')
                              if data.get('total_amount') is not None else round(total, 2))
        order.eco_points_earned = (as_number(data['eco_points_earned'], 'eco_points_earned', int)
                                   if data.get('eco_points_earned') is not None else earned)

        db.session.flush()

        # redemption is debited without a balance check, the order may overdraw
        if eco_points_used > 0:
            ledger.debit(user, eco_points_used, PointReason.ORDER_REDEMPTION,
                         f'Redeemed on order #{order.id}', allow_overdraft=True)

        plastic = data.get('plastic_details')
        if use_plastic and plastic and plastic.get('weight') is not None:
            weight = as_number(plastic['weight'], 'plastic_details.weight')
            bonus = ledger.round_points(weight * PLASTIC_POINTS_PER_KG)
            if bonus > 0:
                ledger.credit(user, bonus, PointReason.ORDER_PLASTIC_BONUS,
                              f'{weight} kg plastic returned with order #{order.id}')

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return order.to_dict()


def update_order(order_id, data):
    order = get_or_raise(Order, order_id, 'Order')
    if data.get('shipping_address') is not None:
        order.shipping_address = data['shipping_address']
    db.session.commit()
    return order.to_dict()


def confirm_order(order_id):
    order = get_or_raise(Order, order_id, 'Order')
    _transition(order, OrderStatus.CONFIRMED)
    db.session.commit()
    return order.to_dict()


def ship_order(order_id):
    order = get_or_raise(Order, order_id, 'Order')
    _transition(order, OrderStatus.SHIPPED)
    db.session.commit()
    return order.to_dict()


def deliver_order(order_id):
    order = get_or_raise(Order, order_id, 'Order')
    _transition(order, OrderStatus.DELIVERED)
    if order.eco_points_earned and order.eco_points_earned > 0:
        ledger.credit(order.user, order.eco_points_earned, PointReason.ORDER_DELIVERY,
                      f'Order #{order.id} delivered')
    db.session.commit()
    return order.to_dict()


def cancel_order(order_id):
    order = get_or_raise(Order, order_id, 'Order')
    _transition(order, OrderStatus.CANCELLED)
    for item in order.items:
        item.product.stock += item.quantity
    db.session.commit()
    return order.to_dict()


def delete_order(order_id):
    order = get_or_raise(Order, order_id, 'Order')
    if order.status != OrderStatus.CANCELLED:
        raise InvalidOperation('Only cancelled orders can be deleted')
    db.session.delete(order)
    db.session.commit()
