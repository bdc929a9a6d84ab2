from shop_api.models.product_models import Product
from shop_api.models.order_models import Order, OrderProduct, OrderStatus
from shop_api.models.customer_models import User

__all__ = ["Order", "OrderProduct", "OrderStatus", "Product", "User"]
