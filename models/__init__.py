from models.enums import Role, OrderStatus
from models.users import User
from models.session_tokens import SessionToken
from models.categories import Category
from models.products import Product
from models.product_images import ProductImage
from models.cart_items import CartItem
from models.orders import Order
from models.order_items import OrderItem

__all__ = ["Role", "OrderStatus", "User", "SessionToken", "Category", "Product",
           "ProductImage", "CartItem", "Order", "OrderItem"]
