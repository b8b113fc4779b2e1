from karigarverse.models.user import User
from karigarverse.models.artisan import ArtisanProfile
from karigarverse.models.category import Category
from karigarverse.models.product import Product
from karigarverse.models.cart import CartItem
from karigarverse.models.order import Order
from karigarverse.models.order_item import OrderItem
from karigarverse.models.review import Review

# add ALL models here
