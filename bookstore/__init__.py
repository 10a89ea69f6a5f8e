from .book_order import BookOrder, OrderStatus
from .bookstore import Bookstore

__all__ = ["BookOrder", "Bookstore", "OrderStatus"]
