from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PLACED = "placed"
    CANCELLED = "cancelled"


class BookOrder:
    book_title: str
    customer: str

    def __init__(self, book_title: str, customer: str):
        self.book_title = book_title
        self.customer = customer
        self._status = OrderStatus.PENDING

    @property
    def status(self) -> OrderStatus:
        return self._status

    def place(self) -> OrderStatus:
        self._status = OrderStatus.PLACED
        return self._status

    def cancel(self) -> OrderStatus:
        self._status = OrderStatus.CANCELLED
        return self._status

    @property
    def is_placed(self) -> bool:
        return self._status is OrderStatus.PLACED

    @property
    def is_cancelled(self) -> bool:
        return self._status is OrderStatus.CANCELLED
