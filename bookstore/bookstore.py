from typing import List

CATALOGUE = ["Book: Ruby 101", "Book: RSpec Mastery"]


class Bookstore:
    @classmethod
    def find(cls, title: str) -> str:
        # stands in for a catalogue lookup
        return f"Book: {title}"

    @classmethod
    def all(cls) -> List[str]:
        return list(CATALOGUE)

    def order_book(self, book_title: str, customer: str) -> str:
        return f"Order placed for {book_title} by {customer}"

    def notify_customer(self, customer: str, message: str) -> str:
        return f"Notified {customer}: {message}"
