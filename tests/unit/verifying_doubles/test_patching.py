"""
Test cases for ScopedPatch
"""
import pytest

from bookstore import Bookstore
from verifying_doubles.core.exceptions import DoublesBaseException
from verifying_doubles.patching import ScopedPatch
from utils import SlottedCourier


class TestScopedPatch:
    """Test ScopedPatch apply and release"""

    def test_inherited_attribute_is_removed_on_release(self, store):
        patch = ScopedPatch(store, "order_book", lambda *a: "patched").apply()

        assert store.order_book("Ruby 101", "Alice") == "patched"
        assert not patch.owned

        patch.release()

        assert "order_book" not in vars(store)
        assert store.order_book("Ruby 101", "Alice") == "Order placed for Ruby 101 by Alice"

    def test_own_attribute_is_put_back(self, order):
        patch = ScopedPatch(order, "customer", "Bob").apply()

        assert order.customer == "Bob"
        assert patch.owned

        patch.release()

        assert order.customer == "Alice"

    def test_class_descriptor_is_put_back_verbatim(self):
        original = vars(Bookstore)["find"]

        with ScopedPatch(Bookstore, "find", staticmethod(lambda title: "patched")):
            assert Bookstore.find("Ruby 101") == "patched"

        assert vars(Bookstore)["find"] is original
        assert Bookstore.find("Ruby 101") == "Book: Ruby 101"

    def test_release_twice_is_a_noop(self, store):
        patch = ScopedPatch(store, "order_book", None).apply()

        patch.release()
        patch.release()

        assert not patch.active

    def test_apply_twice_keeps_first_original(self, order):
        patch = ScopedPatch(order, "customer", "Bob").apply()
        patch.apply()
        patch.release()

        assert order.customer == "Alice"

    def test_context_manager_restores_on_error(self, store):
        with pytest.raises(RuntimeError):
            with ScopedPatch(store, "order_book", None):
                raise RuntimeError("boom")

        assert "order_book" not in vars(store)

    def test_slotted_instance_cannot_be_patched(self):
        courier = SlottedCourier("Bob")
        patch = ScopedPatch(courier, "deliver", lambda parcel: "patched")

        with pytest.raises(DoublesBaseException, match="__slots__") as exc_info:
            patch.apply()

        assert exc_info.value.target == "SlottedCourier instance"
        assert exc_info.value.method == "deliver"
        assert not patch.active
        assert courier.deliver("book") == "Bob delivered book"

    def test_slotted_class_can_be_patched(self):
        with ScopedPatch(SlottedCourier, "deliver", lambda self, parcel: "patched"):
            assert SlottedCourier("Bob").deliver("book") == "patched"

        assert SlottedCourier("Bob").deliver("book") == "Bob delivered book"
