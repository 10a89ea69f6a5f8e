"""
Test cases for Sandbox: allow/expect, verification and reset
"""
import pytest

from bookstore import BookOrder, Bookstore
from verifying_doubles import (
    ArgumentCountError,
    ExpectationState,
    ExpectationViolated,
    NO_OP,
    OrderViolationError,
    Sandbox,
    SpyMode,
    UnconfiguredMethodError,
    VerificationError,
    anything,
    have_received,
    received,
)


class TestAllow:
    """Test allow(...).to(received(...))"""

    def test_allow_on_double(self, sandbox):
        order = sandbox.instance_double(BookOrder)
        sandbox.allow(order).to(received("place").and_return("placed"))

        assert order.place() == "placed"

    def test_allow_without_response_returns_none(self, sandbox):
        store = sandbox.double("store")
        sandbox.allow(store).to(received("notify_customer"))

        assert store.notify_customer("Alice", "Shipped") is None

    def test_allow_unknown_name_on_verifying_double(self, sandbox):
        with pytest.raises(VerificationError):
            sandbox.allow(sandbox.instance_double(BookOrder)).to(received("ship"))

    def test_allow_on_live_object(self, sandbox, store):
        sandbox.allow(store).to(received("order_book").with_args("Ruby 101", "Alice").and_return("fake"))

        assert store.order_book("Ruby 101", "Alice") == "fake"
        with pytest.raises(UnconfiguredMethodError, match="unexpected arguments"):
            store.order_book("Ruby 101", "Bob")

    def test_allow_several_argument_sets(self, sandbox, store):
        sandbox.allow(store).to(received("order_book").with_args("Ruby 101", "Alice").and_return("first"))
        sandbox.allow(store).to(received("order_book").with_args(anything(), "Bob").and_return("second"))

        assert store.order_book("Ruby 101", "Alice") == "first"
        assert store.order_book("Ruby 101", "Bob") == "second"

    def test_allow_with_wrong_arity(self, sandbox, store):
        with pytest.raises(ArgumentCountError):
            sandbox.allow(store).to(received("order_book").with_args("Ruby 101"))

        assert "order_book" not in vars(store)

    def test_allow_on_class(self, sandbox):
        sandbox.allow(Bookstore).to(received("find").and_return("Book: stubbed"))

        assert Bookstore.find("Ruby 101") == "Book: stubbed"

    def test_allow_call_original(self, sandbox, store):
        sandbox.allow(store).to(received("order_book").and_call_original())

        assert store.order_book("Ruby 101", "Alice") == "Order placed for Ruby 101 by Alice"

    def test_allow_requires_received(self, sandbox, store):
        with pytest.raises(TypeError):
            sandbox.allow(store).to(have_received("order_book"))


class TestPreDeclaredExpectations:
    """Test expect(...).to(received(...)) verified at teardown"""

    def test_satisfied(self, sandbox):
        store = sandbox.double("store")
        expectation = sandbox.expect(store).to(received("order_book").with_args("Ruby 101", "Alice"))

        store.order_book("Ruby 101", "Alice")
        sandbox.verify()

        assert expectation.state is ExpectationState.SATISFIED

    def test_never_called(self, sandbox):
        store = sandbox.double("store")
        expectation = sandbox.expect(store).to(received("order_book").with_args("Ruby 101", "Alice"))

        with pytest.raises(ExpectationViolated) as exc_info:
            sandbox.verify()

        assert expectation.state is ExpectationState.VIOLATED
        assert "expected 1 call, got 0" in str(exc_info.value)

    def test_pending_until_verified(self, sandbox):
        store = sandbox.double("store")
        expectation = sandbox.expect(store).to(received("order_book"))

        assert expectation.state is ExpectationState.PENDING
        assert sandbox.expectations == [expectation]

    def test_expectation_also_stubs(self, sandbox, store):
        sandbox.expect(store).to(received("order_book").and_return("fake"))

        assert store.order_book("Ruby 101", "Alice") == "fake"
        sandbox.verify()

    def test_not_to_receive(self, sandbox):
        order = sandbox.instance_double(BookOrder)
        sandbox.expect(order).not_to(received("cancel"))

        sandbox.verify()

    def test_not_to_receive_violated(self, sandbox):
        order = sandbox.instance_double(BookOrder)
        sandbox.expect(order).to_not(received("cancel"))

        order.cancel()

        with pytest.raises(ExpectationViolated, match="expected 0 calls, got 1"):
            sandbox.verify()

    def test_several_violations_are_combined(self, sandbox):
        store = sandbox.double("store")
        sandbox.expect(store).to(received("order_book"))
        sandbox.expect(store).to(received("notify_customer"))

        with pytest.raises(ExpectationViolated) as exc_info:
            sandbox.verify()

        message = str(exc_info.value)
        assert message.startswith("2 expectations were not met")
        assert "1) Double 'store'.order_book" in message
        assert "2) Double 'store'.notify_customer" in message

    def test_ordered_in_sequence(self, sandbox):
        store = sandbox.double("store")
        sandbox.expect(store).to(received("find").ordered())
        sandbox.expect(store).to(received("order_book").ordered())

        store.find("Ruby 101")
        store.order_book("Ruby 101", "Alice")

        sandbox.verify()

    def test_ordered_out_of_sequence(self, sandbox):
        store = sandbox.double("store")
        sandbox.expect(store).to(received("find").ordered())
        sandbox.expect(store).to(received("order_book").ordered())

        store.order_book("Ruby 101", "Alice")
        store.find("Ruby 101")

        with pytest.raises(OrderViolationError) as exc_info:
            sandbox.verify()

        assert exc_info.value.method == "order_book"
        assert exc_info.value.expected_after == 2
        assert exc_info.value.actual_sequence == 1

    def test_ordering_is_per_target(self, sandbox):
        first = sandbox.double("first")
        second = sandbox.double("second")
        sandbox.expect(first).to(received("a").ordered())
        sandbox.expect(second).to(received("b").ordered())

        second.b()
        first.a()

        sandbox.verify()


class TestPostHocExpectations:
    """Test expect(...).to(have_received(...)) checked immediately"""

    def test_spied_live_object(self, sandbox, store):
        sandbox.spy(store, "notify_customer")

        store.notify_customer("Alice", "Shipped")

        expectation = sandbox.expect(store).to(have_received("notify_customer").with_args("Alice", "Shipped"))
        assert expectation.state is ExpectationState.SATISFIED

    def test_fails_immediately(self, sandbox, store):
        sandbox.spy(store, "notify_customer")

        with pytest.raises(ExpectationViolated, match="at least 1 call, got 0"):
            sandbox.expect(store).to(have_received("notify_customer"))

    def test_live_object_must_be_spied(self, sandbox, store):
        with pytest.raises(ExpectationViolated, match="not being spied on"):
            sandbox.expect(store).to(have_received("notify_customer"))

    def test_unknown_name_on_live_object(self, sandbox, store):
        with pytest.raises(VerificationError):
            sandbox.expect(store).to(have_received("notify_costumer"))

    def test_unknown_name_on_verifying_double(self, sandbox):
        order = sandbox.instance_double(BookOrder)

        with pytest.raises(VerificationError):
            sandbox.expect(order).to(have_received("ship"))

    def test_null_double(self, sandbox):
        logger = sandbox.null_double("logger")

        assert logger.info("hello") is NO_OP

        sandbox.expect(logger).to(have_received("info").with_args("hello").once())

    def test_not_to_have_received(self, sandbox):
        order = sandbox.instance_double(BookOrder, place="placed")

        order.place()

        sandbox.expect(order).not_to(have_received("cancel"))
        with pytest.raises(ExpectationViolated):
            sandbox.expect(order).not_to(have_received("place"))

    def test_post_hoc_ordering(self, sandbox, store):
        sandbox.spy(store, "order_book")
        sandbox.spy(store, "notify_customer")

        store.order_book("Ruby 101", "Alice")
        store.notify_customer("Alice", "Placed")

        sandbox.expect(store).to(have_received("order_book").ordered())
        sandbox.expect(store).to(have_received("notify_customer").ordered())

    def test_post_hoc_ordering_violated(self, sandbox, store):
        sandbox.spy(store, "order_book")
        sandbox.spy(store, "notify_customer")

        store.notify_customer("Alice", "Placed")
        store.order_book("Ruby 101", "Alice")

        sandbox.expect(store).to(have_received("order_book").ordered())
        with pytest.raises(OrderViolationError):
            sandbox.expect(store).to(have_received("notify_customer").ordered())

    def test_post_hoc_not_verified_again(self, sandbox, store):
        sandbox.spy(store, "order_book")
        store.order_book("Ruby 101", "Alice")
        sandbox.expect(store).to(have_received("order_book"))

        sandbox.verify()

        assert sandbox.expectations == []

    def test_expect_requires_matcher(self, sandbox, store):
        with pytest.raises(TypeError):
            sandbox.expect(store).to(42)


class TestSpiesAndPatches:
    """Test spy, unwrap, calls_to and patch through the sandbox"""

    def test_spy_and_calls_to(self, sandbox, store):
        sandbox.spy(store, "notify_customer")

        store.notify_customer("Alice", "Shipped")

        records = list(sandbox.calls_to(store, "notify_customer"))
        assert [(r.args, r.sequence) for r in records] == [(("Alice", "Shipped"), 1)]

    def test_spy_replaces_allow(self, sandbox, store):
        sandbox.allow(store).to(received("order_book").and_return("fake"))
        sandbox.spy(store, "order_book", SpyMode.FORWARD)

        assert store.order_book("Ruby 101", "Alice") == "Order placed for Ruby 101 by Alice"

    def test_unwrap(self, sandbox, store):
        sandbox.spy(store, "notify_customer", SpyMode.SUPPRESS, "quiet")

        sandbox.unwrap(store, "notify_customer")
        sandbox.unwrap(store, "notify_customer")

        assert store.notify_customer("Alice", "Hi") == "Notified Alice: Hi"

    def test_patch(self, sandbox, order):
        sandbox.patch(order, "customer", "Bob")

        assert order.customer == "Bob"

        sandbox.reset()

        assert order.customer == "Alice"


class TestLifecycle:
    """Test reset and the context manager"""

    def test_reset_restores_everything(self, store):
        sandbox = Sandbox()
        original_find = vars(Bookstore)["find"]
        sandbox.spy(store, "order_book")
        sandbox.allow(Bookstore).to(received("find").and_return("stub"))

        sandbox.reset()

        assert "order_book" not in vars(store)
        assert vars(Bookstore)["find"] is original_find

    def test_context_manager_verifies(self):
        with pytest.raises(ExpectationViolated):
            with Sandbox() as sandbox:
                store = sandbox.double("store")
                sandbox.expect(store).to(received("order_book"))

    def test_context_manager_restores_on_error(self, store):
        with pytest.raises(RuntimeError):
            with Sandbox() as sandbox:
                sandbox.allow(store).to(received("order_book").and_return("fake"))
                sandbox.expect(store).to(received("notify_customer"))
                raise RuntimeError("test body failed")

        assert "order_book" not in vars(store)
        assert "notify_customer" not in vars(store)

    def test_sandboxes_are_isolated(self, store):
        first, second = Sandbox(), Sandbox()
        first.spy(store, "order_book")

        store.order_book("Ruby 101", "Alice")

        assert len(first.calls_to(store, "order_book")) == 1
        assert len(second.calls_to(store, "order_book")) == 0
        first.reset()

    def test_verified_flag(self):
        sandbox = Sandbox()
        assert not sandbox.verified

        sandbox.verify()

        assert sandbox.verified
