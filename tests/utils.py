"""
Shared reference classes and builders for the unit tests.
"""
import asyncio
from typing import Any, Dict, Iterable, Tuple

from verifying_doubles.records import CallOutcome, CallRecorder


class Mailer:
    """A reference type with one of every member shape the registry knows about."""

    sender = "store@example.com"
    retries: int

    def __init__(self):
        self.sent = []

    def send(self, to, subject, body=""):
        self.sent.append((to, subject, body))
        return f"sent {subject!r} to {to}"

    def broadcast(self, *recipients, subject):
        return [self.send(r, subject) for r in recipients]

    def configure(self, **options):
        return options

    async def send_async(self, to, subject):
        await asyncio.sleep(0)
        return f"sent {subject!r} to {to} (async)"

    @staticmethod
    def normalise(address):
        return address.strip().lower()

    @classmethod
    def default(cls):
        return cls()

    @property
    def outbox_size(self):
        return len(self.sent)


class RecordFactory:
    """Build call histories without going through a double or a spy."""

    @staticmethod
    def recorder(
        calls: Iterable[Tuple[str, tuple]] = (),
        label: str = "Bookstore instance",
    ) -> CallRecorder:
        recorder = CallRecorder(label)
        for method, args in calls:
            recorder.record(method, args)
        return recorder

    @staticmethod
    def failed(recorder: CallRecorder, method: str, args: tuple = (), kwargs: Dict[str, Any] = None):
        return recorder.record(method, args, kwargs, CallOutcome.FAILED, TypeError("boom"))


class SlottedCourier:
    """A reference type whose instances have no ``__dict__``."""

    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def deliver(self, parcel):
        return f"{self.name} delivered {parcel}"
