"""
Shared fixtures: in-memory store, a recording email sender and an API client
wired to both through dependency overrides.
"""
import asyncio
import pytest
from fastapi.testclient import TestClient

from app.services.email_sender import get_email_sender
from app.services.launch_controller import LaunchController, get_launch_controller
from app.services.subscriber_store import InMemorySubscriberStore, get_subscriber_store
from main import app

class FakeEmailSender:
    """Records every email instead of calling Brevo."""

    def __init__(self, failing=None, yield_during_send=False):
        self.failing = set(failing or [])
        self.yield_during_send = yield_during_send
        self.confirmations = []
        self.live_notifications = []

    async def _result(self, to_email):
        if self.yield_during_send:
            await asyncio.sleep(0)
        if to_email in self.failing:
            return {"success": False, "error": "SMTP unavailable", "to_email": to_email}
        return {"success": True, "message_id": f"<{to_email}>", "to_email": to_email}

    async def send_confirmation(self, to_email):
        result = await self._result(to_email)
        if result["success"]:
            self.confirmations.append(to_email)
        return result

    async def send_live_notification(self, to_email):
        result = await self._result(to_email)
        if result["success"]:
            self.live_notifications.append(to_email)
        return result

class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

@pytest.fixture
def store():
    return InMemorySubscriberStore()

@pytest.fixture
def email_sender():
    return FakeEmailSender()

@pytest.fixture
def controller(store, email_sender):
    return LaunchController(store, email_sender, mode="fixed_delay", launch_delay=0, notify_late_signups=False)

@pytest.fixture
def client(store, email_sender, controller):
    app.dependency_overrides[get_subscriber_store] = lambda: store
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_launch_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()
