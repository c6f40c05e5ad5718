from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from access.errors import NotFound, Unavailable
from access.services.directory import OwnerContact


class FakeClock:
    def __init__(self, start=None):
        self.now = start or timezone.now()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def deliver(self, channel, message):
        self.sent.append((channel, message))


class FailingNotifier:
    def deliver(self, channel, message):
        raise Unavailable('sms gateway down')


class StaticDirectory:
    """Owner directory backed by a dict of owner id -> phone."""

    def __init__(self, owners):
        self.owners = owners

    def resolve(self, owner_id):
        if owner_id not in self.owners:
            raise NotFound('migrant not found')
        return OwnerContact(owner_id=owner_id, name=owner_id, phone=self.owners[owner_id])


class FakeSummarizer:
    def __init__(self, reply='summary', fail=False):
        self.reply = reply
        self.fail = fail
        self.texts = []

    def summarize(self, text):
        self.texts.append(text)
        if self.fail:
            raise Unavailable('model offline')
        return self.reply


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def migrant(db):
    from access.models import Migrant
    return Migrant.objects.create(unique_id='M1', name='Ravi Kumar', phone='+910000000001',
                                  gender='male', language='ml')


@pytest.fixture
def doctor(db):
    from access.models import User
    return User.objects.create_user(username='d1', password='P@ssw0rd1', role='doctor')


def client_for(user):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f'Bearer {RefreshToken.for_user(user).access_token}')
    return c


@pytest.fixture
def doctor_client(doctor):
    return client_for(doctor)
