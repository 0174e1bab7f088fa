import pytest

from adaptors import MongoAdaptor
from connectors import MongoConnector

from .fakes import FakeClient


@pytest.fixture()
def client():
    return FakeClient()


@pytest.fixture()
def store(client):
    return MongoConnector("mongodb://127.0.0.1:27017/app", client_factory=lambda uri, **kw: client)


@pytest.fixture()
def db(client):
    return client["app"]


@pytest.fixture()
def adaptor(store):
    return MongoAdaptor(store, log_queries=False)
