import os
from datetime import datetime, timedelta

import pytest

from it_marine.app_container import AppContainer
from it_marine.main import create_app
from it_marine.services import DomainStore, SummaryClient


FIXED_NOW = datetime(2025, 6, 1, 10, 0, 0)


class FakeClock:
    """Callable "now" that tests can move forward."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def store(clock):
    return DomainStore(clock=clock)


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def container(data_dir, clock):
    # No API key: the AI summary answers with its fallback text, no network
    return AppContainer(data_dir, summary_client=SummaryClient(api_key=None), clock=clock)


@pytest.fixture
def app(container, tmp_path):
    app = create_app(container, logs_dir=str(tmp_path / 'logs'))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def data_file(data_dir):
    return os.path.join(data_dir, 'it_marine_app_data.json')
