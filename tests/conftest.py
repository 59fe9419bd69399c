import pytest
from fastapi.testclient import TestClient

from shortener.codes import CodeGenerator
from shortener.config import Settings
from shortener.database import init_db, make_engine, make_session_factory
from shortener.main import create_app
from shortener.service import ShortenerService
from shortener.store import LinkStore


class FixedCodes:
    """Generator stand-in that always hands out the same code."""

    def __init__(self, code="aaaaaaa"):
        self.code = code
        self.calls = 0

    def generate(self):
        self.calls += 1
        return self.code


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'links.db'}",
        base_url="http://testserver",
        log_level="DEBUG",
        _env_file=None,
    )


@pytest.fixture
def engine(settings):
    engine = make_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return LinkStore(make_session_factory(engine))


@pytest.fixture
def service(store, settings):
    return ShortenerService(
        store=store,
        generator=CodeGenerator(settings.code_length),
        base_url=settings.base_url,
        max_attempts=settings.max_create_attempts,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
