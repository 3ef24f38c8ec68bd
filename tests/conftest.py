import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gift_exchange.db import repo
from gift_exchange.db.models import Base


def create_session(url: str = "sqlite+pysqlite:///:memory:"):
    engine = create_engine(url, future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)()


@pytest.fixture
def session():
    db = create_session()
    yield db
    db.close()


@pytest.fixture
def make_user(session):
    counter = itertools.count(1)

    def factory(name=None):
        number = next(counter)
        return repo.create_user(
            session,
            email=f"user{number}@example.com",
            password_hash="not-a-real-hash",
            name=name or f"User {number}",
        )

    return factory
