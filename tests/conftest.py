from __future__ import annotations

import pytest
from sqlalchemy.pool import StaticPool

import init_db
from core import db as core_db
from core.storage import LocalImageStorage, UploadedFile


@pytest.fixture
def engine():
    engine = init_db.init_app("sqlite://", poolclass=StaticPool)
    yield engine
    init_db.shutdown()


@pytest.fixture
def db(engine):
    session = core_db.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalImageStorage(str(tmp_path / "uploads"), "/uploads")


@pytest.fixture
def make_upload():
    def _make(name="photo.jpg", content=b"\xff\xd8\xff fake jpeg"):
        return UploadedFile(filename=name, content=content)
    return _make
