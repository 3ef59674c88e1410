from __future__ import annotations
import os

# configure before any cut_sprint import reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_API_KEY"] = ""
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["AI_DAILY_LIMIT"] = "10"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cut_sprint.database import Base, get_db, make_engine
from cut_sprint.main import app
from cut_sprint.models.product import Product
from cut_sprint.models.user import User

DEFAULT_PROFILE = dict(
    weight=70.0,
    height=175.0,
    age=30,
    gender="male",
    activity_level="moderate",
    target_weekly_loss=0.5,
    weekend_mode="inactive",
    weekend_start_day=5,
    weekend_end_day=0,
    region="PL",
)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so that several connections can share one database."""
    eng = make_engine(f"sqlite:///{tmp_path / 'cut_sprint.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    """Create a committed user; keyword overrides replace DEFAULT_PROFILE fields. Returns the id."""
    counter = {"n": 0}

    def _make(**overrides) -> int:
        counter["n"] += 1
        fields = {**DEFAULT_PROFILE, **overrides}
        user = User(email=f"user{counter['n']}@example.com", **fields)
        db.add(user)
        db.commit()
        return user.id

    return _make


@pytest.fixture
def make_product(db):
    def _make(name="chicken breast", calories=165, protein=31, fat=3.6, carbs=0, **extra) -> int:
        product = Product(
            name=name,
            calories_per_100g=calories,
            protein_per_100g=protein,
            fat_per_100g=fat,
            carbs_per_100g=carbs,
            **extra,
        )
        db.add(product)
        db.commit()
        return product.id

    return _make


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
