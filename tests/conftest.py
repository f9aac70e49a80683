import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["SMTP_HOST"] = ""

from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.celery_worker import celery_app
from storefront.data.database import init_db, make_engine
from storefront.data.models import CartItemModel, ProductModel, UserModel

from helpers import RecordingNotifier


@pytest.fixture(autouse=True)
def eager_celery():
    celery_app.conf.task_always_eager = True
    yield


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """File backed database, for tests that need several real connections."""
    engine = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}", connect_args={"check_same_thread": False, "timeout": 30})
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_user(db):
    def _make(user_id: int = 1, name: str = "Buyer", email: str | None = None, session=None):
        session = session or db
        user = UserModel(id=user_id, name=name, email=email or f"user{user_id}@example.com")
        session.add(user)
        session.commit()
        return user_id

    return _make


@pytest.fixture
def make_product(db):
    def _make(name: str, price: str, stock: int, category: str | None = None, session=None):
        session = session or db
        product = ProductModel(name=name, price=Decimal(price), stock=stock, category=category)
        session.add(product)
        session.commit()
        return product.id

    return _make


@pytest.fixture
def put_in_cart(db):
    """Writes a cart line directly, skipping the soft stock check."""

    def _put(user_id: int, product_id: int, quantity: int, session=None):
        session = session or db
        session.add(CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity))
        session.commit()

    return _put

