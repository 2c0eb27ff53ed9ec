"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure acl_filter is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from acl_filter.model import Base
from acl_filter.interface.config import AclConfig
from acl_filter.interface.masks import MaskBuilder
from acl_filter.permissions.auth import TokenStorage
from acl_filter.permissions.filter import AclFilter
from acl_filter.permissions.identities import user_identifier
from acl_filter.permissions.principal import Principal
from acl_filter.permissions.walker import acl_output_walker
from acl_filter.tests.fixtures import grant
from acl_filter.tests.models import AppBase, Document, Folder, SecretDocument, User


ROLE_HIERARCHY = {
    "ROLE_EDITOR": ["ROLE_VIEWER"],
    # misconfigured on purpose: lists itself
    "ROLE_ADMIN": ["ROLE_ADMIN", "ROLE_EDITOR"],
}


@pytest.fixture
def engine():
    """In-memory SQLite engine with the ACL store and application tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    AppBase.metadata.create_all(bind=engine)

    try:
        yield engine
    finally:
        AppBase.metadata.drop_all(bind=engine)
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def walker_session(session):
    """Session that applies attached ACL filters on every ORM select."""
    acl_output_walker.install(session)
    try:
        yield session
    finally:
        acl_output_walker.uninstall(session)


@pytest.fixture
def acl_config() -> AclConfig:
    return AclConfig(role_hierarchy=ROLE_HIERARCHY)


@pytest.fixture
def token_storage() -> TokenStorage:
    return TokenStorage()


@pytest.fixture
def acl_filter(session, acl_config, token_storage) -> AclFilter:
    return AclFilter(session, token_storage=token_storage, config=acl_config)


@pytest.fixture
def documents(session):
    """
    Three documents and their grants:

    - Doc 1: ROLE_VIEWER may VIEW
    - Doc 2: user alice may EDIT
    - Secret (a SecretDocument): ROLE_ADMIN is OWNER
    - user alice: ROLE_VIEWER may VIEW
    """
    alice = User(id=1, username="alice")
    bob = User(id=2, username="bob")
    shared = Folder(id=1, name="Shared")
    doc1 = Document(id=1, title="Doc 1", owner=alice, folder=shared)
    doc2 = Document(id=2, title="Doc 2", owner=bob, folder=shared)
    secret = SecretDocument(id=3, title="Secret", owner=alice, folder=shared)
    session.add_all([alice, bob, shared, doc1, doc2, secret])
    session.flush()

    grant(session, Document, 1, "ROLE_VIEWER", MaskBuilder.VIEW)
    grant(session, Document, 2, user_identifier(Principal(username="alice")), MaskBuilder.EDIT, username=True)
    grant(session, SecretDocument, 3, "ROLE_ADMIN", MaskBuilder.OWNER)
    grant(session, User, 1, "ROLE_VIEWER", MaskBuilder.VIEW)
    session.commit()

    return {"doc1": doc1, "doc2": doc2, "secret": secret, "alice": alice, "bob": bob}
