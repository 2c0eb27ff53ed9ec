"""
FastAPI wiring for the ACL services.
"""

from functools import lru_cache
from fastapi import Depends
from sqlalchemy.orm import Session

from acl_filter.database import get_db
from acl_filter.interface.config import AclConfig, AclConfigFactory
from acl_filter.permissions.auth import token_storage
from acl_filter.permissions.filter import AclFilter
from acl_filter.permissions.principal import RoleHierarchy
from acl_filter.permissions.query import AclQuery


@lru_cache(maxsize=1)
def get_acl_config() -> AclConfig:
    return AclConfigFactory.from_settings()


@lru_cache(maxsize=1)
def get_role_hierarchy() -> RoleHierarchy:
    return RoleHierarchy(get_acl_config().role_hierarchy)


def get_acl_filter(db: Session = Depends(get_db)) -> AclFilter:
    return AclFilter(
        db,
        token_storage=token_storage,
        config=get_acl_config(),
        role_hierarchy=get_role_hierarchy(),
    )


def get_acl_query(db: Session = Depends(get_db)) -> AclQuery:
    return AclQuery(db)
