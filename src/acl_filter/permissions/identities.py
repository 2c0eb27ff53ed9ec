from typing import Any, List, Optional, Union
import logging

from acl_filter.permissions.principal import Principal, RoleHierarchy

logger = logging.getLogger(__name__)

Identity = Optional[Union[Principal, str]]


def class_type_of(cls: type) -> str:
    """ACL class name of a Python class, e.g. ``app.entity.Document``"""
    return f"{cls.__module__}.{cls.__qualname__}"


def user_identifier(principal: Principal) -> str:
    return f"{class_type_of(type(principal))}-{principal.get_username()}"


class SecurityIdentityExtractor:
    """Turns an identity into the security identifiers it carries"""

    def __init__(self, role_hierarchy: RoleHierarchy):
        self.role_hierarchy = role_hierarchy

    def get_identifiers(self, identity: Any) -> List[str]:
        if isinstance(identity, Principal):
            identifiers = [user_identifier(identity)]
            roles = identity.get_roles()
        elif isinstance(identity, str):
            identifiers = []
            roles = [identity]
        else:
            logger.debug(f"No security identifiers for identity of type {type(identity).__name__}")
            return []

        for role in roles:
            identifiers.append(role)
            identifiers.extend(self.role_hierarchy.get_parent_roles(role))

        # dict keeps first-seen order
        return list(dict.fromkeys(identifiers))
