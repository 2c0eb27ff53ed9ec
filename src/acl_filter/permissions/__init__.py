"""
Row-level ACL filtering for SQLAlchemy queries

Main components:
- principal: Principal identity and the immutable role hierarchy
- identities: expansion of an identity into security identifiers
- aliases: resolution of query aliases to mapped entities
- platform: storage backend adapters for the generated SQL
- compiler: ACL filter SQL compilation
- walker: filter metadata protocol and the output walker consuming it
- filter: AclFilter.apply, the entry point for filtering queries
- query: AclQuery.query_acl, direct grants on one object
- auth: token storage holding the current principal
"""

from .principal import (
    Principal,
    RoleHierarchy,
)

from .identities import (
    SecurityIdentityExtractor,
    class_type_of,
)

from acl_filter.interface.masks import (
    MaskBuilder,
    MaskStrategy,
    PermissionMap,
)

from .aliases import (
    QueryAliasResolver,
    describe_statement,
)

from .platform import (
    PlatformAdapter,
    get_platform,
)

from .compiler import AclFilterCompiler

from .walker import (
    AclFilterEntry,
    AclOutputWalker,
    acl_output_walker,
    get_acl_metadata,
)

from .auth import (
    TokenStorage,
    token_storage,
    get_current_principal,
)

from .filter import AclFilter
from .query import AclQuery

__all__ = [
    # Identities
    "Principal",
    "RoleHierarchy",
    "SecurityIdentityExtractor",
    "class_type_of",

    # Masks
    "MaskBuilder",
    "MaskStrategy",
    "PermissionMap",

    # Query analysis and compilation
    "QueryAliasResolver",
    "describe_statement",
    "PlatformAdapter",
    "get_platform",
    "AclFilterCompiler",

    # Filter metadata protocol
    "AclFilterEntry",
    "AclOutputWalker",
    "acl_output_walker",
    "get_acl_metadata",

    # Current principal
    "TokenStorage",
    "token_storage",
    "get_current_principal",

    # Services
    "AclFilter",
    "AclQuery",
]
