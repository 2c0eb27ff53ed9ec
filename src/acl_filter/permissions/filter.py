"""
Row-level ACL filtering of ORM queries.

``AclFilter.apply`` resolves which entity of a query to protect, expands the
acting identity into security identifiers, compiles the ACL sub-select and
attaches it to a copy of the query for the output walker.
"""

from typing import Any, List, Optional
from sqlalchemy.orm import Mapper, Session
import logging

from acl_filter.exceptions import CompositeIdentifierException
from acl_filter.interface.config import AclConfig, AclConfigFactory
from acl_filter.permissions.aliases import QueryAliasResolver, describe_statement, select_statement
from acl_filter.permissions.auth import TokenStorage, token_storage as default_token_storage
from acl_filter.permissions.compiler import AclFilterCompiler
from acl_filter.permissions.identities import Identity, SecurityIdentityExtractor, class_type_of
from acl_filter.interface.masks import PermissionMap
from acl_filter.permissions.platform import get_platform
from acl_filter.permissions.principal import RoleHierarchy
from acl_filter.permissions.walker import AclFilterEntry, acl_output_walker, attach_filter

logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS = ["VIEW"]


def get_classes(mapper: Mapper) -> List[str]:
    """ACL class names of a mapped class and every mapped subclass"""
    classes = [class_type_of(sub.class_) for sub in mapper.self_and_descendants if sub is not mapper]
    classes.append(class_type_of(mapper.class_))
    return classes


def get_identifier(mapper: Mapper):
    """The single primary key column of a mapped class and its attribute key"""
    primary_key = mapper.primary_key
    if len(primary_key) != 1:
        raise CompositeIdentifierException(
            f"{mapper.class_.__name__} has {len(primary_key)} identifier columns, ACL filtering needs exactly one"
        )
    identifier = primary_key[0]
    return identifier, mapper.get_property_by_column(identifier).key


class AclFilter:
    """Applies ACL row filtering to SQLAlchemy queries"""

    def __init__(self, db: Any,
                 token_storage: Optional[TokenStorage] = None,
                 config: Optional[AclConfig] = None,
                 role_hierarchy: Optional[RoleHierarchy] = None):
        """
        Args:
            db: Session the filtered queries run on, the output walker is installed on it.
                An Engine or Connection only resolves the platform, and the caller
                must install the walker or call ``walk()`` itself
            token_storage: source of the current principal
            config: ACL configuration, read from the environment when omitted
            role_hierarchy: shared hierarchy, built from ``config`` when omitted
        """
        self.db = db
        self.token_storage = token_storage or default_token_storage
        self.config = config or AclConfigFactory.from_settings()
        self.role_hierarchy = role_hierarchy or RoleHierarchy(self.config.role_hierarchy)
        self.permission_map = PermissionMap(self.config.permissions)
        self.identity_extractor = SecurityIdentityExtractor(self.role_hierarchy)

        if isinstance(db, Session):
            bind = db.get_bind()
            # attached filters must never run unenforced on this session
            acl_output_walker.install(db)
        else:
            bind = db
        self.dialect = getattr(bind, "engine", bind).dialect
        self.platform = get_platform(bind, self.config.acl_schema)
        self.compiler = AclFilterCompiler(self.platform, self.config.mask_strategy)

    def apply(self, query: Any, permissions: Optional[List[str]] = None,
              identity: Identity = None, alias: Optional[str] = None) -> Any:
        """
        Return a copy of ``query`` restricted to rows ``identity`` may access.

        Args:
            query: a Select or an ORM Query
            permissions: permission names the rows must be granted, VIEW by default
            identity: Principal or role name, the current principal when None
            alias: alias of the entity to filter, the first root entity when None

        The input query is left untouched. Filters attached by earlier calls
        are kept, so calling apply once per alias protects several entities.
        """
        if permissions is None:
            permissions = DEFAULT_PERMISSIONS
        if identity is None:
            identity = self.token_storage.get_principal()

        statement = select_statement(query)
        mask = self.permission_map.build_mask(permissions)

        resolved = QueryAliasResolver(describe_statement(statement)).resolve(alias)
        mapper = resolved.mapper
        identifier, identifier_attribute = get_identifier(mapper)
        table_name = self.dialect.identifier_preparer.format_table(mapper.local_table)

        identifiers = self.identity_extractor.get_identifiers(identity)
        logger.debug(f"ACL identifiers for {resolved.alias}: {identifiers}")

        filter_sql = self.compiler.compile(get_classes(mapper), identifiers, mask)

        entry = AclFilterEntry(
            filter_sql=filter_sql,
            table_name=table_name,
            alias=resolved.alias,
            identifier_column=identifier.name,
            identifier_attribute=identifier_attribute,
            entity=resolved.entity,
            compare_as_text=self.platform.compare_as_text,
        )
        return attach_filter(query, entry)
