"""
Alias resolution for ORM statements.

``describe_statement`` reads the FROM entities and ``.join()`` calls of a
``Select`` (or legacy ``Query``) into a small typed description, and
``QueryAliasResolver`` walks that description to find the mapped entity a
given alias stands for, following chains of relationship joins.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple
from sqlalchemy import inspect
from sqlalchemy.orm import Mapper, Query
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlalchemy.sql import Select
import logging

from acl_filter.exceptions import AliasResolutionException, InvalidQueryShapeException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinDeclaration:
    alias: Optional[str]
    # alias the join hangs off, None for joins with an explicit ON clause
    parent_alias: Optional[str]
    association_field: Optional[str]
    # class or AliasedClass the joined table renders as
    entity: Any = None


@dataclass(frozen=True)
class RootDeclaration:
    alias: str
    entity: Any
    joins: Tuple[JoinDeclaration, ...] = ()


@dataclass(frozen=True)
class QueryDescription:
    roots: Tuple[RootDeclaration, ...]

    @property
    def aliases(self) -> List[str]:
        aliases = []
        for root in self.roots:
            aliases.append(root.alias)
            aliases.extend(join.alias for join in root.joins)
        return aliases


@dataclass(frozen=True)
class ResolvedEntity:
    alias: str
    mapper: Mapper
    entity: Any


def select_statement(query: Any) -> Select:
    """The Select behind a supported query object"""
    if isinstance(query, Select):
        return query
    if isinstance(query, Query):
        return query.statement
    raise InvalidQueryShapeException(
        f"Expected a Select or an ORM Query, got {type(query).__name__}"
    )


def entity_alias(entity: Any) -> Optional[str]:
    """Name an entity goes by in SQL: alias name or table name"""
    insp = inspect(entity)
    if insp.is_aliased_class:
        return insp.name or insp.selectable.name
    return insp.mapper.local_table.name


def _entity_of(element: Any) -> Any:
    """Mapped class or AliasedClass behind a FROM/join element, if any"""
    annotations = getattr(element, "_annotations", None) or {}
    insp = annotations.get("parententity")
    if insp is None:
        insp = inspect(element, raiseerr=False)
        if insp is None or not (isinstance(insp, Mapper) or getattr(insp, "is_aliased_class", False)):
            return None
    return insp.entity


def _describe_join(target: Any, onclause: Any, from_: Any) -> Optional[JoinDeclaration]:
    attribute = None
    entity = None

    if onclause is None and isinstance(target, QueryableAttribute):
        attribute = target
    elif isinstance(onclause, QueryableAttribute):
        attribute = onclause
        entity = _entity_of(target)
    else:
        entity = _entity_of(target)

    if attribute is not None:
        of_type = getattr(attribute, "_of_type", None)
        if entity is None and of_type is not None:
            entity = inspect(of_type).entity
        parent_alias = entity_alias(attribute.parent.entity)
        if entity is None:
            entity = attribute.property.mapper.class_
        return JoinDeclaration(
            alias=entity_alias(entity),
            parent_alias=parent_alias,
            association_field=attribute.key,
            entity=entity,
        )

    if entity is None:
        # plain table join, nothing an ACL filter can attach to
        return None

    parent = _entity_of(from_) if from_ is not None else None
    return JoinDeclaration(
        alias=entity_alias(entity),
        parent_alias=entity_alias(parent) if parent is not None else None,
        association_field=None,
        entity=entity,
    )


def describe_statement(query: Any) -> QueryDescription:
    """Read the root entities and joins of a statement"""
    statement = select_statement(query)

    joins: List[JoinDeclaration] = []
    for target, onclause, from_, _flags in statement._setup_joins:
        join = _describe_join(target, onclause, from_)
        if join is not None:
            joins.append(join)
    joined_aliases = {join.alias for join in joins}

    roots: Dict[str, Any] = {}
    candidates = [_entity_of(element) for element in statement._from_obj]
    candidates += [description.get("entity") for description in statement.column_descriptions]
    for entity in candidates:
        if entity is None:
            continue
        alias = entity_alias(entity)
        if alias in joined_aliases or alias in roots:
            continue
        roots[alias] = entity

    if not roots:
        return QueryDescription(roots=())

    # every join belongs to the root its parent chain starts from
    first_root = next(iter(roots))
    owner: Dict[str, str] = {alias: alias for alias in roots}
    root_joins: Dict[str, List[JoinDeclaration]] = {alias: [] for alias in roots}
    for join in joins:
        root_alias = owner.get(join.parent_alias, first_root)
        owner[join.alias] = root_alias
        root_joins[root_alias].append(join)

    return QueryDescription(roots=tuple(
        RootDeclaration(alias=alias, entity=entity, joins=tuple(root_joins[alias]))
        for alias, entity in roots.items()
    ))


class QueryAliasResolver:
    """Finds the mapped entity an alias of a described query stands for"""

    def __init__(self, description: QueryDescription):
        self.description = description

    def resolve(self, alias: Optional[str] = None) -> ResolvedEntity:
        """
        Resolve ``alias`` or, when it is None, the first root entity.

        Raises AliasResolutionException when the alias is not declared or a
        traversed join has no matching relationship.
        """
        resolved = self._resolve(alias, set())
        logger.debug(f"Resolved alias {alias!r} to {resolved.mapper.class_.__name__} as '{resolved.alias}'")
        return resolved

    def _resolve(self, alias: Optional[str], visiting: Set[Optional[str]]) -> ResolvedEntity:
        if alias in visiting:
            raise AliasResolutionException(f"Join chain of alias '{alias}' refers back to itself")
        visiting = visiting | {alias}

        for root in self.description.roots:
            root_mapper = inspect(root.entity).mapper
            if alias is None or root.alias == alias:
                return ResolvedEntity(alias=root.alias, mapper=root_mapper, entity=root.entity)

            for join in root.joins:
                if join.alias != alias:
                    continue

                if join.association_field is None:
                    if join.entity is None:
                        break
                    return ResolvedEntity(alias=join.alias, mapper=inspect(join.entity).mapper, entity=join.entity)

                if join.parent_alias is not None and join.parent_alias != root.alias:
                    parent_mapper = self._resolve(join.parent_alias, visiting).mapper
                else:
                    parent_mapper = root_mapper

                if join.association_field not in parent_mapper.relationships:
                    raise AliasResolutionException(
                        f"{parent_mapper.class_.__name__} has no association '{join.association_field}' "
                        f"for alias '{alias}'"
                    )
                target_mapper = parent_mapper.relationships[join.association_field].mapper
                entity = join.entity if join.entity is not None else target_mapper.class_
                return ResolvedEntity(alias=join.alias, mapper=target_mapper, entity=entity)

        if alias is None:
            raise AliasResolutionException("Query has no mapped entity to filter")
        raise AliasResolutionException(
            f"Alias '{alias}' was not found in the query (declared: {', '.join(map(str, self.description.aliases)) or 'none'})"
        )
