"""
Filter-metadata protocol between AclFilter and SQL generation.

AclFilter (the producer) attaches AclFilterEntry records to a statement's
execution options and marks it for the walker. AclOutputWalker (the
consumer) turns each entry into ``<identifier> IN (<filter sql>)`` on the
entry's entity, either explicitly through ``walk()`` or on every ORM
execution once installed as a ``do_orm_execute`` listener.
"""

from typing import Any, Tuple
from pydantic import BaseModel, ConfigDict
from sqlalchemy import String, cast, column, event, text
from sqlalchemy.orm import Query
import logging

logger = logging.getLogger(__name__)

ACL_METADATA_OPTION = "acl_metadata"
ACL_WALKER_OPTION = "acl_walker"


class AclFilterEntry(BaseModel):
    """One compiled ACL filter bound to an alias of the query"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    filter_sql: str
    table_name: str
    alias: str
    identifier_column: str
    identifier_attribute: str
    # mapped class or AliasedClass the alias renders as
    entity: Any
    compare_as_text: bool = False


def get_acl_metadata(query: Any) -> Tuple[AclFilterEntry, ...]:
    return tuple(query.get_execution_options().get(ACL_METADATA_OPTION, ()))


def requires_acl_walker(query: Any) -> bool:
    return bool(query.get_execution_options().get(ACL_WALKER_OPTION, False))


def attach_filter(query: Any, entry: AclFilterEntry) -> Any:
    """Copy of ``query`` carrying ``entry`` after any filters already attached"""
    entries = get_acl_metadata(query) + (entry,)
    return query.execution_options(**{ACL_METADATA_OPTION: entries, ACL_WALKER_OPTION: True})


class AclOutputWalker:
    """Injects attached ACL filters into statements"""

    def build_condition(self, entry: AclFilterEntry):
        identifier = getattr(entry.entity, entry.identifier_attribute)
        if entry.compare_as_text:
            identifier = cast(identifier, String)
        # colons inside literals must not be read as bind parameters
        filter_sql = entry.filter_sql.replace(":", "\\:")
        return identifier.in_(text(filter_sql).columns(column("id")))

    def apply(self, statement: Any, entries: Tuple[AclFilterEntry, ...]) -> Any:
        conditions = [self.build_condition(entry) for entry in entries]
        if not conditions:
            return statement
        if isinstance(statement, Query):
            return statement.filter(*conditions)
        return statement.where(*conditions)

    def walk(self, statement: Any) -> Any:
        """Statement with its attached ACL filters in the WHERE clause"""
        if not requires_acl_walker(statement):
            return statement
        statement = self.apply(statement, get_acl_metadata(statement))
        # already walked, an installed listener must not filter it twice
        return statement.execution_options(**{ACL_WALKER_OPTION: False})

    def __call__(self, orm_execute_state):
        if not orm_execute_state.is_select:
            return
        options = orm_execute_state.execution_options
        if not options.get(ACL_WALKER_OPTION, False):
            return

        entries = tuple(options.get(ACL_METADATA_OPTION, ()))
        logger.debug(f"Applying {len(entries)} ACL filter(s) to ORM select")
        statement = self.apply(orm_execute_state.statement, entries)
        # a listener also installed on the sessionmaker sees the walked statement
        orm_execute_state.statement = statement.execution_options(**{ACL_WALKER_OPTION: False})

    def install(self, target: Any):
        """Listen for ORM executions on a Session, sessionmaker or Session class"""
        if not event.contains(target, "do_orm_execute", self):
            event.listen(target, "do_orm_execute", self)

    def uninstall(self, target: Any):
        if event.contains(target, "do_orm_execute", self):
            event.remove(target, "do_orm_execute", self)


acl_output_walker = AclOutputWalker()
