from typing import Any, Dict, Optional, Type
import logging

logger = logging.getLogger(__name__)


class PlatformAdapter:
    """
    Storage backend differences the ACL filter SQL depends on.

    Subclasses decide how the acl_* tables are schema qualified and how
    string literals are escaped.
    """

    default_schema: Optional[str] = None
    # backslash is an escape character inside string literals
    backslash_escapes = False
    # compare entity identifiers with acl object identifiers as text
    compare_as_text = False

    def __init__(self, schema: Optional[str] = None, database: Optional[str] = None):
        self.database = database
        self.schema = schema if schema is not None else self.default_schema_for(database)

    def default_schema_for(self, database: Optional[str]) -> Optional[str]:
        return self.default_schema

    def qualify(self, table: str) -> str:
        if self.schema:
            return f"{self.schema}.{table}"
        return table

    def quote_literal(self, value: Any) -> str:
        value = str(value)
        if self.backslash_escapes:
            value = value.replace("\\", "\\\\")
        return "'" + value.replace("'", "''") + "'"

    def unquote_literal(self, literal: str) -> str:
        if len(literal) < 2 or literal[0] != "'" or literal[-1] != "'":
            raise ValueError(f"Not a quoted literal: {literal}")
        value = literal[1:-1].replace("''", "'")
        if self.backslash_escapes:
            value = value.replace("\\\\", "\\")
        return value

    def is_null_expression(self, expression: str) -> str:
        return f"{expression} IS NULL"

    def __repr__(self):
        return f"{type(self).__name__}(schema={self.schema!r})"


class SqlitePlatform(PlatformAdapter):
    default_schema = "main"


class MySQLPlatform(PlatformAdapter):
    backslash_escapes = True

    def default_schema_for(self, database: Optional[str]) -> Optional[str]:
        return database


class PostgreSQLPlatform(PlatformAdapter):
    default_schema = "public"
    compare_as_text = True


PLATFORMS: Dict[str, Type[PlatformAdapter]] = {
    "sqlite": SqlitePlatform,
    "mysql": MySQLPlatform,
    "mariadb": MySQLPlatform,
    "postgresql": PostgreSQLPlatform,
}


def get_platform(bind: Any, schema: Optional[str] = None) -> PlatformAdapter:
    """Platform adapter for an Engine or Connection"""
    engine = getattr(bind, "engine", bind)
    dialect_name = engine.dialect.name
    platform_class = PLATFORMS.get(dialect_name)
    if platform_class is None:
        logger.warning(f"No ACL platform adapter for dialect '{dialect_name}', using generic SQL")
        platform_class = PlatformAdapter
    return platform_class(schema=schema, database=engine.url.database)
