from typing import Sequence
import logging

from acl_filter.interface.masks import MaskStrategy
from acl_filter.permissions.platform import PlatformAdapter

logger = logging.getLogger(__name__)

ACL_FILTER_TEMPLATE = """\
SELECT DISTINCT o.object_identifier AS id FROM {object_identities} AS o
    INNER JOIN {classes} c ON c.id = o.class_id
    LEFT JOIN {entries} e ON (
        e.class_id = o.class_id AND (e.object_identity_id = o.id OR {class_wide_entry})
    )
    LEFT JOIN {security_identities} s ON (
        s.id = e.security_identity_id
    )
    WHERE {class_condition}
        AND {identifier_condition}
        AND {mask_condition}"""

# keeps the filter valid SQL while matching nothing
MATCH_NOTHING = "1 = 0"


class AclFilterCompiler:
    """Builds the sub-select of object identifiers an identity may access"""

    def __init__(self, platform: PlatformAdapter, mask_strategy: MaskStrategy = MaskStrategy.THRESHOLD):
        self.platform = platform
        self.mask_strategy = MaskStrategy(mask_strategy)

    def in_condition(self, column: str, values: Sequence[str]) -> str:
        if not values:
            return MATCH_NOTHING
        literals = ", ".join(self.platform.quote_literal(value) for value in values)
        return f"{column} IN ({literals})"

    def mask_condition(self, mask: int) -> str:
        mask = int(mask)
        if self.mask_strategy is MaskStrategy.BITWISE:
            return f"(e.mask & {mask}) = {mask}"
        return f"e.mask >= {mask}"

    def compile(self, classes: Sequence[str], identifiers: Sequence[str], mask: int) -> str:
        """
        Compile the ACL filter.

        Args:
            classes: ACL class names the object may be stored under
            identifiers: security identifiers of the acting identity
            mask: requested permission mask

        Returns:
            SQL selecting the distinct ``object_identifier`` values (as ``id``)
            with a qualifying access control entry. An empty identifier list
            yields a filter matching no rows.
        """
        if not identifiers:
            logger.debug("No security identifiers, compiling a deny-all ACL filter")

        return ACL_FILTER_TEMPLATE.format(
            object_identities=self.platform.qualify("acl_object_identities"),
            classes=self.platform.qualify("acl_classes"),
            entries=self.platform.qualify("acl_entries"),
            security_identities=self.platform.qualify("acl_security_identities"),
            class_wide_entry=self.platform.is_null_expression("e.object_identity_id"),
            class_condition=self.in_condition("c.class_type", classes),
            identifier_condition=self.in_condition("s.identifier", identifiers),
            mask_condition=self.mask_condition(mask),
        )
