from typing import Any, List, Optional, Union
from sqlalchemy.orm import Session
import logging

from acl_filter.interface.acl import AclGrant
from acl_filter.model.acl import AclClass, AclEntry, AclObjectIdentity, AclSecurityIdentity
from acl_filter.permissions.identities import class_type_of

logger = logging.getLogger(__name__)


class AclQuery:
    """
    Lists the security identities with a direct grant on one object.

    Meant for showing users with GRANT permission who can access their
    objects. Role hierarchies and object ancestors are not traversed, and the
    caller is responsible for checking that the acting identity may see the
    report.
    """

    def __init__(self, db: Session):
        self.db = db

    def query_acl(self, class_type: Union[str, type], id: Any, field: Optional[str] = None) -> List[AclGrant]:
        """
        Query the ACL of one object identity

        Args:
            class_type: ACL class name, or the mapped class itself
            id: identifier (primary key) of the object
            field: field name for field-level entries, object-level entries when None

        Returns:
            One AclGrant per entry, empty when the object has none
        """
        if isinstance(class_type, type):
            class_type = class_type_of(class_type)

        field_condition = AclEntry.field.is_(None) if field is None else AclEntry.field == field

        results = (
            self.db.query(
                AclSecurityIdentity.identifier.label("security_identifier"),
                AclSecurityIdentity.username.label("is_username"),
                AclEntry.mask
            )
            .select_from(AclEntry)
            .outerjoin(AclClass, AclClass.id == AclEntry.class_id)
            .outerjoin(AclObjectIdentity, AclObjectIdentity.id == AclEntry.object_identity_id)
            .outerjoin(AclSecurityIdentity, AclSecurityIdentity.id == AclEntry.security_identity_id)
            .filter(
                AclClass.class_type == class_type,
                AclObjectIdentity.object_identifier == str(id),
                field_condition
            )
            .order_by(AclEntry.ace_order)
            .all()
        )

        logger.debug(f"{len(results)} ACL entries for {class_type}#{id}")

        return [
            AclGrant(
                security_identifier=row.security_identifier,
                is_username=bool(row.is_username),
                mask=row.mask
            )
            for row in results
        ]
