"""
Helpers for seeding the ACL store in tests.
"""

from typing import Any, Optional, Union
from sqlalchemy.orm import Session

from acl_filter.model import AclClass, AclEntry, AclObjectIdentity, AclSecurityIdentity
from acl_filter.permissions.identities import class_type_of


def get_or_create_class(db: Session, class_type: Union[str, type]) -> AclClass:
    if isinstance(class_type, type):
        class_type = class_type_of(class_type)
    acl_class = db.query(AclClass).filter(AclClass.class_type == class_type).first()
    if acl_class is None:
        acl_class = AclClass(class_type=class_type)
        db.add(acl_class)
        db.flush()
    return acl_class


def get_or_create_security_identity(db: Session, identifier: str, username: bool) -> AclSecurityIdentity:
    sid = (
        db.query(AclSecurityIdentity)
        .filter(AclSecurityIdentity.identifier == identifier, AclSecurityIdentity.username == username)
        .first()
    )
    if sid is None:
        sid = AclSecurityIdentity(identifier=identifier, username=username)
        db.add(sid)
        db.flush()
    return sid


def get_or_create_object_identity(db: Session, acl_class: AclClass, object_id: Any) -> AclObjectIdentity:
    oid = (
        db.query(AclObjectIdentity)
        .filter(AclObjectIdentity.class_id == acl_class.id, AclObjectIdentity.object_identifier == str(object_id))
        .first()
    )
    if oid is None:
        oid = AclObjectIdentity(class_id=acl_class.id, object_identifier=str(object_id))
        db.add(oid)
        db.flush()
    return oid


def grant(db: Session, class_type: Union[str, type], object_id: Optional[Any], identifier: str,
          mask: int, username: bool = False, field: Optional[str] = None) -> AclEntry:
    """
    Insert an access control entry.

    ``object_id=None`` grants class-wide.
    """
    acl_class = get_or_create_class(db, class_type)
    sid = get_or_create_security_identity(db, identifier, username)
    oid = get_or_create_object_identity(db, acl_class, object_id) if object_id is not None else None

    identity_condition = AclEntry.object_identity_id == oid.id if oid else AclEntry.object_identity_id.is_(None)
    order = db.query(AclEntry).filter(AclEntry.class_id == acl_class.id, identity_condition).count()

    entry = AclEntry(
        class_id=acl_class.id,
        object_identity_id=oid.id if oid else None,
        security_identity_id=sid.id,
        field=field,
        ace_order=order,
        mask=int(mask),
    )
    db.add(entry)
    db.flush()
    return entry


def register_object(db: Session, entity: Any) -> AclObjectIdentity:
    """Object identity for a persisted entity, without any entries"""
    acl_class = get_or_create_class(db, type(entity))
    return get_or_create_object_identity(db, acl_class, entity.id)
