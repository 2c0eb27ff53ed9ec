from sqlalchemy import (
    Boolean, Column, ForeignKey, Integer,
    SmallInteger, String, UniqueConstraint
)
from sqlalchemy.orm import relationship

from .base import Base


class AclClass(Base):
    __tablename__ = 'acl_classes'

    id = Column(Integer, primary_key=True)
    class_type = Column(String(200), nullable=False, unique=True)

    object_identities = relationship('AclObjectIdentity', back_populates='acl_class')


class AclSecurityIdentity(Base):
    __tablename__ = 'acl_security_identities'
    __table_args__ = (
        UniqueConstraint('identifier', 'username'),
    )

    id = Column(Integer, primary_key=True)
    identifier = Column(String(200), nullable=False)
    username = Column(Boolean, nullable=False)


class AclObjectIdentity(Base):
    __tablename__ = 'acl_object_identities'
    __table_args__ = (
        UniqueConstraint('object_identifier', 'class_id'),
    )

    id = Column(Integer, primary_key=True)
    parent_object_identity_id = Column(ForeignKey('acl_object_identities.id'))
    class_id = Column(ForeignKey('acl_classes.id'), nullable=False)
    object_identifier = Column(String(100), nullable=False)
    entries_inheriting = Column(Boolean, nullable=False, default=True)

    acl_class = relationship('AclClass', back_populates='object_identities')
    entries = relationship('AclEntry', back_populates='object_identity')


class AclEntry(Base):
    __tablename__ = 'acl_entries'
    __table_args__ = (
        UniqueConstraint('class_id', 'object_identity_id', 'field', 'ace_order'),
    )

    id = Column(Integer, primary_key=True)
    class_id = Column(ForeignKey('acl_classes.id', ondelete='CASCADE'), nullable=False)
    # NULL means a class-wide entry
    object_identity_id = Column(ForeignKey('acl_object_identities.id', ondelete='CASCADE'))
    security_identity_id = Column(ForeignKey('acl_security_identities.id', ondelete='CASCADE'), nullable=False)
    field = Column(String(50))
    ace_order = Column(SmallInteger, nullable=False, default=0)
    mask = Column(Integer, nullable=False)
    granting = Column(Boolean, nullable=False, default=True)
    granting_strategy = Column(String(30), nullable=False, default='all')
    audit_success = Column(Boolean, nullable=False, default=False)
    audit_failure = Column(Boolean, nullable=False, default=False)

    acl_class = relationship('AclClass')
    object_identity = relationship('AclObjectIdentity', back_populates='entries')
    security_identity = relationship('AclSecurityIdentity')
