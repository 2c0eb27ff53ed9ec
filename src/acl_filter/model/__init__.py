from .base import Base, metadata
from .acl import AclClass, AclSecurityIdentity, AclObjectIdentity, AclEntry

__all__ = [
    'Base',
    'metadata',
    # ACL store
    'AclClass',
    'AclSecurityIdentity',
    'AclObjectIdentity',
    'AclEntry',
]
