from enum import Enum, IntFlag
from functools import reduce
from typing import Dict, Iterable, Optional

from acl_filter.exceptions import UnknownPermissionException


class MaskBuilder(IntFlag):
    """Standard ACL permission bits"""

    VIEW = 1
    CREATE = 2
    EDIT = 4
    DELETE = 8
    UNDELETE = 16
    OPERATOR = 32
    MASTER = 64
    OWNER = 128
    IDDQD = 1073741823


class MaskStrategy(str, Enum):
    """How a stored mask is compared with the requested one"""

    # stored mask >= requested mask (higher bits imply broader rights)
    THRESHOLD = "threshold"
    # stored mask contains every requested bit
    BITWISE = "bitwise"


class PermissionMap:
    """Static permission name -> mask table"""

    def __init__(self, extra_permissions: Optional[Dict[str, int]] = None):
        self._masks: Dict[str, int] = {
            name: int(member.value) for name, member in MaskBuilder.__members__.items()
        }
        self._masks.update(extra_permissions or {})

    @property
    def names(self):
        return sorted(self._masks)

    def get_mask(self, permission: str) -> int:
        if not isinstance(permission, str) or permission.upper() not in self._masks:
            raise UnknownPermissionException(f"Unknown permission '{permission}'")
        return self._masks[permission.upper()]

    def build_mask(self, permissions: Iterable[str]) -> int:
        """OR together the masks of all requested permissions"""
        masks = [self.get_mask(permission) for permission in permissions]
        return reduce(lambda left, right: left | right, masks, 0)
