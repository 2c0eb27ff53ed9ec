from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple
from pydantic import BaseModel, Field
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


class RoleHierarchy:
    """Immutable role -> parent roles mapping"""

    def __init__(self, hierarchy: Optional[Mapping[str, Iterable[str]]] = None):
        self._hierarchy: Mapping[str, Tuple[str, ...]] = MappingProxyType({
            role: tuple(parents) for role, parents in (hierarchy or {}).items()
        })
        for role, parents in self._hierarchy.items():
            if role in parents:
                logger.warning(f"Role hierarchy lists '{role}' as its own parent")

    @property
    def hierarchy(self) -> Mapping[str, Tuple[str, ...]]:
        return self._hierarchy

    def get_direct_parents(self, role: str) -> Tuple[str, ...]:
        return self._hierarchy.get(role, ())

    @lru_cache(maxsize=128)
    def get_parent_roles(self, role: str) -> Tuple[str, ...]:
        """
        Every role reachable from ``role`` through parent links.

        Depth-first, each parent reported once. The role itself is never
        reported and cycles of any length terminate.
        """
        resolved: List[str] = []
        seen = {role}
        stack = [iter(self.get_direct_parents(role))]

        while stack:
            parent = next(stack[-1], None)
            if parent is None:
                stack.pop()
                continue
            if parent in seen:
                if parent == role and len(stack) > 1:
                    logger.warning(f"Role hierarchy has a cycle through '{role}'")
                continue
            seen.add(parent)
            resolved.append(parent)
            stack.append(iter(self.get_direct_parents(parent)))

        return tuple(resolved)


class Principal(BaseModel):
    """Authenticated identity: a username and the roles it holds directly"""

    username: str
    roles: List[str] = Field(default_factory=list)

    def get_roles(self) -> List[str]:
        return list(self.roles)

    def get_username(self) -> str:
        return self.username
