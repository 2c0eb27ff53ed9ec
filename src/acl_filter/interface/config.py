import re
import yaml
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_yaml import to_yaml_str
import logging

from acl_filter.exceptions import AclConfigurationException
from acl_filter.interface.masks import MaskBuilder, MaskStrategy
from acl_filter.settings import settings

logger = logging.getLogger(__name__)

PERMISSION_NAME = re.compile(r"^[A-Z][A-Z0-9_]*$")


class AclConfig(BaseModel):
    """Process-wide ACL filter configuration"""

    model_config = ConfigDict(frozen=True)

    role_hierarchy: Dict[str, List[str]] = Field(default_factory=dict)
    permissions: Dict[str, int] = Field(default_factory=dict)
    mask_strategy: MaskStrategy = MaskStrategy.THRESHOLD
    acl_schema: Optional[str] = None

    @field_validator("permissions", mode="before")
    @classmethod
    def validate_permissions(cls, value):
        if value is None:
            return {}
        permissions = {}
        for name, mask in dict(value).items():
            name = str(name).upper()
            if not PERMISSION_NAME.match(name):
                raise ValueError(f"Invalid permission name '{name}'")
            if isinstance(mask, bool) or not isinstance(mask, int) or mask <= 0:
                raise ValueError(f"Permission '{name}' needs a positive integer mask, got {mask!r}")
            builtin = MaskBuilder.__members__.get(name)
            if builtin is not None and int(builtin) != mask:
                raise ValueError(f"Permission '{name}' conflicts with the built-in mask {int(builtin)}")
            permissions[name] = mask
        return permissions

    @field_validator("role_hierarchy", mode="before")
    @classmethod
    def validate_role_hierarchy(cls, value):
        if value is None:
            return {}
        hierarchy = {}
        for role, parents in dict(value).items():
            if parents is None:
                parents = []
            elif isinstance(parents, str):
                parents = [parents]
            hierarchy[role] = list(parents)
        return hierarchy

    def get_config(self) -> str:
        return to_yaml_str(self, exclude_none=True)

    def write_config(self, filename: str):
        with open(filename, "w") as file:
            file.write(self.get_config())


class AclConfigFactory:

    @staticmethod
    def read_config_from_string(yamlstring: str) -> AclConfig:
        try:
            return AclConfig(**(yaml.safe_load(yamlstring) or {}))
        except (yaml.YAMLError, ValidationError) as e:
            raise AclConfigurationException(f"Invalid ACL configuration: {e}") from e

    @staticmethod
    def read_config_from_file(filename: str) -> AclConfig:
        with open(filename, "r") as file:
            config = AclConfigFactory.read_config_from_string(file.read())
        logger.info(f"Loaded ACL configuration from {filename} ({len(config.role_hierarchy)} roles)")
        return config

    @staticmethod
    def from_settings() -> AclConfig:
        """Build the configuration from ACL_* environment settings"""
        if settings.ACL_CONFIG:
            config = AclConfigFactory.read_config_from_file(settings.ACL_CONFIG)
        else:
            config = AclConfig()

        overrides = {}
        if settings.ACL_SCHEMA:
            overrides["acl_schema"] = settings.ACL_SCHEMA
        if settings.ACL_MASK_STRATEGY:
            try:
                overrides["mask_strategy"] = MaskStrategy(settings.ACL_MASK_STRATEGY.lower())
            except ValueError as e:
                raise AclConfigurationException(
                    f"Unknown mask strategy '{settings.ACL_MASK_STRATEGY}'"
                ) from e

        return config.model_copy(update=overrides) if overrides else config
