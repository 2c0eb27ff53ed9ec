from pydantic import BaseModel, ConfigDict


class AclGrant(BaseModel):
    """A direct grant of a mask to one security identity"""

    model_config = ConfigDict(from_attributes=True)

    security_identifier: str
    is_username: bool
    mask: int
