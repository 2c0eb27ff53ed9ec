from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

class InvalidQueryShapeException(InternalServerException):
    """Raised when a query object is neither a Select nor an ORM Query."""
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Unsupported query object", headers)

class UnknownPermissionException(BadRequestException):
    """Raised when a permission name has no mask."""
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Unknown permission", headers)

class AliasResolutionException(InternalServerException):
    """Raised when an alias cannot be resolved to a mapped entity."""
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Alias could not be resolved", headers)

class CompositeIdentifierException(InternalServerException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Entity has a composite identifier", headers)

class AclConfigurationException(InternalServerException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Invalid ACL configuration", headers)
