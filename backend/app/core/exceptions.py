"""
Custom Exceptions for TRIZEN CMS
================================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Enable proper error handling at API layer
3. Provide meaningful error messages to users

Usage:
    from app.core.exceptions import ProblemNotFoundError, IdentifierConflictError

    if not problem:
        raise ProblemNotFoundError(problem_id)

    try:
        problem = await service.create_problem(data, user_id)
    except IdentifierConflictError as e:
        logger.warning(f"Identifier allocation gave up: {e}")
        raise
"""

from typing import Optional, Any, Dict, List


class CMSError(Exception):
    """Base exception for all CMS errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(CMSError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(CMSError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CMSError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProblemNotFoundError(ResourceNotFoundError):
    """Problem statement not found"""

    def __init__(self, problem_id: str):
        super().__init__("Problem", problem_id)


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class LeadNotFoundError(ResourceNotFoundError):
    """Lead not found"""

    def __init__(self, lead_id: str):
        super().__init__("Lead", lead_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(CMSError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: List[str]):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class CSVParseError(ValidationError):
    """Uploaded stream could not be read as CSV - fails the whole import"""

    def __init__(self, message: str):
        super().__init__(f"Could not parse CSV file: {message}")
        self.code = "CSV_PARSE_ERROR"


class UploadTooLargeError(CMSError):
    """Uploaded file exceeds the configured limit"""

    status_code = 413

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File too large. Maximum size is {max_size // 1024 // 1024}MB",
            code="UPLOAD_TOO_LARGE",
            details={"size": size, "max_size": max_size}
        )


# ============================================
# Problem Store Errors
# ============================================

class ProblemStoreError(CMSError):
    """Persisting a problem statement failed"""

    status_code = 409

    def __init__(self, message: str, code: str = "PROBLEM_STORE_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class IdentifierConflictError(ProblemStoreError):
    """
    No unique identifier could be allocated.

    Collisions with concurrent writes are retryable. A domain whose
    three-digit sequence is used up (exhausted=True) is not.
    """

    def __init__(self, domain: str, attempts: int, last_identifier: Optional[str] = None,
                 exhausted: bool = False):
        if exhausted:
            message = f"Identifier sequence for domain '{domain}' is exhausted"
        else:
            message = f"Could not allocate a unique ID for domain '{domain}' after {attempts} attempts"
        super().__init__(
            message,
            code="IDENTIFIER_CONFLICT",
            details={"domain": domain, "attempts": attempts, "last_identifier": last_identifier,
                     "retryable": not exhausted}
        )


class DuplicateIdentifierError(ProblemStoreError):
    """Caller-supplied identifier already belongs to another problem"""

    def __init__(self, custom_id: str):
        super().__init__(
            f"Problem with ID '{custom_id}' already exists",
            code="DUPLICATE_IDENTIFIER",
            details={"custom_id": custom_id, "retryable": False}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: CMSError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
