"""
Custom Exceptions for MentorConnect
===================================

Every error raised by the service layer derives from MentorConnectError and
carries the HTTP status the API layer should answer with. Precondition
violations on connection actions (already requested, already connected,
nothing pending) are NOT exceptions: they come back as soft outcomes.

Usage:
    from mentorconnect.core.exceptions import UserNotFoundError

    if user is None:
        raise UserNotFoundError(user_id)
"""

from typing import Optional, Any, Dict


class MentorConnectError(Exception):
    """Base exception for all MentorConnect errors"""

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

class AuthenticationError(MentorConnectError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(MentorConnectError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized", code: str = "NOT_AUTHORIZED"):
        super().__init__(message, code=code)


class RoleMismatchLoginError(AuthorizationError):
    """Signed in through the wrong portal"""

    def __init__(self, registered_role: str, requested_role: str):
        super().__init__(
            f"You are registered as {registered_role}, not {requested_role}.",
            code="ROLE_MISMATCH",
        )
        self.details = {"registered_role": registered_role, "requested_role": requested_role}


class ProfileIncompleteError(AuthorizationError):
    """Dashboard features need a completed profile"""

    def __init__(self):
        super().__init__("Complete your profile first", code="PROFILE_INCOMPLETE")


class ConversationAccessError(AuthorizationError):
    """Viewer is not a participant of the conversation"""

    def __init__(self, conversation_id: str):
        super().__init__("Not a participant of this conversation", code="CONVERSATION_FORBIDDEN")
        self.details = {"conversation_id": conversation_id}


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(MentorConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class ConversationNotFoundError(ResourceNotFoundError):
    """Conversation not found"""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", conversation_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(MentorConnectError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidCursorError(ValidationError):
    """Cursor is malformed or belongs to another filter set"""

    def __init__(self, message: str = "Invalid or stale cursor; restart from the first page"):
        super().__init__(message, field="cursor")
        self.code = "INVALID_CURSOR"


class RoleMismatchError(ValidationError):
    """A participant does not have the role the operation requires"""

    def __init__(self, user_id: str, expected_role: str):
        super().__init__(f"User '{user_id}' is not a {expected_role}")
        self.code = "ROLE_MISMATCH"
        self.details = {"user_id": user_id, "expected_role": expected_role}


class UnsupportedImageError(ValidationError):
    """Uploaded profile picture is not an accepted image type"""

    status_code = 415

    def __init__(self, message: str, content_type: Optional[str] = None):
        super().__init__(message, field="file")
        self.code = "UNSUPPORTED_IMAGE"
        self.details = {"field": "file", "content_type": content_type}


class UploadTooLargeError(ValidationError):
    """Uploaded file exceeds the configured size limit"""

    status_code = 413

    def __init__(self, max_bytes: int):
        super().__init__(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB", field="file")
        self.code = "UPLOAD_TOO_LARGE"
        self.details = {"field": "file", "max_bytes": max_bytes}


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(MentorConnectError):
    """Write rejected because the stored state moved on"""

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code=code)


class ConcurrentModificationError(ConflictError):
    """Record version changed between read and write"""

    def __init__(self, message: str = "Record was modified concurrently; reload and retry"):
        super().__init__(message, code="CONCURRENT_MODIFICATION")


class ConnectionStateConflictError(ConflictError):
    """Pair is no longer in the state the caller expected"""

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Connection state is {actual}, expected {expected}",
            code="CONNECTION_STATE_CONFLICT",
        )
        self.details = {"expected": expected, "actual": actual}


class ProfileAlreadyCompleteError(ConflictError):
    """Profile was already completed under another role"""

    def __init__(self, role: str):
        super().__init__(f"Profile already completed as {role}", code="PROFILE_ALREADY_COMPLETE")
        self.details = {"role": role}


class EmailAlreadyRegisteredError(ConflictError):
    def __init__(self):
        super().__init__("Email already registered", code="EMAIL_TAKEN")


# ============================================
# Store Errors (5xx-type)
# ============================================

class StoreUnavailableError(MentorConnectError):
    """The database call failed"""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable", code: str = "STORE_UNAVAILABLE"):
        super().__init__(message, code=code)


class DirectoryQueryError(StoreUnavailableError):
    """Directory page could not be fetched; there is nothing more to load"""

    def __init__(self, message: str = "Failed to load users. Please try again."):
        super().__init__(message, code="DIRECTORY_QUERY_FAILED")
        self.details = {"has_more": False}


class PartialWriteError(MentorConnectError):
    """First write of a two-step mutation landed, the second did not"""

    status_code = 500

    def __init__(self, operation: str, applied: str, failed: str):
        super().__init__(
            f"{operation} partially applied: {applied} updated, {failed} not updated",
            code="PARTIAL_WRITE",
            details={"operation": operation, "applied": applied, "failed": failed},
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: MentorConnectError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
