"""
Unit Tests for the error hierarchy
"""
from mentorconnect.core.exceptions import (
    ConcurrentModificationError,
    ConnectionStateConflictError,
    DirectoryQueryError,
    EmailAlreadyRegisteredError,
    InvalidCursorError,
    MentorConnectError,
    PartialWriteError,
    RoleMismatchError,
    RoleMismatchLoginError,
    UserNotFoundError,
    error_response,
)


class TestStatusCodes:
    """Each error maps to the HTTP status the API answers with"""

    def test_not_found(self):
        error = UserNotFoundError("abc")
        assert error.status_code == 404
        assert error.code == "USER_NOT_FOUND"
        assert error.details == {"resource_type": "User", "resource_id": "abc"}

    def test_role_mismatch_login_message(self):
        error = RoleMismatchLoginError("student", "alumni")
        assert error.status_code == 403
        assert error.message == "You are registered as student, not alumni."

    def test_validation_family(self):
        assert InvalidCursorError().status_code == 400
        assert InvalidCursorError().code == "INVALID_CURSOR"
        assert RoleMismatchError("u1", "alumni").details == {"user_id": "u1", "expected_role": "alumni"}

    def test_conflicts(self):
        assert ConcurrentModificationError().status_code == 409
        assert EmailAlreadyRegisteredError().status_code == 409
        conflict = ConnectionStateConflictError("requested", "none")
        assert conflict.status_code == 409
        assert conflict.details == {"expected": "requested", "actual": "none"}

    def test_directory_query_error(self):
        error = DirectoryQueryError()
        assert error.status_code == 503
        assert error.message == "Failed to load users. Please try again."
        assert error.details["has_more"] is False

    def test_partial_write(self):
        error = PartialWriteError("accept_request", applied="alumnus", failed="student")
        assert error.status_code == 500
        assert error.details["failed"] == "student"


def test_error_response_shape():
    body = error_response(MentorConnectError("boom", code="X"))

    assert body == {
        "success": False,
        "error": {"code": "X", "message": "boom", "details": {}},
    }
