"""Error taxonomy for the authorization and accountability layer."""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Malformed key on a write (empty role, table_name, user_id...). Rejected before any write."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ForbiddenError(HTTPException):
    """Authorization denial. The detail is always generic."""

    def __init__(self):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


class NotFoundError(HTTPException):
    """Registry lookup miss. Never raised by the permission resolver."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuditWriteFailure(Exception):
    """Audit row could not be written after a committed mutation."""

    def __init__(self, table_name: str, record_id: str, cause: Exception):
        self.table_name = table_name
        self.record_id = record_id
        self.cause = cause
        super().__init__(f"Audit write failed for {table_name}/{record_id}: {cause}")


def require_key(**keys: str) -> None:
    """Raise ValidationError for the first empty or blank key."""
    for name, value in keys.items():
        if value is None or not str(value).strip():
            raise ValidationError(f"{name} must not be empty")
