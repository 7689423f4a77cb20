"""Custom exceptions for bootstrap bucket and user-data errors.

This module defines the exception classes raised by the bucket, object and
ignition services. Every fallible cloud call is wrapped in one of these with a
short description of the step that failed, so callers can log a causal chain
without working out which step broke.

Exception Hierarchy:
    BootstrapException (base)
    ├── BucketManagementDisabledError
    ├── InvalidInputError
    ├── ExternalServiceError
    │   ├── S3Error
    │   │   ├── BucketCreationError
    │   │   ├── BucketDeletionError
    │   │   ├── BucketPolicyError
    │   │   ├── ObjectPutError
    │   │   ├── ObjectGetError
    │   │   └── ObjectDeleteError
    │   └── IdentityLookupError
    ├── EncodingError
    │   ├── BucketNameError
    │   ├── PolicyEncodingError
    │   └── FilePermissionError
    ├── DocumentValidationError
    └── ConfigurationError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from bootstrap_s3.ignition.validate import Report


class BootstrapException(Exception):
    """Base exception for all bootstrap_s3 errors.

    Attributes:
        message: Descriptive error message
        error_code: Machine-readable error identifier
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
    ) -> None:
        """Initialize bootstrap exception.

        Args:
            message: Descriptive error message
            error_code: Machine-readable error code (e.g., 'bucket_create_failed')
            details: Additional context dict for debugging

        Example:
            >>> raise BucketCreationError(
            ...     message="creating S3 bucket: AccessDenied",
            ...     error_code="bucket_create_failed",
            ...     details={"bucket": "demo-cluster1"}
            ... )
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to a dictionary suitable for structured logs.

        Returns:
            Dictionary with error information.
        """
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details if self.details else None,
        }


class BucketManagementDisabledError(BootstrapException):
    """Raised when an object operation is requested while bucket management is off.

    Bucket reconcile/delete treat disabled bucket settings as a silent no-op; only
    operations that must return something (such as an object reference)
    raise this.
    """

    pass


class InvalidInputError(BootstrapException):
    """Raised when a required argument is missing or empty.

    Example:
        >>> if not machine_name:
        ...     raise InvalidInputError(
        ...         message="machine name can't be empty",
        ...         error_code="empty_machine_name",
        ...     )
    """

    pass


# ============================================================================
# EXTERNAL SERVICE ERRORS
# ============================================================================


class ExternalServiceError(BootstrapException):
    """Base exception for cloud API failures (S3, STS)."""

    pass


class S3Error(ExternalServiceError):
    """Raised when an S3 operation fails.

    Reasons might include:
    - Access denied
    - Bucket name taken by another account
    - Region mismatch
    - Throttling

    Example:
        >>> try:
        ...     client.put_object(Bucket=bucket, Key=key, Body=data)
        ... except ClientError as e:
        ...     raise ObjectPutError(
        ...         message=f"putting object: {e}",
        ...         error_code="object_put_failed",
        ...         details={"bucket": bucket, "key": key}
        ...     ) from e
    """

    pass


class BucketCreationError(S3Error):
    """Raised when the bucket cannot be created (other than already owned by us)."""

    pass


class BucketDeletionError(S3Error):
    """Raised when the bucket cannot be deleted.

    Deleting a bucket that still holds objects fails with ``BucketNotEmpty``;
    emptying it first is left to operational tooling.
    """

    pass


class BucketPolicyError(S3Error):
    """Raised when attaching the bucket policy fails."""

    pass


class ObjectPutError(S3Error):
    pass


class ObjectGetError(S3Error):
    pass


class ObjectDeleteError(S3Error):
    pass


class IdentityLookupError(ExternalServiceError):
    """Raised when the caller's account id cannot be resolved through STS."""

    pass


# ============================================================================
# ENCODING ERRORS
# ============================================================================


class EncodingError(BootstrapException):
    """Base exception for hashing, serialization and parsing failures."""

    pass


class BucketNameError(EncodingError):
    """Raised when a bucket name cannot be derived from the cluster identity."""

    pass


class PolicyEncodingError(EncodingError):
    """Raised when the bucket policy cannot be serialized."""

    pass


class FilePermissionError(EncodingError):
    """Raised when a file permission string is not a valid octal number.

    Example:
        >>> try:
        ...     mode = int(permissions, 8)
        ... except ValueError as e:
        ...     raise FilePermissionError(
        ...         message=f"invalid file permissions {permissions!r}",
        ...         details={"path": path, "permissions": permissions}
        ...     ) from e
    """

    pass


# ============================================================================
# VALIDATION / CONFIGURATION ERRORS
# ============================================================================


class DocumentValidationError(BootstrapException):
    """Raised when an assembled ignition config fails structural validation.

    Attributes:
        report: The full validation report, for diagnostics.
    """

    def __init__(
        self,
        message: str,
        report: Report,
        error_code: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.report = report
        merged = {"report": [str(entry) for entry in report.entries]}
        merged.update(details or {})
        super().__init__(message, error_code=error_code or "ignition_validation_failed", details=merged)


class ConfigurationError(BootstrapException):
    """Raised when configuration is invalid or inconsistent.

    Example:
        >>> if default_version not in versions:
        ...     raise ConfigurationError(
        ...         message="default template version is not in the template table",
        ...         error_code="invalid_template_table",
        ...         details={"default_version": default_version}
        ...     )
    """

    pass
