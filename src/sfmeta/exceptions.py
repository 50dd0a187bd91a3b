from __future__ import annotations

from typing import Optional


class SfMetaError(RuntimeError):
    """Base class for errors raised by sfmeta."""


class MissingAliasError(SfMetaError):
    """Raised when a refresh has neither an explicit nor a remembered alias."""

    def __init__(self) -> None:
        super().__init__("An org alias is required to refresh a connection.")


class CredentialResolutionError(SfMetaError):
    """Raised when the credential command fails or prints unusable output."""

    def __init__(self, alias: str, detail: Optional[str] = None):
        self.alias = alias
        self.detail = detail
        msg = f"Error occurred while accessing user alias: {alias}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class NoSessionError(SfMetaError):
    """Raised when a listing is attempted before any session was resolved."""

    def __init__(self) -> None:
        super().__init__("No active session; refresh the connection first.")


class DescribeError(SfMetaError):
    """Raised when the remote describeMetadata call fails."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Error occurred during describe: {cause}")


class ListMembersError(SfMetaError):
    """Raised when the remote listMetadata call fails for a type."""

    def __init__(self, type_name: str, cause: BaseException):
        self.type_name = type_name
        self.cause = cause
        super().__init__(f"Error while retrieving members for type: {type_name}: {cause}")


class MetadataAPIError(SfMetaError):
    """SOAP fault or HTTP error status returned by the Metadata API."""

    def __init__(self, fault_code: str, message: str, status_code: Optional[int] = None):
        self.fault_code = fault_code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{fault_code}: {message}")
