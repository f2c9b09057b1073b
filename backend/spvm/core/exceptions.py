"""Exceptions raised by the versioning console.

Site- and library-level failures (``SiteUnreachableError``,
``LibraryUpdateError``, ``CredentialExpiredError`` during a batch) are caught
by the site processor and recorded in the site's result; they never abort a
batch. ``PreconditionError`` and ``BatchFailedError`` are surfaced to the
caller.
"""

from typing import Optional


class PreconditionError(Exception):
    """Raised when an operation is rejected before any remote call is made.

    ``redirect_to`` names the console step the operator should go back to
    ("auth", "sites", "config"), or None when there is nothing to fix.
    """

    def __init__(self, message: str, redirect_to: Optional[str] = None):
        """Initialize the precondition error.

        Args:
            message: Human-readable reason
            redirect_to: Console step the operator should visit
        """
        self.message = message
        self.redirect_to = redirect_to
        super().__init__(message)


class BatchAlreadyRunningError(PreconditionError):
    """Raised when a batch is started while another one is running."""

    def __init__(self, message: str = "A batch is already running"):
        """Initialize the error."""
        super().__init__(message)


class ConsoleBusyError(PreconditionError):
    """Raised when the site list or policy is edited while a batch is running."""

    def __init__(self, message: str = "Cannot modify the console while a batch is running"):
        """Initialize the error."""
        super().__init__(message)


class ConfirmationRequiredError(PreconditionError):
    """Raised when a destructive operator action is requested without confirmation."""

    def __init__(self, action: str):
        """Initialize the error.

        Args:
            action: The action that needs confirmation
        """
        self.action = action
        super().__init__(f"Confirmation required to {action}")


class SiteUnreachableError(Exception):
    """Raised when a site cannot be discovered (unreachable or unauthorized).

    The site processor turns this into a zero-count result; the batch continues.
    """

    def __init__(self, site: str, reason: str, status_code: Optional[int] = None):
        """Initialize the error.

        Args:
            site: Site address
            reason: Short description of the failure
            status_code: HTTP status returned by the service, if any
        """
        self.site = site
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Site {site} unreachable: {reason}")


class LibraryUpdateError(Exception):
    """Raised when one library's versioning update fails.

    Recoverable: the library is counted as failed and the site continues.
    """

    def __init__(self, library: str, reason: str, status_code: Optional[int] = None):
        """Initialize the error.

        Args:
            library: Library display name
            reason: Short description of the failure
            status_code: HTTP status returned by the service, if any
        """
        self.library = library
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Library '{library}' update failed: {reason}")


class CredentialAcquisitionError(Exception):
    """Base class for failures of the interactive sign-in."""

    pass


class UserCancelledError(CredentialAcquisitionError):
    """Raised when the operator declines or abandons the sign-in."""

    pass


class PopupBlockedError(CredentialAcquisitionError):
    """Raised when the interactive sign-in could not be opened."""

    pass


class InteractionInProgressError(CredentialAcquisitionError):
    """Raised when a sign-in is requested while another one is pending."""

    pass


class CredentialExpiredError(Exception):
    """Raised when a token is expired and cannot be renewed silently."""

    pass


class BatchFailedError(Exception):
    """Raised when a batch stops because a collaborator broke its contract.

    This is a non-recoverable error: the run transitions to ``failed``.
    """

    pass
