"""GitLab payload decoding errors."""

from __future__ import annotations


class GitLabEventError(Exception):
    """Base class for GitLab event decoding errors."""


class UnknownEventKindError(GitLabEventError):
    """Raised when a payload's ``object_kind`` is not a supported event kind.

    This is not a decoding failure: callers drop the payload without
    reporting an error to the webhook sender.
    """

    def __init__(self, kind: str | None) -> None:
        """Initialise with the unrecognised discriminant."""
        self.kind = kind
        super().__init__(f"unsupported GitLab event kind: {kind!r}")


class MalformedPayloadError(GitLabEventError):
    """Raised when a known event kind does not match its expected schema.

    Attributes
    ----------
    kind
        The ``object_kind`` the payload was decoded as.
    details
        Description of the schema violation, as reported by msgspec.

    """

    def __init__(self, kind: str, details: str) -> None:
        """Initialise with the event kind and the underlying cause."""
        self.kind = kind
        self.details = details
        super().__init__(f"malformed {kind} payload: {details}")
