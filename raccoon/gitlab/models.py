"""Typed GitLab webhook event records.

Each supported ``object_kind`` maps to one frozen msgspec struct holding only
the fields needed to render its notification. Payload keys that are not
declared here are ignored during decoding, so GitLab can add fields without
breaking the schema; missing or mistyped declared fields are rejected.

Usage
-----
Decode a payload into its record::

    import msgspec

    event = msgspec.convert(payload, type=PushEvent)

"""

from __future__ import annotations

import typing as typ

import msgspec


class User(msgspec.Struct, frozen=True, kw_only=True):
    """Author of an issue, comment, merge request or wiki edit."""

    name: str


class Repository(msgspec.Struct, frozen=True, kw_only=True):
    """Repository reference rendered as ``name (homepage)``."""

    name: str
    homepage: str


class Project(msgspec.Struct, frozen=True, kw_only=True):
    """Project reference carried by pipeline events."""

    name: str
    web_url: str


class PushEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Commits pushed to a branch."""

    user_name: str
    total_commits_count: int
    repository: Repository


class TagPushEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Tag created or deleted.

    Attributes
    ----------
    user_name : str
        Name of the user who pushed the tag.
    before : str
        Previous object id of the ref; the all-zero id means the tag is new.
    tag_ref : str
        Full ref name, e.g. ``refs/tags/v1.0.0`` (payload key ``ref``).
    repository : Repository
        Repository the tag belongs to.

    """

    user_name: str
    before: str
    tag_ref: str = msgspec.field(name="ref")
    repository: Repository


class IssueAttributes(msgspec.Struct, frozen=True, kw_only=True):
    """``object_attributes`` of issue and merge request events."""

    title: str
    url: str
    action: str


class IssueEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Issue opened, closed, reopened or updated."""

    user: User
    issue: IssueAttributes = msgspec.field(name="object_attributes")
    repository: Repository


class MergeRequestEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Merge request opened, merged, closed or updated."""

    user: User
    merge_request: IssueAttributes = msgspec.field(name="object_attributes")
    repository: Repository


class CommentAttributes(msgspec.Struct, frozen=True, kw_only=True):
    """``object_attributes`` of note events."""

    noteable_type: str
    url: str
    note: str


class CommentEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Comment on a commit, merge request, issue or snippet."""

    user: User
    comment: CommentAttributes = msgspec.field(name="object_attributes")
    repository: Repository


class WikiPageAttributes(msgspec.Struct, frozen=True, kw_only=True):
    """``object_attributes`` of wiki page events."""

    title: str
    url: str
    action: str


class WikiPageEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Wiki page created, updated or deleted."""

    user: User
    page: WikiPageAttributes = msgspec.field(name="object_attributes")


class PipelineAttributes(msgspec.Struct, frozen=True, kw_only=True):
    """``object_attributes`` of pipeline events.

    ``duration`` is ``null`` while a pipeline is still pending or running.
    """

    status: str
    duration: float | None = None


class PipelineCommit(msgspec.Struct, frozen=True, kw_only=True):
    """Commit a pipeline ran for; ``id`` is the commit SHA."""

    id: str
    message: str


class PipelineEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Pipeline status change."""

    pipeline: PipelineAttributes = msgspec.field(name="object_attributes")
    commit: PipelineCommit
    project: Project


class BuildCommit(msgspec.Struct, frozen=True, kw_only=True):
    """Commit a build ran for.

    Build payloads use ``id`` for the numeric pipeline id, so the SHA lives
    in ``sha``.
    """

    sha: str
    message: str


class BuildEvent(msgspec.Struct, frozen=True, kw_only=True):
    """Job (build) status change."""

    build_name: str
    build_stage: str
    build_status: str
    commit: BuildCommit
    repository: Repository


type GitLabEvent = (
    PushEvent
    | TagPushEvent
    | IssueEvent
    | CommentEvent
    | MergeRequestEvent
    | WikiPageEvent
    | PipelineEvent
    | BuildEvent
)

EVENT_TYPES: typ.Final[dict[str, type[msgspec.Struct]]] = {
    "push": PushEvent,
    "tag_push": TagPushEvent,
    "issue": IssueEvent,
    "note": CommentEvent,
    "merge_request": MergeRequestEvent,
    "wiki_page": WikiPageEvent,
    "pipeline": PipelineEvent,
    "build": BuildEvent,
}

EVENT_KINDS: typ.Final[frozenset[str]] = frozenset(EVENT_TYPES)

__all__ = [
    "EVENT_KINDS",
    "EVENT_TYPES",
    "BuildCommit",
    "BuildEvent",
    "CommentAttributes",
    "CommentEvent",
    "GitLabEvent",
    "IssueAttributes",
    "IssueEvent",
    "MergeRequestEvent",
    "PipelineAttributes",
    "PipelineCommit",
    "PipelineEvent",
    "Project",
    "PushEvent",
    "Repository",
    "TagPushEvent",
    "User",
    "WikiPageAttributes",
    "WikiPageEvent",
]
