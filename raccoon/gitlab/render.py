"""Render GitLab event records as single-line chat notifications.

Rendering never fails for a decoded record: every value it needs was
validated by the parser, and fallbacks cover the remaining edge cases
(refs without a slash, empty commit messages).
"""

from __future__ import annotations

import typing as typ

from .models import (
    BuildEvent,
    CommentEvent,
    IssueEvent,
    MergeRequestEvent,
    PipelineEvent,
    PushEvent,
    TagPushEvent,
    WikiPageEvent,
)

if typ.TYPE_CHECKING:
    from .models import GitLabEvent, Project, Repository

INVALID: typ.Final = "<invalid>"
NULL_SHA: typ.Final = "0" * 40
NOTE_PREVIEW_CHARS: typ.Final = 40
SHORT_SHA_CHARS: typ.Final = 7


def _repository(repository: Repository) -> str:
    return f"{repository.name} ({repository.homepage})"


def _project(project: Project) -> str:
    return f"{project.name} ({project.web_url})"


def first_line(message: str) -> str:
    """Return the text before the first line feed, or ``<invalid>`` if empty."""
    line = message.split("\n", 1)[0]
    return line or INVALID


def _commit(sha: str, message: str) -> str:
    return f"{sha[:SHORT_SHA_CHARS]} ({first_line(message)})"


def tag_name(ref: str) -> str:
    """Return the part of ``ref`` after its last ``/``.

    >>> tag_name("refs/tags/v1.0.0")
    'v1.0.0'
    >>> tag_name("v1.0.0")
    '<invalid>'

    """
    if "/" not in ref:
        return INVALID
    return ref.rsplit("/", 1)[1]


def truncate_note(note: str) -> str:
    """Shorten a comment to its first 40 characters.

    Trailing whitespace of the shortened text is trimmed and ``...`` is
    appended. Notes of 40 characters or fewer are returned unchanged.
    """
    if len(note) <= NOTE_PREVIEW_CHARS:
        return note
    return f"{note[:NOTE_PREVIEW_CHARS].rstrip()}..."


def wiki_action(action: str) -> str:
    """Return the past tense of a wiki action (``create`` -> ``created``)."""
    suffix = "d" if action.endswith("e") else "ed"
    return f"{action}{suffix}"


def render_push(event: PushEvent) -> str:
    """Render a push event."""
    return (
        f"🌋 {event.user_name} pushed {event.total_commits_count} commits "
        f"to {_repository(event.repository)}"
    )


def render_tag_push(event: TagPushEvent) -> str:
    """Render a tag push; an all-zero ``before`` id means the tag is new."""
    action = "pushed" if event.before == NULL_SHA else "deleted"
    return (
        f'🔖 {event.user_name} {action} tag "{tag_name(event.tag_ref)}" '
        f"to {_repository(event.repository)}"
    )


def render_issue(event: IssueEvent) -> str:
    """Render an issue event."""
    issue = event.issue
    return (
        f'🐛 {event.user.name} {issue.action}ed issue "{issue.title}" '
        f"({issue.url}) on {_repository(event.repository)}"
    )


def render_merge_request(event: MergeRequestEvent) -> str:
    """Render a merge request event."""
    mr = event.merge_request
    return (
        f'🔀 {event.user.name} {mr.action}ed merge request "{mr.title}" '
        f"({mr.url}) on {_repository(event.repository)}"
    )


def render_comment(event: CommentEvent) -> str:
    """Render a comment.

    The noteable type is only lower-cased, so ``MergeRequest`` renders as
    ``mergerequest``.
    """
    comment = event.comment
    return (
        f"💬 {event.user.name} commented on {comment.noteable_type.lower()} "
        f"{comment.url}: {truncate_note(comment.note)}"
    )


def render_wiki_page(event: WikiPageEvent) -> str:
    """Render a wiki page event."""
    page = event.page
    return (
        f'📝 {event.user.name} {wiki_action(page.action)} wiki page "{page.title}" '
        f"({page.url})"
    )


def render_pipeline(event: PipelineEvent) -> str:
    """Render a pipeline event; the duration is omitted unless positive."""
    pipeline = event.pipeline
    text = f"🚀 Pipeline {pipeline.status}"
    if pipeline.duration is not None and pipeline.duration > 0:
        seconds = float(pipeline.duration)
        text += f" in {int(seconds) if seconds.is_integer() else seconds} seconds"
    commit = _commit(event.commit.id, event.commit.message)
    return f"{text} on {commit} for {_project(event.project)}"


def render_build(event: BuildEvent) -> str:
    """Render a build (job) event."""
    commit = _commit(event.commit.sha, event.commit.message)
    return (
        f"🔨 Build {event.build_name} ({event.build_stage}) {event.build_status} "
        f"on {commit} for {_repository(event.repository)}"
    )


def render(event: GitLabEvent) -> str:
    """Render any decoded GitLab event as a notification line."""
    match event:
        case PushEvent():
            return render_push(event)
        case TagPushEvent():
            return render_tag_push(event)
        case IssueEvent():
            return render_issue(event)
        case MergeRequestEvent():
            return render_merge_request(event)
        case CommentEvent():
            return render_comment(event)
        case WikiPageEvent():
            return render_wiki_page(event)
        case PipelineEvent():
            return render_pipeline(event)
        case BuildEvent():
            return render_build(event)
    typ.assert_never(event)


__all__ = [
    "first_line",
    "render",
    "render_build",
    "render_comment",
    "render_issue",
    "render_merge_request",
    "render_pipeline",
    "render_push",
    "render_tag_push",
    "render_wiki_page",
    "tag_name",
    "truncate_note",
    "wiki_action",
]
