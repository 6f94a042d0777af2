"""Typed shape of the GitHub ``issue_comment`` webhook payload.

Only the fields the bridge reads are declared; msgspec ignores the rest.
"""

from __future__ import annotations

import msgspec


class CommentUser(msgspec.Struct):
    """Author of a comment."""

    login: str


class Comment(msgspec.Struct):
    """The comment that triggered the delivery."""

    user: CommentUser
    body: str
    html_url: str


class IssueRef(msgspec.Struct):
    """The issue the comment belongs to."""

    number: int


class RepositoryRef(msgspec.Struct):
    """The repository the issue lives in."""

    full_name: str


class IssueCommentPayload(msgspec.Struct):
    """An ``issue_comment`` delivery."""

    action: str
    comment: Comment
    issue: IssueRef
    repository: RepositoryRef
