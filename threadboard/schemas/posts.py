"""Thread and post Pydantic schemas."""

from pydantic import BaseModel, field_validator


class ContentRequest(BaseModel):
    """Raw submitted content for a thread, reply or edit."""

    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject oversized submissions before they reach the filter."""
        if len(v) > 262144:  # 256KB
            raise ValueError("Content must be 256KB or less")
        return v


class CreatedResponse(BaseModel):
    """Identity of a newly created post."""

    pid: int
    tid: int


class EditedResponse(BaseModel):
    """Result of an edit."""

    pid: int


class DeletedResponse(BaseModel):
    """Result of a soft delete."""

    pid: int
    tid: int


class EditSourceResponse(BaseModel):
    """Stored content of an editable post."""

    pid: int
    content: str


class ThreadView(BaseModel):
    """Root-facing fields of a thread."""

    pid: int
    uid: int
    author: str | None
    content: str
    time: int
    last_activity: int
    last_replier_uid: int


class ThreadListItem(ThreadView):
    """Thread summary for the index."""

    last_replier: str | None
    replies: int


class ListThreadsResponse(BaseModel):
    """One page of the thread index."""

    items: list[ThreadListItem]
    page: int
    page_size: int
    total: int


class ReplyView(BaseModel):
    """Reply-facing fields of a post."""

    pid: int
    tid: int
    uid: int
    author: str | None
    author_credits: int | None
    content: str
    post_time: int
    quoted_pid: int
    quote_content: str | None
    quote_author: str | None


class ThreadPageResponse(BaseModel):
    """A thread root with one page of replies."""

    thread: ThreadView
    replies: list[ReplyView]
    page: int
    page_size: int
    total: int
    pages: int
    thread_lock: bool


class JumpResponse(BaseModel):
    """Page of a thread holding a given reply."""

    tid: int
    page: int
