"""Thread and post router: creation, replies, edits, soft deletes and listings."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.dependencies import get_current_identity
from threadboard.auth.identity import Identity
from threadboard.database import get_db
from threadboard.schemas.posts import (
    ContentRequest,
    CreatedResponse,
    DeletedResponse,
    EditedResponse,
    EditSourceResponse,
    JumpResponse,
    ListThreadsResponse,
    ReplyView,
    ThreadListItem,
    ThreadPageResponse,
    ThreadView,
)
from threadboard.services.content_filter import ContentFilter, get_content_filter
from threadboard.services.posts import PostService
from threadboard.services.threads import ThreadQueries

router = APIRouter(prefix="/api/v1", tags=["Threads"])


def get_post_service(
    db: AsyncSession = Depends(get_db),
    content_filter: ContentFilter = Depends(get_content_filter),
) -> PostService:
    return PostService(db, content_filter)


# --- List Threads ---


@router.get(
    "/threads",
    response_model=ListThreadsResponse,
    status_code=status.HTTP_200_OK,
)
async def list_threads(
    db: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1, description="Page number"),
) -> ListThreadsResponse:
    """List visible threads, most recently active first."""
    rows, page_size, total = await ThreadQueries(db).list_threads(page)
    items = [
        ThreadListItem(
            pid=row.pid,
            uid=row.uid,
            author=row.name,
            content=row.content,
            time=row.time,
            last_activity=row.last_activity,
            last_replier_uid=row.last_replier_uid,
            last_replier=row.last_replier_name,
            replies=row.replies,
        )
        for row in rows
    ]
    return ListThreadsResponse(items=items, page=page, page_size=page_size, total=total)


# --- Create Thread ---


@router.post(
    "/threads",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_thread(
    data: ContentRequest,
    identity: Identity = Depends(get_current_identity),
    posts: PostService = Depends(get_post_service),
) -> CreatedResponse:
    """Open a new thread."""
    thread = await posts.create_thread(identity, data.content)
    return CreatedResponse(pid=thread.pid, tid=0)


# --- Read Thread ---


@router.get(
    "/threads/{tid}",
    response_model=ThreadPageResponse,
    status_code=status.HTTP_200_OK,
)
async def get_thread(
    tid: int,
    db: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1, description="Page number"),
) -> ThreadPageResponse:
    """Get a thread with one page of replies."""
    result = await ThreadQueries(db).get_thread(tid, page)
    root = result.root
    return ThreadPageResponse(
        thread=ThreadView(
            pid=root.pid,
            uid=root.uid,
            author=root.name,
            content=root.content,
            time=root.time,
            last_activity=root.last_activity,
            last_replier_uid=root.last_replier_uid,
        ),
        replies=[
            ReplyView(
                pid=reply.pid,
                tid=reply.tid,
                uid=reply.uid,
                author=reply.name,
                author_credits=reply.credits,
                content=reply.content,
                post_time=reply.time,
                quoted_pid=reply.quoted_pid,
                quote_content=reply.quote_content,
                quote_author=reply.quote_name,
            )
            for reply in result.replies
        ],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        pages=result.pages,
        thread_lock=result.locked,
    )


@router.get(
    "/threads/{tid}/jump",
    response_model=JumpResponse,
    status_code=status.HTTP_200_OK,
)
async def jump_to_reply(
    tid: int,
    time: int = Query(ge=1, description="Post time of the reply to locate"),
    db: AsyncSession = Depends(get_db),
) -> JumpResponse:
    """Find the page of a thread that holds the reply posted at ``time``."""
    page = await ThreadQueries(db).jump(tid, time)
    return JumpResponse(tid=tid, page=page)


# --- Reply ---


@router.post(
    "/posts/{pid}/replies",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_post(
    pid: int,
    data: ContentRequest,
    identity: Identity = Depends(get_current_identity),
    posts: PostService = Depends(get_post_service),
) -> CreatedResponse:
    """Reply to a thread root or to another reply."""
    reply = await posts.create_reply(identity, pid, data.content)
    return CreatedResponse(pid=reply.pid, tid=reply.tid)


# --- Edit ---


@router.get(
    "/posts/{pid}",
    response_model=EditSourceResponse,
    status_code=status.HTTP_200_OK,
)
async def get_edit_source(
    pid: int,
    identity: Identity = Depends(get_current_identity),
    posts: PostService = Depends(get_post_service),
) -> EditSourceResponse:
    """Stored content of a post the caller may edit."""
    content = await posts.edit_source(identity, pid)
    return EditSourceResponse(pid=pid, content=content)


@router.patch(
    "/posts/{pid}",
    response_model=EditedResponse,
    status_code=status.HTTP_200_OK,
)
async def edit_post(
    pid: int,
    data: ContentRequest,
    identity: Identity = Depends(get_current_identity),
    posts: PostService = Depends(get_post_service),
) -> EditedResponse:
    """
    Replace a post's content.

    Authors may edit for seven days after posting; moderators at any time.
    """
    edited = await posts.edit(identity, pid, data.content)
    return EditedResponse(pid=edited)


# --- Delete ---


@router.delete(
    "/posts/{pid}",
    response_model=DeletedResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_post(
    pid: int,
    identity: Identity = Depends(get_current_identity),
    posts: PostService = Depends(get_post_service),
) -> DeletedResponse:
    """Soft-delete a thread or reply. Authors and moderators only."""
    deleted = await posts.soft_delete(identity, pid)
    return DeletedResponse(pid=deleted.pid, tid=deleted.tid)
