"""Progressive reply disclosure module for Solar Capsule.

Replies to a capsule are visible to any visitor immediately, but the
capsule's own author only sees a reply once it is a full band (24 hours) old.
The capsule's life is sliced into bands relative to its creation so the
author can see how many replies are waiting and when the next batch opens.

Every function here is a pure function of its arguments; ``now`` is always
passed in explicitly.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence, Tuple

from solarcapsule.logger import get_logger
from solarcapsule.models import Capsule, Reply
from solarcapsule.solar import as_utc, elapsed_since

logger = get_logger(__name__)

BAND_HOURS = 24
LIFETIME_DAYS = 7
PREVIEW_LENGTH = 50

_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class DisclosureBand:
    """One band of a capsule's life and the replies that fell into it."""

    day_index: int
    start_hour: int
    end_hour: int
    is_unlocked: bool
    count: int

    @property
    def day(self) -> int:
        """1-based day number for display."""
        return self.day_index + 1

    def to_dict(self) -> dict:
        """Convert band to dictionary for JSON export."""
        return {
            "day": self.day,
            "start_hour": self.start_hour,
            "end_hour": self.end_hour,
            "is_unlocked": self.is_unlocked,
            "count": self.count,
        }


@dataclass(frozen=True)
class UnlockState:
    """Reply visibility of one capsule for one viewer at one instant."""

    bands: Tuple[DisclosureBand, ...]
    next_unlock_in: timedelta
    visible_replies: Tuple[Reply, ...]
    total_replies: int
    hours_elapsed: float
    is_author: bool

    @property
    def visible_count(self) -> int:
        """Number of replies the viewer can read."""
        return len(self.visible_replies)

    def to_dict(self) -> dict:
        """Convert state to dictionary for JSON export."""
        return {
            "replies": [reply.to_dict() for reply in self.visible_replies],
            "total_replies": self.total_replies,
            "visible_count": self.visible_count,
            "bands": [band.to_dict() for band in self.bands],
            "next_unlock_in_seconds": self.next_unlock_in.total_seconds(),
            "hours_elapsed": self.hours_elapsed,
            "is_author": self.is_author,
        }


@dataclass(frozen=True)
class ReplyPreview:
    """Truncated view of a capsule's latest reply."""

    author_id: int
    created_at: datetime
    preview: str


@dataclass(frozen=True)
class InboxItem:
    """Reply counts for one of the author's capsules."""

    capsule: Capsule
    total_replies: int
    unlocked_count: int
    locked_count: int
    latest_reply: Optional[ReplyPreview]
    hours_elapsed: float

    def to_dict(self) -> dict:
        """Convert item to dictionary for JSON export."""
        latest = None
        if self.latest_reply is not None:
            latest = {
                "author_id": self.latest_reply.author_id,
                "created_at": as_utc(self.latest_reply.created_at).isoformat(),
                "preview": self.latest_reply.preview,
            }
        return {
            "id": self.capsule.id,
            "content_text": self.capsule.content_text,
            "image_ref": self.capsule.image_ref,
            "created_at": as_utc(self.capsule.created_at).isoformat(),
            "total_replies": self.total_replies,
            "unlocked_replies": self.unlocked_count,
            "locked_replies": self.locked_count,
            "latest_reply": latest,
            "capsule_age_hours": self.hours_elapsed,
        }


@dataclass(frozen=True)
class InboxSummary:
    """Aggregate of an author's inbox."""

    items: Tuple[InboxItem, ...]
    total_unread: int

    @property
    def total_capsules(self) -> int:
        """Number of capsules that have at least one reply."""
        return len(self.items)

    def to_dict(self) -> dict:
        """Convert summary to dictionary for JSON export."""
        return {
            "items": [item.to_dict() for item in self.items],
            "total_unread": self.total_unread,
            "total_capsules": self.total_capsules,
        }


def hours_elapsed(created_at: datetime, now: datetime) -> float:
    """Age in hours of something created at ``created_at``, never negative."""
    return elapsed_since(created_at, now) / _HOUR


def is_unlocked(reply: Reply, now: datetime, band_hours: int = BAND_HOURS) -> bool:
    """Whether the capsule's author may read ``reply`` at ``now``."""
    return as_utc(now) - as_utc(reply.created_at) >= timedelta(hours=band_hours)


def visible_replies(
    replies: Iterable[Reply],
    now: datetime,
    is_author: bool,
    band_hours: int = BAND_HOURS,
) -> Tuple[Reply, ...]:
    """Replies the viewer may read; authors wait a full band per reply."""
    if not is_author:
        return tuple(replies)
    return tuple(r for r in replies if is_unlocked(r, now, band_hours))


def build_bands(
    created_at: datetime,
    replies: Sequence[Reply],
    now: datetime,
    band_hours: int = BAND_HOURS,
    lifetime_days: int = LIFETIME_DAYS,
) -> Tuple[DisclosureBand, ...]:
    """Group replies into bands relative to the capsule's creation.

    Replies are bucketed in one pass by their integer band offset. A band is
    listed when it holds replies or has already started; bands further in the
    future are omitted. Replies stamped after ``now`` or before the capsule
    itself are not counted.

    Args:
        created_at: Creation instant of the capsule.
        replies: Replies to the capsule.
        now: Instant of the query.
        band_hours: Width of a band.
        lifetime_days: Number of bands in the capsule's life.

    Returns:
        Bands in chronological order.
    """
    created_at, now = as_utc(created_at), as_utc(now)
    band = timedelta(hours=band_hours)
    elapsed = elapsed_since(created_at, now)

    counts = [0] * lifetime_days
    for reply in replies:
        reply_at = as_utc(reply.created_at)
        if reply_at > now or reply_at < created_at:
            continue
        day = (reply_at - created_at) // band
        if day < lifetime_days:
            counts[day] += 1

    whole, remainder = divmod(elapsed, band)
    started = whole + (1 if remainder else 0)

    bands = []
    for day, count in enumerate(counts):
        if count == 0 and day >= started:
            continue
        bands.append(
            DisclosureBand(
                day_index=day,
                start_hour=day * band_hours,
                end_hour=(day + 1) * band_hours,
                is_unlocked=elapsed >= (day + 1) * band,
                count=count,
            )
        )
    return tuple(bands)


def next_unlock_in(
    created_at: datetime, now: datetime, band_hours: int = BAND_HOURS
) -> timedelta:
    """Time until the band currently in progress closes."""
    band = timedelta(hours=band_hours)
    elapsed = elapsed_since(created_at, now)
    current = elapsed // band
    return max(timedelta(0), (current + 1) * band - elapsed)


def unlock_state(
    created_at: datetime,
    replies: Sequence[Reply],
    now: datetime,
    is_author: bool = False,
    band_hours: int = BAND_HOURS,
    lifetime_days: int = LIFETIME_DAYS,
) -> UnlockState:
    """Compute reply visibility for a capsule.

    Args:
        created_at: Creation instant of the capsule.
        replies: Replies to the capsule, oldest first.
        now: Instant of the query.
        is_author: Whether the viewer wrote the capsule.
        band_hours: Width of a disclosure band.
        lifetime_days: Number of bands in the capsule's life.

    Returns:
        A fresh UnlockState.
    """
    replies = tuple(replies)
    if replies:
        bands = build_bands(created_at, replies, now, band_hours, lifetime_days)
        countdown = next_unlock_in(created_at, now, band_hours)
    else:
        bands = ()
        countdown = timedelta(0)

    state = UnlockState(
        bands=bands,
        next_unlock_in=countdown,
        visible_replies=visible_replies(replies, now, is_author, band_hours),
        total_replies=len(replies),
        hours_elapsed=hours_elapsed(created_at, now),
        is_author=is_author,
    )
    logger.debug(
        f"Unlock state: {state.visible_count}/{state.total_replies} replies visible, "
        f"{len(bands)} band(s), next unlock in {countdown}"
    )
    return state


def make_preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Truncate ``text`` to ``length`` characters, marking the cut."""
    if len(text) > length:
        return text[:length] + "..."
    return text


def summarize_inbox(
    entries: Iterable[Tuple[Capsule, Sequence[Reply]]],
    now: datetime,
    band_hours: int = BAND_HOURS,
    preview_length: int = PREVIEW_LENGTH,
) -> InboxSummary:
    """Summarize reply counts across an author's capsules.

    Capsules without replies are left out. The latest reply is previewed only
    when that reply itself is unlocked; an older unlocked reply never stands
    in for it.

    Args:
        entries: (capsule, replies) pairs, in the order items should appear.
        now: Instant of the query.
        band_hours: Age a reply needs before its author may read it.
        preview_length: Characters kept in the latest-reply preview.

    Returns:
        InboxSummary over the given capsules.
    """
    items = []
    for capsule, replies in entries:
        if not replies:
            continue

        unlocked = sum(1 for r in replies if is_unlocked(r, now, band_hours))
        latest = max(replies, key=lambda r: as_utc(r.created_at))
        preview = None
        if is_unlocked(latest, now, band_hours):
            preview = ReplyPreview(
                author_id=latest.author_id,
                created_at=latest.created_at,
                preview=make_preview(latest.content_text, preview_length),
            )

        items.append(
            InboxItem(
                capsule=capsule,
                total_replies=len(replies),
                unlocked_count=unlocked,
                locked_count=len(replies) - unlocked,
                latest_reply=preview,
                hours_elapsed=hours_elapsed(capsule.created_at, now),
            )
        )

    return InboxSummary(
        items=tuple(items),
        total_unread=sum(item.unlocked_count for item in items),
    )
