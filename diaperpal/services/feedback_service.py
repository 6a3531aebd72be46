"""Votes, venue reports and directions click tracking."""
import hashlib
import logging
import uuid
from typing import Optional

from diaperpal.dao.redis_venue_dao import RedisVenueDAO
from diaperpal.models.requests import (
    DirectionClick,
    DirectionClickRequest,
    Report,
    ReportRequest,
    Vote,
    VoteRequest,
)
from diaperpal.models.restroom import utc_now

logger = logging.getLogger(__name__)

DIRECTION_CLICK_SOURCES = ("list", "detail")
ANONYMOUS_USER_ID = "anon-user"


def hash_ip(ip: str) -> str:
    """First 16 hex chars of the SHA-256 of an IP address."""
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:16]


class FeedbackService:
    """Service recording anonymous user feedback on venues."""

    def __init__(self, venue_dao: RedisVenueDAO):
        self.venue_dao = venue_dao

    def venue_exists(self, venue_id: str) -> bool:
        return self.venue_dao.get_venue(venue_id) is not None

    def add_vote(self, request: VoteRequest, user_id: Optional[str] = None) -> Vote:
        vote = Vote(
            id=str(uuid.uuid4()),
            venue_id=request.venue_id,
            user_id=user_id or ANONYMOUS_USER_ID,
            vote_type=request.vote_type,
            created_at=utc_now().isoformat(),
        )
        self.venue_dao.add_vote(vote)
        logger.debug(f"[FeedbackService] {vote.vote_type.value} vote on venue {vote.venue_id}")
        return vote

    def add_report(self, request: ReportRequest, user_id: Optional[str] = None) -> Report:
        report = Report(
            id=str(uuid.uuid4()),
            venue_id=request.venue_id,
            user_id=user_id or ANONYMOUS_USER_ID,
            issue_type=request.issue_type,
            created_at=utc_now().isoformat(),
        )
        self.venue_dao.add_report(report)
        logger.info(f"[FeedbackService] Report '{report.issue_type}' on venue {report.venue_id}")
        return report

    def record_direction_click(
        self,
        request: DirectionClickRequest,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """Record a "get directions" click.

        Args:
            request: Click body; unknown sources are recorded as "list"
            ip: Client IP, stored only as a hash
            user_agent: Client user agent

        Returns:
            Total direction clicks for the venue
        """
        source = request.source if request.source in DIRECTION_CLICK_SOURCES else "list"
        click = DirectionClick(
            id=str(uuid.uuid4()),
            venue_id=request.venue_id,
            clicked_at=utc_now().isoformat(),
            user_agent=user_agent,
            ip_hash=hash_ip(ip or "unknown"),
            source=source,
        )
        return self.venue_dao.add_direction_click(click)
