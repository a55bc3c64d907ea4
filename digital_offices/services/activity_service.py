"""Activity feed for the admin dashboard.

Services call :func:`record_activity` whenever something an admin would
want to see happens: registrations, verification decisions and
moderation actions. Entries are added to the current session and are
committed together with the change they describe.
"""
from __future__ import annotations

from typing import List, Optional

from ..db import db
from ..models import Activity


def record_activity(activity_type: str, description: str, user_id: Optional[str] = None) -> Activity:
    activity = Activity(type=activity_type, description=description, user_id=user_id)
    db.session.add(activity)
    return activity


def recent_activity(limit: int = 20) -> List[Activity]:
    """Return the newest ``limit`` activity entries, newest first."""
    return (
        Activity.query.order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )
