from fastapi import Request

from app.core.exceptions import MissingMemberId
from app.core.identity import extract_member_id


def get_current_member_id(request: Request) -> str:
    """Member id claimed by the caller; 401 when the request carries none."""
    member_id = extract_member_id(request.headers)
    if member_id is None:
        raise MissingMemberId("Send 'Authorization: Bearer <memberId>' or 'X-Member-Id'")
    return member_id
