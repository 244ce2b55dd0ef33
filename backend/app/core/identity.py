"""
Header-borne member identity.

There are no credentials: the member id handed out on create/join is kept by
the client and sent back on every request. Whoever presents an id is treated
as that member; membership checks happen in the services.
"""

from typing import Mapping, Optional

MEMBER_ID_HEADER = "X-Member-Id"
BEARER_PREFIX = "bearer "


def extract_member_id(headers: Mapping[str, str]) -> Optional[str]:
    """Return the claimed member id, or None when no usable header is present.

    ``Authorization: Bearer <id>`` wins over ``X-Member-Id``.
    """
    authorization = (headers.get("authorization") or "").strip()
    if authorization.lower().startswith(BEARER_PREFIX):
        member_id = authorization[len(BEARER_PREFIX):].strip()
        if member_id:
            return member_id

    member_id = (headers.get(MEMBER_ID_HEADER) or "").strip()
    return member_id or None


def member_headers(member_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {member_id}"}
