# backend/booking_engine/api/dependencies/auth.py
"""
Caller identity.

Tokens are verified by the API gateway, which forwards the subject id and
role as headers. This service trusts those headers and never parses
credentials itself.
"""

from typing import Optional

from fastapi import Header

from ...core.constants import MAX_RECORD_ID, SUBJECT_ID_HEADER, SUBJECT_ROLE_HEADER
from ...core.enums import ActorRole
from ...core.exceptions import UnauthorizedException
from ...principal import ActorPrincipal


def principal_from_headers(subject_id: Optional[str], role: Optional[str]) -> ActorPrincipal:
    if not subject_id or not role:
        raise UnauthorizedException("Unauthorized", code="MISSING_IDENTITY")
    try:
        parsed_id = int(subject_id)
        parsed_role = ActorRole(role.strip().lower())
    except ValueError:
        raise UnauthorizedException("Unauthorized", code="INVALID_IDENTITY") from None
    if not 0 < parsed_id <= MAX_RECORD_ID:
        raise UnauthorizedException("Unauthorized", code="INVALID_IDENTITY")
    return ActorPrincipal(subject_id=parsed_id, role=parsed_role)


def get_current_principal(
    subject_id: Optional[str] = Header(None, alias=SUBJECT_ID_HEADER),
    subject_role: Optional[str] = Header(None, alias=SUBJECT_ROLE_HEADER),
) -> ActorPrincipal:
    return principal_from_headers(subject_id, subject_role)
