from enum import Enum
from typing import Optional

import attrs


class UserRole(str, Enum):
    SUPERADMIN = 'superadmin'
    ORGANIZER = 'organizer'
    VOLUNTEER = 'volunteer'
    PARTICIPANT = 'participant'


@attrs.define
class UserEntity:
    """Operator identity rebuilt from the JWT; accounts live outside this service."""

    email: str = ''
    name: str = ''
    id: Optional[int] = None
    role: UserRole = UserRole.PARTICIPANT
    is_active: bool = True
