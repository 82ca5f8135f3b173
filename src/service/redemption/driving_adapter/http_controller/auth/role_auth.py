from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.redemption.domain.entity.user_entity import UserEntity, UserRole
from src.service.redemption.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class RoleAuthStrategy:
    @staticmethod
    def can_check_in(user: UserEntity) -> bool:
        return user.role in (UserRole.SUPERADMIN, UserRole.ORGANIZER, UserRole.VOLUNTEER)

    @staticmethod
    def can_manage_tickets(user: UserEntity) -> bool:
        return user.role in (UserRole.SUPERADMIN, UserRole.ORGANIZER)

    @staticmethod
    def is_superadmin(user: UserEntity) -> bool:
        return user.role == UserRole.SUPERADMIN


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    return token.strip() if scheme.lower() == 'bearer' and token.strip() else None


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    authorization: Optional[str] = Header(None),
    cookie_token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
) -> UserEntity:
    """Devices send a Bearer header; the browser check-in screen sends the auth cookie."""
    return jwt_auth.get_current_user_info_from_jwt(_bearer_token(authorization) or cookie_token)


async def require_check_in_operator(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_check_in_operator',
        attributes={
            'user.id': current_user.id or 0,
            'user.role': current_user.role.value,
        },
    ):
        if not RoleAuthStrategy.can_check_in(current_user):
            raise ForbiddenError('Only check-in staff can redeem tickets')
        return current_user


async def require_ticket_manager(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    if not RoleAuthStrategy.can_manage_tickets(current_user):
        raise ForbiddenError('Only organizers can perform this action')
    return current_user


async def require_superadmin(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    if not RoleAuthStrategy.is_superadmin(current_user):
        raise ForbiddenError('Only superadmins can perform this action')
    return current_user
