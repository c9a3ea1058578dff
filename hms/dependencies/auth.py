# hms/dependencies/auth.py
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from hms.core.config import Settings
from hms.core.errors import Unauthenticated
from hms.core.security import decode_token
from hms.core.services import AppServices
from hms.core.tenant_context import Principal
from hms.dependencies.services import get_app_settings, get_services
from hms.services.audit_service import RequestAuditor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def principal_from_token(settings: Settings, token: str) -> Principal:
    """
    Decode an access token into a Principal.
    Every failure reads the same to the client.
    """
    try:
        return Principal.from_claims(decode_token(settings, token))
    except (ValueError, KeyError):
        raise Unauthenticated("Invalid or expired token") from None


def get_current_principal(
    token: str | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    """
    Dependency resolving the caller from `Authorization: Bearer <token>`.
    """
    if not token:
        raise Unauthenticated("No token provided")
    return principal_from_token(settings, token)


def get_optional_principal(
    token: str | None = Depends(oauth2_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Principal | None:
    """
    Like get_current_principal, but anonymous callers get None.
    A token that is present but invalid is still rejected.
    """
    if not token:
        return None
    return principal_from_token(settings, token)


def get_auditor(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    services: AppServices = Depends(get_services),
) -> RequestAuditor:
    return services.audit.for_request(principal, request)
