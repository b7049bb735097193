"""DRF authentication backed by the external identity provider's JWTs."""

from typing import Any

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.settings import api_settings

from ClassroomApp.core.errors import ErrorCode
from ClassroomApp.users.identity import claims_from_token, sync_claims


class ExternalIdentityAuthentication(JWTAuthentication):
    """Authenticate a bearer token and map its principal to a local user.

    Signature and expiry checks are simplejwt's; this class only turns the verified
    claims into a reconciled ``User`` through identity sync.
    """

    def get_user(self, validated_token: Any):
        claims = claims_from_token(validated_token, api_settings.USER_ID_CLAIM)
        if claims is None:
            raise AuthenticationFailed("Token contained no recognizable identity", code="bad_identity")
        result = sync_claims(claims)
        if not result.ok:
            if result.code is ErrorCode.COLLABORATOR_FAILURE:
                raise result.error.as_exception()
            raise AuthenticationFailed(result.error.detail, code="identity_conflict")
        if not result.value.is_active:
            raise AuthenticationFailed("User is inactive", code="user_inactive")
        return result.value
