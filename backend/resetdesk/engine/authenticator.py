"""Authenticator - Credential checks and token issuance"""
from typing import Optional

from ..config.settings import settings
from ..domain.models import ActorContext, LoginResult, Personnel
from ..domain.enums import AuditCategory, LoginIdentifier
from ..domain.errors import (
    InvalidCredentialError, PermissionDeniedError, PersonnelNotFoundError, ValidationError
)
from ..repositories.personnel_repo import PersonnelRepository
from ..utils.jwt import TokenService, get_token_service
from ..utils.passwords import hash_password, verify_password
from ..utils.logger import get_logger
from .audit_writer import AuditWriter

logger = get_logger(__name__)


def actor_from_personnel(personnel: Personnel) -> ActorContext:
    """Identity context for a stored personnel record"""
    return ActorContext(
        personnel_id=personnel.personnel_id,
        nrp=personnel.nrp,
        name=personnel.name,
        role=personnel.role,
        email=personnel.email,
        unit_id=personnel.unit_id,
        unit_name=personnel.unit_name,
    )


class Authenticator:
    """
    Verify credentials and issue bearer tokens

    Tokens are stateless: verification needs only the token and the
    shared secret.
    """

    def __init__(
        self,
        personnel_repo: Optional[PersonnelRepository] = None,
        token_service: Optional[TokenService] = None,
        audit_writer: Optional[AuditWriter] = None,
        login_identifier: Optional[str] = None
    ):
        self.personnel_repo = personnel_repo or PersonnelRepository()
        self.tokens = token_service or get_token_service()
        self.audit = audit_writer or AuditWriter()
        self._identifier_kind = LoginIdentifier(login_identifier or settings.login_identifier)

    def find_by_identifier(self, identifier: str) -> Optional[Personnel]:
        """Look up personnel by NRP or email according to the configured identifier kind"""
        identifier = identifier.strip()
        if self._identifier_kind == LoginIdentifier.EMAIL:
            return self.personnel_repo.get_by_email(identifier)
        if self._identifier_kind == LoginIdentifier.NRP:
            return self.personnel_repo.get_by_nrp(identifier)
        if "@" in identifier:
            return self.personnel_repo.get_by_email(identifier)
        return self.personnel_repo.get_by_nrp(identifier)

    def login(self, identifier: str, password: str, origin: Optional[str] = None) -> LoginResult:
        """
        Authenticate and issue a token

        Raises:
            PersonnelNotFoundError: No personnel matches the identifier
            InvalidCredentialError: Password does not match
            PermissionDeniedError: Account is inactive
        """
        personnel = self.find_by_identifier(identifier)
        if not personnel:
            logger.warning(f"Login failed, unknown identifier: {identifier}")
            raise PersonnelNotFoundError("Personnel not found")

        if not verify_password(password, personnel.password_hash):
            logger.warning(
                f"Login failed, wrong password for {personnel.nrp}",
                extra={"actor_nrp": personnel.nrp}
            )
            raise InvalidCredentialError("Invalid password")

        if not personnel.is_active:
            logger.warning(
                f"Login refused, inactive account {personnel.nrp}",
                extra={"actor_nrp": personnel.nrp}
            )
            raise PermissionDeniedError("Account is inactive")

        token = self.tokens.issue(personnel)
        actor = actor_from_personnel(personnel)
        self.audit.record_login(actor, origin)

        logger.info(
            f"Login successful: {personnel.nrp}",
            extra={"actor_nrp": personnel.nrp, "personnel_id": personnel.personnel_id}
        )
        return LoginResult(
            token=token,
            expires_in=self.tokens.expires_in,
            identity=personnel.to_view()
        )

    def verify(self, token: Optional[str]) -> ActorContext:
        """Decode a bearer token into an identity"""
        return self.tokens.get_actor_context(token)

    def logout(self, actor: ActorContext, origin: Optional[str] = None) -> None:
        """Record a logout; the token itself stays valid until it expires"""
        self.audit.record_logout(actor, origin)

    def change_password(
        self,
        actor: ActorContext,
        current_password: str,
        new_password: str,
        origin: Optional[str] = None
    ) -> None:
        """Change the caller's own login password"""
        if not new_password or not new_password.strip():
            raise ValidationError("New password is required", details={"field": "new_password"})

        personnel = self.personnel_repo.get_personnel_or_raise(actor.personnel_id)
        if not verify_password(current_password, personnel.password_hash):
            raise InvalidCredentialError("Current password is incorrect")

        self.personnel_repo.set_password_hash(personnel.personnel_id, hash_password(new_password))
        self.audit.record(actor, AuditCategory.UPDATE_DATA, f"{actor.name} changed their password", origin)
        logger.info(f"Password changed for {actor.nrp}", extra={"actor_nrp": actor.nrp})
