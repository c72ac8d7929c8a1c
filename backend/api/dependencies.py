"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The two backing services (identity directory and document store) are
chosen by ``settings.storage_backend``: Supabase in production, in-memory
for local development and tests.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from shared.audit import AuditLogRepository
    from shared.document_store import IDocumentStore
    from modules.auth.interfaces import IAuthService
    from modules.claims.interfaces import IClaimsService
    from modules.claims.writer import ClaimsWriter
    from modules.identity.interfaces import IIdentityDirectory
    from modules.invitations.interfaces import IInvitationLedger
    from modules.profiles.repository import (
        PatientProfileRepository,
        TherapistProfileRepository,
        UserProfileRepository,
    )
    from modules.provisioning.interfaces import IProvisioningService
    from modules.provisioning.reconciliation import OrphanReconciler
    from modules.relationships.interfaces import IRelationshipManager


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(
        self,
        store: "IDocumentStore | None" = None,
        directory: "IIdentityDirectory | None" = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._directory = directory
        self._injected = (store, directory)
        self._clear_services()

    def _clear_services(self) -> None:
        self._audit: "AuditLogRepository | None" = None
        self._users: "UserProfileRepository | None" = None
        self._therapists: "TherapistProfileRepository | None" = None
        self._patients: "PatientProfileRepository | None" = None
        self._claims_writer: "ClaimsWriter | None" = None
        self._claims_service: "IClaimsService | None" = None
        self._invitation_ledger: "IInvitationLedger | None" = None
        self._relationship_manager: "IRelationshipManager | None" = None
        self._reconciler: "OrphanReconciler | None" = None
        self._provisioning_service: "IProvisioningService | None" = None
        self._auth_service: "IAuthService | None" = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def store(self) -> "IDocumentStore":
        """Get the document store instance."""
        if self._store is None:
            if self.settings.storage_backend == "memory":
                from shared.document_store import InMemoryDocumentStore
                self._store = InMemoryDocumentStore()
            else:
                from shared.database import get_supabase_client
                from shared.document_store import SupabaseDocumentStore
                self._store = SupabaseDocumentStore(get_supabase_client(self.settings))
        return self._store

    @property
    def directory(self) -> "IIdentityDirectory":
        """Get the identity directory instance."""
        if self._directory is None:
            if self.settings.storage_backend == "memory":
                from modules.identity.service import InMemoryIdentityDirectory
                self._directory = InMemoryIdentityDirectory()
            else:
                from shared.database import get_supabase_client
                from modules.identity.service import SupabaseIdentityDirectory
                self._directory = SupabaseIdentityDirectory(get_supabase_client(self.settings))
        return self._directory

    @property
    def audit(self) -> "AuditLogRepository":
        if self._audit is None:
            from shared.audit import AuditLogRepository
            self._audit = AuditLogRepository(self.store)
        return self._audit

    @property
    def users(self) -> "UserProfileRepository":
        if self._users is None:
            from modules.profiles.repository import UserProfileRepository
            self._users = UserProfileRepository(self.store)
        return self._users

    @property
    def therapists(self) -> "TherapistProfileRepository":
        if self._therapists is None:
            from modules.profiles.repository import TherapistProfileRepository
            self._therapists = TherapistProfileRepository(self.store)
        return self._therapists

    @property
    def patients(self) -> "PatientProfileRepository":
        if self._patients is None:
            from modules.profiles.repository import PatientProfileRepository
            self._patients = PatientProfileRepository(self.store)
        return self._patients

    @property
    def claims_writer(self) -> "ClaimsWriter":
        """Get the single writer of principal claims."""
        if self._claims_writer is None:
            from modules.claims.writer import ClaimsWriter
            self._claims_writer = ClaimsWriter(self.directory)
        return self._claims_writer

    @property
    def claims(self) -> "IClaimsService":
        """Get the claims service instance."""
        if self._claims_service is None:
            from modules.claims.service import ClaimsService
            self._claims_service = ClaimsService(
                directory=self.directory,
                users=self.users,
                therapists=self.therapists,
                writer=self.claims_writer,
            )
        return self._claims_service

    @property
    def invitations(self) -> "IInvitationLedger":
        """Get the invitation ledger instance."""
        if self._invitation_ledger is None:
            from modules.invitations.repository import InvitationRepository
            from modules.invitations.service import InvitationLedger
            self._invitation_ledger = InvitationLedger(
                directory=self.directory,
                invitations=InvitationRepository(self.store),
                users=self.users,
                audit=self.audit,
                settings=self.settings,
            )
        return self._invitation_ledger

    @property
    def relationships(self) -> "IRelationshipManager":
        """Get the relationship manager instance."""
        if self._relationship_manager is None:
            from modules.relationships.repository import (
                AppointmentRepository,
                RelationshipRepository,
            )
            from modules.relationships.service import RelationshipManager
            self._relationship_manager = RelationshipManager(
                relationships=RelationshipRepository(self.store),
                appointments=AppointmentRepository(self.store),
                users=self.users,
                therapists=self.therapists,
                writer=self.claims_writer,
                audit=self.audit,
            )
        return self._relationship_manager

    @property
    def reconciler(self) -> "OrphanReconciler":
        if self._reconciler is None:
            from modules.provisioning.reconciliation import OrphanReconciler
            self._reconciler = OrphanReconciler(self.directory, self.users, self.settings)
        return self._reconciler

    @property
    def provisioning(self) -> "IProvisioningService":
        """Get the provisioning service instance."""
        if self._provisioning_service is None:
            from modules.provisioning.service import ProvisioningService
            self._provisioning_service = ProvisioningService(
                directory=self.directory,
                users=self.users,
                therapists=self.therapists,
                patients=self.patients,
                writer=self.claims_writer,
                ledger=self.invitations,
                relationships=self.relationships,
                audit=self.audit,
                reconciler=self.reconciler,
                settings=self.settings,
            )
        return self._provisioning_service

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(claims=self.claims, settings=self.settings)
        return self._auth_service

    def reset(self) -> None:
        """
        Reset all cached services.

        Injected backends are kept; backends the container created are
        dropped along with every service built on them.
        """
        self._store, self._directory = self._injected
        self._clear_services()


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests and the operator CLI)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_claims_service() -> "IClaimsService":
    """FastAPI dependency for claims service."""
    return get_container().claims


def get_invitation_ledger() -> "IInvitationLedger":
    """FastAPI dependency for the invitation ledger."""
    return get_container().invitations


def get_relationship_manager() -> "IRelationshipManager":
    """FastAPI dependency for the relationship manager."""
    return get_container().relationships


def get_provisioning_service() -> "IProvisioningService":
    """FastAPI dependency for provisioning service."""
    return get_container().provisioning
