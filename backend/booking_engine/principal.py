from dataclasses import dataclass

from .core.enums import ActorRole


@dataclass(frozen=True)
class ActorPrincipal:
    """Verified caller identity as forwarded by the API gateway."""

    subject_id: int
    role: ActorRole

    @property
    def is_customer(self) -> bool:
        return self.role is ActorRole.CUSTOMER

    @property
    def is_provider(self) -> bool:
        return self.role is ActorRole.PROVIDER

    @property
    def identifier(self) -> str:
        return f"{self.role.value}:{self.subject_id}"
