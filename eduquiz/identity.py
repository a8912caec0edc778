"""Identity - Ator atual e capacidades por papel.

O ator e passado explicitamente para cada componente (autoria, catalogo,
sessao) em vez de ser lido de um estado global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Protocol

from .exceptions import AuthorizationError
from .models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Usuario autenticado (ID estavel + papel)."""

    id: str
    role: UserRole

    @property
    def view(self) -> "RoleView":
        return role_view_for(self.role)


# =============================================================================
# ROLE VIEWS
# =============================================================================


class RoleView:
    """Capacidades de um papel. Subclasses sobrescrevem o que liberam."""

    role: UserRole

    def can_author(self) -> bool:
        return False

    def can_attempt(self) -> bool:
        return True

    def can_manage_any(self) -> bool:
        """Pode ver/editar quizzes de outros autores."""
        return False

    def can_manage(self, actor_id: str, author_id: str) -> bool:
        return self.can_manage_any() or (self.can_author() and actor_id == author_id)


class StudentView(RoleView):
    role = UserRole.STUDENT


class ParentView(RoleView):
    role = UserRole.PARENT

    def can_attempt(self) -> bool:
        return False


class TeacherView(RoleView):
    role = UserRole.TEACHER

    def can_author(self) -> bool:
        return True


class AdminView(RoleView):
    role = UserRole.ADMIN

    def can_author(self) -> bool:
        return True

    def can_manage_any(self) -> bool:
        return True


_VIEWS: dict[UserRole, RoleView] = {
    UserRole.STUDENT: StudentView(),
    UserRole.PARENT: ParentView(),
    UserRole.TEACHER: TeacherView(),
    UserRole.ADMIN: AdminView(),
}


def role_view_for(role: UserRole) -> RoleView:
    return _VIEWS[role]


def require_author(actor: Actor | None) -> Actor:
    """Garante ator autenticado com permissao de autoria."""
    if actor is None:
        raise AuthorizationError("Autenticação necessária")
    if not actor.view.can_author():
        raise AuthorizationError(
            "Apenas professores podem criar quizzes",
            details={"user_id": actor.id, "role": actor.role.value},
        )
    return actor


# =============================================================================
# IDENTITY PROVIDERS
# =============================================================================


class IdentityProvider(Protocol):
    def current_user(self) -> Actor | None:
        ...


class StaticIdentityProvider:
    """Ator fixo (testes e scripts)."""

    def __init__(self, actor: Actor | None):
        self._actor = actor

    def current_user(self) -> Actor | None:
        return self._actor


class HeaderIdentityProvider:
    """Le o ator dos headers repassados pelo gateway de autenticacao.

    Headers:
        - X-User-Id: ID estavel do usuario
        - X-User-Role: student | parent | teacher | admin (case-insensitive)
    """

    USER_HEADER = "x-user-id"
    ROLE_HEADER = "x-user-role"

    def __init__(self, headers: Mapping[str, str]):
        self._headers = {k.lower(): v for k, v in headers.items()}

    def current_user(self) -> Actor | None:
        user_id = (self._headers.get(self.USER_HEADER) or "").strip()
        if not user_id:
            return None

        role_raw = (self._headers.get(self.ROLE_HEADER) or UserRole.STUDENT.value).strip().lower()
        try:
            role = UserRole(role_raw)
        except ValueError:
            logger.warning(f"Papel desconhecido '{role_raw}' para {user_id}, usando student")
            role = UserRole.STUDENT

        return Actor(id=user_id, role=role)
