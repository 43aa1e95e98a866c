"""Read access to application users (role lookup for the signed-in user)."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import AppUser


class UserService:
    """Service for the users table. Rows are provisioned outside this app."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def get_by_id(self, user_id: UUID) -> AppUser | None:
        row = self.postgres.execute_single(
            "SELECT id, email, role FROM users WHERE id = %s",
            (user_id,),
        )
        if row is None:
            return None
        return AppUser.model_validate(row)
