"""Identity store: the only code that touches the ``users`` table.

Learn: The auth core needs five operations from persistence, and each
one is a single statement, so each is atomic on its own:

- find by email / by id / first by role
- count by role
- upsert by email  (INSERT ... ON CONFLICT (email) DO UPDATE ... RETURNING)
- update password by id  (UPDATE ... WHERE id = ... RETURNING)

No application-level locking: the database's single-row atomicity is
the concurrency boundary. Writes commit immediately.
"""

import uuid
from typing import Optional, Union

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from folio.auth.errors import NotFoundError
from folio.db.models import ADMIN_ROLE, User, new_uuid, utcnow

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_uuid(user_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


class IdentityStore:
    """Persistence operations for identity records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def find_by_id(self, user_id: Union[str, uuid.UUID]) -> Optional[User]:
        uid = _as_uuid(user_id)
        if uid is None:
            return None
        return await self.db.get(User, uid)

    async def find_first_by_role(self, role: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.role == role).order_by(User.created_at).limit(1)
        )
        return result.scalars().first()

    async def count_by_role(self, role: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(User).where(User.role == role)
        )
        return result.scalar_one()

    # ─── Writes ─────────────────────────────────────────

    async def upsert_by_email(
        self, email: str, password_hash: str, role: str = ADMIN_ROLE
    ) -> User:
        """Create the identity, or overwrite its hash and role if the email exists."""
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Upsert is not supported on {dialect!r}")

        stmt = insert(User).values(
            id=new_uuid(),
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.email],
            set_={
                "password_hash": stmt.excluded.password_hash,
                "role": stmt.excluded.role,
                "updated_at": utcnow(),
            },
        ).returning(User)

        result = await self.db.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        user = result.one()
        await self.db.commit()
        return user

    async def update_password(
        self, user_id: Union[str, uuid.UUID], password_hash: str
    ) -> User:
        """Replace the password hash. Raises NotFoundError for an unknown id."""
        uid = _as_uuid(user_id)
        if uid is None:
            raise NotFoundError()

        result = await self.db.scalars(
            update(User)
            .where(User.id == uid)
            .values(password_hash=password_hash, updated_at=utcnow())
            .returning(User),
            execution_options={"populate_existing": True},
        )
        user = result.first()
        if user is None:
            raise NotFoundError()
        await self.db.commit()
        return user
