"""Household domain service and owner-scope resolution."""

import logging
from typing import Optional

from famledger.database.base import Database
from famledger.domain.entities import (
    Household,
    HouseholdMember,
    HouseholdRole,
    OwnerScope,
)
from famledger.domain.errors import ConflictError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def resolve_owner_scope(db: Database, user_id: str) -> OwnerScope:
    """Return the records a user may see: their own and their households'."""
    return OwnerScope(user_id=user_id, household_ids=tuple(db.list_user_household_ids(user_id)))


class HouseholdService:
    """Service for households (shared-ownership groups)."""

    def __init__(self, db: Database):
        """Initialize household service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, household_id: int) -> Household:
        household = self.db.get_household(household_id)
        if household is None:
            raise NotFoundError(f"Household {household_id} not found")
        return household

    def create_household(self, name: str, created_by: str) -> int:
        """Create a household with created_by as its owner.

        Returns:
            Household ID
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Household name is required")
        household_id = self.db.create_household(name=name, created_by=created_by)
        logger.info("Created household %s '%s' for %s", household_id, name, created_by)
        return household_id

    def get_household(self, household_id: int) -> Optional[Household]:
        """Get household by ID, or None if not found."""
        return self.db.get_household(household_id)

    def list_households(self, user_id: str) -> list[Household]:
        """List households the user belongs to."""
        households = []
        for household_id in self.db.list_user_household_ids(user_id):
            household = self.db.get_household(household_id)
            if household is not None:
                households.append(household)
        return households

    def add_member(
        self,
        household_id: int,
        user_id: str,
        role: HouseholdRole = HouseholdRole.MEMBER,
    ) -> int:
        """Add a user to a household.

        Raises:
            NotFoundError: If the household doesn't exist
            ConflictError: If the user is already a member
        """
        self._require(household_id)
        if any(m.user_id == user_id for m in self.db.list_household_members(household_id)):
            raise ConflictError(f"User '{user_id}' is already a member of household {household_id}")
        member_id = self.db.add_household_member(household_id, user_id, HouseholdRole(role).value)
        logger.info("Added %s to household %s", user_id, household_id)
        return member_id

    def remove_member(self, household_id: int, user_id: str) -> None:
        """Remove a user from a household.

        The last owner cannot be removed.
        """
        self._require(household_id)
        members = self.db.list_household_members(household_id)
        owners = [m for m in members if m.role == HouseholdRole.OWNER]
        if len(owners) == 1 and owners[0].user_id == user_id:
            raise InvalidInputError(f"Cannot remove the last owner of household {household_id}")
        self.db.remove_household_member(household_id, user_id)
        logger.info("Removed %s from household %s", user_id, household_id)

    def list_members(self, household_id: int) -> list[HouseholdMember]:
        """List members of a household."""
        self._require(household_id)
        return self.db.list_household_members(household_id)

    def resolve_owner_scope(self, user_id: str) -> OwnerScope:
        return resolve_owner_scope(self.db, user_id)
