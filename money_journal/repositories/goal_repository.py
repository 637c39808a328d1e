"""
Goal Repository

Savings goals live inside their owner's User record, in creation order.
Like transactions, every write goes through UserRepository.apply_to_user.

DESIGN DECISION: current_amount is never clamped to target_amount.
Saving more than the target is valid data; only the display caps the
progress bar at 100%.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from money_journal.audit.logger import AuditLogger
from money_journal.models.audit import AuditEventType
from money_journal.models.finance import (
    Goal,
    GoalInput,
    GoalUpdate,
    User,
    new_id,
)
from money_journal.repositories.errors import NotFoundError
from money_journal.repositories.user_repository import UserRepository
from money_journal.validation.validator import ValidationError, validate


def _not_found(goal_id: str) -> NotFoundError:
    return NotFoundError(f'Goal with ID "{goal_id}" not found')


def _index_in(user: User, goal_id: str) -> int:
    for index, goal in enumerate(user.goals):
        if goal.id == goal_id:
            return index
    raise _not_found(goal_id)


def _as_amount(value: Union[Decimal, int, float, str]) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}", field="amount")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}", field="amount")
    return amount


class GoalRepository:
    """Goal queries, writes and totals."""

    def __init__(
        self,
        user_repository: UserRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = user_repository
        self._audit = audit_logger or AuditLogger()

    async def _user_goals(self, user_id: str) -> list[Goal]:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f'User with ID "{user_id}" not found')
        return user.goals

    async def _find_owner_id(self, goal_id: str) -> str:
        for user in await self._users.find_all():
            if any(g.id == goal_id for g in user.goals):
                return user.id
        raise _not_found(goal_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def find_by_id(self, goal_id: str) -> Optional[Goal]:
        for user in await self._users.find_all():
            for goal in user.goals:
                if goal.id == goal_id:
                    return goal
        return None

    async def find_all(self) -> list[Goal]:
        return [g for user in await self._users.find_all() for g in user.goals]

    async def find_by_user_id(self, user_id: str) -> list[Goal]:
        return await self._user_goals(user_id)

    async def find_completed(self, user_id: str) -> list[Goal]:
        return [g for g in await self._user_goals(user_id) if g.is_completed]

    async def find_active(self, user_id: str) -> list[Goal]:
        return [g for g in await self._user_goals(user_id) if not g.is_completed]

    # =========================================================================
    # Commands
    # =========================================================================

    async def create(self, user_id: str, data: Union[GoalInput, dict]) -> Goal:
        """
        Add a goal at the end of the user's list.

        Raises:
            ValidationError: Input fails the schema
            NotFoundError: Unknown user id
        """
        goal_input = validate(GoalInput, data, "Invalid goal input")
        goal = validate(
            Goal,
            {**goal_input.model_dump(), "id": new_id("goal")},
            "Failed to create valid goal",
        )

        def append(user: User) -> None:
            user.goals.append(goal)

        await self._users.apply_to_user(user_id, append)
        await self._audit.log_goal_event(
            AuditEventType.GOAL_CREATED,
            user_id,
            goal.id,
            details={"name": goal.name, "target_amount": str(goal.target_amount)},
        )
        return goal

    async def update(self, goal_id: str, updates: Union[GoalUpdate, dict]) -> Goal:
        """
        Raises:
            ValidationError: Update or merged goal is invalid
            NotFoundError: No user holds this goal
        """
        changes = validate(GoalUpdate, updates, "Invalid goal update")
        fields = changes.model_dump(exclude_unset=True)
        owner_id = await self._find_owner_id(goal_id)

        def merge(user: User) -> Goal:
            index = _index_in(user, goal_id)
            merged = validate(
                Goal,
                {**user.goals[index].model_dump(), **fields, "id": goal_id},
                "Invalid goal update",
            )
            user.goals[index] = merged
            return merged

        updated = await self._users.apply_to_user(owner_id, merge)
        await self._audit.log_goal_event(
            AuditEventType.GOAL_UPDATED,
            owner_id,
            goal_id,
            details={"fields": sorted(fields)},
        )
        return updated

    async def delete(self, goal_id: str) -> None:
        """
        Raises:
            NotFoundError: No user holds this goal
        """
        owner_id = await self._find_owner_id(goal_id)

        def remove(user: User) -> None:
            del user.goals[_index_in(user, goal_id)]

        await self._users.apply_to_user(owner_id, remove)
        await self._audit.log_goal_event(AuditEventType.GOAL_DELETED, owner_id, goal_id)

    async def delete_by_user_id(self, user_id: str) -> int:
        """Remove every goal of a user. Returns how many were removed."""

        def remove_all(user: User) -> int:
            count = len(user.goals)
            user.goals = []
            return count

        count = await self._users.apply_to_user(user_id, remove_all)
        await self._audit.log_goal_event(
            AuditEventType.GOAL_DELETED,
            user_id,
            "*",
            details={"count": count},
        )
        return count

    async def add_amount(self, goal_id: str, amount: Union[Decimal, int, float, str]) -> Goal:
        """
        Put money towards a goal. Overshooting the target is allowed.

        Raises:
            ValidationError: Negative amount
            NotFoundError: No user holds this goal
        """
        delta = _as_amount(amount)
        if delta < 0:
            raise ValidationError("Amount must be positive", field="amount")

        owner_id = await self._find_owner_id(goal_id)

        def fund(user: User) -> Goal:
            index = _index_in(user, goal_id)
            current = user.goals[index]
            funded = validate(
                Goal,
                {**current.model_dump(), "current_amount": current.current_amount + delta},
                "Invalid goal update",
            )
            user.goals[index] = funded
            return funded

        funded = await self._users.apply_to_user(owner_id, fund)
        await self._audit.log_goal_event(
            AuditEventType.GOAL_FUNDED,
            owner_id,
            goal_id,
            details={
                "amount": str(delta),
                "current_amount": str(funded.current_amount),
                "completed": funded.is_completed,
            },
        )
        return funded

    # =========================================================================
    # Totals
    # =========================================================================

    async def calculate_total_saved(self, user_id: str) -> Decimal:
        return sum((g.current_amount for g in await self._user_goals(user_id)), Decimal("0"))

    async def calculate_total_target(self, user_id: str) -> Decimal:
        return sum((g.target_amount for g in await self._user_goals(user_id)), Decimal("0"))
