# wallet_api/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from wallet_api.models.goal import Goal
from wallet_api.utils.goals import refresh_goal_status
from typing import List, Optional
import uuid
from wallet_api.schemas.goal import GoalCreate, GoalUpdate

async def get_goals_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Goal]:
    result = await db.execute(select(Goal).where(Goal.user_id == user_id).order_by(Goal.created_at))
    return list(result.scalars().all())

async def get_goal_by_id(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Goal]:
    result = await db.execute(
        select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_goal_for_user(user_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    data = goal_in.model_dump()
    data["wallet_category"] = data["wallet_category"].value
    new_goal = Goal(**data, user_id=user_id, saved_amount=0.0)
    refresh_goal_status(new_goal)
    db.add(new_goal)
    await db.commit()
    await db.refresh(new_goal)
    return new_goal

async def update_goal(goal: Goal, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    for field, value in goal_in.model_dump(exclude_unset=True).items():
        # title, target_amount and wallet_category are required columns
        if value is None and field in ("title", "target_amount", "wallet_category"):
            continue
        if field == "wallet_category":
            value = value.value
        setattr(goal, field, value)
    refresh_goal_status(goal)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def save_goal(goal: Goal, db: AsyncSession) -> Goal:
    refresh_goal_status(goal)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def delete_goal(goal: Goal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()
