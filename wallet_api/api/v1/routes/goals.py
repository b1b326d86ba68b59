# wallet_api/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from wallet_api.api.deps import get_current_user
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.crud import goal as crud_goal
from wallet_api.models.goal import Goal
from wallet_api.schemas.goal import GoalContribution, GoalCreate, GoalRead, GoalUpdate
from wallet_api.utils.events import publish_change
from wallet_api.utils.goals import contribute, goal_progress, goal_status

router = APIRouter(prefix="/goals", tags=["goals"])


def goal_read(goal: Goal) -> GoalRead:
    # Status is re-derived on read so a passed target date shows as overdue
    status_now = goal_status(float(goal.saved_amount or 0), float(goal.target_amount), goal.target_date)
    return GoalRead.model_validate(goal).model_copy(update={"status": status_now, **goal_progress(goal)})


async def get_owned_goal(goal_id: uuid.UUID, user: User, db: AsyncSession) -> Goal:
    goal = await crud_goal.get_goal_by_id(goal_id, uuid.UUID(str(user.id)), db)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


@router.get("", response_model=List[GoalRead])
async def list_goals(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return [goal_read(g) for g in await crud_goal.get_goals_for_user(uuid.UUID(str(user.id)), db)]


@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    user_id = uuid.UUID(str(user.id))
    goal = await crud_goal.create_goal_for_user(user_id, goal_in, db)
    await publish_change(user_id)
    return goal_read(goal)


@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_owned_goal(goal_id, user, db)
    goal = await crud_goal.update_goal(goal, goal_in, db)
    await publish_change(uuid.UUID(str(user.id)))
    return goal_read(goal)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_owned_goal(goal_id, user, db)
    await crud_goal.delete_goal(goal, db)
    await publish_change(uuid.UUID(str(user.id)))


@router.post("/{goal_id}/contribute", response_model=GoalRead)
async def contribute_to_goal(
    goal_id: uuid.UUID,
    contribution: GoalContribution,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Add to the saved amount; the goal completes once it reaches the target"""
    goal = await get_owned_goal(goal_id, user, db)
    contribute(goal, contribution.amount)
    goal = await crud_goal.save_goal(goal, db)
    await publish_change(uuid.UUID(str(user.id)))
    return goal_read(goal)
