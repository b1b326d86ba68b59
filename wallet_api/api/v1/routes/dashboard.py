# wallet_api/api/v1/routes/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any, Tuple
from datetime import date, timedelta
from enum import Enum
from collections import defaultdict
import uuid

from wallet_api.api.deps import get_current_user, get_wallet_store
from wallet_api.api.v1.routes.goals import goal_read
from wallet_api.api.v1.routes.wallets import build_overview
from wallet_api.core.auth import User
from wallet_api.core.database import get_async_session
from wallet_api.crud.expense import get_expenses_for_user
from wallet_api.crud.goal import get_goals_for_user
from wallet_api.crud.income import get_income_for_user
from wallet_api.crud.udaar import get_udaar_for_user
from wallet_api.crud.wallet import SQLAlchemyWalletStore
from wallet_api.models.udaar import UdaarType
from wallet_api.utils.goals import sub_wallet_goal_progress
from wallet_api.utils.udaar import OPEN_STATUSES

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

class TimePeriod(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"

def period_range(time_period: TimePeriod, today: date) -> Tuple[date, date, str]:
    """Start (inclusive), end (exclusive) and label of the current period"""
    if time_period == TimePeriod.daily:
        return today, today + timedelta(days=1), "Daily"
    if time_period == TimePeriod.weekly:
        # Start from the beginning of the current week (Monday)
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=7), "Weekly"
    if time_period == TimePeriod.yearly:
        return date(today.year, 1, 1), date(today.year + 1, 1, 1), "Yearly"
    start = date(today.year, today.month, 1)
    if today.month == 12:
        end = date(today.year + 1, 1, 1)
    else:
        end = date(today.year, today.month + 1, 1)
    return start, end, "Monthly"

@router.get("/summary")
async def get_dashboard_summary(
    time_period: TimePeriod = Query(TimePeriod.monthly, description="Period for the income and expense totals"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    store: SQLAlchemyWalletStore = Depends(get_wallet_store),
) -> Dict[str, Any]:
    """
    Everything the dashboard shows in one call:
    - Cards: income, spent and net for the period, total balance
    - Wallets: displayed totals per category with their sub-wallets
    - Goals: sub-wallet goal progress and active financial goals
    - Udaar: open receivable and payable amounts
    """
    user_id = uuid.UUID(str(user.id))
    start_date, end_date, period_label = period_range(time_period, date.today())

    income = await get_income_for_user(user_id, db, start_date, end_date, store.bank_account_id)
    expenses = await get_expenses_for_user(user_id, db, start_date, end_date, store.bank_account_id)
    total_income = sum(float(i.amount) for i in income)
    total_spent = sum(float(e.amount) for e in expenses)

    spending_by_category: Dict[str, float] = defaultdict(float)
    for e in expenses:
        spending_by_category[e.category] += float(e.amount)

    wallets = await build_overview(store)
    sub_wallet_goals = []
    for sw in await store.list_sub_wallets():
        progress = sub_wallet_goal_progress(sw)
        if progress is not None:
            sub_wallet_goals.append({"id": str(sw.id), "name": sw.name, **progress})

    open_udaar = [e for e in await get_udaar_for_user(user_id, db) if e.status in OPEN_STATUSES]
    receivable = sum(e.amount for e in open_udaar if e.type == UdaarType.gave.value)
    payable = sum(e.amount for e in open_udaar if e.type == UdaarType.took.value)

    goals = [goal_read(g) for g in await get_goals_for_user(user_id, db)]

    return {
        "summary": {
            "time_period": time_period,
            "period_label": period_label,
            "start_date": start_date,
            "end_date": end_date,
            "income": round(total_income, 2),
            "spent": round(total_spent, 2),
            "net": round(total_income - total_spent, 2),
            "total_balance": round(sum(w.total_balance for w in wallets), 2),
        },
        "wallets": wallets,
        "spending_by_category": {k: round(v, 2) for k, v in spending_by_category.items()},
        "sub_wallet_goals": sub_wallet_goals,
        "udaar": {
            "receivable": round(receivable, 2),
            "payable": round(payable, 2),
            "net": round(receivable - payable, 2),
            "open_count": len(open_udaar),
        },
        "goals": [g for g in goals if g.status != "completed"],
    }
