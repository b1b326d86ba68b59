# wallet_api/utils/goals.py
from datetime import date
from typing import Any, Dict, Optional

from wallet_api.core.exceptions import ValidationError


def sub_wallet_goal_progress(sub_wallet: Any) -> Optional[Dict[str, Any]]:
    """Progress of a sub-wallet's savings goal, or None when no goal is set"""
    if not sub_wallet.goal_enabled or not sub_wallet.goal_target_amount:
        return None
    target = float(sub_wallet.goal_target_amount)
    balance = float(sub_wallet.balance or 0)
    progress = min(balance / target * 100, 100.0)
    return {
        "target_amount": target,
        "current_amount": balance,
        "progress_percentage": round(progress, 2),
        "remaining_amount": round(max(0.0, target - balance), 2),
        "achieved": progress >= 100,
    }


def validate_sub_wallet_goal(enabled: bool, target_amount: Optional[float]) -> None:
    if enabled and (not target_amount or target_amount <= 0):
        raise ValidationError("Please enter a valid target amount")


def goal_status(saved_amount: float, target_amount: float, target_date: Optional[date], today: Optional[date] = None) -> str:
    today = today or date.today()
    if saved_amount >= target_amount:
        return "completed"
    if target_date is not None and target_date < today:
        return "overdue"
    return "active"


def goal_progress(goal: Any, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    target = float(goal.target_amount)
    saved = float(goal.saved_amount or 0)
    days_left = (goal.target_date - today).days if goal.target_date else None
    return {
        "progress_percentage": round(min(saved / target * 100, 100.0), 2) if target else 0.0,
        "remaining_amount": round(max(0.0, target - saved), 2),
        "days_left": days_left,
    }


def refresh_goal_status(goal: Any, today: Optional[date] = None) -> str:
    goal.status = goal_status(float(goal.saved_amount or 0), float(goal.target_amount), goal.target_date, today)
    return goal.status


def contribute(goal: Any, amount: float, today: Optional[date] = None) -> str:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    goal.saved_amount = float(goal.saved_amount or 0) + amount
    return refresh_goal_status(goal, today)
