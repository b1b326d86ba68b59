from fastapi import APIRouter

from wallet_api.api.v1.routes import (
    users,
    auth,
    settings,
    wallets,
    accounts,
    income,
    expenses,
    udaar,
    goals,
    dashboard,
    realtime,
)

api_router = APIRouter()

# Custom auth routes; included before the fastapi-users routers so /auth/jwt/logout resolves here
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["User Management"])
api_router.include_router(settings.router)
api_router.include_router(wallets.router)
api_router.include_router(accounts.router)
api_router.include_router(income.router)
api_router.include_router(expenses.router)
api_router.include_router(udaar.router)
api_router.include_router(goals.router)
api_router.include_router(dashboard.router)
api_router.include_router(realtime.router)
