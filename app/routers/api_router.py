from fastapi import APIRouter
from app.routers import (
    auth, users, children, leave_type, leave_balance,
    leave_request, schedule, task, admin
)

# Routers are aggregated here; main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(children.router, tags=["Children"])
api_router.include_router(leave_type.router, tags=["Leave Types"])
api_router.include_router(leave_balance.router, tags=["Leave Balances"])
api_router.include_router(leave_request.router, tags=["Leave Requests"])
api_router.include_router(schedule.router, tags=["Schedules"])
api_router.include_router(task.router, tags=["Tasks"])
api_router.include_router(admin.router, tags=["Administration"])
