from fastapi import APIRouter

from mailsync.api.routers.accounts import router as accounts_router
from mailsync.api.routers.emails import router as emails_router

api_router = APIRouter()

api_router.include_router(emails_router, prefix="/emails", tags=["emails"])
api_router.include_router(accounts_router, prefix="/email-accounts", tags=["email-accounts"])
