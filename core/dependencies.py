from fastapi import Request, HTTPException, Depends, status
from jose import jwt, JWTError
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.config import SECRET_KEY, ALGORITHM
from db import get_db
from services.analytics import AnalyticsSink
from services.drafts import DraftSaveScheduler
from services.payment import PaymentGateway


async def get_current_user(request: Request, db: AsyncIOMotorDatabase = Depends(get_db)):
    token = request.cookies.get("access_token")
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token missing, please log in again",
        )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = await db.users.find_one({"email": email})
    if user is None:
        raise HTTPException(status_code=401, detail="User does not exist")
    return user


async def verify_admin(current_user: dict = Depends(get_current_user)):
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admins only")
    return current_user


# app-scoped collaborators, set up in main.lifespan
def get_analytics(request: Request) -> AnalyticsSink:
    return request.app.state.analytics


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_draft_scheduler(request: Request) -> DraftSaveScheduler:
    return request.app.state.draft_scheduler
