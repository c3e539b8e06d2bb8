from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
import uuid
from datetime import datetime

from core.security import get_password_hash
from db import get_db
from schemas.user import UserCreate
from services.orders import PHONE_RE, normalize_phone

router = APIRouter()

@router.post("/register")
async def register(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    if not PHONE_RE.match(user.phone.strip()):
        raise HTTPException(status_code=422, detail="Phone number must be 11 digits and start with 01")
    if await db.users.find_one({"email": user.email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = {
        "_id": str(uuid.uuid4()),
        "email": user.email,
        "fullName": user.full_name,
        "phone": normalize_phone(user.phone),
        "address": user.address,
        "password": get_password_hash(user.password),
        "role": "user",
        "createdAt": datetime.utcnow(),
    }
    await db.users.insert_one(new_user)
    return {"message": "Registered", "id": new_user["_id"]}
