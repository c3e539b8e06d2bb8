from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.security import verify_password, create_access_token
from db import get_db
from services.orders import normalize_phone

router = APIRouter()

@router.post("/login")
async def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    # customers sign in with email or the phone they checked out with
    user = await db.users.find_one({"$or": [
        {"email": form_data.username},
        {"phone": normalize_phone(form_data.username)},
    ]})
    if not user or not verify_password(form_data.password, user["password"]):
        raise HTTPException(status_code=401, detail="Wrong email/phone or password")

    token = create_access_token(data={"sub": user["email"]})

    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=False,     # set True behind HTTPS
        samesite="lax"
    )

    return {"message": "Logged in"}
