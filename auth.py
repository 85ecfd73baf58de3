from datetime import datetime, timedelta, timezone
from typing import Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from pymongo.database import Database

import config
from database import get_db, to_public
from schemas import SignUpBody, TokenResponse, User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# Helpers

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def user_to_public(u: dict) -> dict:
    return to_public(u, hidden=("password",))


def get_user_by_email(db: Database, email: str) -> Optional[dict]:
    return db["user"].find_one({"email": email})


def get_user_by_id(db: Database, user_id: str) -> Optional[dict]:
    if not ObjectId.is_valid(user_id):
        return None
    return db["user"].find_one({"_id": ObjectId(user_id)})


class TokenData(BaseModel):
    user_id: Optional[str] = None


async def get_current_user(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        token_data = TokenData(user_id=user_id)
    except JWTError:
        raise credentials_exception

    user = get_user_by_id(db, token_data.user_id)
    if user is None:
        raise credentials_exception
    return user


def register_user(db: Database, body: SignUpBody) -> TokenResponse:
    if get_user_by_email(db, body.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user_doc = User(
        name=body.name,
        email=body.email,
        password=hash_password(body.password),
        saved_communities=[],
    ).model_dump()
    inserted_id = db["user"].insert_one(user_doc).inserted_id

    return TokenResponse(access_token=create_access_token({"sub": str(inserted_id), "email": body.email}))


def authenticate(db: Database, email: str, password: str) -> TokenResponse:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.get("password", "")):
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    return TokenResponse(access_token=create_access_token({"sub": str(user["_id"]), "email": user["email"]}))
