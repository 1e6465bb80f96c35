# src/utils/jwt.py
from dataclasses import dataclass
from typing import Optional
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from src.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

OFFICER_ROLES = {"officer", "admin"}


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as handed over by the auth provider."""
    user_id: str
    email: Optional[str]
    role: Optional[str] = None

    @property
    def is_officer(self) -> bool:
        return (self.role or "").lower() in OFFICER_ROLES


# Function to create access token
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


# Function to verify access token
def verify_access_token(token: str):
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise _credentials_exception()


def get_caller_from_token(token: str) -> CallerIdentity:
    """
    Extracts the caller identity from the JWT token.

    ``sub`` carries the verified email, ``uid`` the opaque account id. Tokens
    issued without ``uid`` fall back to the email as the account id.
    """
    payload = verify_access_token(token)
    email = payload.get("sub")
    if email is None:
        raise _credentials_exception()
    return CallerIdentity(
        user_id=str(payload.get("uid") or email),
        email=email,
        role=payload.get("role"),
    )


def get_current_caller(token: str = Depends(oauth2_scheme)) -> CallerIdentity:
    return get_caller_from_token(token)


def require_officer(caller: CallerIdentity = Depends(get_current_caller)) -> CallerIdentity:
    if not caller.is_officer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Election officer access required.",
        )
    return caller
