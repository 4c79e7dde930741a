from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from ..settings import settings

# Tokens come from the identity provider; this service only verifies them.
# auto_error=False so anonymous/demo callers can still submit.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


class User(BaseModel):
	user_id: str


def get_optional_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[User]:
	if not token:
		return None
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise HTTPException(status_code=401, detail="Could not validate credentials")
	sub = payload.get("sub")
	if not sub:
		raise HTTPException(status_code=401, detail="Could not validate credentials")
	return User(user_id=str(sub))
