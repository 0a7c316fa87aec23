"""
Bearer token extraction.
Token validation and role checks happen in the access gate so the same rules
apply to HTTP and in-process callers.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

# Tokens are issued by the external auth service; auto_error is off so a
# missing header reaches the gate and comes back as an Unauthorized envelope.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_bearer_token(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    return token or None
