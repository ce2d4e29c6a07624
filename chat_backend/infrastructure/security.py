# chat_backend/infrastructure/security.py
import datetime
import secrets
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError
from passlib.context import CryptContext

from chat_backend.domain.entities import Identity
from chat_backend.domain.exceptions import AuthError


class SecurityService:
    def __init__(self, config):
        self.config = config
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def verify_password(self, plain_password, hashed_password):
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password):
        return self.pwd_context.hash(password)

    def create_access_token(
        self, identity: Identity, expires_delta: Optional[datetime.timedelta] = None
    ) -> tuple[str, datetime.datetime]:
        expire = datetime.datetime.now(datetime.timezone.utc) + (
            expires_delta
            or datetime.timedelta(minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode = {
            "sub": str(identity.user_id),
            "username": identity.username,
            "email": identity.email,
            "nonce": secrets.token_hex(8),
            "exp": expire,
        }
        encoded_jwt = jwt.encode(
            to_encode, self.config.SECRET_KEY, algorithm=self.config.ALGORITHM
        )
        return encoded_jwt, expire

    def verify_access_token(self, token: Optional[str]) -> Identity:
        if not token:
            raise AuthError("Authentication token is missing")
        try:
            payload = jwt.decode(
                token, self.config.SECRET_KEY, algorithms=[self.config.ALGORITHM]
            )
        except ExpiredSignatureError:
            raise AuthError("Authentication token has expired")
        except InvalidTokenError:
            raise AuthError("Invalid authentication token")

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            raise AuthError("Invalid authentication token")
        return Identity(
            user_id=int(subject),
            username=payload.get("username", ""),
            email=payload.get("email", ""),
        )
