from __future__ import annotations

from dataclasses import dataclass
from secrets import compare_digest
from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

SECURITY_HEADERS = {
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'no-referrer',
}


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    password_hash: Optional[str] = None

    def check(self, username: str, password: str) -> bool:
        user_ok = compare_digest(username.encode(), self.username.encode())
        if self.password_hash:
            password_ok = verify_password(password, self.password_hash)
        else:
            password_ok = compare_digest(password.encode(), self.password.encode())
        return user_ok and password_ok


def apply_security_headers(response):
    for key, value in SECURITY_HEADERS.items():
        response.headers[key] = value
    return response
