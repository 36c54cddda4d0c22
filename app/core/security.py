"""
Advocacia SaaS - Security
Hash de senhas, chaves de registro e tokens JWT (access + refresh)
"""
import uuid
import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt
import bcrypt

from .config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica password usando bcrypt"""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # hash corrompido ou senha acima do limite do bcrypt
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Gera hash bcrypt do password"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds or settings.BCRYPT_ROUNDS)
    ).decode('utf-8')


def generate_registration_key() -> str:
    """Gera chave de registro aleatória (64 caracteres hex)"""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Hash SHA-256 usado para armazenar refresh tokens"""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Cria JWT de acesso (curta duração)"""
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now, "type": ACCESS_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """
    Cria JWT de refresh.
    Retorna (token, expires_at). O jti garante tokens distintos mesmo
    quando emitidos no mesmo segundo.
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    to_encode.update({
        "exp": expire,
        "iat": now,
        "jti": uuid.uuid4().hex,
        "type": REFRESH_TOKEN_TYPE
    })
    token = jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expire


def decode_access_token(token: str) -> dict:
    """
    Decodifica JWT de acesso.
    Propaga ExpiredSignatureError / JWTError para o chamador decidir o status.
    """
    return jwt.decode(token, settings.JWT_ACCESS_SECRET, algorithms=[settings.JWT_ALGORITHM])


def decode_refresh_token(token: str) -> dict:
    """Decodifica JWT de refresh (propaga JWTError)"""
    return jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALGORITHM])
