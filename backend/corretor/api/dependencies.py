"""
DEPENDENCIES (Dependências)
============================

Funções injetadas nas rotas para autenticação.

Os tokens são emitidos pelo provedor de identidade; aqui apenas validamos
a assinatura e usamos o claim "sub" para achar o perfil do corretor.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.config import get_settings
from corretor.domain.entities import User
from corretor.infrastructure.database import get_db

logger = logging.getLogger(__name__)
settings = get_settings()

# auto_error=False para devolver 401 (e não 403) quando não há token
security = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodifica e valida o token JWT.

    Returns:
        Claims do token ou None se inválido
    """
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.warning(f"⚠️ Token rejeitado: {e}")
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """
    Valida o token e retorna os claims do usuário autenticado.

    Uso nas rotas:
        @router.get("/rota-protegida")
        async def rota(user: dict = Depends(get_current_user)):
            user["sub"]  # id no provedor de identidade
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)

    if not payload or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Dict[str, Any]]:
    """Igual a get_current_user, mas devolve None em vez de 401."""
    if not credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        return None

    return payload


async def get_current_agent(
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Retorna o perfil de corretor (tabela users) do usuário autenticado.
    """
    result = await db.execute(select(User).where(User.auth_id == user["sub"]))
    agent = result.scalar_one_or_none()

    if not agent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Agent profile not found",
        )

    return agent


async def get_optional_agent(
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Perfil do corretor quando houver token válido; senão None."""
    if not user:
        return None

    result = await db.execute(select(User).where(User.auth_id == user["sub"]))
    return result.scalar_one_or_none()
