# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Username generation for new accounts."""

import re
import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.config import settings
from vibeshare_server.errors import Conflict
from vibeshare_server.models import User

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_username(name: str) -> str:
    """Lowercase alphanumerics of ``name`` (max 15) plus a random 4-character suffix."""
    base = re.sub(r"[^a-z0-9]", "", name.lower())[:15] or "user"
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(4))
    return f"{base}{suffix}"


async def unique_username(db: AsyncSession, name: str) -> str:
    for _ in range(settings.username_max_attempts):
        candidate = generate_username(name)
        result = await db.execute(select(User.id).where(User.username == candidate))
        if result.scalar_one_or_none() is None:
            return candidate
    raise Conflict("Could not generate a unique username")
