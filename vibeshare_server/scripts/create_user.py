#!/usr/bin/env python3
# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create a verified user. Run: python -m vibeshare_server.scripts.create_user"""

import asyncio
import getpass
import sys

from sqlalchemy import select

from vibeshare_server.auth import hash_password
from vibeshare_server.database import async_session_maker, init_db
from vibeshare_server.models import User
from vibeshare_server.services.usernames import unique_username


async def main():
    await init_db()
    name = input("Display name: ").strip()
    email = input("Email: ").strip().lower()
    password = getpass.getpass("Password: ")
    if not name or not email or not password:
        print("All fields required")
        sys.exit(1)

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print("User already exists")
            sys.exit(1)
        user = User(
            name=name,
            email=email,
            username=await unique_username(session, name),
            password_hash=hash_password(password),
            is_verified=True,
        )
        session.add(user)
        await session.commit()
        print(f"User {user.username} created.")


if __name__ == "__main__":
    asyncio.run(main())
