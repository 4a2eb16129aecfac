# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Genre API routes."""

from vibeshare_server.routers.collections import collection_router
from vibeshare_server.services.collections import GENRES

router = collection_router(GENRES)
