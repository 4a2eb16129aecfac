# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Playlist API routes."""

from vibeshare_server.routers.collections import collection_router
from vibeshare_server.services.collections import PLAYLISTS

router = collection_router(PLAYLISTS)
