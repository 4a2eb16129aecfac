# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Legacy composite id decoding."""

from vibeshare_server.services.legacy_catalog import decode_legacy_id, is_legacy_id


def test_decodes_known_ids():
    assert decode_legacy_id("afro_001").youtube_id == "e-3Awv-wuzs"
    assert decode_legacy_id("pop_1").title == "Blinding Lights"
    assert decode_legacy_id("hiphop_003").artist == "Travis Scott"


def test_out_of_range_and_unknown_genre():
    assert decode_legacy_id("afro_000") is None
    assert decode_legacy_id("afro_099") is None
    assert decode_legacy_id("jazz_001") is None


def test_rejects_non_legacy_shapes():
    assert not is_legacy_id("dQw4w9WgXcQ")
    assert not is_legacy_id("Afro_001")
    assert decode_legacy_id("e-3Awv-wuzs") is None
