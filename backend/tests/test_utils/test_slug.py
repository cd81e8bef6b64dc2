"""
Unit tests for category slugs and owner metadata in descriptions
"""
from unittest.mock import patch

from storefront.utils.slug import (
    clean_description,
    encode_owner_description,
    slugify,
    unique_slug,
)


class TestSlugify:

    def test_lowercases_and_dashes_spaces(self):
        assert slugify("Bolos Caseiros") == "bolos-caseiros"

    def test_drops_accents_and_symbols(self):
        assert slugify("Pães & Doces!") == "pes-doces"

    def test_collapses_dashes(self):
        assert slugify("a  -  b") == "a-b"

    def test_unique_slug_appends_epoch_ms(self):
        with patch("storefront.utils.slug.time.time", return_value=1700000000.5):
            assert unique_slug("bolos") == "bolos-1700000000500"


class TestOwnerDescription:

    def test_encode_and_clean_round_trip(self):
        encoded = encode_owner_description("user-1", "  Sweet stuff ")
        assert encoded == "user:user-1|desc:Sweet stuff"
        assert clean_description(encoded) == "Sweet stuff"

    def test_encode_without_description(self):
        assert encode_owner_description("user-1") == "user:user-1|desc:"

    def test_clean_leaves_plain_descriptions(self):
        assert clean_description("Seeded category") == "Seeded category"
        assert clean_description(None) == ""
