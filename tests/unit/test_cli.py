"""Tests for command line parameter parsing."""

import pytest

from ett_lifecycle.cli import parse_parameters


class TestParseParameters:
    def test_pairs_override_json(self):
        parameters = parse_parameters(["entity_id=wb", "dry_run=true"], '{"entity_id": "other", "notify": false}')
        assert parameters == {"entity_id": "wb", "dry_run": "true", "notify": False}

    def test_value_may_contain_equals(self):
        assert parse_parameters(["registration_uri=https://x.org/?a=b"]) == {"registration_uri": "https://x.org/?a=b"}

    def test_pair_without_value(self):
        with pytest.raises(ValueError):
            parse_parameters(["entity_id"])
