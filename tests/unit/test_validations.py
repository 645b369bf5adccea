"""Unit tests for input validation helpers."""

from __future__ import annotations

import pytest

from tfe.validations import valid_string, valid_string_id


class TestValidations:
    @pytest.mark.parametrize("value", ["acme", "ws-123", "my_org.prod", "A1"])
    def test_valid_ids(self, value):
        assert valid_string_id(value)

    @pytest.mark.parametrize("value", ["", None, "a b", "org/ws", "ws?x", "ünicode"])
    def test_invalid_ids(self, value):
        assert not valid_string_id(value)

    def test_valid_string(self):
        assert valid_string("x")
        assert not valid_string("")
        assert not valid_string(None)
