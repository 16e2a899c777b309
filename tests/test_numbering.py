"""Unit tests for reference code generation."""

import re

import pytest

from poultry_api.utils.numbering import _to_base36, generate_reference_code

CODE_PATTERN = re.compile(r"^ORD-[0-9A-Z]+-[0-9A-Z]{6}$")


@pytest.mark.unit
class TestReferenceCodes:
    def test_format(self):
        assert CODE_PATTERN.match(generate_reference_code("ORD"))

    def test_timestamp_part(self, monkeypatch):
        monkeypatch.setattr("poultry_api.utils.numbering.time.time", lambda: 1.5)

        code = generate_reference_code("PAY")

        # 1500 ms is "15o" in base 36
        assert code.startswith("PAY-15O-")

    def test_random_length(self):
        assert len(generate_reference_code("CUST", random_length=10).split("-")[-1]) == 10

    def test_codes_differ(self):
        assert len({generate_reference_code("ORD") for _ in range(50)}) == 50

    def test_base36(self):
        assert _to_base36(0) == "0"
        assert _to_base36(35) == "z"
        assert _to_base36(36) == "10"
