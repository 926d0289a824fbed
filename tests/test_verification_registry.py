"""
Tests for the bank verification code registry.

These tests verify:
  - The ten recognized banks are registered in directory order
  - Validation is exact and case-sensitive
  - A code only unlocks the bank it was issued to
  - Unknown banks have no code
"""

import pytest

from app.services.verification_registry import (
    DEFAULT_BANKS,
    VerificationCodeRegistry,
    default_registry,
)


class TestDefaultRegistry:

    def test_ten_banks(self):
        assert len(default_registry) == 10
        assert "CBZ Bank" in default_registry
        assert "NMB Bank" in default_registry

    def test_list_uses_one_based_ids_in_order(self):
        entries = default_registry.list()

        assert [e.id for e in entries] == [str(i) for i in range(1, 11)]
        assert [e.name for e in entries] == [name for name, _, _ in DEFAULT_BANKS]
        assert entries[0].code == "CBZ"
        assert entries[0].verification_code == "CBZ-VERIFY-2024"

    def test_codes_are_unique(self):
        codes = [e.verification_code for e in default_registry.list()]
        assert len(set(codes)) == len(codes)


class TestValidation:

    @pytest.mark.parametrize("bank_name, code", [
        (name, code) for name, _, code in DEFAULT_BANKS
    ])
    def test_every_bank_accepts_its_own_code(self, bank_name, code):
        assert default_registry.is_valid(bank_name, code) is True

    def test_exact_match_example(self):
        assert default_registry.is_valid("ZB Bank", "ZB-VERIFY-2024") is True

    def test_code_is_case_sensitive(self):
        assert default_registry.is_valid("ZB Bank", "zb-verify-2024") is False

    def test_bank_name_is_case_sensitive(self):
        assert default_registry.is_valid("zb bank", "ZB-VERIFY-2024") is False

    def test_code_of_another_bank_is_rejected(self):
        assert default_registry.is_valid("CBZ Bank", "ZB-VERIFY-2024") is False

    def test_unknown_bank(self):
        assert default_registry.is_valid("Unknown Bank", "ANY-CODE") is False
        assert default_registry.code_for("Unknown Bank") == ""

    def test_code_for_known_bank(self):
        assert default_registry.code_for("Steward Bank") == "STEW-VERIFY-2024"


class TestCustomRegistry:

    def test_duplicate_codes_are_rejected(self):
        with pytest.raises(ValueError):
            VerificationCodeRegistry({"A Bank": "SAME", "B Bank": "SAME"})

    def test_list_without_short_codes(self):
        registry = VerificationCodeRegistry({"A Bank": "A-1"})
        [entry] = registry.list()
        assert entry.id == "1"
        assert entry.code == ""
        assert entry.verification_code == "A-1"
