"""
Verification code registry — which code unlocks which bank.

A bank representative proves their affiliation by entering the code issued
to their bank. The registry is a plain mapping from bank name to code,
wrapped in a class so the session manager receives it as a dependency and
a secret-management backend can replace the built-in table without touching
call sites.

Lookups are exact, case-sensitive string matches. Names are not normalized:
"ZB Bank" is registered, "zb bank" is not.
"""

from collections.abc import Mapping

from app.schemas.bank import RegistryEntry


# (name, short code, verification code), in directory order
DEFAULT_BANKS: tuple[tuple[str, str, str], ...] = (
    ("CBZ Bank", "CBZ", "CBZ-VERIFY-2024"),
    ("Steward Bank", "STEW", "STEW-VERIFY-2024"),
    ("Nedbank Zimbabwe", "NED", "NED-VERIFY-2024"),
    ("Standard Chartered Bank", "SCB", "SCB-VERIFY-2024"),
    ("First Capital Bank", "FCB", "FCB-VERIFY-2024"),
    ("ZB Bank", "ZB", "ZB-VERIFY-2024"),
    ("BancABC", "ABC", "ABC-VERIFY-2024"),
    ("CABS", "CABS", "CABS-VERIFY-2024"),
    ("Ecobank Zimbabwe", "ECO", "ECO-VERIFY-2024"),
    ("NMB Bank", "NMB", "NMB-VERIFY-2024"),
)


class VerificationCodeRegistry:
    """
    Read-only mapping of bank name to verification code.

    Args:
        codes: bank name -> verification code. Each bank has exactly one
            code, and no two banks share a code.
        short_codes: optional bank name -> short code, used by list().
    """

    def __init__(
        self,
        codes: Mapping[str, str],
        short_codes: Mapping[str, str] | None = None,
    ):
        if len(set(codes.values())) != len(codes):
            raise ValueError("Verification codes must be unique per bank")
        self._codes = dict(codes)
        self._short_codes = dict(short_codes or {})

    @classmethod
    def default(cls) -> "VerificationCodeRegistry":
        """The ten recognized banks."""
        return cls(
            codes={name: code for name, _, code in DEFAULT_BANKS},
            short_codes={name: short for name, short, _ in DEFAULT_BANKS},
        )

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, bank_name: object) -> bool:
        return bank_name in self._codes

    def list(self) -> list[RegistryEntry]:
        """All registered banks with 1-based ids, in registration order."""
        return [
            RegistryEntry(
                id=str(index),
                name=name,
                code=self._short_codes.get(name, ""),
                verification_code=code,
            )
            for index, (name, code) in enumerate(self._codes.items(), start=1)
        ]

    def code_for(self, bank_name: str) -> str:
        """The bank's code, or "" when the bank isn't registered."""
        return self._codes.get(bank_name, "")

    def is_valid(self, bank_name: str, code: str) -> bool:
        expected = self._codes.get(bank_name)
        return expected is not None and expected == code


# Shared default instance, injected into the session manager at startup
default_registry = VerificationCodeRegistry.default()
