"""
Jurisdiction sales tax rate and exemption tables.

The default table covers the jurisdictions the store sells into. Any other
jurisdiction code is treated as untaxed. Tables can be replaced at
construction time or loaded from a TOML file:

    [jurisdictions.CA]
    rate = "0.0975"
    exempt_categories = ["food"]
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from receipt_engine.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")

TAX_TABLE_ENV_VAR = "RECEIPT_ENGINE_TAX_TABLE"


class TaxTableError(ValueError):
    """Raised when a tax table configuration is malformed."""


@dataclass(frozen=True)
class JurisdictionTaxInfo:
    """Tax policy of a single jurisdiction."""

    code: str
    rate: Decimal  # fraction, e.g. 0.0975 = 9.75%
    exempt_categories: frozenset[str] = frozenset()

    @property
    def has_sales_tax(self) -> bool:
        return self.rate != ZERO


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------

_DEFAULT_RATES: dict[str, Decimal] = {
    "CA": Decimal("0.0975"),
    "NY": Decimal("0.08875"),
}

_DEFAULT_EXEMPTIONS: dict[str, frozenset[str]] = {
    "CA": frozenset({"food"}),
    "NY": frozenset({"food", "clothing"}),
}


def _to_rate(code: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise TaxTableError(f"{code}: rate must be a number, got {value!r}")
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise TaxTableError(f"{code}: invalid rate {value!r}") from None
    if not rate.is_finite() or rate < ZERO:
        raise TaxTableError(f"{code}: rate must be a non-negative number, got {value!r}")
    return rate


def _to_categories(code: str, value: Any) -> frozenset[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TaxTableError(f"{code}: exempt categories must be a list of strings")
    categories = list(value)
    if not all(isinstance(c, str) for c in categories):
        raise TaxTableError(f"{code}: exempt categories must be a list of strings")
    return frozenset(categories)


class TaxTable:
    """
    Read-only lookup of jurisdiction rates and exempt categories.

    Jurisdiction codes are upper-cased on the way in. Category membership
    is an exact, case-sensitive string match.
    """

    def __init__(
        self,
        rates: Optional[Mapping[str, Any]] = None,
        exemptions: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> None:
        if rates is None and exemptions is None:
            rates, exemptions = _DEFAULT_RATES, _DEFAULT_EXEMPTIONS
        rates = rates or {}
        exemptions = exemptions or {}

        self._rates: Mapping[str, Decimal] = MappingProxyType(
            {code.upper(): _to_rate(code, value) for code, value in rates.items()}
        )
        self._exemptions: Mapping[str, frozenset[str]] = MappingProxyType(
            {
                code.upper(): _to_categories(code, cats)
                for code, cats in exemptions.items()
            }
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaxTable":
        """
        Build a table from parsed configuration.

        Expects {"jurisdictions": {"CA": {"rate": ..., "exempt_categories": [...]}}}.
        A jurisdiction may omit either key.
        """
        section = data.get("jurisdictions")
        if not isinstance(section, Mapping):
            raise TaxTableError("tax table needs a [jurisdictions] section")

        rates: dict[str, Any] = {}
        exemptions: dict[str, Any] = {}
        for code, entry in section.items():
            if not isinstance(entry, Mapping):
                raise TaxTableError(f"{code}: expected a table of settings")
            if "rate" in entry:
                rates[code] = entry["rate"]
            if "exempt_categories" in entry:
                exemptions[code] = entry["exempt_categories"]
        return cls(rates=rates, exemptions=exemptions)

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "TaxTable":
        """Load a table from a TOML file."""
        toml_path = Path(path)
        if not toml_path.exists():
            raise TaxTableError(f"Tax table file not found: {toml_path}")
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise TaxTableError(f"{toml_path}: {e}") from e

        table = cls.from_mapping(data)
        logger.info(
            "Loaded tax table from %s (%d jurisdictions)", toml_path, len(table.codes)
        )
        return table

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def rate_for(self, jurisdiction: str) -> Decimal:
        """Return the configured rate, or zero for an unlisted jurisdiction."""
        return self._rates.get(jurisdiction.upper(), ZERO)

    def is_exempt(self, jurisdiction: str, category: str) -> bool:
        """True iff the jurisdiction lists this exact category as exempt."""
        exempt = self._exemptions.get(jurisdiction.upper())
        if exempt is None:
            return False
        return category in exempt

    def exempt_categories(self, jurisdiction: str) -> frozenset[str]:
        return self._exemptions.get(jurisdiction.upper(), frozenset())

    def get_jurisdiction(self, jurisdiction: str) -> Optional[JurisdictionTaxInfo]:
        """Full policy for a listed jurisdiction, None when it is not configured."""
        code = jurisdiction.upper()
        if code not in self:
            return None
        return JurisdictionTaxInfo(
            code=code,
            rate=self.rate_for(code),
            exempt_categories=self.exempt_categories(code),
        )

    @property
    def codes(self) -> list[str]:
        return sorted(set(self._rates) | set(self._exemptions))

    def jurisdictions(self) -> list[JurisdictionTaxInfo]:
        """Return all configured jurisdictions sorted by code."""
        return [
            JurisdictionTaxInfo(code, self.rate_for(code), self.exempt_categories(code))
            for code in self.codes
        ]

    def __contains__(self, jurisdiction: object) -> bool:
        if not isinstance(jurisdiction, str):
            return False
        code = jurisdiction.upper()
        return code in self._rates or code in self._exemptions

    def __repr__(self) -> str:
        return f"TaxTable({', '.join(self.codes)})"


def load_tax_table(path: Optional[Union[str, Path]] = None) -> TaxTable:
    """
    Resolve the active tax table.

    Uses path if given, else the RECEIPT_ENGINE_TAX_TABLE environment
    variable, else the built-in defaults.
    """
    path = path or os.environ.get(TAX_TABLE_ENV_VAR)
    if path:
        return TaxTable.from_toml(path)
    return TaxTable()
