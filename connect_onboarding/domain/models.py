"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Platform(str, Enum):
    """Stripe platform account a connected account lives under"""

    US = "US"
    UK = "UK"


class FinancialProduct(str, Enum):
    """Product the demo is configured for"""

    EXPENSE_MANAGEMENT = "Expense Management"
    EMBEDDED_FINANCE = "Embedded Finance"


# Countries served by the UK platform; everything else goes through US
UK_PLATFORM_COUNTRIES = frozenset({"GB", "AT", "BE", "DE", "ES", "FR", "IE", "IT", "NL"})

SUPPORTED_COUNTRIES = ("US",) + tuple(sorted(UK_PLATFORM_COUNTRIES))


def get_platform(country: str) -> Platform:
    """Resolve the platform (tenant) for a country code"""
    if country in UK_PLATFORM_COUNTRIES:
        return Platform.UK
    return Platform.US


@dataclass(frozen=True)
class StripeAccountRef:
    """Pointer to a remote connected account"""

    account_id: str
    platform: Platform


@dataclass(frozen=True)
class SessionContext:
    """Authenticated user context read from the session"""

    email: str
    country: str
    financial_product: FinancialProduct
    stripe_account: StripeAccountRef

    @property
    def account_id(self) -> str:
        return self.stripe_account.account_id

    @property
    def platform(self) -> Platform:
        return self.stripe_account.platform

    def to_session(self) -> Dict[str, Any]:
        """Serialize to the cookie session layout"""
        return {
            "email": self.email,
            "country": self.country,
            "financialProduct": self.financial_product.value,
            "stripeAccount": {
                "accountId": self.stripe_account.account_id,
                "platform": self.stripe_account.platform.value,
            },
        }

    @classmethod
    def from_session(cls, data: Dict[str, Any]) -> "SessionContext":
        """Build from the cookie session layout.

        Raises:
            KeyError, ValueError: If the session is incomplete or malformed
        """
        stripe_account = data["stripeAccount"]
        return cls(
            email=data["email"],
            country=data["country"],
            financial_product=FinancialProduct(data["financialProduct"]),
            stripe_account=StripeAccountRef(
                account_id=stripe_account["accountId"],
                platform=Platform(stripe_account["platform"]),
            ),
        )


@dataclass(frozen=True)
class ConnectedAccount:
    """The parts of a remote connected account this service reads"""

    id: str
    country: Optional[str] = None
    currently_due: Tuple[str, ...] = ()
