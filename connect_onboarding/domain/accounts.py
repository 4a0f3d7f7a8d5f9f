"""Connected account payloads and requirement inspection.

Everything in here is a pure function of its arguments. Demo-mode data is
synthetic: the values trigger automatic verification in Stripe test mode
(https://stripe.com/docs/connect/testing) so that hosted onboarding can be
skipped. A real deployment collects this data from the user instead.
"""

from typing import Any, Dict, List

from connect_onboarding.domain.models import ConnectedAccount, FinancialProduct

CAPABILITIES = {
    "transfers": {"requested": True},
    "card_issuing": {"requested": True},
}

IGNORED_REQUIREMENTS = frozenset({"external_account"})

# Fixed Terms of Service acceptance used when faking onboarding
TOS_ACCEPTANCE = {"date": 1691518261, "ip": "127.0.0.1"}

DEMO_ID_NUMBER = "000000000"
DEMO_TAX_ID = "000000000"
DEMO_MCC = "5734"  # Computer software stores
DEMO_PRODUCT_DESCRIPTION = "Some demo product"
DEMO_URL = "https://some-company.com"
DEMO_FIRST_NAME = "John"
DEMO_LAST_NAME = "Smith"
DEMO_PHONE = "2015550123"
DEMO_DOB = {"day": 1, "month": 1, "year": 1901}

# Address line that makes test mode verify the address
AUTO_VERIFY_ADDRESS_LINE1 = "address_full_match"

DEMO_ADDRESSES: Dict[str, Dict[str, str]] = {
    "US": {"city": "South San Francisco", "state": "CA", "postal_code": "94080"},
    "GB": {"city": "London", "postal_code": "WC32 4AP"},
}


def build_account_create_params(email: str, country: str, demo_mode: bool) -> Dict[str, Any]:
    """Parameters for creating a custom connected account"""
    params: Dict[str, Any] = {
        "type": "custom",
        "country": country,
        "email": email,
        "capabilities": CAPABILITIES,
    }
    if demo_mode:
        params["business_type"] = "individual"
        params["individual"] = {"id_number": DEMO_ID_NUMBER}
    return params


def demo_address(country: str) -> Dict[str, str]:
    """Test-mode address; only the country is known for unlisted countries"""
    return {
        "line1": AUTO_VERIFY_ADDRESS_LINE1,
        **DEMO_ADDRESSES.get(country, {}),
        "country": country,
    }


def build_account_update_params(
    business_name: str,
    email: str,
    country: str,
    financial_product: FinancialProduct,
    demo_mode: bool,
    skip_onboarding: bool = False,
) -> Dict[str, Any]:
    """
    Parameters for the onboarding account update.

    Outside demo mode only the business name is sent. In demo mode a full
    synthetic KYC profile is added, and when onboarding is skipped the
    Terms of Service are accepted on the account and for card issuing (and
    for treasury when the product is Embedded Finance).
    """
    params: Dict[str, Any] = {"business_profile": {"name": business_name}}
    if not demo_mode:
        return params

    params.update(
        {
            "business_type": "individual",
            "business_profile": {
                "name": business_name,
                "mcc": DEMO_MCC,
                "product_description": DEMO_PRODUCT_DESCRIPTION,
                "url": DEMO_URL,
            },
            "company": {"name": business_name, "tax_id": DEMO_TAX_ID},
            "individual": {
                "address": demo_address(country),
                "dob": dict(DEMO_DOB),
                "email": email,
                "first_name": DEMO_FIRST_NAME,
                "last_name": DEMO_LAST_NAME,
                "phone": DEMO_PHONE,
            },
        }
    )

    if skip_onboarding:
        params["tos_acceptance"] = dict(TOS_ACCEPTANCE)
        params["settings"] = {"card_issuing": {"tos_acceptance": dict(TOS_ACCEPTANCE)}}
        if financial_product == FinancialProduct.EMBEDDED_FINANCE:
            params["settings"]["treasury"] = {"tos_acceptance": dict(TOS_ACCEPTANCE)}

    return params


def outstanding_requirements(account: ConnectedAccount) -> List[str]:
    """Currently-due requirements that still block the account"""
    return [item for item in account.currently_due if item not in IGNORED_REQUIREMENTS]
