"""Unit tests for structured outcome logs"""

import logging
from connect_onboarding.infrastructure.observability.logging import log_registration


def test_registration_log_omits_email(caplog):
    with caplog.at_level(logging.INFO):
        log_registration("req-1", "acct_test_1", "US", 12.5)

    record = caplog.records[-1]
    assert record.getMessage() == "Registration completed"
    assert record.account_id == "acct_test_1"
    assert not hasattr(record, "email")
