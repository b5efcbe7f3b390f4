"""
Unit Tests for the shared-secret checks
"""
import pytest

from hostel_portal.core.exceptions import AuthenticationError
from hostel_portal.core.security import require_bearer_token


class TestRequireBearerToken:

    def test_matching_token_passes(self):
        require_bearer_token("Bearer s3cret", "s3cret")

    @pytest.mark.parametrize("authorization", [None, "", "s3cret", "Bearer other", "bearer s3cret"])
    def test_other_headers_are_rejected(self, authorization):
        with pytest.raises(AuthenticationError) as exc_info:
            require_bearer_token(authorization, "s3cret")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid or missing authorization token"
