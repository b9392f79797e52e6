# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ContactRelay API:
# - test_models.py: Pydantic model and error category tests
# - test_config.py: Settings parsing and computed properties
# - test_contact_service.py: Validation, composition and delivery mapping
# - test_rate_limiter.py: Sliding window throttle
# - test_mailer.py: SMTP transport pool and error classification
# - test_api.py: Endpoint tests through FastAPI's TestClient
#
# Run tests with: poetry run pytest
# =============================================================================
