# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Portfolio API:
# - test_utils.py: Validation helpers (order, tags, URLs, image values)
# - test_uploads.py: UploadGuard and ImageResolver
# - test_config_store.py: Document persistence, atomic writes, write queue
# - test_repositories.py: Profile and project repositories
# - test_auth.py: Sessions, admin login, CSRF and the write gate
# - test_api.py: End-to-end endpoint tests
#
# Run tests with: pytest
# =============================================================================
