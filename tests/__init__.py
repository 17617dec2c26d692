"""
CareSpace Tests

Running Tests:
    # Run all tests
    pytest

    # Unit tests only
    pytest tests/unit -v

    # API tests (FastAPI TestClient, temporary CSV data)
    pytest tests/api -v

Test Coverage:
    - Interval conflict checks
    - Activity and specialty compatibility rules
    - Availability engine and optimal matches
    - Booking creation, conflicts and concurrent requests
    - CSV entity store and atomic flush
    - Chat request extraction and replies
    - HTTP routes and error mapping
"""
