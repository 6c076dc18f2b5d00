"""
Test Suite

Unit tests cover the engine (lifecycle, scopes, password policy, audit
writer) and the services; the test_api_* modules drive the HTTP surface
through FastAPI's TestClient. Storage is an in-memory mongomock database.

To run tests:
    pytest
    pytest backend/tests/test_api_requests.py
"""
