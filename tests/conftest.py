"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import importlib
import os
import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


def _prepare_schema(db_url: str) -> None:
    """Create the tables and install the aggregate deletion preview."""
    from sqlalchemy import create_engine, text
    from database.models import Base

    migration = importlib.import_module("migrations.001_cascade_user_deletion")

    engine = create_engine(db_url)
    Base.metadata.create_all(engine)
    with engine.connect() as conn:
        conn.execute(text(migration.PREVIEW_FUNCTION_SQL))
        conn.commit()
    engine.dispose()


@pytest.fixture(scope="session")
def test_database():
    """
    Session-scoped fixture that automatically manages the test database container.

    Uses testcontainers to start PostgreSQL before tests and stops it after
    all tests complete. Falls back to external database if TEST_DATABASE_URL
    is set.
    """
    # If TEST_DATABASE_URL is set, use external database
    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        from tests import check_db_available
        if check_db_available():
            _prepare_schema(external_url)
            yield external_url
            return
        else:
            pytest.skip("External database not available")

    # Try to use testcontainers for automatic container management
    try:
        from testcontainers.postgres import PostgresContainer

        postgres = PostgresContainer(
            image="postgres:16",
            username="testuser",
            password="testpass",
            dbname="eduprima_test",
            port=5432
        )
        postgres.start()
    except Exception as e:
        print(f"\n⚠ Failed to start test database container:")
        print(f"   {e}")
        pytest.skip(f"Could not start test database container: {e}")

    try:
        db_url = postgres.get_connection_url()
        _prepare_schema(db_url)
        print(f"\n✓ Test database started: {db_url}")

        yield db_url
    finally:
        # Cleanup after all tests
        postgres.stop()
        print("\n✓ Test database stopped")


@pytest.fixture(scope="session")
def test_db_url(test_database):
    """Get test database URL."""
    return test_database
