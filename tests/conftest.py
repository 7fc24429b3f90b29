"""
Pytest configuration and shared fixtures for MSSQL MCP Server tests

APPROACH: Stub the database session, not the database
- create_table only needs execute_batch / execute_query
- StubSession records every statement in call order
- No SQL Server or ODBC driver is needed to run the suite
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.stubs import StubDatabase, StubSession


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    """
    import os
    os.environ['PYTEST_RUNNING'] = '1'


@pytest.fixture
def stub_session():
    return StubSession()


@pytest.fixture
def stub_db(stub_session):
    return StubDatabase(stub_session)
