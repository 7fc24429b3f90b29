"""
Database configuration for Microsoft SQL Server
Supports local development, testing, and Azure SQL deployment
Environment-aware configuration based on APP_ENV
"""

import os
from dataclasses import dataclass
from typing import Optional, Literal
from pathlib import Path
from dotenv import load_dotenv

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists. Nothing is printed: stdout belongs to
    the MCP stdio transport.
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    env_file = Path(__file__).parent / f'.env.{mode}'

    if env_file.exists():
        # override=False lets variables from the host (e.g. the MCP client config)
        # take precedence over .env file values.
        load_dotenv(env_file, override=False)

    return mode


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


def _odbc_value(value: str) -> str:
    """Brace-quote an ODBC attribute value when it contains reserved characters"""
    if any(ch in value for ch in ";{}") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


@dataclass
class DatabaseConfig:
    """SQL Server database configuration"""

    server: str
    port: int
    database: str
    user: str
    password: str

    driver: str = DEFAULT_ODBC_DRIVER

    # Connection pool settings
    min_pool_size: int = 1
    max_pool_size: int = 10
    connect_timeout: int = 30  # seconds
    command_timeout: int = 60  # seconds

    # TLS settings (Azure SQL requires encryption)
    encrypt: bool = True
    trust_server_certificate: bool = False

    @property
    def odbc_connection_string(self) -> str:
        """Get the ODBC connection string used by aioodbc/pyodbc"""
        parts = [
            f"DRIVER={{{self.driver}}}",
            f"SERVER={self.server},{self.port}",
            f"DATABASE={_odbc_value(self.database)}",
            f"UID={_odbc_value(self.user)}",
            f"PWD={_odbc_value(self.password)}",
            f"Encrypt={'yes' if self.encrypt else 'no'}",
            f"TrustServerCertificate={'yes' if self.trust_server_certificate else 'no'}",
        ]
        return ";".join(parts) + ";"

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_SERVER: SQL Server host (default: localhost)
        - DB_PORT: SQL Server port (default: 1433)
        - DB_NAME: Database name (default: master)
        - DB_USER: Database login (default: sa)
        - DB_PASSWORD: Database password
        - DB_DRIVER: ODBC driver name (default: ODBC Driver 18 for SQL Server)
        - DB_ENCRYPT: Encrypt the connection (default: true)
        - DB_TRUST_SERVER_CERTIFICATE: Skip certificate validation
          (default: true in development, false otherwise)

        Args:
            mode: Override environment mode (default: reads from APP_ENV)
        """
        mode = load_app_environment(mode)

        config = cls(
            server=os.getenv('DB_SERVER', 'localhost'),
            port=int(os.getenv('DB_PORT', '1433')),
            database=os.getenv('DB_NAME', 'master'),
            user=os.getenv('DB_USER', 'sa'),
            password=os.getenv('DB_PASSWORD', ''),
            driver=os.getenv('DB_DRIVER', DEFAULT_ODBC_DRIVER),
            encrypt=_env_flag('DB_ENCRYPT', True),
            trust_server_certificate=_env_flag('DB_TRUST_SERVER_CERTIFICATE', mode == 'development'),
            min_pool_size=int(os.getenv('DB_MIN_POOL_SIZE', '1')),
            max_pool_size=int(os.getenv('DB_MAX_POOL_SIZE', '10')),
            connect_timeout=int(os.getenv('DB_CONNECT_TIMEOUT', '30')),
            command_timeout=int(os.getenv('DB_COMMAND_TIMEOUT', '60')),
        )

        # Safety check
        config.validate_safety(mode)

        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database.lower():
                raise ValueError(f"SAFETY ERROR: Test mode requested but database is '{self.database}'. Test database must contain 'test'.")
            if 'prod' in self.database.lower():
                raise ValueError(f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production.")

        if self.min_pool_size > self.max_pool_size:
            raise ValueError(
                f"DB_MIN_POOL_SIZE ({self.min_pool_size}) cannot exceed DB_MAX_POOL_SIZE ({self.max_pool_size})"
            )

    @classmethod
    def for_local_development(cls) -> 'DatabaseConfig':
        """Configuration for a local SQL Server container"""
        return cls(
            server='localhost',
            port=1433,
            database='master',
            user='sa',
            password='',
            encrypt=False,  # Less strict for local
            trust_server_certificate=True,
            min_pool_size=1,
            max_pool_size=5,
        )

    @classmethod
    def for_azure(
        cls,
        server_name: str,
        database_name: str,
        admin_user: str,
        admin_password: str
    ) -> 'DatabaseConfig':
        """
        Configuration for Azure SQL Database

        Args:
            server_name: Azure server name (e.g., 'myserver')
            database_name: Database name
            admin_user: Admin login
            admin_password: Admin password

        Returns:
            DatabaseConfig configured for Azure
        """
        # Azure SQL uses format: server.database.windows.net
        host = f"{server_name}.database.windows.net"

        return cls(
            server=host,
            port=1433,
            database=database_name,
            user=admin_user,
            password=admin_password,
            encrypt=True,  # Azure requires TLS
            trust_server_certificate=False,
            min_pool_size=1,
            max_pool_size=20,
        )


# Utility functions
def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore


def is_test_mode() -> bool:
    """Check if running in test mode"""
    return get_environment_mode() == 'test'


def is_production_mode() -> bool:
    """Check if running in production mode"""
    return get_environment_mode() == 'production'
