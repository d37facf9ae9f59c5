from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the generator maintenance back office.

The loader (gensetdesk/config/loader.py) builds these from the YAML file;
every field has a default so callers (and tests) can construct them directly.
"""

# client names must be longer than 2 characters; config may only raise this
MIN_NAME_LENGTH = 3

DEFAULT_HEADER_TOKENS: frozenset[str] = frozenset(
    {
        "name",
        "client",
        "company name",
        "nombre",
        "cliente",
        "razon social",
        "empresa",
    }
)


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportDefaults:
    """Defaults applied by the tabular import normalizer.

    fallback_province is the operator's most common region, used when a row
    only carries ``[name, city]``. unknown_placeholder marks a province/city
    that was not supplied at all, and differs from the empty string.
    """
    fallback_province: str = "Misiones"
    unknown_placeholder: str = "Desconocida"
    missing_placeholder: str = "-"  # address / phone not supplied
    min_name_length: int = MIN_NAME_LENGTH
    header_tokens: frozenset[str] = DEFAULT_HEADER_TOKENS


@dataclass(frozen=True)
class AlertSettings:
    horizon_days: int = 30
    urgent_days: int = 7


@dataclass(frozen=True)
class TableNames:
    clients: str = "clients"
    equipment: str = "equipment"
    services: str = "services"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    import_defaults: ImportDefaults = field(default_factory=ImportDefaults)
    alerts: AlertSettings = field(default_factory=AlertSettings)
    tables: TableNames = field(default_factory=TableNames)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
