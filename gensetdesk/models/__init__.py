"""Domain models for the generator maintenance back office.

Clients and their import drafts, installed equipment with its maintenance
alerts, configuration records and import results.
"""

from .client import Client, ClientDraft, ClientStatus
from .config_models import AlertSettings, AppConfig, DatabaseConfig, ImportDefaults, TableNames
from .equipment import AlertEntry, AlertReport, Equipment, Service, Urgency
from .import_result import ImportResult, InsertTally, NormalizeResult

__all__ = [
    # Configuration models
    "AlertSettings",
    "AppConfig",
    "DatabaseConfig",
    "ImportDefaults",
    "TableNames",
    # Client models
    "Client",
    "ClientDraft",
    "ClientStatus",
    # Equipment / alert models
    "AlertEntry",
    "AlertReport",
    "Equipment",
    "Service",
    "Urgency",
    # Import results
    "ImportResult",
    "InsertTally",
    "NormalizeResult",
]
