"""Schema management for SQL-backed FleetOps providers."""

from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield provider


def _register_models(domain: Domain, provider) -> None:
    # Touching each repository's DAO registers its SQLAlchemy model with the provider
    records = list(domain.registry.aggregates.values()) + list(domain.registry.entities.values())
    for record in records:
        if record.cls.meta_.provider == provider.name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables for orders, drivers and proofs."""
    with domain.domain_context():
        for provider in _sql_providers(domain):
            _register_models(domain, provider)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))


def drop_db(domain: Domain) -> None:
    """Drop every table created by ``setup_db``."""
    with domain.domain_context():
        for provider in _sql_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
