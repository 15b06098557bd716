"""Schema management for the SQL-backed providers of a domain.

The memory provider needs no schema, so only sqlite and postgresql providers
are touched.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for provider in domain.providers.values():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield provider


def _register_tables(domain: Domain, provider) -> None:
    # Touching the DAO is what registers a model's table in the provider metadata.
    records = [*domain.registry.aggregates.values(), *domain.registry.entities.values()]
    for record in records:
        if record.cls.meta_.provider == provider.name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _sql_providers(domain):
            _register_tables(domain, provider)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("schema_created", domain=domain.name, provider=provider.name)


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _sql_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("schema_dropped", domain=domain.name, provider=provider.name)
