from integrations.provider import MetadataProvider, ProviderRegistry  # noqa: F401
from integrations.postgresql_provider import PostgresProvider  # noqa: F401
from integrations.sqlite_provider import SqliteProvider  # noqa: F401


def build_provider_registry() -> ProviderRegistry:
    """Registry with one provider per supported database engine."""
    return ProviderRegistry({
        SqliteProvider.name: SqliteProvider(),
        PostgresProvider.name: PostgresProvider(),
    })
