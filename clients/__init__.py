# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_identity_config,
)
from clients.postgres_client import PostgresClient
from clients.identity_client import IdentityClient, IdentityProviderError, IdentityRejectedError
