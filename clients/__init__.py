# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_valkey_url,
    get_email_config,
    get_bootstrap_admin,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.email_client import (
    EmailDeliveryError,
    LogOnlyEmailClient,
    ResendEmailClient,
    create_email_client,
)
