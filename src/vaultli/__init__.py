"""vaultli -- a command-table driven client for the HashiCorp Vault HTTP API.

Each entry of a declarative command table (HTTP method, path template and
optional JSON-Schemas) becomes a method on the client.  Calls are
validated, rendered into a request URI, sent with the client token, and
their responses normalized into a body or a typed error.

Typical usage::

    from vaultli import AsyncVaultClient

    async with AsyncVaultClient(token="s.xxxx") as vault:
        await vault.add_policy(name="ops", rules='path "secret/*" { capabilities = ["read"] }')
        secret = await vault.read("secret/app")

Modules:
    client: Async and sync client facades.
    generator: Binds command table entries to client methods.
    table: Command table loading (packaged ``commands.yaml``).
    validation: JSON-Schema payload validation.
    templating: Path template rendering.
    models: Pydantic models shared across the package.
    config: Environment-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: The ``vaultli`` command line.
"""

from vaultli.client import AsyncVaultClient, VaultClient
from vaultli.exceptions import (
    CommandTableError,
    ConfigError,
    OperationError,
    TransportError,
    ValidationError,
    VaultliError,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncVaultClient",
    "VaultClient",
    "VaultliError",
    "ValidationError",
    "OperationError",
    "TransportError",
    "CommandTableError",
    "ConfigError",
    "__version__",
]
