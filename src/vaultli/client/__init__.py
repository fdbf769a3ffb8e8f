"""Vault clients for vaultli.

Provides asynchronous and synchronous clients that wrap :mod:`httpx` and
expose the generic verbs (``read``, ``write``, ``list``, ``delete``,
``help``) plus one method per command table entry.

Classes:
    :class:`AsyncVaultClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`VaultClient` -- blocking client backed by :class:`httpx.Client`.

Example::

    from vaultli.client import AsyncVaultClient

    async with AsyncVaultClient() as vault:
        health = await vault.health(standbyok=True)
"""

from vaultli.client.async_client import AsyncVaultClient
from vaultli.client.sync_client import VaultClient

__all__ = ["AsyncVaultClient", "VaultClient"]
