"""Domain port definitions for adapters."""

from __future__ import annotations

from .auth import TokenProvider
from .provisioning import ChannelRegistrar, CredentialSink, IdentityProvisioner, PackageImporter
from .resources import ResourceStore

__all__ = [
    "ChannelRegistrar",
    "CredentialSink",
    "IdentityProvisioner",
    "PackageImporter",
    "ResourceStore",
    "TokenProvider",
]
