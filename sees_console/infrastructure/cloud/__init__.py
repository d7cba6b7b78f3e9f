"""Cloud provisioning adapters."""

from .azure import AzureConfig, AzureProvisioner
from .null import NullProvisioner

__all__ = ["AzureConfig", "AzureProvisioner", "NullProvisioner"]
