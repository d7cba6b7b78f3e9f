"""
CRC — domain/services.py

Name
- External service interfaces (Protocols)

Responsibilities
- Define the contract of the cloud provisioner (DNS zone + static site).

Collaborators
- infrastructure.cloud.azure.AzureProvisioner
- infrastructure.cloud.null.NullProvisioner
- application.provisioning: best-effort orchestration

Constraints
- Implementations are synchronous SDK adapters; callers run them in a thread.
- Failures raise crosscutting.exceptions.CloudProvisioningError.
"""

from __future__ import annotations

import re
from typing import Optional, Protocol

from .entities import ProvisionedResources


def project_name_for(domain: str) -> str:
    """example.co.jp -> example-co-jp (lowercase alnum and dashes)."""
    slug = re.sub(r"[^a-z0-9]+", "-", (domain or "").lower()).strip("-")
    return slug or "site"


class CloudProvisioner(Protocol):
    def is_configured(self) -> bool: ...

    def provision(
        self, dns_zone_name: str, project_name: str
    ) -> Optional[ProvisionedResources]:
        """R: None when provisioning is disabled."""
        ...

    def register_custom_domain(self, static_app_name: str, domain: str) -> None: ...

    def teardown(self, dns_zone_name: str, static_app_name: str) -> None: ...
