"""
CRC — infrastructure/cloud/null.py

Name
- NullProvisioner

Responsibilities
- Stand in for the cloud provisioner when Azure is not configured
  (local development, tests): nothing is created, nothing fails.
"""

from __future__ import annotations

from typing import Optional

from ...domain.entities import ProvisionedResources


class NullProvisioner:
    def is_configured(self) -> bool:
        return False

    def provision(
        self, dns_zone_name: str, project_name: str
    ) -> Optional[ProvisionedResources]:
        return None

    def register_custom_domain(self, static_app_name: str, domain: str) -> None:
        return None

    def teardown(self, dns_zone_name: str, static_app_name: str) -> None:
        return None
