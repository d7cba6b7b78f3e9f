"""
===============================================================================
CRC CARD — infrastructure/cloud/azure.py
===============================================================================

Class:
  AzureProvisioner (Adapter)

Responsibilities:
  - Implement domain.services.CloudProvisioner on Azure:
      DNS zone (azure-mgmt-dns) + Static Web App (azure-mgmt-web).
  - Register a custom domain on an existing Static Web App.
  - Tear down both resources.
  - Hide the SDK: every error raised while talking to Azure (AzureError,
    but also ValueError from ClientSecretCredential on a malformed tenant id)
    becomes CloudProvisioningError.

Collaborators:
  - domain.services.CloudProvisioner (port)
  - domain.entities.ProvisionedResources
  - azure-identity ClientSecretCredential

Design decisions:
  - Fail-fast config validation in the constructor.
  - Lazy import of the management SDKs and lazy client construction to keep
    startup cheap when provisioning is never used.
  - Clients are injectable for tests.
  - Static app names follow `stapp-{project}-{env}-je-001-{suffix}`; the SKU
    is Standard for `prd` and Free otherwise.
===============================================================================
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Any, Optional

from ...crosscutting.exceptions import CloudProvisioningError
from ...crosscutting.logger import logger
from ...domain.entities import ProvisionedResources

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 5
_STATIC_APP_NAME_MAX = 40
_PRODUCTION_ENV = "prd"


@dataclass(frozen=True)
class AzureConfig:
    subscription_id: str
    tenant_id: str
    client_id: str
    client_secret: str
    resource_group: str
    location: str = "eastasia"
    environment: str = "dev"

    def is_complete(self) -> bool:
        return all(
            (v or "").strip()
            for v in (
                self.subscription_id,
                self.tenant_id,
                self.client_id,
                self.client_secret,
                self.resource_group,
            )
        )

    @property
    def env_code(self) -> str:
        return _PRODUCTION_ENV if self.environment == _PRODUCTION_ENV else "dev"

    @property
    def sku_name(self) -> str:
        return "Standard" if self.env_code == _PRODUCTION_ENV else "Free"


def generate_static_app_name(project_name: str, env_code: str) -> str:
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    fixed = f"stapp--{env_code}-je-001-{suffix}"
    room = max(1, _STATIC_APP_NAME_MAX - len(fixed))
    project = project_name[:room].strip("-") or "site"
    return f"stapp-{project}-{env_code}-je-001-{suffix}"


class AzureProvisioner:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      AzureProvisioner

    Responsibilities:
      - provision / register_custom_domain / teardown

    Collaborators:
      - DnsManagementClient, WebSiteManagementClient
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        config: AzureConfig,
        *,
        dns_client: Any = None,
        web_client: Any = None,
    ) -> None:
        if not config.is_complete():
            raise ValueError(
                "Azure provisioning requires subscription, tenant, client id/secret "
                "and resource group"
            )
        self._config = config
        self._dns_client = dns_client
        self._web_client = web_client

    # =========================================================================
    # SDK clients (lazy)
    # =========================================================================

    def _credential(self):
        from azure.identity import ClientSecretCredential

        return ClientSecretCredential(
            tenant_id=self._config.tenant_id,
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
        )

    def _dns(self):
        if self._dns_client is None:
            from azure.mgmt.dns import DnsManagementClient

            self._dns_client = DnsManagementClient(
                self._credential(), self._config.subscription_id
            )
        return self._dns_client

    def _web(self):
        if self._web_client is None:
            from azure.mgmt.web import WebSiteManagementClient

            self._web_client = WebSiteManagementClient(
                self._credential(), self._config.subscription_id
            )
        return self._web_client

    # =========================================================================
    # Port
    # =========================================================================

    def is_configured(self) -> bool:
        return True

    def provision(
        self, dns_zone_name: str, project_name: str
    ) -> Optional[ProvisionedResources]:
        from azure.mgmt.dns.models import Zone
        from azure.mgmt.web.models import SkuDescription, StaticSiteARMResource

        cfg = self._config
        static_app_name = generate_static_app_name(project_name, cfg.env_code)
        logger.info(
            "Provisioning cloud resources",
            extra={
                "dns_zone_name": dns_zone_name,
                "static_app_name": static_app_name,
                "sku": cfg.sku_name,
            },
        )

        try:
            zone = self._dns().zones.create_or_update(
                cfg.resource_group,
                dns_zone_name,
                Zone(location="global", zone_type="Public"),
            )
            site = (
                self._web()
                .static_sites.begin_create_or_update_static_site(
                    cfg.resource_group,
                    static_app_name,
                    StaticSiteARMResource(
                        location=cfg.location,
                        sku=SkuDescription(name=cfg.sku_name, tier=cfg.sku_name),
                        provider="None",
                        staging_environment_policy="Enabled",
                        allow_config_file_updates=True,
                        enterprise_grade_cdn_status="Disabled",
                    ),
                )
                .result()
            )
        except Exception as exc:
            raise CloudProvisioningError(
                "Cloud provisioning failed", original_error=exc
            ) from exc

        resources = ProvisionedResources(
            static_app_name=static_app_name,
            static_app_url=getattr(site, "default_hostname", None) or "",
            dns_zone_name=dns_zone_name,
            name_servers=list(getattr(zone, "name_servers", None) or []),
        )
        logger.info(
            "Cloud resources provisioned",
            extra={
                "dns_zone_name": dns_zone_name,
                "static_app_name": static_app_name,
                "name_servers": resources.name_servers,
            },
        )
        return resources

    def register_custom_domain(self, static_app_name: str, domain: str) -> None:
        from azure.mgmt.web.models import (
            StaticSiteCustomDomainRequestPropertiesARMResource,
        )

        logger.info(
            "Registering custom domain",
            extra={"static_app_name": static_app_name, "domain": domain},
        )
        try:
            (
                self._web()
                .static_sites.begin_create_or_update_static_site_custom_domain(
                    self._config.resource_group,
                    static_app_name,
                    domain,
                    StaticSiteCustomDomainRequestPropertiesARMResource(),
                )
                .result()
            )
        except Exception as exc:
            raise CloudProvisioningError(
                "Custom domain registration failed", original_error=exc
            ) from exc

    def teardown(self, dns_zone_name: str, static_app_name: str) -> None:

        cfg = self._config
        logger.info(
            "Deleting cloud resources",
            extra={"dns_zone_name": dns_zone_name, "static_app_name": static_app_name},
        )
        try:
            if static_app_name:
                self._web().static_sites.begin_delete_static_site(
                    cfg.resource_group, static_app_name
                ).result()
            if dns_zone_name:
                self._dns().zones.begin_delete(
                    cfg.resource_group, dns_zone_name
                ).result()
        except Exception as exc:
            raise CloudProvisioningError(
                "Cloud teardown failed", original_error=exc
            ) from exc
