from dataclasses import dataclass

from azure.identity import ClientSecretCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient


@dataclass
class AzureClients:
    """Management clients sharing one credential and subscription."""

    resource: ResourceManagementClient
    network: NetworkManagementClient
    compute: ComputeManagementClient

    @classmethod
    def from_settings(cls, settings):
        credential = ClientSecretCredential(
            tenant_id=settings.tenant_id,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
        )
        return cls(
            resource=ResourceManagementClient(credential, settings.subscription_id),
            network=NetworkManagementClient(credential, settings.subscription_id),
            compute=ComputeManagementClient(credential, settings.subscription_id),
        )
