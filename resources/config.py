"""Settings and fixed names for the load balancer sample"""

import os
import uuid
from dataclasses import dataclass

location = "westus"

vnet_address_prefix = "172.16.0.0/16"
subnet_name = "Front-end"
subnet_address_prefix = "172.16.1.0/24"

http_port = 80
probe_interval_in_seconds = 10
number_of_probes = 2
probe_request_path = "/"
idle_timeout_in_minutes = 15

vm_size = "Standard_DS1_v2"
admin_username = "adminuser"
image_reference = {
    "publisher": "Canonical",
    "offer": "0001-com-ubuntu-server-jammy",
    "sku": "22_04-lts",
    "version": "latest",
}

REQUIRED_ENV = ("CLIENT_ID", "CLIENT_SECRET", "TENANT_ID", "SUBSCRIPTION_ID")


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    tenant_id: str
    subscription_id: str

    @classmethod
    def from_env(cls, environ=None):
        if environ is None:
            environ = os.environ

        missing = [name for name in REQUIRED_ENV if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                "Missing environment variables: " + ", ".join(missing)
            )

        return cls(
            client_id=environ["CLIENT_ID"],
            client_secret=environ["CLIENT_SECRET"],
            tenant_id=environ["TENANT_ID"],
            subscription_id=environ["SUBSCRIPTION_ID"],
        )


def random_name(prefix: str) -> str:
    return prefix + uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class SampleNames:
    resource_group: str
    vnet: str
    load_balancer: str
    public_ip: str
    availability_set: str
    vms: tuple
    nics: tuple
    http_rule: str = "httpRule"
    http_probe: str = "httpProbe"

    @property
    def network_security_group(self) -> str:
        return self.vnet + "-nsg"

    @property
    def frontend(self) -> str:
        return self.load_balancer + "-FE"

    @property
    def backend_pool(self) -> str:
        return self.load_balancer + "-BAP"

    @classmethod
    def generate(cls):
        return cls(
            resource_group=random_name("NetworkSampleRG"),
            vnet=random_name("vnet"),
            load_balancer=random_name("lb"),
            public_ip=random_name("pip"),
            availability_set=random_name("av"),
            vms=(random_name("vm1-"), random_name("vm2-")),
            nics=(random_name("nic"), random_name("nic")),
        )
