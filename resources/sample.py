"""Azure Network sample for creating a simple Internet facing load balancer

Creates two virtual machines in the same availability set and virtual
network, then an Internet facing load balancer with

- a public IP address assigned to the frontend
- one backend address pool holding both virtual machines
- one HTTP probe
- one load balancing rule mapping port 80 on the load balancer to port 80
  in the backend address pool

and finally deletes the load balancer and the resource group.
"""

import logging

from azure.core.exceptions import ResourceNotFoundError

from resources import config
from resources import resources as steps
from resources.clients import AzureClients
from resources.config import SampleNames, Settings

logger = logging.getLogger(__name__)


def run_sample(clients, names=None):
    if names is None:
        names = SampleNames.generate()

    resource_group_name = None
    try:
        resource_group = steps.create_resource_group(clients, names.resource_group)
        resource_group_name = resource_group.name

        availability_set = steps.create_availability_set(
            clients, resource_group, names.availability_set
        )
        vnet = steps.create_virtual_network(clients, resource_group, names.vnet)
        subnet_id = vnet.subnets[0].id
        nsg = steps.create_network_security_group(
            clients, resource_group, names.network_security_group
        )

        logger.info(
            "Creating two virtual machines in the frontend subnet ...\n"
            "and putting them in the shared availability set and virtual network."
        )
        nics = []
        for vm_name, nic_name in zip(names.vms, names.nics):
            nic = steps.create_network_interface(
                clients, resource_group, nic_name, subnet_id, nsg.id
            )
            steps.create_virtual_machine(
                clients, resource_group, vm_name, nic.id, availability_set.id
            )
            nics.append(nic)

        public_ip = steps.create_public_ip(clients, resource_group, names.public_ip)
        load_balancer = steps.create_load_balancer(
            clients, resource_group, names, public_ip.id
        )

        logger.info("Enable load balancer...")
        pool_id = load_balancer.backend_address_pools[0].id
        for nic in nics:
            steps.attach_to_backend_pool(clients, resource_group, nic, pool_id)

        load_balancer = steps.update_idle_timeout(
            clients,
            resource_group,
            names.load_balancer,
            names.http_rule,
            config.idle_timeout_in_minutes,
        )
        steps.log_load_balancer(load_balancer)

        steps.delete_load_balancer(clients, resource_group, names.load_balancer)
        return load_balancer
    finally:
        if resource_group_name is None:
            logger.info(
                "Did not create any resources in Azure. No clean up is necessary"
            )
        else:
            try:
                steps.delete_resource_group(clients, resource_group_name)
            except ResourceNotFoundError:
                logger.info("Resource Group %s is already gone", resource_group_name)
            except Exception:
                logger.exception(
                    "Failed to delete Resource Group %s", resource_group_name
                )


def configure_logging():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(
        logging.WARNING
    )
    logging.getLogger("azure.identity").setLevel(logging.WARNING)


def main(environ=None):
    configure_logging()
    try:
        settings = Settings.from_env(environ)
        clients = AzureClients.from_settings(settings)
        run_sample(clients)
    except Exception:
        logger.exception("Load balancer sample failed")
