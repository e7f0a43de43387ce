import logging
import secrets

from azure.mgmt.compute import models as compute
from azure.mgmt.network import models as network
from azure.mgmt.resource.resources.models import ResourceGroup

from resources import config

logger = logging.getLogger(__name__)


def resource_group_params(location):
    return ResourceGroup(location=location)


def availability_set_params(location):
    return compute.AvailabilitySet(
        location=location,
        platform_fault_domain_count=1,
        platform_update_domain_count=1,
        sku=compute.Sku(name="Aligned"),
    )


def virtual_network_params(location):
    return network.VirtualNetwork(
        location=location,
        address_space=network.AddressSpace(
            address_prefixes=[config.vnet_address_prefix],
        ),
        subnets=[
            network.Subnet(
                name=config.subnet_name,
                address_prefix=config.subnet_address_prefix,
            ),
        ],
    )


def network_security_group_params(location):
    return network.NetworkSecurityGroup(
        location=location,
        security_rules=[
            network.SecurityRule(
                name="allow-80-inbound",
                priority=110,
                source_address_prefix="*",
                source_port_range="*",
                destination_address_prefix="*",
                destination_port_range=str(config.http_port),
                access=network.SecurityRuleAccess.ALLOW,
                direction=network.SecurityRuleDirection.INBOUND,
                protocol=network.SecurityRuleProtocol.TCP,
            ),
        ],
    )


def network_interface_params(location, subnet_id, nsg_id):
    return network.NetworkInterface(
        location=location,
        network_security_group=network.NetworkSecurityGroup(id=nsg_id),
        ip_configurations=[
            network.NetworkInterfaceIPConfiguration(
                name="default-config",
                subnet=network.Subnet(id=subnet_id),
                private_ip_allocation_method=network.IPAllocationMethod.DYNAMIC,
            )
        ],
    )


def admin_password():
    # Azure wants three of: lower, upper, digit, special
    return secrets.token_urlsafe(16) + "Aa1!"


def virtual_machine_params(location, vm_name, nic_id, availability_set_id, password):
    return compute.VirtualMachine(
        location=location,
        availability_set=compute.SubResource(id=availability_set_id),
        hardware_profile=compute.HardwareProfile(
            vm_size=config.vm_size,
        ),
        storage_profile=compute.StorageProfile(
            image_reference=compute.ImageReference(**config.image_reference),
            os_disk=compute.OSDisk(
                create_option=compute.DiskCreateOptionTypes.FROM_IMAGE,
                caching=compute.CachingTypes.READ_WRITE,
                managed_disk=compute.ManagedDiskParameters(
                    storage_account_type=compute.StorageAccountTypes.STANDARD_LRS,
                ),
                delete_option=compute.DiskDeleteOptionTypes.DELETE,
            ),
        ),
        os_profile=compute.OSProfile(
            computer_name=vm_name,
            admin_username=config.admin_username,
            admin_password=password,
        ),
        network_profile=compute.NetworkProfile(
            network_interfaces=[
                compute.NetworkInterfaceReference(id=nic_id, primary=True),
            ],
        ),
    )


def public_ip_params(location):
    return network.PublicIPAddress(
        location=location,
        sku=network.PublicIPAddressSku(
            name=network.PublicIPAddressSkuName.STANDARD,
        ),
        public_ip_allocation_method=network.IPAllocationMethod.STATIC,
    )


def load_balancer_child_id(resource_group_id, lb_name, kind, child_name):
    return (
        f"{resource_group_id}/providers/Microsoft.Network/loadBalancers/"
        f"{lb_name}/{kind}/{child_name}"
    )


def load_balancer_params(location, resource_group_id, names, public_ip_id):
    def child_id(kind, child_name):
        return load_balancer_child_id(
            resource_group_id, names.load_balancer, kind, child_name
        )

    return network.LoadBalancer(
        location=location,
        sku=network.LoadBalancerSku(
            name=network.LoadBalancerSkuName.STANDARD,
            tier=network.LoadBalancerSkuTier.REGIONAL,
        ),
        frontend_ip_configurations=[
            network.FrontendIPConfiguration(
                name=names.frontend,
                public_ip_address=network.PublicIPAddress(id=public_ip_id),
            ),
        ],
        backend_address_pools=[
            network.BackendAddressPool(
                name=names.backend_pool,
            )
        ],
        probes=[
            network.Probe(
                name=names.http_probe,
                protocol=network.ProbeProtocol.HTTP,
                port=config.http_port,
                request_path=config.probe_request_path,
                interval_in_seconds=config.probe_interval_in_seconds,
                number_of_probes=config.number_of_probes,
            ),
        ],
        load_balancing_rules=[
            network.LoadBalancingRule(
                name=names.http_rule,
                frontend_ip_configuration=network.SubResource(
                    id=child_id("frontendIPConfigurations", names.frontend),
                ),
                backend_address_pool=network.SubResource(
                    id=child_id("backendAddressPools", names.backend_pool),
                ),
                probe=network.SubResource(
                    id=child_id("probes", names.http_probe),
                ),
                protocol=network.TransportProtocol.TCP,
                frontend_port=config.http_port,
                backend_port=config.http_port,
                idle_timeout_in_minutes=config.idle_timeout_in_minutes,
                enable_floating_ip=False,
                load_distribution=network.LoadDistribution.DEFAULT,
            ),
        ],
    )


def add_backend_pool(nic, pool_id):
    """Add ``pool_id`` to the first IP configuration of ``nic`` in place."""
    ip_configuration = nic.ip_configurations[0]
    pools = ip_configuration.load_balancer_backend_address_pools or []
    # ARM is not consistent about the casing of resource IDs
    if not any(pool.id and pool.id.lower() == pool_id.lower() for pool in pools):
        pools.append(network.BackendAddressPool(id=pool_id))
    ip_configuration.load_balancer_backend_address_pools = pools
    return nic


def set_idle_timeout(load_balancer, rule_name, minutes):
    for rule in load_balancer.load_balancing_rules or []:
        if rule.name == rule_name:
            rule.idle_timeout_in_minutes = minutes
            return load_balancer
    raise LookupError(
        f"Load balancer {load_balancer.name} has no rule named {rule_name}"
    )


def create_resource_group(clients, name, location=config.location):
    logger.info("Creating resource group...")
    resource_group = clients.resource.resource_groups.create_or_update(
        name, resource_group_params(location)
    )
    logger.info("Created a resource group with name: %s", resource_group.name)
    return resource_group


def create_availability_set(clients, resource_group, name):
    logger.info("Creating an availability set ...")
    availability_set = clients.compute.availability_sets.create_or_update(
        resource_group.name, name, availability_set_params(resource_group.location)
    )
    logger.info("Created availability set: %s", availability_set.name)
    return availability_set


def create_virtual_network(clients, resource_group, name):
    logger.info("Creating virtual network...")
    vnet = clients.network.virtual_networks.begin_create_or_update(
        resource_group.name, name, virtual_network_params(resource_group.location)
    ).result()
    logger.info("Created a virtual network: %s", vnet.name)
    return vnet


def create_network_security_group(clients, resource_group, name):
    logger.info("Creating network security group...")
    nsg = clients.network.network_security_groups.begin_create_or_update(
        resource_group.name,
        name,
        network_security_group_params(resource_group.location),
    ).result()
    logger.info("Created network security group: %s", nsg.name)
    return nsg


def create_network_interface(clients, resource_group, name, subnet_id, nsg_id):
    logger.info("Creating network interface %s...", name)
    nic = clients.network.network_interfaces.begin_create_or_update(
        resource_group.name,
        name,
        network_interface_params(resource_group.location, subnet_id, nsg_id),
    ).result()
    logger.info("Created network interface: %s", nic.name)
    return nic


def create_virtual_machine(clients, resource_group, name, nic_id, availability_set_id):
    logger.info("Creating a new virtual machine...")
    vm = clients.compute.virtual_machines.begin_create_or_update(
        resource_group.name,
        name,
        virtual_machine_params(
            resource_group.location,
            name,
            nic_id,
            availability_set_id,
            admin_password(),
        ),
    ).result()
    logger.info("Created virtual machine: %s", vm.name)
    return vm


def create_public_ip(clients, resource_group, name):
    logger.info("Creating public IP address %s...", name)
    public_ip = clients.network.public_ip_addresses.begin_create_or_update(
        resource_group.name, name, public_ip_params(resource_group.location)
    ).result()
    logger.info("Created public IP address: %s", public_ip.ip_address)
    return public_ip


def create_load_balancer(clients, resource_group, names, public_ip_id):
    logger.info(
        "Creating a Internet facing load balancer with ...\n"
        "- A frontend public IP address\n"
        "- One backend address pool with the two virtual machines\n"
        "- One load balancing rule for HTTP, mapping public ports on the load\n"
        "  balancer to ports in the backend address pool"
    )
    load_balancer = clients.network.load_balancers.begin_create_or_update(
        resource_group.name,
        names.load_balancer,
        load_balancer_params(
            resource_group.location, resource_group.id, names, public_ip_id
        ),
    ).result()
    logger.info("Created a load balancer: %s", load_balancer.name)
    return load_balancer


def attach_to_backend_pool(clients, resource_group, nic, pool_id):
    add_backend_pool(nic, pool_id)
    nic = clients.network.network_interfaces.begin_create_or_update(
        resource_group.name, nic.name, nic
    ).result()
    logger.info("Added network interface %s to backend pool", nic.name)
    return nic


def update_idle_timeout(clients, resource_group, lb_name, rule_name, minutes):
    logger.info("Updating the load balancer ...")
    load_balancer = clients.network.load_balancers.get(resource_group.name, lb_name)
    set_idle_timeout(load_balancer, rule_name, minutes)
    load_balancer = clients.network.load_balancers.begin_create_or_update(
        resource_group.name, lb_name, load_balancer
    ).result()
    logger.info(
        "Updated the load balancer with a TCP idle timeout to %s minutes", minutes
    )
    return load_balancer


def log_load_balancer(load_balancer):
    logger.info("Name: %s", load_balancer.name)
    logger.info(
        "LoadBalancingRules: %d", len(load_balancer.load_balancing_rules or [])
    )
    logger.info("Probes: %d", len(load_balancer.probes or []))
    logger.info(
        "FrontendIPConfigurations: %d",
        len(load_balancer.frontend_ip_configurations or []),
    )
    logger.info(
        "BackendAddressPools: %d", len(load_balancer.backend_address_pools or [])
    )


def delete_load_balancer(clients, resource_group, lb_name):
    logger.info("Deleting load balancer...")
    clients.network.load_balancers.begin_delete(resource_group.name, lb_name).result()
    logger.info("Deleted load balancer %s", lb_name)


def delete_resource_group(clients, name):
    logger.info("Deleting Resource Group...")
    clients.resource.resource_groups.begin_delete(name).result()
    logger.info("Deleted Resource Group: %s", name)
