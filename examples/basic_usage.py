"""
Example: Basic usage of abiquo_client
=====================================

This example shows how to log in, browse resources, follow links and
deploy a virtual machine.
"""

from abiquo_client import AbiquoClient, BasicAuthentication
from abiquo_client.v1 import relations
from abiquo_client.v1.model import VirtualDataCenter


def example_basic_query():
    """Login and list virtual datacenters and machines."""

    with AbiquoClient() as client:
        if not client.login("https://your-abiquo.example.com/api", BasicAuthentication("admin", "xabiquo")):
            print("Login failed")
            return

        print("Logged in as", client.current_user.nick, "of enterprise", client.tenant_id)

        for vdc in client.get_virtual_data_centers().collection:
            print(f"{vdc.id}: {vdc.name} ({vdc.hypervisor_type})")

        vms = client.get_all_virtual_machines().collection
        print(f"Found {len(vms)} virtual machines")
        print("First 2:", [vm.label for vm in vms[:2]])


def example_follow_links():
    """Navigate from a machine to its virtual datacenter through links."""
    from abiquo_client import ConnectionContext

    # Reads from environment variables: ABIQUO_URI, ABIQUO_USER, ABIQUO_PASS
    with ConnectionContext() as conn:
        client = conn.enter()
        vms = client.get_all_virtual_machines().collection
        if not vms:
            return

        # Typed: the link's media type selects the model
        vdc_link = vms[0].require_link(relations.VIRTUALDATACENTER)
        vdc = client.invoke_link_as(VirtualDataCenter, vdc_link)
        print(f"Machine {vms[0].label} runs in {vdc.name}")

        # Untyped: any link, decoded into a plain dict
        nics = client.invoke_link_by_rel(vms[0].links, relations.IPS)
        print("NICs:", nics.get("collection"))


def example_deploy():
    """Deploy a machine and wait for its task."""
    from abiquo_client import ConnectionContext

    with ConnectionContext() as conn:
        client = conn.enter()
        task = client.deploy_virtual_machine(1, 2, 3, wait_for_completion=True)
        if task.is_terminal:
            print(f"Deploy task {task.task_id} ended with {task.state.value}")
        else:
            print(f"Deploy task {task.task_id} still {task.state.value}, poll again later")


if __name__ == "__main__":
    # Uncomment the example you want to run
    # example_basic_query()
    # example_follow_links()
    # example_deploy()

    print("Set up your environment variables and uncomment an example to run.")
    print("Required: ABIQUO_URI, ABIQUO_USER, ABIQUO_PASS (or ABIQUO_OAUTH2_TOKEN)")
