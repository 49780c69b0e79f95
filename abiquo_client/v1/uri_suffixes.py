"""
abiquo_client.v1.uri_suffixes - Relative URI templates
=======================================================

Templates are relative to the API base URI and filled with ``str.format``.
"""

LOGIN = "/login"

# ---------------- enterprises / users ----------------
ENTERPRISES = "/admin/enterprises"
ENTERPRISE_BY_ID = "/admin/enterprises/{0}"
USERS_BY_ENTERPRISE_ID = "/admin/enterprises/{0}/users"
USER_BY_ENTERPRISE_ID_AND_USER_ID = "/admin/enterprises/{0}/users/{1}"
SWITCH_ENTERPRISE_BY_USER_ID = "/admin/enterprises/_/users/{0}"

# ---------------- virtual datacenters / appliances ----------------
VIRTUALDATACENTERS = "/cloud/virtualdatacenters"
VIRTUALDATACENTER_BY_ID = "/cloud/virtualdatacenters/{0}"
VIRTUALAPPLIANCES_BY_VIRTUALDATACENTER_ID = "/cloud/virtualdatacenters/{0}/virtualappliances"
VIRTUALAPPLIANCE_BY_VIRTUALDATACENTER_ID_AND_VIRTUALAPPLIANCE_ID = "/cloud/virtualdatacenters/{0}/virtualappliances/{1}"

# ---------------- virtual machines ----------------
VIRTUALMACHINES = "/cloud/virtualmachines"
VIRTUALMACHINES_BY_VIRTUALDATACENTER_ID_AND_VIRTUALAPPLIANCE_ID = (
    "/cloud/virtualdatacenters/{0}/virtualappliances/{1}/virtualmachines"
)
VIRTUALMACHINE_BY_IDS = "/cloud/virtualdatacenters/{0}/virtualappliances/{1}/virtualmachines/{2}"
DEPLOY_VIRTUALMACHINE_BY_IDS = VIRTUALMACHINE_BY_IDS + "/action/deploy"
CHANGE_VIRTUALMACHINE_STATE_BY_IDS = VIRTUALMACHINE_BY_IDS + "/state"
VIRTUALMACHINE_TASKS_BY_IDS = VIRTUALMACHINE_BY_IDS + "/tasks"
VIRTUALMACHINE_TASK_BY_IDS_AND_TASK_ID = VIRTUALMACHINE_BY_IDS + "/tasks/{3}"

# ---------------- networks ----------------
PRIVATE_NETWORKS_BY_VIRTUALDATACENTER_ID = "/cloud/virtualdatacenters/{0}/privatenetworks"
PRIVATE_NETWORK_BY_VIRTUALDATACENTER_ID_AND_PRIVATE_NETWORK_ID = "/cloud/virtualdatacenters/{0}/privatenetworks/{1}"
