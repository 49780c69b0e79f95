"""
abiquo_client.v1.relations - Link relation names
=================================================
"""

ENTERPRISE = "enterprise"
IPS = "ips"
ROLE = "role"
USERS = "users"
VIRTUALAPPLIANCE = "virtualappliance"
VIRTUALDATACENTER = "virtualdatacenter"
VIRTUALMACHINES = "virtualmachines"
VIRTUALMACHINETEMPLATE = "virtualmachinetemplate"

EDIT = "edit"
FIRST = "first"
LAST = "last"
PROPERTIES = "properties"
SELF = "self"
STATUS = "status"
