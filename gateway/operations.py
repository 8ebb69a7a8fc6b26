"""
Static table of operations the gateway forwards to the device.

Operation names are opaque to the gateway; the device interprets them
together with the HTTP method.  Only ``login`` waits for a correlated reply.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Operation:
    name: str
    http_method: str
    waits_for_reply: bool = False


_POST_OPERATIONS = (
    "logout",
    "add_tag",
    "save_tag",
    "user_create",
    "user_delete",
    "user_edit",
    "set_system_time",
    "department_create",
    "department_delete",
    "holidays_create",
    "holidays_delete",
    "set_system_network",
    "save_sensor",
    "factory_reset",
    "delete_admins",
    "save_reader",
    "save_interlock",
    "save_alarms",
)

# Queries that take their filter as a JSON body on a GET request.
_GET_OPERATIONS = (
    "user_credentials",
    "user_list",
    "department_list",
    "get_sensors",
    "system_information",
    "get_readers",
    "get_interlock",
    "get_alarms",
)

OPERATIONS: tuple[Operation, ...] = (
    Operation("login", "POST", waits_for_reply=True),
    *(Operation(name, "POST") for name in _POST_OPERATIONS),
    *(Operation(name, "GET") for name in _GET_OPERATIONS),
)
