from enum import Enum, IntFlag


class GatewayAction(str, Enum):
    SHIP = "ship"
    CANCEL = "cancel"
    COMPLETE = "complete"
    PRINT_LABEL = "print_label"
    TRACK = "track"
    PROVE = "prove"
    LIST_RELAY_POINTS = "list_relay_points"
    GET_RELAY_POINT = "get_relay_point"


class Capability(IntFlag):
    NONE = 0
    SHIPMENT = 1
    RETURN = 2
    PARCEL = 4
    RELAY = 8


class Requirement(IntFlag):
    NONE = 0
    MOBILE = 1
