"""
Elevator Dispatch Configuration File

This file contains all configuration parameters for the dispatch simulation,
using configurable settings instead of hardcoded constants
"""
import copy
from enum import Enum
from typing import Dict, Any, List, Optional

from elevator_interface import Floor, TRAVEL_TIME


class SameFloorPolicy(Enum):
    """How a car treats an order for the floor it is standing on"""
    SERVE = 'serve'     # Reopen at the current floor on the next step
    IGNORE = 'ignore'   # Drop the order


# Floor catalog of the demo building
DEFAULT_MIN_FLOOR = -5
DEFAULT_MAX_FLOOR = 12

# Fleet layout
DEFAULT_FLEET_SIZE = 1
DESIGNATED_CAR = 0  # Car that receives every external order

# Runtime configuration
TICK_SECONDS = float(TRAVEL_TIME)  # One floor of travel per tick

# Random workload
DEFAULT_ORDER_COUNT = 48
MAX_PASSENGERS_PER_ORDER = 7

# Logging
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Complete default configuration
DEFAULT_CONFIG = {
    "floors": {
        "min": DEFAULT_MIN_FLOOR,
        "max": DEFAULT_MAX_FLOOR
    },
    "fleet": {
        "size": DEFAULT_FLEET_SIZE,
        "designated_car": DESIGNATED_CAR
    },
    "scheduling": {
        "same_floor_policy": SameFloorPolicy.SERVE.value
    },
    "timing": {
        "tick_seconds": TICK_SECONDS
    },
    "workload": {
        "order_count": DEFAULT_ORDER_COUNT,
        "max_passengers": MAX_PASSENGERS_PER_ORDER
    },
    "logging": {
        "level": LOG_LEVEL,
        "format": LOG_FORMAT
    }
}


def get_config() -> Dict[str, Any]:
    """
    Get dispatch simulation configuration

    Returns:
        Independent copy of the complete configuration
    """
    return copy.deepcopy(DEFAULT_CONFIG)


def floor_catalog(config: Optional[Dict[str, Any]] = None) -> List[Floor]:
    """
    Build the ordered list of valid floors

    Args:
        config: Configuration to read the floor range from (defaults to get_config())

    Returns:
        Floors from the lowest to the highest, inclusive
    """
    floors = (config or get_config())["floors"]
    return [Floor(num) for num in range(floors["min"], floors["max"] + 1)]
