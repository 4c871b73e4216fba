from enum import Enum
from dataclasses import dataclass, field
from typing import Protocol, Optional, Union
import asyncio
import time

# Configuration constants
# Time it takes for a car to travel between two adjacent floors (in seconds)
TRAVEL_TIME = 1  # in seconds


class ElevatorDirection(Enum):
    """
    Represents the direction of car movement.

    Attributes:
        Up: The car is sweeping upward
        Down: The car is sweeping downward
        Stopped: The car is idle; also the initial state of every car
    """
    Up = 'Up'
    Down = 'Down'
    Stopped = 'Stopped'

    def flipped(self) -> "ElevatorDirection":
        """Return the opposite sweep direction (Stopped has no opposite)."""
        if self is ElevatorDirection.Up:
            return ElevatorDirection.Down
        if self is ElevatorDirection.Down:
            return ElevatorDirection.Up
        return self


@dataclass(frozen=True, order=True)
class Floor:
    """
    A building level, identified and ordered by its number.

    Attributes:
        num: Signed floor number (basements are negative)
    """
    num: int

    def __str__(self) -> str:
        return f"F{self.num}"


@dataclass(frozen=True)
class Order:
    """
    A request for a car to stop at a floor.

    The creation time is recorded for future aging policies; nothing reads it yet.

    Attributes:
        floor: Destination floor
        passengers: Number of riders (recorded, never enforced)
        created_at: Monotonic timestamp taken when the order was made
    """
    floor: Floor
    passengers: int = 0
    created_at: float = field(default_factory=time.monotonic, compare=False)

    def same_destination(self, other: "Order") -> bool:
        return self.floor == other.floor


# Messages understood by a car worker
@dataclass(frozen=True)
class NewOrder:
    order: Order


@dataclass(frozen=True)
class SetDirection:
    direction: ElevatorDirection


@dataclass(frozen=True)
class GoToFloor:
    floor: Floor


@dataclass(frozen=True)
class Terminate:
    pass


Message = Union[NewOrder, SetDirection, GoToFloor, Terminate]


class CarCommands(Protocol):
    """
    Protocol defining the commands a fleet supervisor may send to one car.

    Every command is fire-and-forget: it is placed on the car's inbox and
    handled by the car's own worker loop in send order.
    """
    def submit(self, order: Order) -> None:
        """Queue a stop request"""
        ...

    def relocate(self, floor: Floor) -> None:
        """Overwrite the car's current floor without touching its queues"""
        ...

    def set_direction(self, direction: ElevatorDirection) -> None:
        """Overwrite the car's direction"""
        ...

    def terminate(self) -> None:
        """Ask the worker to exit its loop"""
        ...


async def wait(rounds: int, tick: Optional[float] = None) -> None:
    """
    Helper function to simulate time passing during car operation.

    Args:
        rounds: Number of time units to wait
        tick: Length of one time unit in seconds (defaults to TRAVEL_TIME)
    """
    await asyncio.sleep(rounds * (TRAVEL_TIME if tick is None else tick))
