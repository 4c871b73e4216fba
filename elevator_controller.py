from typing import Optional, Dict, List, Iterator, Any, Union
import logging
from pydantic import BaseModel, field_validator

# Import value types shared with the worker and fleet
from elevator_interface import ElevatorDirection, Floor, Order

# Import configuration and constants
from elevator_config import SameFloorPolicy, get_config

# Get system configuration
CONFIG = get_config()

logger = logging.getLogger("ElevatorSystem")


class OrderRequest(BaseModel):
    """
    Model representing an order submitted from outside the fleet.

    Attributes:
        floor: Destination floor number
        passengers: Number of riders travelling with the order
    """
    floor: int
    passengers: int = 0

    @field_validator('floor', mode='before')
    @classmethod
    def validate_floor(cls, v: Any) -> int:
        """
        Validate that floor is an integer.

        Args:
            v: The floor value to validate

        Returns:
            The validated floor value

        Raises:
            ValueError: If floor is not an integer
        """
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("Floor must be an integer")
        return v

    @field_validator('passengers')
    @classmethod
    def validate_passengers(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Passenger count cannot be negative")
        return v

    def to_order(self) -> Order:
        return Order(Floor(self.floor), self.passengers)


def add_to_queue(queue: List[Order], order: Order) -> bool:
    """
    Append an order unless the queue already holds one for the same floor.

    Returns:
        True if the order was added, False if it was a duplicate
    """
    if any(queued.same_destination(order) for queued in queue):
        return False
    queue.append(order)
    return True


def sort_queue(queue: List[Order], direction: ElevatorDirection) -> None:
    # Descending when sweeping down, ascending otherwise
    queue.sort(key=lambda order: order.floor, reverse=direction is ElevatorDirection.Down)


class CarScheduler:
    """
    Directional two-queue scheduler for a single car.

    Orders ahead of the car in its direction of travel go to the active queue,
    kept sorted so its head is always the nearest stop. Orders behind the car
    wait in the return queue until the active queue drains, at which point the
    queues swap and the car reverses.
    """

    def __init__(self, car_id: int = 0,
                 current_floor: Floor = Floor(0),
                 floors: Optional[List[Floor]] = None,
                 same_floor_policy: Union[SameFloorPolicy, str] = CONFIG["scheduling"]["same_floor_policy"]) -> None:
        """
        Initialize the car scheduler.

        Args:
            car_id: Identifier of the car this scheduler drives
            current_floor: Floor the car starts at
            floors: Catalog of valid floors (informational, never range-checked)
            same_floor_policy: What to do with orders for the floor the car stands on
        """
        self.car_id = car_id
        self.current_floor = current_floor
        self.direction = ElevatorDirection.Stopped
        self.floors = list(floors) if floors is not None else []
        self.same_floor_policy = SameFloorPolicy(same_floor_policy)

        self._active_queue: List[Order] = []
        self._return_queue: List[Order] = []

        logger.info(f"Car {car_id} scheduler initialized at floor {current_floor.num}",
                    extra={"car": car_id, "floor": current_floor.num, "action": "init"})

    @property
    def active_floors(self) -> List[Floor]:
        return [order.floor for order in self._active_queue]

    @property
    def return_floors(self) -> List[Floor]:
        return [order.floor for order in self._return_queue]

    @property
    def pending_count(self) -> int:
        return len(self._active_queue) + len(self._return_queue)

    def submit(self, order: Order) -> None:
        """
        Classify an order into the active or return queue.

        An idle car takes its direction from the first order that is not for
        its current floor. After that, orders ahead of the car in its direction
        of travel join the active queue and orders behind it join the return
        queue. Duplicate floors within a queue are dropped.

        Args:
            order: The order to file
        """
        floor = order.floor

        if self.direction is ElevatorDirection.Stopped:
            if floor < self.current_floor:
                self.set_direction(ElevatorDirection.Down)
            elif floor > self.current_floor:
                self.set_direction(ElevatorDirection.Up)

        if self._is_ahead(floor):
            self._file_active(order)
        elif self._is_behind(floor):
            if add_to_queue(self._return_queue, order):
                logger.info(f"Car {self.car_id}: added floor {floor.num} to return queue",
                            extra={"car": self.car_id, "floor": floor.num, "action": "queue_return"})
            else:
                logger.debug(f"Car {self.car_id}: floor {floor.num} already in return queue")
        elif self.same_floor_policy is SameFloorPolicy.SERVE:
            # Already here: reopen on the next step
            self._file_active(order)
        else:
            logger.info(f"Car {self.car_id}: ignoring order for current floor {floor.num}",
                        extra={"car": self.car_id, "floor": floor.num, "action": "ignore"})

    # Alias used by the worker loop
    queue_order = submit

    def set_direction(self, direction: ElevatorDirection) -> None:
        """
        Set the car direction, re-sorting the active queue to match.

        Args:
            direction: New direction
        """
        if direction is not self.direction:
            logger.info(f"Car {self.car_id}: direction changed to {direction.value} from {self.direction.value}",
                        extra={"car": self.car_id, "direction": direction.value, "action": "direction"})
        self.direction = direction
        sort_queue(self._active_queue, direction)

    def go_to_floor(self, floor: Floor) -> None:
        """
        Move the car to a floor without touching its queues.

        Args:
            floor: Floor the car is now at
        """
        logger.info(f"Car {self.car_id}: going to floor {floor.num}",
                    extra={"car": self.car_id, "floor": floor.num, "action": "move"})
        self.current_floor = floor

    relocate = go_to_floor

    def step(self) -> Optional[Floor]:
        """
        Advance the car to its next stop.

        When the active queue is empty the queues are swapped first and the
        direction resolved for the new sweep.

        Returns:
            The floor the car stopped at, or None if there is no work left
        """
        # A swap either yields work or leaves both queues empty, so one retry
        # is always enough.
        for _ in range(2):
            if not self._active_queue:
                self._swap_queues()

            if self._active_queue:
                floor = self._active_queue.pop(0).floor
                self.go_to_floor(floor)
                return floor

            if self.all_queues_emptied():
                break

        self.set_direction(ElevatorDirection.Stopped)
        return None

    def sweep(self) -> Iterator[Floor]:
        """
        Yield stops until the car runs out of work.

        The generator ends when the car goes idle; call it again after new
        orders arrive to continue.
        """
        while True:
            floor = self.step()
            if floor is None:
                return
            yield floor

    def __iter__(self) -> Iterator[Floor]:
        return self.sweep()

    def all_queues_emptied(self) -> bool:
        return not self._active_queue and not self._return_queue

    def snapshot(self) -> Dict[str, Any]:
        return {
            "car": self.car_id,
            "floor": self.current_floor.num,
            "direction": self.direction.value,
            "active": [floor.num for floor in self.active_floors],
            "return": [floor.num for floor in self.return_floors],
        }

    def _is_ahead(self, floor: Floor) -> bool:
        return ((floor < self.current_floor and self.direction is ElevatorDirection.Down) or
                (floor > self.current_floor and self.direction is ElevatorDirection.Up))

    def _is_behind(self, floor: Floor) -> bool:
        return ((floor < self.current_floor and self.direction is ElevatorDirection.Up) or
                (floor > self.current_floor and self.direction is ElevatorDirection.Down))

    def _file_active(self, order: Order) -> None:
        if add_to_queue(self._active_queue, order):
            logger.info(f"Car {self.car_id}: added floor {order.floor.num} to active queue",
                        extra={"car": self.car_id, "floor": order.floor.num, "action": "queue_active"})
        sort_queue(self._active_queue, self.direction)

    def _swap_queues(self) -> None:
        logger.debug(f"Car {self.car_id}: swapping directional queues")
        self._active_queue, self._return_queue = self._return_queue, self._active_queue

        if not self._active_queue:
            next_direction = ElevatorDirection.Stopped
        elif self.direction is not ElevatorDirection.Stopped:
            next_direction = self.direction.flipped()
        elif self._active_queue[0].floor > self.current_floor:
            next_direction = ElevatorDirection.Up
        elif self._active_queue[0].floor < self.current_floor:
            next_direction = ElevatorDirection.Down
        else:
            next_direction = ElevatorDirection.Stopped

        self.set_direction(next_direction)
        sort_queue(self._active_queue, self.direction)
