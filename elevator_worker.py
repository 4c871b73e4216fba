from typing import Callable, List, Optional
import asyncio
import logging

from elevator_interface import (
    ElevatorDirection, Floor, Order, Message,
    NewOrder, SetDirection, GoToFloor, Terminate, wait,
)
from elevator_controller import CarScheduler
from elevator_config import get_config

logger = logging.getLogger("ElevatorSystem")

StopCallback = Callable[[int, Floor], None]


class CarWorker:
    """
    Car Worker

    Runs one car's scheduler on its own asyncio task. The scheduler is only
    ever touched from the worker loop; everything else talks to it through
    the inbox, so messages are handled in send order and never interleave
    with a movement step.
    """

    def __init__(self, scheduler: CarScheduler, tick: Optional[float] = None) -> None:
        """
        Initialize the car worker

        Args:
            scheduler: Scheduler owned by this worker
            tick: Seconds per floor of travel (defaults to the configured tick)
        """
        self.scheduler = scheduler
        self.car_id = scheduler.car_id
        self.tick = get_config()["timing"]["tick_seconds"] if tick is None else tick
        self.inbox: "asyncio.Queue[Message]" = asyncio.Queue()
        self._subscribers: List[StopCallback] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: StopCallback) -> None:
        """Register a callback invoked with (car_id, floor) on every stop."""
        self._subscribers.append(callback)

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"car-{self.car_id}")
        return self._task

    async def join(self) -> None:
        if self._task is not None:
            await self._task

    def submit(self, order: Order) -> None:
        self.inbox.put_nowait(NewOrder(order))

    def relocate(self, floor: Floor) -> None:
        self.inbox.put_nowait(GoToFloor(floor))

    def set_direction(self, direction: ElevatorDirection) -> None:
        self.inbox.put_nowait(SetDirection(direction))

    def terminate(self) -> None:
        self.inbox.put_nowait(Terminate())

    async def _run(self) -> None:
        """
        Worker polling loop.

        Implements the following loop:
        1. Checks the inbox without blocking
        2. Handles a waiting message immediately and re-polls
        3. Otherwise advances the car by one step and sleeps for one tick
        4. Exits once a terminate message has been handled
        """
        logger.info(f"Car {self.car_id} worker started", extra={"car": self.car_id, "action": "start"})
        try:
            while True:
                try:
                    message = self.inbox.get_nowait()
                except asyncio.QueueEmpty:
                    self._advance()
                    await wait(1, self.tick)
                    continue

                if not self._handle(message):
                    logger.info(f"Car {self.car_id} was told to terminate",
                                extra={"car": self.car_id, "action": "terminate"})
                    break
        except asyncio.CancelledError:
            # Cancellation is an implicit terminate
            logger.warning(f"Car {self.car_id} worker cancelled", extra={"car": self.car_id, "action": "cancel"})
            raise
        finally:
            logger.info(f"Car {self.car_id} worker stopped at floor {self.scheduler.current_floor.num}",
                        extra={"car": self.car_id, "floor": self.scheduler.current_floor.num, "action": "stop"})

    def _handle(self, message: Message) -> bool:
        """
        Apply one inbox message to the scheduler.

        Returns:
            False when the worker should exit, True otherwise
        """
        if isinstance(message, NewOrder):
            self.scheduler.queue_order(message.order)
        elif isinstance(message, SetDirection):
            self.scheduler.set_direction(message.direction)
        elif isinstance(message, GoToFloor):
            self.scheduler.go_to_floor(message.floor)
        elif isinstance(message, Terminate):
            return False
        else:
            raise TypeError(f"Unknown message: {message!r}")
        return True

    def _advance(self) -> None:
        floor = self.scheduler.step()
        if floor is None:
            return

        logger.info(f"Car {self.car_id} stopped at floor {floor.num}",
                    extra={"car": self.car_id, "floor": floor.num, "action": "stopped"})
        for callback in self._subscribers:
            try:
                callback(self.car_id, floor)
            except Exception as e:
                logger.error(f"Error in stop subscriber: {e}", exc_info=True)
