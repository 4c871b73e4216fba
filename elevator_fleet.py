"""
Fleet supervisor: one worker per car, with every external order routed to a
single designated car.
"""
from typing import List, Optional
import asyncio
import logging

from elevator_interface import CarCommands, Floor, Order
from elevator_controller import CarScheduler, OrderRequest
from elevator_worker import CarWorker, StopCallback
from elevator_config import get_config

logger = logging.getLogger("ElevatorSystem")


class FleetError(RuntimeError):
    """Raised when the fleet cannot start, accept work or shut down cleanly."""


class ElevatorFleet:
    """
    Owns one CarWorker per car and forwards external commands to them.

    Usable as an async context manager, which starts every worker on entry
    and shuts them all down on exit.
    """

    def __init__(self, size: Optional[int] = None,
                 default_floor: Floor = Floor(0),
                 floors: Optional[List[Floor]] = None,
                 tick: Optional[float] = None,
                 designated_car: Optional[int] = None) -> None:
        """
        Initialize the fleet

        Args:
            size: Number of cars
            default_floor: Floor every car starts at
            floors: Ordered catalog of valid floors
            tick: Seconds per floor of travel
            designated_car: Index of the car receiving all orders
        """
        config = get_config()
        size = config["fleet"]["size"] if size is None else size
        if size <= 0:
            raise ValueError(f"Fleet size must be positive, got {size}")

        self.designated_car = config["fleet"]["designated_car"] if designated_car is None else designated_car
        if not 0 <= self.designated_car < size:
            raise ValueError(f"Designated car {self.designated_car} is not part of a fleet of {size}")

        self.floors = list(floors) if floors is not None else []
        self.workers: List[CarWorker] = [
            CarWorker(CarScheduler(car_id, default_floor, self.floors), tick=tick)
            for car_id in range(size)
        ]
        self._closed = False
        logger.info(f"Fleet created with {size} car(s) at floor {default_floor.num}")

    def __len__(self) -> int:
        return len(self.workers)

    async def __aenter__(self) -> "ElevatorFleet":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    def start(self) -> None:
        if self._closed:
            raise FleetError("Fleet has already been shut down")
        for worker in self.workers:
            worker.start()

    def car(self, car_id: int) -> CarCommands:
        """
        Direct command handle for one car, for administrative overrides.

        Raises:
            FleetError: If the fleet has been shut down
        """
        if self._closed:
            raise FleetError("Cannot command cars of a fleet that has been shut down")
        return self.workers[car_id]

    def subscribe(self, callback: StopCallback) -> None:
        for worker in self.workers:
            worker.subscribe(callback)

    def submit_order(self, order: Order) -> None:
        """
        Send an order to the designated car.

        Args:
            order: The order to submit

        Raises:
            FleetError: If the fleet has been shut down
        """
        if self._closed:
            raise FleetError("Cannot submit orders to a fleet that has been shut down")
        logger.info(f"Submitting order for floor {order.floor.num} ({order.passengers} passenger(s)) "
                    f"to car {self.designated_car}",
                    extra={"car": self.designated_car, "floor": order.floor.num, "action": "submit"})
        self.workers[self.designated_car].submit(order)

    def submit_request(self, request: OrderRequest) -> None:
        self.submit_order(request.to_order())

    async def wait(self) -> None:
        """
        Wait for every worker to exit on its own.

        A car whose task was cancelled counts as terminated. Cancelling the
        caller leaves the cars running.

        Raises:
            FleetError: If a worker ended with an error
        """
        await self._join_all()

    async def shutdown(self) -> None:
        """
        Send terminate to every car, then wait for each worker to exit.

        Raises:
            FleetError: If a worker ended with an error
        """
        if self._closed:
            return
        self._closed = True

        logger.info("Sending terminate message to all cars")
        for worker in self.workers:
            worker.terminate()

        logger.info("Shutting down all cars")
        await self._join_all()

    async def _join_all(self) -> None:
        for worker in self.workers:
            logger.info(f"Waiting for car {worker.car_id}", extra={"car": worker.car_id, "action": "join"})

        # Shielded so cancelling the caller does not cancel the cars. Every car
        # is awaited before any failure is reported.
        results = await asyncio.shield(
            asyncio.gather(*(worker.join() for worker in self.workers), return_exceptions=True)
        )

        failures = [
            (worker, result) for worker, result in zip(self.workers, results)
            if isinstance(result, Exception)
        ]
        for worker, result in failures:
            logger.error(f"Car {worker.car_id} worker failed: {result!r}",
                         extra={"car": worker.car_id, "action": "join_failed"})
        if failures:
            worker, result = failures[0]
            raise FleetError(f"Car {worker.car_id} worker failed") from result
