"""
Elevator Dispatch Simulation

Starts a fleet at a random floor of the demo building, submits a batch of
random orders to it and lets the cars serve them for a fixed amount of time
before shutting the fleet down.
"""
import argparse
import asyncio
import logging
import random
from typing import Dict, Any, List, Optional, Tuple

from elevator_interface import Floor, Order
from elevator_fleet import ElevatorFleet
from elevator_config import get_config, floor_catalog

logger = logging.getLogger("Simulation")


def gen_random_order(floors: List[Floor], rng: random.Random, max_passengers: int) -> Order:
    """
    Generate an order for a random floor of the catalog

    Args:
        floors: Catalog to pick the destination from
        rng: Random source
        max_passengers: Largest passenger count to generate (inclusive)
    """
    return Order(rng.choice(floors), rng.randint(0, max_passengers))


def random_start_floor(floors: List[Floor], rng: random.Random) -> Floor:
    return rng.choice(floors)


async def run(config: Dict[str, Any], order_count: int, duration: float,
              seed: Optional[int] = None) -> List[Tuple[int, Floor]]:
    """
    Run one simulation and return the (car, floor) stops in the order they happened
    """
    rng = random.Random(seed)
    floors = floor_catalog(config)
    start_floor = random_start_floor(floors, rng)
    stops: List[Tuple[int, Floor]] = []

    fleet = ElevatorFleet(
        size=config["fleet"]["size"],
        default_floor=start_floor,
        floors=floors,
        tick=config["timing"]["tick_seconds"],
        designated_car=config["fleet"]["designated_car"],
    )
    fleet.subscribe(lambda car_id, floor: stops.append((car_id, floor)))

    async with fleet:
        for _ in range(order_count):
            fleet.submit_order(gen_random_order(floors, rng, config["workload"]["max_passengers"]))
        await asyncio.sleep(duration)

    return stops


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    config = get_config()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--orders", type=int, default=config["workload"]["order_count"],
                        help="Number of random orders to submit")
    parser.add_argument("--cars", type=int, default=config["fleet"]["size"], help="Number of cars")
    parser.add_argument("--tick", type=float, default=config["timing"]["tick_seconds"],
                        help="Seconds per floor of travel")
    parser.add_argument("--duration", type=float, default=30.0, help="Seconds to run before shutting down")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = get_config()
    config["fleet"]["size"] = args.cars
    config["timing"]["tick_seconds"] = args.tick

    logging.basicConfig(level=config["logging"]["level"], format=config["logging"]["format"])

    stops = asyncio.run(run(config, args.orders, args.duration, args.seed))

    logger.info(f"Simulation finished with {len(stops)} stop(s)")
    print("Stops: " + ", ".join(f"car {car_id} -> {floor}" for car_id, floor in stops))


if __name__ == "__main__":
    main()
