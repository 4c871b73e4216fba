import unittest
import asyncio
from unittest.mock import MagicMock
from elevator_interface import ElevatorDirection, Floor, Order, NewOrder, Terminate
from elevator_controller import CarScheduler
from elevator_worker import CarWorker
from elevator_config import floor_catalog

TICK = 0.01


class TestCarWorker(unittest.IsolatedAsyncioTestCase):
    """Tests for the per-car worker loop"""

    async def asyncSetUp(self):
        """Asynchronous setup before test execution"""
        self.scheduler = CarScheduler(0, Floor(1), floor_catalog())
        self.worker = CarWorker(self.scheduler, tick=TICK)
        self.stops = []
        self.worker.subscribe(lambda car_id, floor: self.stops.append(floor))

    async def asyncTearDown(self):
        if self.worker.running:
            self.worker.terminate()
            await asyncio.wait_for(self.worker.join(), timeout=1)

    async def wait_for_stops(self, count):
        async def poll():
            while len(self.stops) < count:
                await asyncio.sleep(TICK)
        await asyncio.wait_for(poll(), timeout=2)

    async def test_commands_are_queued_on_inbox(self):
        """Test commands are placed on the inbox instead of touching the scheduler"""
        self.worker.submit(Order(Floor(5)))
        self.worker.terminate()
        self.assertEqual(self.worker.inbox.qsize(), 2)
        self.assertIsInstance(self.worker.inbox.get_nowait(), NewOrder)
        self.assertIsInstance(self.worker.inbox.get_nowait(), Terminate)
        self.assertTrue(self.scheduler.all_queues_emptied())

    async def test_serves_scenario_in_sweep_order(self):
        """Test orders for 12, -3 and 0 from floor 1 are visited as 12, 0, -3"""
        for num in (12, -3, 0):
            self.worker.submit(Order(Floor(num)))
        self.worker.start()

        await self.wait_for_stops(3)
        self.assertEqual(self.stops, [Floor(12), Floor(0), Floor(-3)])

    async def test_goes_idle_after_work(self):
        """Test the car reports Stopped once every order is served"""
        self.worker.submit(Order(Floor(4)))
        self.worker.start()

        await self.wait_for_stops(1)
        await asyncio.sleep(TICK * 5)
        self.assertEqual(self.scheduler.direction, ElevatorDirection.Stopped)
        self.assertEqual(self.scheduler.current_floor, Floor(4))

    async def test_terminate_discards_later_messages(self):
        """Test nothing sent after a terminate message reaches the scheduler"""
        self.worker.submit(Order(Floor(8)))
        self.worker.terminate()
        self.worker.submit(Order(Floor(3)))
        self.worker.relocate(Floor(-5))

        self.worker.start()
        await asyncio.wait_for(self.worker.join(), timeout=1)

        self.assertFalse(self.worker.running)
        self.assertEqual(self.scheduler.active_floors, [Floor(8)])
        self.assertEqual(self.scheduler.return_floors, [])
        self.assertEqual(self.scheduler.current_floor, Floor(1))
        self.assertEqual(self.stops, [])

    async def test_messages_are_handled_before_stepping(self):
        """Test queued relocation and direction overrides apply in send order"""
        self.worker.relocate(Floor(6))
        self.worker.submit(Order(Floor(2)))
        self.worker.set_direction(ElevatorDirection.Down)
        self.worker.terminate()

        self.worker.start()
        await asyncio.wait_for(self.worker.join(), timeout=1)

        self.assertEqual(self.scheduler.current_floor, Floor(6))
        self.assertEqual(self.scheduler.direction, ElevatorDirection.Down)
        self.assertEqual(self.scheduler.active_floors, [Floor(2)])

    async def test_subscriber_errors_do_not_stop_worker(self):
        """Test a failing stop subscriber is logged and the car keeps moving"""
        self.worker._subscribers.insert(0, MagicMock(side_effect=RuntimeError("boom")))
        self.worker.submit(Order(Floor(3)))
        self.worker.submit(Order(Floor(5)))

        with self.assertLogs("ElevatorSystem", level="ERROR"):
            self.worker.start()
            await self.wait_for_stops(2)
        self.assertEqual(self.stops, [Floor(3), Floor(5)])
        self.assertTrue(self.worker.running)

    async def test_cancel_stops_worker(self):
        """Test cancelling the worker task ends the loop"""
        task = self.worker.start()
        await asyncio.sleep(TICK)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await self.worker.join()
        self.assertFalse(self.worker.running)

    async def test_start_is_idempotent(self):
        first = self.worker.start()
        self.assertIs(self.worker.start(), first)


if __name__ == "__main__":
    unittest.main()
