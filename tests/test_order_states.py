import unittest

from stockpick.core.constants import OrderStatus
from stockpick.core.errors import InvalidState
from stockpick.core.order_states import (
    can_transition,
    ensure_active,
    ensure_transition,
    is_terminal,
)


class OrderStatesTest(unittest.TestCase):
    def test_forward_path(self):
        self.assertTrue(can_transition(OrderStatus.PENDING, OrderStatus.PROCESSING))
        self.assertTrue(can_transition(OrderStatus.PROCESSING, OrderStatus.READY))
        self.assertTrue(can_transition(OrderStatus.READY, OrderStatus.COMPLETED))

    def test_cancel_allowed_from_every_active_state(self):
        for status in (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.READY):
            self.assertTrue(can_transition(status, OrderStatus.CANCELLED))

    def test_no_backward_or_skipping_moves(self):
        self.assertFalse(can_transition(OrderStatus.PROCESSING, OrderStatus.PENDING))
        self.assertFalse(can_transition(OrderStatus.PENDING, OrderStatus.COMPLETED))
        self.assertFalse(can_transition("ready", "processing"))

    def test_terminal_states_have_no_exits(self):
        for status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
            self.assertTrue(is_terminal(status))
            for target in OrderStatus:
                self.assertFalse(can_transition(status, target))

    def test_ensure_helpers_raise_invalid_state(self):
        with self.assertRaises(InvalidState):
            ensure_transition(OrderStatus.CANCELLED, OrderStatus.PENDING)
        with self.assertRaises(InvalidState):
            ensure_active(OrderStatus.COMPLETED, "scan items for")
        ensure_active(OrderStatus.READY, "scan items for")


if __name__ == "__main__":
    unittest.main()
