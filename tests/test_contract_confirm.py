import unittest

from planboard.confirm import (
    KIND_DELETE,
    KIND_DELETE_GROUP,
    SUPPRESS_SECONDS,
    ConfirmRequest,
    SuppressibleConfirmer,
)


class FakeClock:
    def __init__(self) -> None:
        self.t = 1000.0

    def __call__(self) -> float:
        return self.t


class TestSuppressibleConfirmer(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.answers = []
        self.asked = []

        def prompt(req):
            self.asked.append(req)
            return self.answers.pop(0)

        self.c = SuppressibleConfirmer(prompt, clock=self.clock)

    def _req(self, kind=KIND_DELETE):
        return ConfirmRequest(kind, "Delete", "Sure?")

    def test_dont_ask_again_silences_for_five_minutes(self) -> None:
        self.assertEqual(SUPPRESS_SECONDS, 300)
        self.answers = [(True, True)]
        self.assertTrue(self.c.confirm(self._req()))
        self.assertTrue(self.c.is_suppressed(KIND_DELETE))

        self.clock.t += 299
        self.assertTrue(self.c.confirm(self._req()))
        self.assertEqual(len(self.asked), 1)

        self.clock.t += 1
        self.assertFalse(self.c.is_suppressed(KIND_DELETE))
        self.answers = [(False, False)]
        self.assertFalse(self.c.confirm(self._req()))
        self.assertEqual(len(self.asked), 2)

    def test_declining_never_suppresses(self) -> None:
        self.answers = [(False, True), (True, False)]
        self.assertFalse(self.c.confirm(self._req()))
        self.assertIsNone(self.c.suppressed_until(KIND_DELETE))
        self.assertTrue(self.c.confirm(self._req()))
        self.assertEqual(len(self.asked), 2)

    def test_only_listed_kinds_are_suppressible(self) -> None:
        self.answers = [(True, True), (True, False)]
        self.c.confirm(self._req(KIND_DELETE_GROUP))
        self.assertFalse(self.asked[0].suppressible)
        self.assertFalse(self.c.is_suppressed(KIND_DELETE_GROUP))
        self.c.confirm(self._req(KIND_DELETE_GROUP))
        self.assertEqual(len(self.asked), 2)

    def test_prompt_sees_suppressible_flag(self) -> None:
        self.answers = [(True, False)]
        self.c.confirm(self._req())
        self.assertTrue(self.asked[0].suppressible)

    def test_reset(self) -> None:
        self.answers = [(True, True)]
        self.c.confirm(self._req())
        self.c.reset()
        self.assertFalse(self.c.is_suppressed(KIND_DELETE))


if __name__ == "__main__":
    unittest.main(verbosity=2)
