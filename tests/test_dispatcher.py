import unittest
from unittest.mock import MagicMock

from drone_console.core.dispatcher import CommandDispatcher, CommandKind
from drone_console.core.mission_controller import MissionController
from drone_console.models.mode import MissionKind

from helpers import FakeKeyboard, FakeVehicleLink, cache_with_fix, fast_config

class TestCommandRouting(unittest.TestCase):
    def setUp(self):
        self.controller = MagicMock()
        self.controller.manual_input.return_value = False
        self.dispatcher = CommandDispatcher(self.controller, FakeKeyboard([]), poll_interval=0.01)

    def test_mission_keys(self):
        expected = {'c': MissionKind.CIRCLE, 's': MissionKind.SQUARE,
                    '1': MissionKind.TRIANGLE, '2': MissionKind.SINE}
        for key, kind in expected.items():
            self.controller.start_mission.reset_mock()
            self.assertTrue(self.dispatcher.handle_key(key))
            self.controller.start_mission.assert_called_once_with(kind)

    def test_keys_are_case_insensitive(self):
        self.dispatcher.handle_key('T')
        self.controller.arm_and_takeoff.assert_called_once()
        self.dispatcher.handle_key('L')
        self.controller.land_and_disarm.assert_called_once()
        self.dispatcher.handle_key('M')
        self.controller.enter_manual.assert_called_once()
        self.dispatcher.handle_key('X')
        self.controller.stop.assert_called_once()

    def test_command_kinds(self):
        kinds = {key: command.kind for key, command in self.dispatcher.commands.items()}
        self.assertEqual(kinds['t'], CommandKind.BLOCKING)
        self.assertEqual(kinds['l'], CommandKind.BLOCKING)
        self.assertEqual(kinds['c'], CommandKind.TASK)
        self.assertEqual(kinds['m'], CommandKind.TASK)
        self.assertEqual(kinds['x'], CommandKind.STOP)
        self.assertEqual(kinds['q'], CommandKind.QUIT)

    def test_quit(self):
        self.assertFalse(self.dispatcher.handle_key('q'))
        self.assertFalse(self.dispatcher.is_running)

    def test_unknown_key_ignored(self):
        self.assertTrue(self.dispatcher.handle_key('z'))
        self.assertTrue(self.dispatcher.handle_key(''))
        self.controller.start_mission.assert_not_called()

    def test_manual_keys_take_precedence(self):
        self.controller.manual_input.return_value = True
        self.dispatcher.handle_key('s')
        self.controller.manual_input.assert_called_once_with('s')
        self.controller.start_mission.assert_not_called()

    def test_manual_q_does_not_quit(self):
        self.controller.manual_input.return_value = True
        self.assertTrue(self.dispatcher.handle_key('q'))
        self.assertTrue(self.dispatcher.is_running)

    def test_command_exception_does_not_kill_loop(self):
        self.controller.start_mission.side_effect = RuntimeError("boom")
        self.assertTrue(self.dispatcher.handle_key('c'))

class TestDispatchLoop(unittest.TestCase):
    def test_run_processes_keys_until_quit(self):
        link = FakeVehicleLink()
        controller = MissionController(link, cache_with_fix(), fast_config())
        dispatcher = CommandDispatcher(controller, FakeKeyboard("tmwdxq"), poll_interval=0.01)

        dispatcher.run()

        self.assertFalse(dispatcher.is_running)
        self.assertTrue(controller.mode.is_idle)
        self.assertEqual(link.calls[:2], ["arm", "takeoff"])
        # 'w' and 'd' went to manual control, one goto each
        self.assertEqual(len(link.gotos), 2)

    def test_request_exit_stops_loop(self):
        keyboard = MagicMock()
        keyboard.has_input.return_value = False
        dispatcher = CommandDispatcher(MagicMock(), keyboard, poll_interval=0.01)
        dispatcher.request_exit()
        dispatcher.run()
        self.assertFalse(dispatcher.is_running)

if __name__ == '__main__':
    unittest.main()
