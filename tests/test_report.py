import unittest

from tomasulo_sim.executer import Executer
from tomasulo_sim.instruction import parse_program
from tomasulo_sim.programs import SAMPLE_PROGRAMS
from tomasulo_sim.report import (
    STATION_COLUMNS,
    TIMING_COLUMNS,
    event_lines,
    render_cycle,
    render_timing,
    station_frame,
    timing_frame,
    unit_frame,
)


class ReportTestCase(unittest.TestCase):
    def setUp(self):
        self.executer = Executer()
        self.executer.add_instructions(parse_program(SAMPLE_PROGRAMS[1]))

    def test_timing_frame(self):
        frame = timing_frame(self.executer.run())
        self.assertEqual(list(frame.columns), TIMING_COLUMNS)
        self.assertEqual(len(frame), 6)
        first = frame.iloc[0]
        self.assertEqual(first["Instruction"], "LD F6 34 R2")
        self.assertEqual([first["Issue"], first["Start"], first["Exec"], first["Write"]], ["1", "1", "2", "3"])
        self.assertEqual(frame.iloc[-1]["Write"], "36")

    def test_empty_timing_frame(self):
        frame = timing_frame([])
        self.assertTrue(frame.empty)
        self.assertEqual(list(frame.columns), TIMING_COLUMNS)
        self.assertEqual(render_timing([]), "(no instructions)")

    def test_station_frame(self):
        snapshot = self.executer.step()
        frame = station_frame(snapshot)
        self.assertEqual(list(frame.columns), STATION_COLUMNS)
        self.assertEqual(len(frame), 11)
        busy = station_frame(snapshot, busy_only=True)
        self.assertEqual(list(busy["Name"]), ["Load1"])
        self.assertEqual(busy.iloc[0]["State"], "Calculating")
        self.assertEqual(busy.iloc[0]["Vk"], "34")
        self.assertEqual(busy.iloc[0]["Addr"], "R2")
        self.assertEqual(busy.iloc[0]["Remain"], "1")

    def test_unit_frame(self):
        snapshot = self.executer.step()
        self.assertEqual(len(unit_frame(snapshot)), 16)
        renamed = unit_frame(snapshot, renamed_only=True)
        self.assertEqual(list(renamed["Name"]), ["F6"])
        self.assertEqual(renamed.iloc[0]["Qi"], "Load1")
        self.assertEqual(renamed.iloc[0]["Value"], "")

    def test_event_lines(self):
        self.executer.step()
        self.executer.step()
        third = self.executer.step()
        lines = event_lines(third)
        self.assertIn("Issued: MULTD F0 F2 F4 -> Mult1", lines)
        self.assertIn("Wrote result: Load1 = M[(34+R2)]", lines)

    def test_render_cycle(self):
        text = render_cycle(self.executer.step())
        self.assertTrue(text.startswith("Cycle: 1 > Running"))
        self.assertIn("Reservation Stations:", text)
        self.assertIn("Load1", text)

    def test_render_timing(self):
        text = render_timing(self.executer.run())
        self.assertIn("DIVD F10 F0 F6", text)
        self.assertIn("36", text)


if __name__ == '__main__':
    unittest.main()
