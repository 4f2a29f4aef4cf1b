import unittest

from tomasulo_sim.errors import InvariantViolation, ParseError
from tomasulo_sim.instruction import Instruction, parse_instruction, parse_program
from tomasulo_sim.isa import Opcode, StationKind
from tomasulo_sim.programs import SAMPLE_PROGRAMS, build_sample_program
from tomasulo_sim.units import FuId, RegId
from tomasulo_sim.values import Immediate, UnitReference


class LifecycleTestCase(unittest.TestCase):
    def setUp(self):
        self.inst = parse_instruction("MULTD F0 F2 F4")

    def test_latencies(self):
        expected = {"ADDD": 2, "SUBD": 2, "LD": 2, "SD": 2, "MULTD": 10, "DIVD": 20}
        for op, latency in expected.items():
            self.assertEqual(parse_instruction(f"{op} F0 F2 F4").latency, latency)

    def test_countdown(self):
        self.inst.emit(3)
        self.assertEqual(self.inst.emit_cycle, 3)
        self.assertEqual(self.inst.remaining, 10)
        finished = [self.inst.advance(cycle) for cycle in range(4, 14)]
        self.assertEqual(finished, [False] * 9 + [True])
        self.assertEqual(self.inst.start_cycle, 4)
        self.assertEqual(self.inst.exec_cycle, 13)
        self.assertIsNone(self.inst.remaining)
        self.inst.write(14)
        self.assertEqual(self.inst.write_cycle, 14)

    def test_emit_with_latency_override(self):
        self.inst.emit(1, latency=1)
        self.assertEqual(self.inst.latency, 1)
        self.assertTrue(self.inst.advance(1))
        self.assertEqual((self.inst.start_cycle, self.inst.exec_cycle), (1, 1))

    def test_advance_before_emit(self):
        with self.assertRaises(InvariantViolation):
            self.inst.advance(1)

    def test_write_before_finish(self):
        self.inst.emit(1)
        self.inst.advance(1)
        with self.assertRaises(InvariantViolation):
            self.inst.write(2)

    def test_write_twice(self):
        self.inst.emit(1, latency=1)
        self.inst.advance(1)
        self.inst.write(2)
        with self.assertRaises(InvariantViolation):
            self.inst.write(3)

    def test_clone_is_independent(self):
        copy = self.inst.clone()
        copy.emit(1)
        self.assertIsNone(self.inst.emit_cycle)
        self.assertEqual(copy.src1, self.inst.src1)


class ParserTestCase(unittest.TestCase):
    def test_arithmetic(self):
        inst = parse_instruction("MULTD F0 F2 F4")
        self.assertIs(inst.op, Opcode.MULTD)
        self.assertEqual(inst.dest, FuId(0))
        self.assertEqual(inst.src1, UnitReference(FuId(2)))
        self.assertEqual(inst.src2, UnitReference(FuId(4)))
        self.assertIs(inst.op.station_kind, StationKind.MULT)

    def test_offset_notation(self):
        inst = parse_instruction("LD F6 34+ R2")
        self.assertEqual(inst.src1, Immediate(34))
        self.assertEqual(inst.src2, UnitReference(RegId(2)))
        self.assertEqual(str(inst), "LD F6 34 R2")

    def test_signed_literals(self):
        self.assertEqual(parse_instruction("LD F2 -8 R1").src1, Immediate(-8))
        self.assertEqual(parse_instruction("SD F2 +16+ R1").src1, Immediate(16))

    def test_commas_and_case(self):
        inst = parse_instruction("addd f8, f6, f2")
        self.assertIs(inst.op, Opcode.ADDD)
        self.assertEqual(inst.dest, FuId(8))

    def test_rejections(self):
        bad_lines = [
            "FOO F0 F2 F4",
            "ADDD F1 F2 F4",
            "ADDD F32 F2 F4",
            "ADDD R1 F2 F4",
            "ADDD F0 F2",
            "ADDD F0 F2 F4 F6",
            "LD F6 34x R2",
            "LD F6 ++ R2",
            "ADDD F0 F3 F4",
        ]
        for line in bad_lines:
            with self.subTest(line=line):
                with self.assertRaises(ParseError):
                    parse_instruction(line)

    def test_parse_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_instruction("NOPE F0 F2 F4")

    def test_program_skips_comments_and_blanks(self):
        program = parse_program("# header\n\nLD F6 34+ R2   # load\n   \nADDD F0 F2 F4\n")
        self.assertEqual([inst.op for inst in program], [Opcode.LD, Opcode.ADDD])

    def test_program_error_reports_line(self):
        with self.assertRaises(ParseError) as ctx:
            parse_program("LD F6 34+ R2\n\nMULTD F0 F2 X9\n")
        self.assertEqual(ctx.exception.line_no, 3)
        self.assertIn("Line 3", str(ctx.exception))

    def test_samples_parse(self):
        self.assertEqual(len(build_sample_program(1)), 6)
        self.assertEqual(len(build_sample_program(2)), 8)
        for text in SAMPLE_PROGRAMS.values():
            self.assertTrue(all(isinstance(i, Instruction) for i in parse_program(text)))

    def test_unknown_sample(self):
        with self.assertRaises(ValueError):
            build_sample_program(9)


if __name__ == '__main__':
    unittest.main()
