import math
import unittest

from tomasulo_sim.isa import Opcode
from tomasulo_sim.units import FuId, RegId
from tomasulo_sim.values import (
    BinaryOp,
    FloatConstant,
    Immediate,
    MemoryAddress,
    UnitReference,
    apply_op,
    is_numeric,
)


class ValueModelTestCase(unittest.TestCase):
    def test_equality_is_structural(self):
        left = BinaryOp(Opcode.MULTD, FloatConstant(2.0), UnitReference(FuId(4)))
        right = BinaryOp(Opcode.MULTD, FloatConstant(2.0), UnitReference(FuId(4)))
        self.assertEqual(left, right)
        self.assertIsNot(left, right)
        self.assertEqual(hash(left), hash(right))
        self.assertNotEqual(left, BinaryOp(Opcode.ADDD, FloatConstant(2.0), UnitReference(FuId(4))))

    def test_values_are_immutable(self):
        value = Immediate(3)
        with self.assertRaises(AttributeError):
            value.value = 4

    def test_rendering(self):
        address = MemoryAddress(BinaryOp(Opcode.ADDD, Immediate(34), UnitReference(RegId(2))))
        self.assertEqual(str(address), "M[(34+R2)]")
        self.assertEqual(address.brief(), "M[..]")
        product = BinaryOp(Opcode.MULTD, FloatConstant(2.0), FloatConstant(4.0))
        self.assertEqual(str(product), "(2.00*4.00)")
        self.assertEqual(product.brief(), "..*..")
        self.assertEqual(str(UnitReference(FuId(6))), "F6")

    def test_shared_children(self):
        shared = FloatConstant(2.0)
        tree = BinaryOp(Opcode.ADDD, shared, shared)
        self.assertIs(tree.left, tree.right)
        self.assertEqual(str(tree), "(2.00+2.00)")

    def test_apply_op_defers_by_default(self):
        result = apply_op(Opcode.SUBD, FloatConstant(6.0), FloatConstant(2.0))
        self.assertEqual(result, BinaryOp(Opcode.SUBD, FloatConstant(6.0), FloatConstant(2.0)))

    def test_apply_op_folds_numeric_leaves(self):
        self.assertEqual(apply_op(Opcode.MULTD, FloatConstant(2.0), FloatConstant(4.0), fold=True), FloatConstant(8.0))
        self.assertEqual(apply_op(Opcode.ADDD, Immediate(34), FloatConstant(1.0), fold=True), FloatConstant(35.0))
        self.assertEqual(apply_op(Opcode.DIVD, FloatConstant(6.0), FloatConstant(2.0), fold=True), FloatConstant(3.0))

    def test_apply_op_does_not_fold_symbols(self):
        symbolic = apply_op(Opcode.ADDD, Immediate(34), UnitReference(RegId(2)), fold=True)
        self.assertIsInstance(symbolic, BinaryOp)

    def test_fold_division_by_zero(self):
        result = apply_op(Opcode.DIVD, FloatConstant(1.0), FloatConstant(0.0), fold=True)
        self.assertTrue(math.isinf(result.value))

    def test_is_numeric(self):
        self.assertTrue(is_numeric(Immediate(1)))
        self.assertTrue(is_numeric(FloatConstant(1.0)))
        self.assertFalse(is_numeric(UnitReference(RegId(1))))
        self.assertFalse(is_numeric(MemoryAddress(Immediate(1))))


if __name__ == '__main__':
    unittest.main()
