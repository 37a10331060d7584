import unittest
from chip8.errors import DecodeError
from chip8.instructions import (
    AddByte, AddI, AddReg, And, Call, Cls, Drw, Jp, JpV0, LdB, LdByte, LdDtVx, LdF, LdI,
    LdReg, LdStVx, LdVxDt, LdVxK, LoadRegs, Or, Ret, Rnd, SeByte, SeReg, Shl, Shr, Sknp,
    Skp, SneByte, SneReg, StoreRegs, Sub, Subn, Sys, Xor, decode, decode_word,
)


class TestDecoding(unittest.TestCase):
    TABLE = {
        0x00E0: Cls(),
        0x00EE: Ret(),
        0x0123: Sys(0x123),
        0x1ABC: Jp(0xABC),
        0x2F00: Call(0xF00),
        0x3A42: SeByte(0xA, 0x42),
        0x4B07: SneByte(0xB, 0x07),
        0x5120: SeReg(1, 2),
        0x6105: LdByte(1, 0x05),
        0x7FFF: AddByte(0xF, 0xFF),
        0x8120: LdReg(1, 2),
        0x8121: Or(1, 2),
        0x8122: And(1, 2),
        0x8123: Xor(1, 2),
        0x8124: AddReg(1, 2),
        0x8125: Sub(1, 2),
        0x8126: Shr(1, 2),
        0x8127: Subn(1, 2),
        0x812E: Shl(1, 2),
        0x9340: SneReg(3, 4),
        0xA300: LdI(0x300),
        0xB210: JpV0(0x210),
        0xC50F: Rnd(5, 0x0F),
        0xD125: Drw(1, 2, 5),
        0xE39E: Skp(3),
        0xE3A1: Sknp(3),
        0xF407: LdVxDt(4),
        0xF40A: LdVxK(4),
        0xF415: LdDtVx(4),
        0xF418: LdStVx(4),
        0xF41E: AddI(4),
        0xF429: LdF(4),
        0xF133: LdB(1),
        0xF455: StoreRegs(4),
        0xF465: LoadRegs(4),
    }

    def test_instruction_set(self):
        for word, expected in self.TABLE.items():
            with self.subTest(word=hex(word)):
                self.assertEqual(decode_word(word), expected)

    def test_decode_from_bytes(self):
        self.assertEqual(decode(0x81, 0x24), AddReg(1, 2))

    def test_same_operands_different_opcodes(self):
        self.assertNotEqual(Cls(), Ret())
        self.assertNotEqual(SeByte(1, 2), LdByte(1, 2))
        self.assertEqual(len({Or(1, 2), And(1, 2), Or(1, 2)}), 2)

    def test_unknown_words(self):
        for word in (0x5121, 0x8128, 0x812F, 0x9349, 0x9341, 0xE3A0, 0xF4FF, 0xF400):
            with self.subTest(word=hex(word)):
                with self.assertRaises(DecodeError) as ctx:
                    decode_word(word, 0x2AA)
                self.assertEqual(ctx.exception.word, word)
                self.assertEqual(ctx.exception.address, 0x2AA)


class TestMnemonics(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(Cls()), "CLS")
        self.assertEqual(str(LdByte(1, 5)), "LD V1, 0x05")
        self.assertEqual(str(Drw(0xA, 0xB, 15)), "DRW VA, VB, 15")
        self.assertEqual(str(JpV0(0x210)), "JP V0, 0x210")
        self.assertEqual(str(StoreRegs(0xF)), "LD [I], VF")
        self.assertEqual(str(Shr(1, 2)), "SHR V1, V2")
        self.assertEqual(str(Shl(0xA, 0xB)), "SHL VA, VB")


if __name__ == "__main__":
    unittest.main()
