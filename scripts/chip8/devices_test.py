import os
import tempfile
import unittest
from chip8.constants import C8_FONTS, FONT_ADDRESS, MAX_ROM_SIZE, ROM_START_ADDRESS
from chip8.devices import Display, Keypad, Memory, Stack
from chip8.errors import OutOfBoundsAccess, ProgramTooLarge, StackOverflow, StackUnderflow


class TestMemory(unittest.TestCase):
    def setUp(self):
        self.mem = Memory()

    def test_fonts_preloaded(self):
        self.assertEqual(len(self.mem), 4096)
        self.assertEqual(self.mem.read(FONT_ADDRESS, len(C8_FONTS)), bytes(C8_FONTS))
        self.assertEqual(self.mem[ROM_START_ADDRESS], 0)

    def test_load_program(self):
        self.mem.load_program(b"\x61\x05\x62\x03")
        self.assertEqual(self.mem.read(0x200, 4), b"\x61\x05\x62\x03")

    def test_program_too_large(self):
        self.mem.load_program(bytes(MAX_ROM_SIZE))
        with self.assertRaises(ProgramTooLarge):
            self.mem.load_program(bytes(MAX_ROM_SIZE + 1))

    def test_load_rom(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "test.ch8")
            with open(path, "wb") as f:
                f.write(b"\x00\xe0\x12\x00")
            self.assertEqual(self.mem.load_rom(path), 4)
        self.assertEqual(self.mem.read(0x200, 4), b"\x00\xe0\x12\x00")

    def test_out_of_bounds(self):
        with self.assertRaises(OutOfBoundsAccess):
            self.mem[0x1000]
        with self.assertRaises(OutOfBoundsAccess):
            self.mem.read(0xFFF, 2)
        with self.assertRaises(OutOfBoundsAccess):
            self.mem.write(0xFFE, [1, 2, 3])
        # nothing gets written when the range doesn't fit
        self.assertEqual(self.mem.read(0xFFE, 2), b"\x00\x00")


class TestStack(unittest.TestCase):
    def test_limits(self):
        stack = Stack()
        for addr in range(16):
            stack.append(0x200 + 2 * addr)
        self.assertEqual(len(stack), 16)
        with self.assertRaises(StackOverflow):
            stack.append(0x300)
        self.assertEqual(stack.pop(), 0x21E)
        stack = Stack()
        with self.assertRaises(StackUnderflow):
            stack.pop()

    def test_errors_carry_address(self):
        self.assertIn("mem_addr: 0x0204", str(StackOverflow(16, address=0x204)))
        self.assertEqual(StackUnderflow(address=0x2AA).address, 0x2AA)
        self.assertIsNone(StackUnderflow().address)


class TestDisplay(unittest.TestCase):
    def test_xor_and_collision(self):
        display = Display()
        self.assertFalse(display.draw_sprite(0, 0, [0xF0]))
        self.assertEqual([display[x, 0] for x in range(8)], [1, 1, 1, 1, 0, 0, 0, 0])
        self.assertTrue(display.draw_sprite(2, 0, [0xC0]))
        self.assertEqual([display[x, 0] for x in range(8)], [1, 1, 0, 0, 0, 0, 0, 0])

    def test_wrapping(self):
        display = Display()
        display.draw_sprite(62, 31, [0xFF, 0x80])
        self.assertEqual(display[62, 31], 1)
        self.assertEqual(display[5, 31], 1)
        self.assertEqual(display[6, 31], 0)
        self.assertEqual(display[62, 0], 1)
        self.assertEqual(display[66, 32], display[2, 0])

    def test_clear(self):
        display = Display()
        display.draw_sprite(10, 10, [0xFF])
        display.dirty = False
        display.clear()
        self.assertTrue(display.dirty)
        self.assertEqual(sum(sum(row) for row in display.rows()), 0)


class TestKeypad(unittest.TestCase):
    def test_press_release(self):
        keypad = Keypad()
        self.assertTrue(keypad.untouched())
        keypad.press(0xA)
        self.assertTrue(keypad[0xA])
        self.assertTrue(keypad[0x1A])   # only the low nibble selects the key
        keypad.release(0xA)
        self.assertFalse(keypad[0xA])

    def test_invalid_key(self):
        with self.assertRaises(ValueError):
            Keypad().press(16)


if __name__ == "__main__":
    unittest.main()
