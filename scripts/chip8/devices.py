from .constants import (
    C8_FONTS, DEBUG, FONT_ADDRESS, KEYS_COUNT, MAX_ROM_SIZE, MEMORY_SIZE,
    ROM_START_ADDRESS, SCREEN_HEIGHT, SCREEN_WIDTH, STACK_DEPTH,
)
from .errors import OutOfBoundsAccess, ProgramTooLarge, StackOverflow, StackUnderflow


# ******************** I/O SECTION
class Display:
    """64x32 monochrome framebuffer, coordinates always wrap around the edges"""
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [0] * h * w
        self.dirty = False      # set on every change, cleared by whoever renders the buffer

    def __getitem__(self, xy):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        x, y = xy
        return self.buffer[(y % self.h) * self.w + (x % self.w)]

    def __repr__(self):
        return f"Display(w={self.w}, h={self.h}, lit={sum(self.buffer)})"

    def rows(self):
        for y in range(self.h):
            yield self.buffer[y * self.w:(y + 1) * self.w]

    def clear(self):
        self.buffer = [0] * self.h * self.w
        self.dirty = True

    def xor_pixel(self, x, y, bit):
        """XOR a single bit onto the buffer, return True if a lit pixel got erased"""
        pos = (y % self.h) * self.w + (x % self.w)
        old = self.buffer[pos]
        self.buffer[pos] = old ^ bit
        self.dirty = True
        return old == 1 and bit == 1

    def draw_sprite(self, x, y, sprite):
        """
        XOR the sprite rows (one byte each, MSB leftmost) onto the buffer at (x, y)
        return True when at least one pixel was turned off (collision)
        """
        collision = False
        for i, sprite_byte in enumerate(sprite):
            for j in range(8):
                bit = (sprite_byte >> (7 - j)) & 0x1
                if bit and self.xor_pixel(x + j, y + i, bit):
                    collision = True
        return collision


class Keypad:
    def __init__(self):
        self.pressed_keys = [False] * KEYS_COUNT

    def __getitem__(self, key):
        return self.pressed_keys[key & 0xF]

    def __repr__(self):
        down = ",".join(f"{k:X}" for k, v in enumerate(self.pressed_keys) if v)
        return f"Keypad(pressed=[{down}])"

    @staticmethod
    def _check(key):
        if not 0 <= key < KEYS_COUNT:
            raise ValueError(f"CHIP-8 keys go from 0x0 to 0xF, got {key!r}")

    def press(self, key):
        self._check(key)
        self.pressed_keys[key] = True

    def release(self, key):
        self._check(key)
        self.pressed_keys[key] = False

    def untouched(self):
        return not any(self.pressed_keys)


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, depth=STACK_DEPTH):
        self.addr_list = []
        self.depth = depth

    def __len__(self):
        return len(self.addr_list)

    def __iter__(self):
        return iter(self.addr_list)

    def __repr__(self):
        return "[" + ", ".join(f"0x{a:04x}" for a in self.addr_list) + "]"

    def append(self, address):
        if len(self.addr_list) >= self.depth:
            raise StackOverflow(self.depth)
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackUnderflow()
        return self.addr_list.pop()


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[FONT_ADDRESS:FONT_ADDRESS+len(C8_FONTS)] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    def __getitem__(self, index):
        self._check(index)
        return self.inner[index]

    def __setitem__(self, index, value):
        self._check(index)
        self.inner[index] = value & 0xFF

    @staticmethod
    def _check(start, length=1):
        if start < 0 or start + length > MEMORY_SIZE:
            raise OutOfBoundsAccess(start, length)

    def read(self, start, length):
        self._check(start, length)
        return bytes(self.inner[start:start+length])

    def write(self, start, values):
        """write all the values or none of them"""
        values = bytes(v & 0xFF for v in values)
        self._check(start, len(values))
        self.inner[start:start+len(values)] = values

    def load_program(self, program):
        """copy the raw program image verbatim at the start of the program region"""
        if len(program) > MAX_ROM_SIZE:
            raise ProgramTooLarge(len(program))
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(program)] = bytes(program)

    def load_rom(self, path):
        """load ROM file from user specified path, raise an exception if it can't be read or doesn't fit"""
        with open(path, mode='rb') as f:
            rom = f.read()
        self.load_program(rom)
        if DEBUG: print(f"The ROM at path {path} has been loaded successfully ({len(rom)} bytes)")
        return len(rom)
