import random
from collections import namedtuple
from enum import Enum

from .constants import DEBUG, FONT_ADDRESS, FONT_SPRITE_SIZE, REGISTERS_COUNT, ROM_START_ADDRESS, TIMER_HZ
from .devices import Display, Keypad, Memory, Stack
from .errors import Chip8Error
from .instructions import (
    AddByte, AddI, AddReg, And, Call, Cls, Drw, Jp, JpV0, LdB, LdByte, LdDtVx, LdF, LdI,
    LdReg, LdStVx, LdVxDt, LdVxK, LoadRegs, Or, Ret, Rnd, SeByte, SeReg, Shl, Shr, Sknp,
    Skp, SneByte, SneReg, StoreRegs, Sub, Subn, Sys, Xor, decode,
)


# ******************** CONFIGURATION SECTION
# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html
Quirks = namedtuple(
    "Quirks",
    "index_overflow_flag shift_uses_vy logic_resets_vf load_store_increments_i",
    defaults=(True, False, False, False),
)
Quirks.__doc__ = """
index_overflow_flag      ADD I, Vx sets VF when I goes past 0xFFF
shift_uses_vy            SHR/SHL shift Vy into Vx instead of shifting Vx in place
logic_resets_vf          OR/AND/XOR clear VF
load_store_increments_i  LD [I], Vx and LD Vx, [I] leave I pointing past the last register
"""


class State(Enum):
    RUNNING = "running"
    AWAITING_KEY = "awaiting key"


# ******************** CPU SECTION
class Chip8:
    def __init__(self, quirks=None, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.display = Display()
        self.keypad = Keypad()
        self.v_regs = [0] * REGISTERS_COUNT
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.state = State.RUNNING
        self.key_register = None    # register waiting for LD Vx, K to complete
        self.quirks = quirks if quirks is not None else Quirks()
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            Cls: self._clear_screen,
            Ret: self._return,
            Sys: self._sys,
            Jp: self._jump,
            Call: self._call_addr,
            SeByte: self._skip_if_eq,
            SneByte: self._skip_if_not_eq,
            SeReg: self._skip_if_eq_regs,
            LdByte: self._set_vk,
            AddByte: self._add_to_vk,
            LdReg: self._set_vx_to_vy,
            Or: self._set_vx_or_vy,
            And: self._set_vx_and_vy,
            Xor: self._set_vx_xor_vy,
            AddReg: self._add_vx_vy,
            Sub: self._sub_vx_vy,
            Shr: self._shr,
            Subn: self._subn_vx_vy,
            Shl: self._shl,
            SneReg: self._skip_if_not_eq_regs,
            LdI: self._set_idx,
            JpV0: self._jump_plus,
            Rnd: self._random_byte_and,
            Drw: self._to_screen,
            Skp: self._skip_if_pressed,
            Sknp: self._skip_if_not_pressed,
            LdVxDt: self._set_vx_dt,
            LdVxK: self._wait_keypress,
            LdDtVx: self._set_dt_vx,
            LdStVx: self._set_st,
            AddI: self._add_to_idx,
            LdF: self._select_char,
            LdB: self._bcd_repr,
            StoreRegs: self._store_vregs,
            LoadRegs: self._load_vregs,
        }

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | SP:{self.sp}"
        v_regs = "VARIABLE_REGISTERS:" + " ".join(f"V{i:X}={v:02x}" for i, v in enumerate(self.v_regs))
        timers = f"DT:{self.dt} | ST:{self.st}"
        stack = f"STACK:{self.stack!r}"
        state = f"STATE:{self.state.value}"
        if self.state is State.AWAITING_KEY:
            state += f" (V{self.key_register:X})"
        return f"{registers}\n{v_regs}\n{timers}\n{stack}\n{state}"

    @property
    def sp(self):
        return len(self.stack)

    @property
    def sound_active(self):
        """a tone should be audible while the sound timer is running"""
        return self.st > 0

    def load_program(self, program):
        self.mem.load_program(program)

    def load_rom(self, path):
        return self.mem.load_rom(path)

    # ********** HOST EVENTS
    def press_key(self, key):
        """register a key press, resuming a pending LD Vx, K"""
        self.keypad.press(key)
        if self.state is State.AWAITING_KEY:
            self.v_regs[self.key_register] = key
            self.key_register = None
            self.state = State.RUNNING
            self._goto_next_instruction()

    def release_key(self, key):
        self.keypad.release(key)

    def tick_timers(self):
        """one 60Hz tick: count delay/sound timers down towards zero"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    # ********** FETCH / DECODE / EXECUTE
    def step(self):
        """
        emulate one machine cycle (fetch opcode, decode opcode, execute opcode)
        return the executed instruction, or None while waiting for a key press
        on a Chip8Error nothing of the failed step is committed
        """
        if self.state is State.AWAITING_KEY:
            return None
        mem_addr, word = self.pc, None
        try:
            # fetch (each instruction is two bytes long)
            high, low = self.mem.read(mem_addr, 2)
            word = high << 8 | low
            instruction = decode(high, low, mem_addr)
            self._goto_next_instruction()
            self.instructions[type(instruction)](instruction)
        except Chip8Error as err:
            self.pc = mem_addr
            err.locate(word, mem_addr)
            raise
        if DEBUG: print(f"mem_addr: 0x{mem_addr:04x}    instruction: {instruction}")
        return instruction

    def _goto_next_instruction(self):
        self.pc += 0x2

    # ********** INSTRUCTIONS
    # handlers run after PC has been moved past the current instruction, and
    # perform every check that can fail before writing any state
    def _clear_screen(self, ins):
        self.display.clear()

    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()

    def _sys(self, ins):
        """jump to a machine code routine, ignored by modern interpreters"""

    def _jump(self, ins):
        self.pc = ins.addr

    def _call_addr(self, ins):
        self.stack.append(self.pc)
        self.pc = ins.addr

    def _skip_if_eq(self, ins):
        if self.v_regs[ins.x] == ins.kk:
            self._goto_next_instruction()

    def _skip_if_not_eq(self, ins):
        if self.v_regs[ins.x] != ins.kk:
            self._goto_next_instruction()

    def _skip_if_eq_regs(self, ins):
        if self.v_regs[ins.x] == self.v_regs[ins.y]:
            self._goto_next_instruction()

    def _skip_if_not_eq_regs(self, ins):
        if self.v_regs[ins.x] != self.v_regs[ins.y]:
            self._goto_next_instruction()

    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.kk

    def _add_to_vk(self, ins):
        """add to the value already present in Vx, VF is left untouched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.kk) & 0xFF

    def _set_vx_to_vy(self, ins):
        self.v_regs[ins.x] = self.v_regs[ins.y]

    def _set_vx_or_vy(self, ins):
        self.v_regs[ins.x] |= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    def _set_vx_and_vy(self, ins):
        self.v_regs[ins.x] &= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    def _set_vx_xor_vy(self, ins):
        self.v_regs[ins.x] ^= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    # the flag setting instructions below read both operands first and write VF
    # last, so with x == 0xF the register ends up holding the flag
    def _add_vx_vy(self, ins):
        """set Vx = Vx + Vy, VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF     # keep only the lowest 8 bits
        self.v_regs[0xF] = 1 if total > 0xFF else 0

    def _sub_vx_vy(self, ins):
        """set Vx = Vx - Vy, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vx - vy) & 0xFF
        self.v_regs[0xF] = 1 if vx >= vy else 0

    def _subn_vx_vy(self, ins):
        """set Vx = Vy - Vx, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vy - vx) & 0xFF
        self.v_regs[0xF] = 1 if vy >= vx else 0

    def _shr(self, ins):
        """set Vx = Vx SHR 1, VF = bit shifted out"""
        value = self.v_regs[ins.y] if self.quirks.shift_uses_vy else self.v_regs[ins.x]
        self.v_regs[ins.x] = value >> 1
        self.v_regs[0xF] = value & 0x1

    def _shl(self, ins):
        """set Vx = Vx SHL 1, VF = bit shifted out"""
        value = self.v_regs[ins.y] if self.quirks.shift_uses_vy else self.v_regs[ins.x]
        self.v_regs[ins.x] = (value << 1) & 0xFF
        self.v_regs[0xF] = (value >> 7) & 0x1

    def _set_idx(self, ins):
        self.idx = ins.addr

    def _jump_plus(self, ins):
        self.pc = ins.addr + self.v_regs[0x0]

    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng.randint(0, 255) & ins.kk

    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        sprite = self.mem.read(self.idx, ins.n)
        collision = self.display.draw_sprite(self.v_regs[ins.x], self.v_regs[ins.y], sprite)
        self.v_regs[0xF] = 1 if collision else 0

    def _skip_if_pressed(self, ins):
        if self.keypad[self.v_regs[ins.x]]:
            self._goto_next_instruction()

    def _skip_if_not_pressed(self, ins):
        if not self.keypad[self.v_regs[ins.x]]:
            self._goto_next_instruction()

    def _set_vx_dt(self, ins):
        self.v_regs[ins.x] = self.dt

    def _wait_keypress(self, ins):
        """stay on the same instruction until the host delivers a key press"""
        self.pc -= 0x2
        self.key_register = ins.x
        self.state = State.AWAITING_KEY

    def _set_dt_vx(self, ins):
        self.dt = self.v_regs[ins.x]

    def _set_st(self, ins):
        self.st = self.v_regs[ins.x]

    def _add_to_idx(self, ins):
        """set I = I + Vx"""
        total = self.idx + self.v_regs[ins.x]
        self.idx = total & 0xFFF
        if self.quirks.index_overflow_flag:
            self.v_regs[0xF] = 1 if total > 0xFFF else 0

    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.idx = FONT_ADDRESS + (self.v_regs[ins.x] & 0xF) * FONT_SPRITE_SIZE

    def _bcd_repr(self, ins):
        """store hundreds, tens and ones digits of Vx at I, I+1, I+2"""
        value = self.v_regs[ins.x]
        self.mem.write(self.idx, [value // 100, value // 10 % 10, value % 10])

    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem.write(self.idx, self.v_regs[:ins.x+1])
        if self.quirks.load_store_increments_i:
            self.idx = (self.idx + ins.x + 1) & 0xFFF

    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        self.v_regs[:ins.x+1] = self.mem.read(self.idx, ins.x + 1)
        if self.quirks.load_store_increments_i:
            self.idx = (self.idx + ins.x + 1) & 0xFFF


# ******************** TIMERS SECTION
class TimerDriver:
    """
    turn elapsed wall clock time into 60Hz timer ticks, independently of how many
    instructions get executed in the meantime (and of the machine waiting for a key)
    """
    def __init__(self, machine, hz=TIMER_HZ):
        self.machine = machine
        self.hz = hz
        self.pending = 0.0      # fraction of a tick carried over between updates

    def update(self, seconds):
        """service the timers for the given elapsed time, return how many ticks were applied"""
        self.pending += seconds * self.hz
        ticks = int(self.pending)
        self.pending -= ticks
        for _ in range(ticks):
            self.machine.tick_timers()
        return ticks
