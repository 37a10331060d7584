from .errors import Chip8Error, DecodeError, OutOfBoundsAccess, ProgramTooLarge, StackOverflow, StackUnderflow
from .instructions import Instruction, decode, decode_word
from .machine import Chip8, Quirks, State, TimerDriver
