"""
CHIP-8 instruction set and decoder

every opcode shape is its own immutable named tuple carrying only the operands
it needs; str() of an instruction gives back its assembly mnemonic
"""
from collections import namedtuple

from .errors import DecodeError


class Instruction(tuple):
    __slots__ = ()
    mnemonic = ""

    def __str__(self):
        return self.mnemonic.format(**self._asdict())

    # plain tuples with the same operands would compare equal across opcodes
    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__,) + tuple(self))


def instruction(name, fields, mnemonic):
    return type(name, (Instruction, namedtuple(name, fields)), {"__slots__": (), "mnemonic": mnemonic})


# ******************** INSTRUCTION SET SECTION
Cls = instruction("Cls", "", "CLS")
Ret = instruction("Ret", "", "RET")
Sys = instruction("Sys", "addr", "SYS 0x{addr:03x}")
Jp = instruction("Jp", "addr", "JP 0x{addr:03x}")
Call = instruction("Call", "addr", "CALL 0x{addr:03x}")
SeByte = instruction("SeByte", "x kk", "SE V{x:X}, 0x{kk:02x}")
SneByte = instruction("SneByte", "x kk", "SNE V{x:X}, 0x{kk:02x}")
SeReg = instruction("SeReg", "x y", "SE V{x:X}, V{y:X}")
LdByte = instruction("LdByte", "x kk", "LD V{x:X}, 0x{kk:02x}")
AddByte = instruction("AddByte", "x kk", "ADD V{x:X}, 0x{kk:02x}")
LdReg = instruction("LdReg", "x y", "LD V{x:X}, V{y:X}")
Or = instruction("Or", "x y", "OR V{x:X}, V{y:X}")
And = instruction("And", "x y", "AND V{x:X}, V{y:X}")
Xor = instruction("Xor", "x y", "XOR V{x:X}, V{y:X}")
AddReg = instruction("AddReg", "x y", "ADD V{x:X}, V{y:X}")
Sub = instruction("Sub", "x y", "SUB V{x:X}, V{y:X}")
Shr = instruction("Shr", "x y", "SHR V{x:X}, V{y:X}")
Subn = instruction("Subn", "x y", "SUBN V{x:X}, V{y:X}")
Shl = instruction("Shl", "x y", "SHL V{x:X}, V{y:X}")
SneReg = instruction("SneReg", "x y", "SNE V{x:X}, V{y:X}")
LdI = instruction("LdI", "addr", "LD I, 0x{addr:03x}")
JpV0 = instruction("JpV0", "addr", "JP V0, 0x{addr:03x}")
Rnd = instruction("Rnd", "x kk", "RND V{x:X}, 0x{kk:02x}")
Drw = instruction("Drw", "x y n", "DRW V{x:X}, V{y:X}, {n}")
Skp = instruction("Skp", "x", "SKP V{x:X}")
Sknp = instruction("Sknp", "x", "SKNP V{x:X}")
LdVxDt = instruction("LdVxDt", "x", "LD V{x:X}, DT")
LdVxK = instruction("LdVxK", "x", "LD V{x:X}, K")
LdDtVx = instruction("LdDtVx", "x", "LD DT, V{x:X}")
LdStVx = instruction("LdStVx", "x", "LD ST, V{x:X}")
AddI = instruction("AddI", "x", "ADD I, V{x:X}")
LdF = instruction("LdF", "x", "LD F, V{x:X}")
LdB = instruction("LdB", "x", "LD B, V{x:X}")
StoreRegs = instruction("StoreRegs", "x", "LD [I], V{x:X}")
LoadRegs = instruction("LoadRegs", "x", "LD V{x:X}, [I]")


# ******************** DECODER SECTION
# groups selected by the low nibble (0x8) or the low byte (0xE, 0xF)
ALU_OPS = {
    0x0: LdReg,
    0x1: Or,
    0x2: And,
    0x3: Xor,
    0x4: AddReg,
    0x5: Sub,
    0x6: Shr,
    0x7: Subn,
    0xE: Shl,
}
KEY_OPS = {
    0x9E: Skp,
    0xA1: Sknp,
}
MISC_OPS = {
    0x07: LdVxDt,
    0x0A: LdVxK,
    0x15: LdDtVx,
    0x18: LdStVx,
    0x1E: AddI,
    0x29: LdF,
    0x33: LdB,
    0x55: StoreRegs,
    0x65: LoadRegs,
}
# groups fully determined by the high nibble
ADDR_OPS = {0x1: Jp, 0x2: Call, 0xA: LdI, 0xB: JpV0}
BYTE_OPS = {0x3: SeByte, 0x4: SneByte, 0x6: LdByte, 0x7: AddByte, 0xC: Rnd}


def decode(high, low, address=None):
    """
    decode the two bytes of an opcode word into an Instruction
    raise DecodeError for words outside the instruction set (address is only used in the error)
    """
    word = high << 8 | low
    a, x = high >> 4, high & 0xF
    y, n = low >> 4, low & 0xF
    kk, nnn = low, word & 0x0FFF

    if a == 0x0:
        if word == 0x00E0:
            return Cls()
        if word == 0x00EE:
            return Ret()
        return Sys(nnn)
    if a in ADDR_OPS:
        return ADDR_OPS[a](nnn)
    if a in BYTE_OPS:
        return BYTE_OPS[a](x, kk)
    if a == 0x5 and n == 0x0:
        return SeReg(x, y)
    if a == 0x8 and n in ALU_OPS:
        return ALU_OPS[n](x, y)
    if a == 0x9 and n == 0x0:
        return SneReg(x, y)
    if a == 0xD:
        return Drw(x, y, n)
    if a == 0xE and kk in KEY_OPS:
        return KEY_OPS[kk](x)
    if a == 0xF and kk in MISC_OPS:
        return MISC_OPS[kk](x)
    raise DecodeError(word, address)


def decode_word(word, address=None):
    return decode((word >> 8) & 0xFF, word & 0xFF, address)
