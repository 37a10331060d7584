from .constants import MAX_ROM_SIZE, MEMORY_SIZE, ROM_START_ADDRESS


# ******************** ERRORS SECTION
# every error below is fatal for the step that raised it: the machine state is
# left as it was before that step and the host decides what to do next
class Chip8Error(Exception):
    """base class for the faults the machine reports to the host"""
    def __init__(self, detail, word=None, address=None):
        super().__init__(detail)
        self.detail = detail
        self.word = word            # raw opcode being executed, when known
        self.address = address      # address the opcode was fetched from, when known

    def __str__(self):
        msg = self.detail
        if self.word is not None:
            msg += f"    opcode: 0x{self.word:04x}"
        if self.address is not None:
            msg += f"    mem_addr: 0x{self.address:04x}"
        return msg

    def locate(self, word, address):
        """attach the opcode and its address, unless the raiser already did"""
        if self.word is None:
            self.word = word
        if self.address is None:
            self.address = address
        return self


class DecodeError(Chip8Error):
    def __init__(self, word, address=None):
        super().__init__("Unknown opcode", word=word, address=address)


class StackOverflow(Chip8Error):
    def __init__(self, depth, address=None):
        super().__init__(f"The CHIP-8 stack can contain at most {depth} addresses. Limit exceeded",
                         address=address)


class StackUnderflow(Chip8Error):
    def __init__(self, address=None):
        super().__init__("Return with an empty CHIP-8 stack", address=address)


class OutOfBoundsAccess(Chip8Error):
    def __init__(self, start, length=1, detail=None):
        self.start, self.length = start, length
        if detail is None:
            detail = (f"Memory access of {length} byte(s) at 0x{start:04x} "
                      f"falls outside 0x0000-0x{MEMORY_SIZE - 1:04x}")
        super().__init__(detail)


class ProgramTooLarge(OutOfBoundsAccess):
    def __init__(self, size):
        super().__init__(ROM_START_ADDRESS, size, f"ROM of {size} bytes exceeds the {MAX_ROM_SIZE} bytes available")
