# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import argparse
import os
import sys
from array import array

os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
)

from .constants import SCREEN_HEIGHT, SCREEN_WIDTH, TIMER_HZ
from .errors import Chip8Error
from .machine import Chip8, Quirks, TimerDriver


# ******************** STATIC SECTION
# the hex keypad laid out on the left side of a qwerty keyboard
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
KEY_MAPPINGS = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}

DEFAULT_IPS = 700
SCALE = 15
BEEP_FREQUENCY = 440
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 virtual machine")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--ips", type=int, default=DEFAULT_IPS, help="instructions executed per second")
    parser.add_argument("--scale", type=int, default=SCALE, help="size in screen pixels of a CHIP-8 pixel")
    parser.add_argument("--no-index-overflow", action="store_true", help="ADD I, Vx leaves VF untouched")
    parser.add_argument("--shift-vy", action="store_true", help="SHR/SHL shift Vy into Vx")
    parser.add_argument("--logic-vf-reset", action="store_true", help="OR/AND/XOR clear VF")
    parser.add_argument("--increment-i", action="store_true", help="LD [I], Vx and LD Vx, [I] increment I")
    args = parser.parse_args(argv)
    if args.ips <= 0:
        parser.error("--ips must be a positive number")
    if args.scale <= 0:
        parser.error("--scale must be a positive number")
    return args

def quirks_from_args(args):
    return Quirks(
        index_overflow_flag=not args.no_index_overflow,
        shift_uses_vy=args.shift_vy,
        logic_resets_vf=args.logic_vf_reset,
        load_store_increments_i=args.increment_i,
    )


# ******************** I/O SECTION
class Screen:
    """render collaborator: paints the machine display buffer, never writes to it"""
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def render(self, display):
        self.surface.fill(self.background)
        for y, row in enumerate(display.rows()):
            for x, pixel in enumerate(row):
                if pixel:
                    pygame.draw.rect(
                        self.surface,
                        self.foreground,
                        (x * self.scale, y * self.scale, self.scale, self.scale)
                    )
        pygame.display.flip()


class Beeper:
    """square wave tone played while the sound timer runs, silent when no audio device is available"""
    def __init__(self, frequency=BEEP_FREQUENCY, volume=0.1):
        self.sound = None
        self.playing = False
        mixer_init = pygame.mixer.get_init()
        if mixer_init is None:
            return
        sample_rate, size, channels = mixer_init
        period = int(round(sample_rate / frequency))
        amplitude = 2 ** (abs(size) - 1) - 1
        samples = array("h")
        for t in range(period):
            samples.extend([amplitude if t < period / 2 else -amplitude] * channels)
        self.sound = pygame.mixer.Sound(buffer=samples.tobytes())
        self.sound.set_volume(volume)

    def update(self, active):
        if self.sound is None or active == self.playing:
            return
        if active:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = active


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    chip = Chip8(quirks=quirks_from_args(args))
    try:
        chip.load_rom(args.file)
    except (OSError, Chip8Error) as err:
        sys.exit(f"Cannot load ROM {args.file}: {err}")
    # pygame initialization
    pygame.mixer.pre_init(44100, -16, 1, 512)
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.file))
    # IO
    screen = Screen(s=args.scale)
    beeper = Beeper()
    timers = TimerDriver(chip)
    pending_steps = 0.0
    # emulation loop
    run = True
    while run:
        # frames per second, timers and instructions are scheduled on the elapsed time
        seconds = clock.tick(TIMER_HZ) / 1000
        # process user input
        # loop throught the event queue
        for event in pygame.event.get():
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    run = False
                elif event.key in KEY_MAPPINGS:
                    chip.press_key(KEY_MAPPINGS[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAPPINGS:
                    chip.release_key(KEY_MAPPINGS[event.key])
            elif event.type == pygame.QUIT:
                run = False
        timers.update(seconds)
        pending_steps += args.ips * seconds
        try:
            while pending_steps >= 1:
                pending_steps -= 1
                chip.step()
        except Chip8Error as err:
            pygame.quit()
            sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{err}\n{chip}")
        # refresh screen if needed
        if chip.display.dirty:
            screen.render(chip.display)
            chip.display.dirty = False
        beeper.update(chip.sound_active)
    pygame.quit()


if __name__ == "__main__":
    main()
