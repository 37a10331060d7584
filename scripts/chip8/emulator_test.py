import unittest
from chip8.emulator import KEY_MAPPINGS, get_args, quirks_from_args
from chip8.machine import Quirks


class TestCommandLine(unittest.TestCase):
    def test_defaults(self):
        args = get_args(["-f", "pong.ch8"])
        self.assertEqual(args.file, "pong.ch8")
        self.assertEqual(quirks_from_args(args), Quirks())

    def test_quirk_flags(self):
        args = get_args(["--file", "pong.ch8", "--no-index-overflow", "--shift-vy",
                         "--logic-vf-reset", "--increment-i", "--ips", "1000"])
        self.assertEqual(args.ips, 1000)
        self.assertEqual(quirks_from_args(args), Quirks(False, True, True, True))

    def test_rejects_bad_rate(self):
        with self.assertRaises(SystemExit):
            get_args(["-f", "pong.ch8", "--ips", "0"])


class TestKeyMappings(unittest.TestCase):
    def test_whole_keypad_is_mapped(self):
        self.assertEqual(sorted(KEY_MAPPINGS.values()), list(range(16)))


if __name__ == "__main__":
    unittest.main()
