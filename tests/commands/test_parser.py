import unittest

from braiins_pool_bot.commands.parser import parse_command


class ParseCommandTests(unittest.TestCase):
    def test_bare_command(self) -> None:
        command = parse_command("!help")
        self.assertEqual("!help", command.name)
        self.assertEqual("", command.argument)
        self.assertEqual([], command.args)

    def test_splits_on_first_space_only(self) -> None:
        command = parse_command("!subscribe abc def")
        self.assertEqual("!subscribe", command.name)
        self.assertEqual("abc def", command.argument)
        self.assertEqual(["abc", "def"], command.args)

    def test_extra_whitespace_in_argument(self) -> None:
        command = parse_command("!subscribe   tok  ")
        self.assertEqual(["tok"], command.args)

    def test_name_is_case_sensitive(self) -> None:
        self.assertEqual("!HELP", parse_command("!HELP").name)

    def test_empty_body(self) -> None:
        command = parse_command("")
        self.assertEqual("", command.name)
        self.assertEqual([], command.args)
