from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    argument: str = ""

    @property
    def args(self) -> list[str]:
        return self.argument.split()


def parse_command(body: str) -> ParsedCommand:
    name, _, argument = body.partition(" ")
    return ParsedCommand(name=name, argument=argument)
