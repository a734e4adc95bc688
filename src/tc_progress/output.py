from dataclasses import dataclass
from enum import Enum
from typing import Iterable, TextIO

class Channel(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"

@dataclass(frozen=True)
class Line:
    channel: Channel
    text: str
    newline: bool = True  # False: write text as-is, no terminator

def write_lines(lines: Iterable[Line], out: TextIO, err: TextIO) -> None:
    for line in lines:
        stream = out if line.channel is Channel.STDOUT else err
        stream.write(line.text + "\n" if line.newline else line.text)
