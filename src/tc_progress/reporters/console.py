from typing import List
from ..events import Event, TestStarted, Output
from ..output import Channel, Line
class ConsoleReporter:
    def __init__(self, labels: bool = False): self.labels = labels
    def render(self, event: Event) -> List[Line]:
        if isinstance(event, TestStarted) and self.labels:
            return [Line(Channel.STDOUT, f"***** {event.name}")]
        if isinstance(event, Output) and event.type == "Out":
            # captured output already carries its own line endings
            return [Line(Channel.STDOUT, event.text, newline=False)]
        return []
