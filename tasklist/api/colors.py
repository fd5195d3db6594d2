from enum import Enum

class PriorityColor(Enum):
    LOW = "[green]"
    MEDIUM = "[yellow]"
    HIGH = "[bold red]"
    DONE = "[dim strike]"
    RESET = "[/]"

    def __str__(self):
        return self.value
