from enum import Enum, IntEnum


class ReturnCode(IntEnum):
    """
    Codigos que devuelve una etapa cuando la shell decide por ella.
    """
    SUCCESS = 0
    EXIT = 1
    UNKNOWN = 2
    INVALID = 3


class ShellStatus(Enum):
    CONTINUE = "continue"
    EXIT = "exit"
