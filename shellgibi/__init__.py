from shellgibi.ast_tree import Command, Redirects
from shellgibi.codes import ReturnCode, ShellStatus
from shellgibi.executer import CommandExecutor
from shellgibi.parser import ShellParser

__all__ = [
    "Command",
    "Redirects",
    "ReturnCode",
    "ShellStatus",
    "CommandExecutor",
    "ShellParser",
]

__version__ = "0.1.0"
