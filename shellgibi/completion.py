import os
import readline
from typing import Iterable, List, Optional

from shellgibi.resolver import is_executable


class AutocompleteMatch:
    """
    Clase que representa el conjunto de candidatos de un autocompletado.
    """
    def __init__(self, matches: Optional[Iterable[str]] = None) -> None:
        self.matches: List[str] = []
        for match in matches or []:
            if match not in self.matches:
                self.matches.append(match)

    @property
    def match_count(self) -> int:
        return len(self.matches)

    def __repr__(self) -> str:
        return f"AutocompleteMatch({self.match_count}, {self.matches})"


def load_available_commands(search_path: List[str], builtins: Iterable[str]) -> List[str]:
    commands = set(builtins)
    for directory in search_path:
        try:
            entries = os.listdir(directory)
        except OSError:
            continue
        for entry in entries:
            if entry.startswith("."):
                continue
            if is_executable(os.path.join(directory, entry)):
                commands.add(entry)
    return sorted(commands)


def filename_autocomplete(prefix: str, directory: str = ".") -> AutocompleteMatch:
    head, tail = os.path.split(prefix)
    search = os.path.join(directory, head) if head else directory
    try:
        entries = sorted(os.listdir(search))
    except OSError:
        return AutocompleteMatch()
    return AutocompleteMatch(
        os.path.join(head, entry) if head else entry
        for entry in entries
        if not entry.startswith(".") and entry.startswith(tail)
    )


class ShellCompleter:
    """
    Clase que completa nombres de comandos (primera palabra) y nombres de
    archivos (resto de palabras) para ``readline``.
    """
    def __init__(self, commands: List[str]) -> None:
        self.commands = commands
        self.matches: List[str] = []

    def command_autocomplete(self, prefix: str) -> AutocompleteMatch:
        return AutocompleteMatch(c for c in self.commands if c.startswith(prefix))

    def candidates(self, line: str, text: str) -> AutocompleteMatch:
        # se completa un archivo si ya hay un comando y un separador antes
        before = line[: len(line) - len(text)]
        if before.strip():
            return filename_autocomplete(text)
        return self.command_autocomplete(text)

    def complete(self, text: str, state: int) -> Optional[str]:
        if state == 0:
            line = readline.get_line_buffer()[: readline.get_endidx()]
            self.matches = self.candidates(line, text).matches
        if state < len(self.matches):
            return self.matches[state]
        return None
