#!/usr/bin/env python3
import os
import readline
import socket
import sys
from typing import Optional

from shellgibi.codes import ShellStatus
from shellgibi.colors import color
from shellgibi.completion import ShellCompleter, load_available_commands
from shellgibi.config import ShellConfig
from shellgibi.executer import CommandExecutor
from shellgibi.parser import ShellParser


class Shell:
    """
    Clase que representa el ciclo de lectura y ejecucion de la shell.
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        executor: Optional[CommandExecutor] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self.config = config if config else ShellConfig.from_env()
        self.executor = executor if executor else CommandExecutor(self.config)
        self.parser = ShellParser()
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        if self.interactive:
            self._setup_readline()

    def _setup_readline(self) -> None:
        commands = load_available_commands(
            self.config.search_path, self.executor.resolver.builtin_names()
        )
        completer = ShellCompleter(commands)
        readline.set_completer(completer.complete)
        if "libedit" in (readline.__doc__ or ""):
            readline.parse_and_bind("bind ^I rl_complete")
        else:
            readline.parse_and_bind("tab: complete")
        readline.set_completer_delims(" \t\n")
        readline.set_history_length(self.config.history_size)

    def prompt(self) -> str:
        location = f"{self.config.user}@{socket.gethostname()}:{os.getcwd()}"
        return f"{color(location, 'GREEN')} {self.config.sysname}$ "

    def read_line(self) -> Optional[str]:
        """
        Devuelve la siguiente linea, o ``None`` al llegar al fin de la entrada.
        """
        try:
            return input(self.prompt() if self.interactive else "").strip()
        except EOFError:
            return None

    def run_line(self, line: str) -> ShellStatus:
        chain = self.parser.parse(line)
        if self.config.debug:
            print(chain.inspect(), file=sys.stderr, flush=True)
        try:
            return self.executor.execute(chain)
        finally:
            chain.release()

    def run(self) -> int:
        while True:
            self.executor.jobs.reap()
            try:
                line = self.read_line()
            except KeyboardInterrupt:
                print()
                continue

            if line is None:
                print()
                break

            if self.run_line(line) is ShellStatus.EXIT:
                break

        self.executor.jobs.reap()
        return self.executor.last_return_code


def main() -> None:
    sys.exit(Shell().run())


if __name__ == "__main__":
    main()
