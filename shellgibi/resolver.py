"""
Resolucion de etapas.

Cada etapa se resuelve en una de las variantes de abajo. Los comandos
propios de la shell no se ejecutan dentro de la shell: se reescriben como
una invocacion de una herramienta externa y el ejecutor lanza esa
invocacion igual que cualquier otra.
"""
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from shellgibi.ast_tree import Command, Redirects
from shellgibi.config import ShellConfig

CORONA_PATTERN = r"<td[^>]*> Turkey </td>(\s*)<td[^>]*>\K[0-9]*(?=</td>)"


@dataclass
class Launch:
    executable: str
    argv: List[str]


@dataclass
class Rewrite:
    command: Command
    prelude: List[Command] = field(default_factory=list)
    wait_for_pid: Optional[int] = None


@dataclass
class NoOp:
    pass


@dataclass
class ExitShell:
    pass


@dataclass
class ChangeDirectory:
    path: str


@dataclass
class Invalid:
    message: str


@dataclass
class NotFound:
    name: str


Resolution = Union[Launch, Rewrite, NoOp, ExitShell, ChangeDirectory, Invalid, NotFound]


class ExecutionResolver:
    """
    Clase que decide como se ejecuta una etapa.

    Los nombres propios de la shell se revisan antes que el ``PATH`` y
    siempre tienen prioridad sobre un ejecutable del mismo nombre.
    """

    def __init__(self, config: Optional[ShellConfig] = None, warn=None) -> None:
        self.config = config if config else ShellConfig.from_env()
        self.warn = warn
        self.builtins: Dict[str, Callable[[Command], Resolution]] = {
            "exit": self._builtin_exit,
            "cd": self._builtin_cd,
            "myjobs": self._builtin_myjobs,
            "pause": self._builtin_pause,
            "mybg": self._builtin_mybg,
            "myfg": self._builtin_myfg,
            "alarm": self._builtin_alarm,
            "psvis": self._builtin_psvis,
            "corona": self._builtin_corona,
        }

    def builtin_names(self) -> List[str]:
        return sorted(self.builtins)

    def is_exit(self, stage: Command) -> bool:
        return stage.name == "exit"

    def resolve(self, stage: Command) -> Resolution:
        if not stage.name:
            return NoOp()

        builtin = self.builtins.get(stage.name)
        if builtin is not None:
            return builtin(stage)

        return self.launchable(stage)

    def launchable(self, stage: Command) -> Resolution:
        if not stage.name:
            return NoOp()
        executable = self.locate(stage.name)
        if executable is None:
            return NotFound(stage.name)
        return Launch(executable, stage.argv)

    def locate(self, name: str) -> Optional[str]:
        if os.sep in name:
            return name if is_executable(name) else None

        for directory in self.config.search_path:
            candidate = os.path.join(directory, name)
            if is_executable(candidate):
                return candidate
        return None

    def _builtin_exit(self, stage: Command) -> Resolution:
        return ExitShell()

    def _builtin_cd(self, stage: Command) -> Resolution:
        if stage.arg_count > 1:
            return Invalid("cd requires at most one argument <DIR>")
        if not stage.args:
            return ChangeDirectory(self.config.home or os.path.expanduser("~"))
        return ChangeDirectory(stage.args[0])

    def _builtin_myjobs(self, stage: Command) -> Resolution:
        if stage.arg_count != 0 and self.warn:
            self.warn("myjobs does not accept any arguments, arguments are omitted")
        return Rewrite(
            _rewritten(stage, "ps", ["-U", self.config.user, "-o", "pid,cmd,s"])
        )

    def _builtin_pause(self, stage: Command) -> Resolution:
        return self._signal(stage, "-STOP")

    def _builtin_mybg(self, stage: Command) -> Resolution:
        return self._signal(stage, "-CONT")

    def _builtin_myfg(self, stage: Command) -> Resolution:
        resolution = self._signal(stage, "-CONT")
        if isinstance(resolution, Rewrite):
            resolution.wait_for_pid = int(stage.args[0])
        return resolution

    def _signal(self, stage: Command, signal_flag: str) -> Resolution:
        if stage.arg_count != 1:
            return Invalid(f"{stage.name} requires only one argument <PID>")
        if not _is_pid(stage.args[0]):
            return Invalid(f"{stage.name}: invalid process id '{stage.args[0]}'")
        return Rewrite(_rewritten(stage, "kill", [signal_flag, stage.args[0]]))

    def _builtin_alarm(self, stage: Command) -> Resolution:
        if stage.arg_count != 2:
            return Invalid("alarm requires two arguments <HH.MM> <music_file>")

        hour, _, minute = stage.args[0].partition(".")
        if not hour:
            return Invalid("invalid hour argument")
        if not minute:
            return Invalid("invalid minute argument")

        try:
            with open(self.config.cronjob_file, "w") as cronjob:
                cronjob.write("SHELL=/bin/bash\n")
                cronjob.write(f"PATH={os.pathsep.join(self.config.search_path)}\n")
                cronjob.write(f"{minute} {hour} * * * aplay {stage.args[1]}\n")
        except OSError as e:
            return Invalid(f"alarm: {self.config.cronjob_file}: {e.strerror}")

        return Rewrite(_rewritten(stage, "crontab", [self.config.cronjob_file]))

    def _builtin_psvis(self, stage: Command) -> Resolution:
        if stage.arg_count != 2:
            return Invalid("psvis requires two arguments <PID> <output_file>")
        if not _is_pid(stage.args[0]):
            return Invalid(f"psvis: invalid process id '{stage.args[0]}'")

        root_pid = int(stage.args[0])
        load = Command("sudo", ["insmod", self.config.psvis_module, f"PID={root_pid}"])
        unload = Command("sudo", ["rmmod", "psvis"])
        drain = _rewritten(stage, "sudo", ["dmesg", "-c"])
        drain.redirects = Redirects(truncate=stage.args[1])
        return Rewrite(drain, prelude=[load, unload])

    def _builtin_corona(self, stage: Command) -> Resolution:
        fetch = _rewritten(
            stage,
            "wget",
            ["--quiet", "--output-document", "-", self.config.corona_url],
        )
        fetch.redirects = Redirects(input=stage.redirects.input)
        fetch.next = Command(
            "grep",
            ["-Po", CORONA_PATTERN],
            Redirects(truncate=stage.redirects.truncate, append=stage.redirects.append),
        )
        return Rewrite(fetch)


def _rewritten(stage: Command, name: str, args: List[str]) -> Command:
    return Command(name, list(args), stage.redirects, stage.background)


def _is_pid(value: str) -> bool:
    # solo digitos ascii: int() tambien acepta "+5", "-1" y "1_0"
    if not (value.isascii() and value.isdigit()):
        return False
    return int(value) > 0


def is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)
