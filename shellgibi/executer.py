import os
import signal
import subprocess
import tempfile
from functools import partial
from typing import IO, List, Optional, Tuple

from shellgibi.ast_tree import Command
from shellgibi.codes import ReturnCode, ShellStatus
from shellgibi.colors import print_error, print_warning
from shellgibi.config import ShellConfig
from shellgibi.jobs import JobPolicy, SingleJobPolicy
from shellgibi.resolver import (
    ChangeDirectory,
    ExecutionResolver,
    Invalid,
    Launch,
    NoOp,
    NotFound,
    Resolution,
    Rewrite,
)

BUFSIZE = 8192
LAUNCH_FAILURE = 1


class CommandExecutor:
    """
    Clase que representa el ejecutor de comandos.

    Recorre la cadena etapa por etapa, lanza un proceso por etapa y conecta
    su entrada y salida. Cuando la salida de una etapa tiene mas de un
    destino se guarda en un archivo temporal y se copia al terminar el
    proceso.
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        resolver: Optional[ExecutionResolver] = None,
        jobs: Optional[JobPolicy] = None,
    ) -> None:
        self.config = config if config else ShellConfig.from_env()
        self.env = os.environ.copy()
        self.resolver = resolver if resolver else ExecutionResolver(
            self.config, warn=print_warning
        )
        self.jobs = jobs if jobs else SingleJobPolicy()
        self.return_codes: List[Optional[int]] = []
        self.last_return_code = 0

    def execute(self, chain: Command) -> ShellStatus:
        self.return_codes = []
        if any(self.resolver.is_exit(stage) for stage in chain):
            return ShellStatus.EXIT

        wait = self.jobs.should_wait(chain)
        line = self._ast_to_string(chain)
        pending: List[Tuple[int, subprocess.Popen]] = []
        inbound = None
        stage = chain
        try:
            while stage is not None:
                stage, inbound = self._process_stage(stage, inbound, wait, line, pending)
                stage = stage.next
        finally:
            _close(inbound)
            # siempre se espera a todo lo lanzado, aunque otra etapa haya fallado
            for index, process in pending:
                self.return_codes[index] = self._wait(process)

        codes = [code for code in self.return_codes if code is not None]
        self.last_return_code = codes[-1] if codes else ReturnCode.SUCCESS
        return ShellStatus.CONTINUE

    def _process_stage(
        self,
        stage: Command,
        inbound,
        wait: bool,
        line: str,
        pending: List[Tuple[int, subprocess.Popen]],
    ):
        index = len(self.return_codes)
        self.return_codes.append(None)

        stage, resolution, follow_pid = self._resolve(stage)
        if not isinstance(resolution, Launch):
            _close(inbound)
            self.return_codes[index] = self._settle(resolution)
            return stage, _empty_stream(stage)

        redirects = stage.redirects
        if "" in redirects.slots():
            _close(inbound)
            print_error(f"{stage.name}: missing redirection target")
            self.return_codes[index] = ReturnCode.INVALID
            return stage, _empty_stream(stage)

        fan_out = len(redirects.outputs()) + (stage.next is not None) > 1
        capture = None
        opened: List[IO] = []
        try:
            stdin = inbound
            if redirects.input is not None:
                stdin = _open(redirects.input, "rb", opened)

            if fan_out:
                capture = tempfile.NamedTemporaryFile(
                    prefix=f"{self.config.sysname}-", suffix=".out", delete=False
                )
                opened.append(capture)
                stdout = capture
            elif redirects.truncate is not None:
                stdout = _open(redirects.truncate, "wb", opened)
            elif redirects.append is not None:
                stdout = _open(redirects.append, "ab", opened)
            elif stage.next is not None:
                stdout = subprocess.PIPE
            else:
                stdout = None

            process = self._launch(resolution, stdin, stdout)
        except OSError as e:
            print_error(f"{stage.name}: {e.strerror or e}")
            self.return_codes[index] = LAUNCH_FAILURE
            if capture is not None:
                capture.close()
                os.remove(capture.name)
            return stage, _empty_stream(stage)
        finally:
            _close(inbound)
            for f in opened:
                f.close()

        if fan_out and not wait and stage.next is None and follow_pid is None:
            # la copia a los destinos se hace al recoger el proceso
            self.jobs.track(
                process,
                line,
                on_exit=partial(
                    self._fan_out,
                    redirects.truncate,
                    redirects.append,
                    capture.name,
                    False,
                ),
            )
            return stage, None

        if fan_out:
            self.return_codes[index] = self._wait(process)
            outbound, copied = self._fan_out(
                redirects.truncate, redirects.append, capture.name, stage.next is not None
            )
            if not copied:
                self.return_codes[index] = LAUNCH_FAILURE
        elif stage.next is not None:
            outbound = process.stdout
        else:
            outbound = None

        if follow_pid is not None:
            if self.return_codes[index] is None:
                self.return_codes[index] = self._wait(process)
            self.jobs.wait_for_pid(follow_pid)
        elif not fan_out:
            if wait or stage.next is not None:
                pending.append((index, process))
            else:
                self.jobs.track(process, line)

        return stage, outbound

    def _resolve(self, stage: Command) -> Tuple[Command, Resolution, Optional[int]]:
        resolution = self.resolver.resolve(stage)
        if not isinstance(resolution, Rewrite):
            return stage, resolution, None

        for step in resolution.prelude:
            self._run_prelude(step)

        rewritten = resolution.command
        rewritten.tail().next = stage.next
        return rewritten, self.resolver.launchable(rewritten), resolution.wait_for_pid

    def _settle(self, resolution: Resolution) -> int:
        if isinstance(resolution, NoOp):
            return ReturnCode.SUCCESS

        if isinstance(resolution, ChangeDirectory):
            try:
                os.chdir(resolution.path)
            except OSError as e:
                print_error(f"-{self.config.sysname}: cd: {e.strerror}")
                return LAUNCH_FAILURE
            return ReturnCode.SUCCESS

        if isinstance(resolution, Invalid):
            print_error(resolution.message)
            return ReturnCode.INVALID

        if isinstance(resolution, NotFound):
            print_error(f"-{self.config.sysname}: {resolution.name}: command not found")
            return ReturnCode.UNKNOWN

        return ReturnCode.SUCCESS

    def _run_prelude(self, step: Command) -> Optional[int]:
        resolution = self.resolver.launchable(step)
        if not isinstance(resolution, Launch):
            return self._settle(resolution)
        try:
            process = self._launch(resolution, None, None)
        except OSError as e:
            print_error(f"{step.name}: {e.strerror or e}")
            return LAUNCH_FAILURE
        return self._wait(process)

    def _launch(self, resolution: Launch, stdin, stdout) -> subprocess.Popen:
        return subprocess.Popen(
            resolution.argv,
            executable=resolution.executable,
            stdin=stdin,
            stdout=stdout,
            env=self.env,
        )

    def _wait(self, process: subprocess.Popen) -> int:
        while True:
            try:
                return process.wait()
            except KeyboardInterrupt:
                process.send_signal(signal.SIGINT)

    def _fan_out(
        self,
        truncate: Optional[str],
        append: Optional[str],
        capture_path: str,
        feed_next: bool,
    ) -> Tuple[Optional[IO], bool]:
        """
        Copia la salida capturada a cada destino, en orden: archivo truncado,
        archivo en append y por ultimo la entrada de la siguiente etapa.

        Devuelve la entrada de la siguiente etapa (o None) y si todos los
        archivos destino se pudieron abrir. El archivo temporal se borra
        siempre.
        """
        targets: List[IO] = []
        copied = True
        try:
            for path, mode in ((truncate, "wb"), (append, "ab")):
                if path is not None:
                    try:
                        _open(path, mode, targets)
                    except OSError as e:
                        print_error(f"Cannot open file: {path}: {e.strerror}")
                        copied = False

            with open(capture_path, "rb") as captured:
                for chunk in iter(partial(captured.read, BUFSIZE), b""):
                    for target in targets:
                        target.write(chunk)

            if feed_next:
                return open(capture_path, "rb"), copied
            return None, copied
        finally:
            for target in targets:
                target.close()
            os.remove(capture_path)

    def _ast_to_string(self, chain: Command) -> str:
        stages = []
        for stage in chain:
            parts = [stage.name]
            for arg in stage.args:
                parts.append(f'"{arg}"' if " " in arg else arg)

            redirects = stage.redirects
            if redirects.input is not None:
                parts.append(f"< {redirects.input}")
            if redirects.truncate is not None:
                parts.append(f"> {redirects.truncate}")
            if redirects.append is not None:
                parts.append(f">> {redirects.append}")
            stages.append(" ".join(parts))

        line = " | ".join(stages)
        if chain.tail().background:
            line += " &"
        return line


def _open(path: str, mode: str, opened: List[IO]) -> IO:
    f = open(path, mode)
    opened.append(f)
    return f


def _close(stream) -> None:
    if stream is not None and hasattr(stream, "close"):
        stream.close()


def _empty_stream(stage: Command):
    return subprocess.DEVNULL if stage.next is not None else None
