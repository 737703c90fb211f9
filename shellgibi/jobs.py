import os
import subprocess
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from shellgibi.ast_tree import Command
from shellgibi.colors import color

POLL_INTERVAL = 0.05


class Job:
    """
    Clase que representa un proceso lanzado en segundo plano.

    ``on_exit`` se llama una sola vez, cuando el proceso ya termino y se
    recoge.
    """
    def __init__(
        self,
        job_id: int,
        process: subprocess.Popen,
        cmd: str,
        on_exit: Optional[Callable[[], object]] = None,
    ) -> None:
        self.job_id = job_id
        self.process = process
        self.cmd = cmd
        self.on_exit = on_exit

    @property
    def pid(self) -> int:
        return self.process.pid

    def __repr__(self) -> str:
        return f"Job(id=({self.job_id}), pid=({self.pid}), cmd=({self.cmd}))"


class JobPolicy(ABC):
    """
    Clase que decide que se espera en primer plano y que queda en segundo.
    """

    @abstractmethod
    def should_wait(self, chain: Command) -> bool:
        pass

    @abstractmethod
    def track(
        self,
        process: subprocess.Popen,
        line: str,
        on_exit: Optional[Callable[[], object]] = None,
    ) -> None:
        pass

    @abstractmethod
    def reap(self) -> List[Tuple[int, int]]:
        pass

    @abstractmethod
    def wait_for_pid(self, pid: int) -> None:
        pass


class SingleJobPolicy(JobPolicy):
    """
    Politica sin tabla de jobs.

    Solo una cadena de una etapa marcada con ``&`` queda en segundo plano;
    una cadena con pipes se espera completa. Los procesos en segundo plano
    se guardan unicamente para recogerlos y no dejar zombies.
    """

    def __init__(self, announce: bool = True) -> None:
        self.announce = announce
        self.background: List[Job] = []
        self.current_job_id = 1

    def should_wait(self, chain: Command) -> bool:
        return not (chain.background and chain.next is None)

    def track(
        self,
        process: subprocess.Popen,
        line: str,
        on_exit: Optional[Callable[[], object]] = None,
    ) -> None:
        job = Job(self.current_job_id, process, line, on_exit)
        self.current_job_id += 1
        self.background.append(job)
        if self.announce:
            print(color(f"[{job.job_id}] {job.pid}", "CYAN"), flush=True)

    def reap(self) -> List[Tuple[int, int]]:
        finished = []
        for job in list(self.background):
            if job.process.poll() is None:
                continue
            self.background.remove(job)
            if job.on_exit is not None:
                job.on_exit()
            finished.append((job.pid, job.process.returncode))
            if self.announce:
                print(
                    color(f"[{job.job_id}]    done       {job.cmd}", "GREEN"),
                    flush=True,
                )
        return finished

    def wait_for_pid(self, pid: int) -> None:
        try:
            while True:
                # un hijo propio terminado sigue vivo para kill(pid, 0) hasta recogerlo
                self.reap()
                try:
                    os.kill(pid, 0)
                except ProcessLookupError:
                    return
                except PermissionError:
                    pass
                time.sleep(POLL_INTERVAL)
        except KeyboardInterrupt:
            print(flush=True)
