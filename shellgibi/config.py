import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

SYSNAME = "shellgibi"
HISTORY_SIZE = 50
CORONA_URL = "www.worldometers.info/coronavirus/"


@dataclass
class ShellConfig:
    """
    Clase que representa la configuracion de la shell.

    Se construye a partir de un entorno (por defecto ``os.environ``); la
    shell no lee ningun archivo de configuracion.
    """
    search_path: List[str] = field(default_factory=list)
    user: str = ""
    home: str = ""
    sysname: str = SYSNAME
    psvis_module: str = "psvis.ko"
    cronjob_file: str = "new-cronjob.txt"
    corona_url: str = CORONA_URL
    history_size: int = HISTORY_SIZE
    debug: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ShellConfig":
        env = os.environ if env is None else env
        return cls(
            search_path=split_search_path(env.get("PATH", "")),
            user=env.get("USER", ""),
            home=env.get("HOME", ""),
            psvis_module=env.get("SHELLGIBI_PSVIS_MODULE", "psvis.ko"),
            cronjob_file=env.get("SHELLGIBI_CRONJOB_FILE", "new-cronjob.txt"),
            debug=bool(env.get("SHELLGIBI_DEBUG")),
        )


def split_search_path(value: str) -> List[str]:
    return [directory for directory in value.split(os.pathsep) if directory]
