from typing import Iterator, List, Optional


class Redirects:
    """
    Clase que representa las tres redirecciones de una etapa.
    """
    def __init__(
        self,
        input: Optional[str] = None,
        truncate: Optional[str] = None,
        append: Optional[str] = None,
    ) -> None:
        self.input = input
        self.truncate = truncate
        self.append = append

    def slots(self) -> List[Optional[str]]:
        return [self.input, self.truncate, self.append]

    def outputs(self) -> List[str]:
        # orden fijo: primero truncate, luego append
        return [path for path in (self.truncate, self.append) if path is not None]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Redirects):
            return NotImplemented
        return self.slots() == other.slots()

    def __repr__(self) -> str:
        return f"Redirects(in={self.input}, out={self.truncate}, append={self.append})"


class Command:
    """
    Clase que representa una etapa de una cadena de pipes.

    La primera etapa es la duena de la cadena: las siguientes solo se
    alcanzan por ``next``.
    """
    def __init__(
        self,
        name: str = "",
        args: Optional[List[str]] = None,
        redirects: Optional[Redirects] = None,
        background: bool = False,
        next: Optional["Command"] = None,
    ) -> None:
        self.name = name
        self.args = args if args else []
        self.redirects = redirects if redirects else Redirects()
        self.background = background
        self.next = next

    @property
    def arg_count(self) -> int:
        return len(self.args)

    @property
    def argv(self) -> List[str]:
        return [self.name] + self.args

    def __iter__(self) -> Iterator["Command"]:
        stage = self
        while stage is not None:
            yield stage
            stage = stage.next

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def tail(self) -> "Command":
        stage = self
        while stage.next is not None:
            stage = stage.next
        return stage

    def inspect(self, indent: int = 0) -> str:
        pad = "\t" * indent
        lines = [
            f"{pad}Command: <{self.name}>",
            f"{pad}\tIs Background: {'yes' if self.background else 'no'}",
            f"{pad}\tRedirects:",
        ]
        for i, target in enumerate(self.redirects.slots()):
            lines.append(f"{pad}\t\t{i}: {target if target is not None else 'N/A'}")
        lines.append(f"{pad}\tArguments ({self.arg_count}):")
        for i, arg in enumerate(self.args):
            lines.append(f"{pad}\t\tArg {i}: {arg}")
        if self.next is not None:
            lines.append(f"{pad}\tPiped to:")
            lines.append(self.next.inspect(indent + 1))
        return "\n".join(lines)

    def release(self) -> None:
        stage = self
        while stage is not None:
            following = stage.next
            stage.next = None
            stage.name = ""
            stage.args = []
            stage.redirects = Redirects()
            stage.background = False
            stage = following

    def __repr__(self) -> str:
        return (
            f"Command({self.name}, {self.args}, {self.redirects}, "
            f"{self.background}, next={self.next})"
        )
