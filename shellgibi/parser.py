from typing import List, Optional

from shellgibi.ast_tree import Command
from shellgibi.lexer import QUOTES, ShellLexer

BACKGROUND = "&"
REDIRECT_IN = "<"
REDIRECT_OUT = ">"
REDIRECT_APPEND = ">>"


class ShellParser:
    """
    Clase que representa el parser de la shell.

    El parser es tolerante: nunca lanza excepciones, los errores de sintaxis
    se quedan en la etapa (por ejemplo una redireccion con ruta vacia) y es
    el ejecutor quien los reporta.
    """

    def __init__(self, lexer: Optional[ShellLexer] = None) -> None:
        self.lexer = lexer if lexer else ShellLexer()
        self.tokens: List[str] = []
        self.pos = 0

    def parse(self, line: str) -> Command:
        line = line.strip()

        background = False
        if line.endswith(BACKGROUND):
            background = True
            line = line[: -len(BACKGROUND)].strip()

        root = None
        previous = None
        for segment in self.lexer.split_pipeline(line):
            stage = self.parse_stage(segment)
            if previous is None:
                root = stage
            else:
                previous.next = stage
            previous = stage

        # solo la ultima etapa de la cadena puede ir en background
        previous.background = background
        return root

    def parse_stage(self, segment: str) -> Command:
        self.tokens = [t for t in self.lexer.tokenize(segment) if t.strip()]
        self.pos = 0

        command = Command()
        if not self.tokens:
            return command

        command.name = unquote(self.consume_any())

        while self.pos < len(self.tokens):
            token = self.consume_any().strip()

            if token == BACKGROUND:
                continue

            if token.startswith(REDIRECT_APPEND):
                command.redirects.append = self.redirect_target(token, REDIRECT_APPEND)
            elif token.startswith(REDIRECT_OUT):
                command.redirects.truncate = self.redirect_target(token, REDIRECT_OUT)
            elif token.startswith(REDIRECT_IN):
                command.redirects.input = self.redirect_target(token, REDIRECT_IN)
            else:
                command.args.append(unquote(token))

        return command

    def redirect_target(self, token: str, operator: str) -> str:
        target = token[len(operator):]
        if target:
            return unquote(target)
        if self.pos < len(self.tokens) and not self.peek().startswith(
            (REDIRECT_IN, REDIRECT_OUT)
        ):
            return unquote(self.consume_any())
        return ""

    def peek(self) -> str:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else ""

    def consume_any(self) -> str:
        token = self.tokens[self.pos]
        self.pos += 1
        return token


def unquote(token: str) -> str:
    if len(token) > 2 and token[0] in QUOTES and token[0] == token[-1]:
        return token[1:-1]
    return token
