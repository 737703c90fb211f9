from typing import List

SPLITTERS = (" ", "\t")
QUOTES = ('"', "'")
PIPE = "|"


class ShellLexer:
    """
    Clase que representa el lexer de la shell.

    Las comillas se conservan dentro del token: es el parser quien decide
    si un token entre comillas se desenvuelve o no.
    """

    def __init__(self) -> None:
        self.tokens: List[str] = []
        self.current_token = ""
        self.quote_char = ""

    def _reset(self) -> None:
        self.tokens = []
        self.current_token = ""
        self.quote_char = ""

    def split_pipeline(self, line: str) -> List[str]:
        """
        Divide la linea en los segmentos separados por ``|`` fuera de comillas.
        """
        parts = []
        current = []
        quote_char = ""

        for char in line:
            if quote_char:
                if char == quote_char:
                    quote_char = ""
                current.append(char)
            elif char in QUOTES:
                quote_char = char
                current.append(char)
            elif char == PIPE:
                parts.append("".join(current))
                current = []
            else:
                current.append(char)

        parts.append("".join(current))
        return parts

    def tokenize(self, segment: str) -> List[str]:
        self._reset()

        for char in segment:
            if self.quote_char:
                self.current_token += char
                if char == self.quote_char:
                    self.quote_char = ""
                continue

            if char in QUOTES:
                self.quote_char = char
                self.current_token += char
                continue

            if char in SPLITTERS:
                self.add_token()
                continue

            self.current_token += char

        # comilla sin cerrar: el resto del segmento queda como un solo token
        self.add_token()
        return self.tokens

    def add_token(self) -> None:
        if self.current_token:
            self.tokens.append(self.current_token)
            self.current_token = ""
