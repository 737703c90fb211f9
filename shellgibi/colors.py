import sys

COLORS = {
    "RESET": "\033[0m",
    "RED": "\033[91m",
    "GREEN": "\033[92m",
    "YELLOW": "\033[93m",
    "BLUE": "\033[94m",
    "MAGENTA": "\033[95m",
    "CYAN": "\033[96m",
    "WHITE": "\033[97m",
    "BRIGHT_CYAN": "\033[1;96m",
    "ERROR": "\033[1;31m",
    "WARNING": "\033[1;33;46m",
}


def color(text: str, color_name: str, stream=None) -> str:
    stream = stream if stream is not None else sys.stdout
    if not stream.isatty():
        return text
    return f"{COLORS.get(color_name, '')}{text}{COLORS['RESET']}"


def print_error(message: str) -> None:
    print(color(f"Error: {message}", "ERROR", sys.stderr), file=sys.stderr, flush=True)


def print_warning(message: str) -> None:
    print(
        color(f"Warning: {message}", "WARNING", sys.stderr),
        file=sys.stderr,
        flush=True,
    )
