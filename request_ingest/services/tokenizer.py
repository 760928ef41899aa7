"""
Command tokenizer for curl command lines.

Splits a single-line command into (flag, value) tokens plus a residual string
of positional arguments. Only the quoting and escaping rules curl users
commonly rely on are supported; anything else is passed through literally.
"""

import re
from dataclasses import dataclass, field


# Alias -> canonical flag name
FLAG_ALIASES: dict[str, str] = {
    "-X": "request",
    "--request": "request",
    "-H": "header",
    "--header": "header",
    "-d": "data",
    "--data": "data",
    "--data-ascii": "data",
    "--data-raw": "data-raw",
    "--data-binary": "data-binary",
    "--data-urlencode": "data-urlencode",
    "-F": "form",
    "--form": "form",
    "--url": "url",
    "-A": "user-agent",
    "--user-agent": "user-agent",
    "-u": "user",
    "--user": "user",
    "-b": "cookie",
    "--cookie": "cookie",
    "--compressed": "compressed",
}

SWITCH_FLAGS = frozenset({"compressed"})

VALUE_FLAGS = frozenset(
    name for name in FLAG_ALIASES.values() if name not in SWITCH_FLAGS
)

# Flags whose value may use the $'...' form
ANSI_C_FLAGS = frozenset({"data", "data-raw", "data-binary", "data-urlencode"})

# curl options that take a value but have no effect on the request record
IGNORED_VALUE_OPTIONS = frozenset({
    "-o", "--output",
    "-m", "--max-time",
    "--connect-timeout",
    "-x", "--proxy",
    "-U", "--proxy-user",
    "-e", "--referer",
    "-w", "--write-out",
    "-T", "--upload-file",
    "-c", "--cookie-jar",
    "-E", "--cert",
    "--cacert",
    "--key",
    "-r", "--range",
    "--retry",
    "--max-redirs",
    "--limit-rate",
    "--resolve",
    "--interface",
})

_CONTINUATION = re.compile(r"\\\r?\n")
_WHITESPACE = re.compile(r"\s+")
_CURL_PREFIX = re.compile(r"curl(?:\s+|$)", re.IGNORECASE)

# Escapes honoured in each quoting context; anything else stays literal
_DOUBLE_QUOTE_ESCAPES = frozenset('"\\$`')
_BARE_ESCAPES = frozenset("'\"\\ $")
_ANSI_C_ESCAPES = {"'": "'", "n": "\n", "t": "\t"}


@dataclass
class Token:
    """A recognized flag and its value (``None`` for switches)."""
    flag: str
    value: str | None
    ignored: bool = False


@dataclass
class TokenizedCommand:
    """Result of tokenizing one command line."""
    command: str
    tokens: list[Token] = field(default_factory=list)
    residual: str = ""
    unknown_flags: list[str] = field(default_factory=list)

    def values(self, flag: str) -> list[str]:
        """All values given for a canonical flag, in order."""
        return [t.value or "" for t in self.tokens if t.flag == flag]


def normalize_command(text: str) -> str:
    """
    Collapse line continuations and whitespace runs, and strip a leading ``curl``.

    Example:
        >>> normalize_command("CURL  -X POST   https://x")
        '-X POST https://x'
    """
    command = _CONTINUATION.sub(" ", text or "")
    command = _WHITESPACE.sub(" ", command).strip()
    match = _CURL_PREFIX.match(command)
    if match:
        command = command[match.end():]
    return command


def _read_single_quoted(s: str, i: int) -> tuple[str, int]:
    end = s.find("'", i + 1)
    if end == -1:
        return s[i + 1:], len(s)
    return s[i + 1:end], end + 1


def _read_double_quoted(s: str, i: int) -> tuple[str, int]:
    out = []
    i += 1
    while i < len(s):
        ch = s[i]
        if ch == "\\" and i + 1 < len(s) and s[i + 1] in _DOUBLE_QUOTE_ESCAPES:
            out.append(s[i + 1])
            i += 2
            continue
        if ch == '"':
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return "".join(out), i


def _read_ansi_c(s: str, i: int) -> tuple[str, int]:
    out = []
    i += 2  # skip $'
    while i < len(s):
        ch = s[i]
        if ch == "\\" and i + 1 < len(s) and s[i + 1] in _ANSI_C_ESCAPES:
            out.append(_ANSI_C_ESCAPES[s[i + 1]])
            i += 2
            continue
        if ch == "'":
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return "".join(out), i


def _read_bare(s: str, i: int, ansi_c: bool) -> tuple[str, int]:
    out = []
    while i < len(s):
        ch = s[i]
        if ch.isspace() or ch in "'\"":
            break
        if ansi_c and s.startswith("$'", i):
            break
        if ch == "\\" and i + 1 < len(s) and s[i + 1] in _BARE_ESCAPES:
            out.append(s[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out), i


def read_value(s: str, i: int, ansi_c: bool = False) -> tuple[str, int]:
    """
    Read one shell word starting at ``s[i]``.

    Adjacent quoted and bare segments are concatenated, as a shell would.
    Returns ``(value, end_index)``.
    """
    parts = []
    while i < len(s) and not s[i].isspace():
        if ansi_c and s.startswith("$'", i):
            part, i = _read_ansi_c(s, i)
        elif s[i] == "'":
            part, i = _read_single_quoted(s, i)
        elif s[i] == '"':
            part, i = _read_double_quoted(s, i)
        else:
            part, i = _read_bare(s, i, ansi_c)
        parts.append(part)
    return "".join(parts), i


def _skip_spaces(s: str, i: int) -> int:
    while i < len(s) and s[i].isspace():
        i += 1
    return i


def _word_end(s: str, i: int) -> int:
    while i < len(s) and not s[i].isspace():
        i += 1
    return i


def tokenize(text: str) -> TokenizedCommand:
    """
    Tokenize a curl command line in a single left-to-right scan.

    Args:
        text: The command as typed or pasted (may include ``curl`` and
            backslash line continuations)

    Returns:
        TokenizedCommand holding recognized tokens in order and the residual
        positional text with every recognized flag-and-value span removed
    """
    s = normalize_command(text)
    result = TokenizedCommand(command=s)
    positional: list[str] = []

    i = _skip_spaces(s, 0)
    while i < len(s):
        start = i
        end = _word_end(s, i)
        word = s[start:end]
        canonical = FLAG_ALIASES.get(word)

        if canonical in SWITCH_FLAGS:
            result.tokens.append(Token(flag=canonical, value=None))
            i = _skip_spaces(s, end)
            continue

        if canonical in VALUE_FLAGS or word in IGNORED_VALUE_OPTIONS:
            value_start = _skip_spaces(s, end)
            value, i = read_value(s, value_start, ansi_c=canonical in ANSI_C_FLAGS)
            result.tokens.append(Token(
                flag=canonical or word,
                value=value,
                ignored=canonical is None,
            ))
            i = _skip_spaces(s, i)
            continue

        # Short flag with its value attached, e.g. -XPOST or -H'Accept: */*'
        short = FLAG_ALIASES.get(word[:2]) if not word.startswith("--") else None
        if short in VALUE_FLAGS and len(word) > 2:
            value, i = read_value(s, start + 2, ansi_c=short in ANSI_C_FLAGS)
            result.tokens.append(Token(flag=short, value=value))
            i = _skip_spaces(s, i)
            continue

        _, i = read_value(s, start)
        if i == start:
            i = end
        span = s[start:i]
        if span.startswith("-"):
            result.unknown_flags.append(span)
        positional.append(span)
        i = _skip_spaces(s, i)

    result.residual = " ".join(positional)
    return result
