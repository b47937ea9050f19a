from __future__ import annotations

"""Split chat text into a command name and positional arguments.

Purpose: Turn '!ban "troll user" spamming' into
ParsedCommand(command="ban", args=["troll user", "spamming"]).

Rules:
- Whitespace separates tokens, except inside a "double quoted" span, which
  becomes one token with the quotes removed.
- A stray quote without a partner is kept as a literal character.
- The prefix is removed from the first token only; case is left as typed.

"""

import re
from dataclasses import dataclass, field
from typing import List


_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


@dataclass(frozen=True)
class ParsedCommand:
    command: str
    args: List[str] = field(default_factory=list)


def split_tokens(text: str) -> List[str]:
    tokens: List[str] = []
    for m in _TOKEN_RE.finditer(text):
        quoted, bare = m.group(1), m.group(2)
        tokens.append(quoted if quoted is not None else bare)
    return tokens


def tokenize(text: str, prefix: str) -> ParsedCommand:
    tokens = split_tokens(text)
    if not tokens:
        return ParsedCommand(command="")
    head = tokens[0]
    if prefix and head.startswith(prefix):
        head = head[len(prefix):]
    return ParsedCommand(command=head, args=tokens[1:])
