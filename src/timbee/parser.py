"""Command parser — split a finished line into tokens.

Rules:
    - Whitespace (space, tab, CR, LF, BEL) separates tokens and is
      otherwise dropped.
    - ``'`` or ``"`` starts a quoted span that runs to the next matching
      quote character.  Inside it whitespace is kept and the other
      quote character is literal.  The quote characters themselves are
      dropped.
    - There are no escapes: a backslash is an ordinary character.
    - An unterminated quote is forgiven — the rest of the line belongs
      to the open span.
    - ``""`` on its own produces an empty token.

Examples::

    cmd "a b" 'c d' e     →  ["cmd", "a b", "c d", "e"]
    echo 'it"s'           →  ["echo", 'it"s']
    say "unterminated x   →  ["say", "unterminated x"]

Redirection operators are ordinary tokens here; stripping them is a
separate pass (see ``timbee.redirection``).
"""

WHITESPACE = frozenset(" \t\r\n\a")
QUOTES = frozenset("'\"")


def tokenize(line: str) -> list[str]:
    """Split *line* into tokens, honouring single and double quotes.

    Args:
        line: The submitted command line (may be blank).

    Returns:
        The tokens in order; an empty list for a blank line.

    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    # A quoted span makes a token even when it is empty ("").
    in_token = False

    for ch in line:
        if quote is not None:
            if ch == quote:
                quote = None
            else:
                current.append(ch)
        elif ch in QUOTES:
            quote = ch
            in_token = True
        elif ch in WHITESPACE:
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True

    if in_token:
        tokens.append("".join(current))
    return tokens
