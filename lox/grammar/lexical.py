"""Lexical analysis for Lox: converts source text into a flat list of Tokens.

Lexical grammar:

```
<number>     ::= <digit>+ ( "." <digit>+ )?     ; a trailing "." is not part of the number
<string>     ::= '"' <char>* '"'                ; may span lines, no escapes
<identifier> ::= <letter> ( <letter> | <digit> )*
<comment>    ::= "//" <char>*                   ; up to (not including) end of line
```

Lexical errors (unexpected characters, unterminated strings, malformed numbers) are reported through the ErrorHandler
and the offending input is skipped: the lexer never stops early, and the token list always ends with EOF.
"""

from lox.grammar.tokens import KEYWORDS, Token, TokenKind


class Lexer:
    """Single left-to-right pass over source. Tracks the current line for diagnostics."""
    SINGLE = {
        "(": TokenKind.LEFT_PAREN,
        ")": TokenKind.RIGHT_PAREN,
        "{": TokenKind.LEFT_BRACE,
        "}": TokenKind.RIGHT_BRACE,
        ",": TokenKind.COMMA,
        ".": TokenKind.DOT,
        "-": TokenKind.MINUS,
        "+": TokenKind.PLUS,
        ";": TokenKind.SEMICOLON,
        "*": TokenKind.STAR,
    }
    DOUBLE = {  # char: (kind if followed by "=", kind otherwise)
        "!": (TokenKind.BANG_EQUAL, TokenKind.BANG),
        "=": (TokenKind.EQUAL_EQUAL, TokenKind.EQUAL),
        "<": (TokenKind.LESS_EQUAL, TokenKind.LESS),
        ">": (TokenKind.GREATER_EQUAL, TokenKind.GREATER),
    }

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # first char of the lexeme being scanned
        self.current = 0  # char about to be consumed
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source and returns its tokens, terminated by an EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Lexer.SINGLE:
            self.add_token(Lexer.SINGLE[char])

        elif char in Lexer.DOUBLE:
            with_equal, without = Lexer.DOUBLE[char]
            self.add_token(with_equal if self.match("=") else without)

        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenKind.SLASH)

        elif char in " \r\t":
            pass

        elif char == "\n":
            self.line += 1

        elif char == "\"":
            self.string()

        elif char.isdigit():
            self.number()

        elif char.isalpha():
            self.identifier()

        else:
            self.error_handler.error(self.line, "Unexpected character.")

    def string(self):
        while self.peek() != "\"" and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error_handler.error(self.line, "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenKind.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while self.peek().isdigit():
            self.advance()

        if self.peek() == "." and self.peek_next().isdigit():
            self.advance()
            while self.peek().isdigit():
                self.advance()

        try:
            value = float(self.source[self.start:self.current])
        except ValueError:
            # str.isdigit accepts characters such as superscripts that float cannot convert
            self.error_handler.error(self.line, "Malformed number.")
            return

        self.add_token(TokenKind.NUMBER, value)

    def identifier(self):
        while self.peek().isalpha() or self.peek().isdigit():
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenKind.IDENTIFIER))

    def is_at_end(self):
        return self.current >= len(self.source)

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        """Consumes the next char only if it is expected."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "\0" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def add_token(self, kind, literal=None):
        self.tokens.append(Token(kind, self.source[self.start:self.current], literal, self.line))


def scan(source, error_handler):
    """Shorthand for Lexer(source, error_handler).scan_tokens()."""
    return Lexer(source, error_handler).scan_tokens()
