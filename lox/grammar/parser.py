"""Recursive-descent parser for Lox. Each grammar rule is a method; precedence is encoded by which rule calls which.

```
<program>   ::= <declaration>* EOF
<declaration> ::= <fun_decl> | <var_decl> | <statement>
<fun_decl>  ::= "fun" IDENTIFIER "(" <parameters>? ")" <block>
<var_decl>  ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement> ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>
<block>     ::= "{" <declaration>* "}"

<expression> ::= <assignment>
<assignment> ::= IDENTIFIER "=" <assignment> | <logic_or>     ; right-associative
<logic_or>   ::= <logic_and> ( "or" <logic_and> )*
<logic_and>  ::= <equality> ( "and" <equality> )*
<equality>   ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison> ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>       ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>     ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>      ::= ( "!" | "-" ) <unary> | <call>
<call>       ::= <primary> ( "(" <arguments>? ")" )*
<primary>    ::= NUMBER | STRING | "true" | "false" | "nil" | IDENTIFIER | "(" <expression> ")"
```

Errors come in two strengths. A missing token or a missing expression raises ParseError, which abandons the current
declaration: the parser then synchronizes to the next statement boundary and carries on, so one bad statement costs one
diagnostic. An invalid assignment target or too many arguments/parameters is only reported, and parsing continues in
place.
"""

from lox.grammar.ast import (Assign, Binary, Block, Call, ExpressionStmt, FuncStmt, Grouping, IfStmt, Literal, Logical,
                             PrintStmt, ReturnStmt, Unary, Variable, VarStmt, WhileStmt)
from lox.grammar.tokens import TokenKind
from lox.lang.error import ParseError


class Parser:
    """Turns a token list (as produced by the Lexer) into a list of statements."""
    MAX_ARGS = 255
    STATEMENT_STARTS = (TokenKind.CLASS, TokenKind.FUN, TokenKind.VAR, TokenKind.FOR, TokenKind.IF, TokenKind.WHILE,
                        TokenKind.PRINT, TokenKind.RETURN)

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        """Parses declarations until EOF. Declarations that failed to parse are left out."""
        statements = []
        while not self.is_at_end():
            try:
                statement = self.declaration()
            except RecursionError:
                self.error(self.peek(), "Expression nesting too deep.")
                self.synchronize()
                continue

            if statement is not None:
                statements.append(statement)
        return statements

    # ---------------------------------------- statements ----------------------------------------

    def declaration(self):
        try:
            if self.match(TokenKind.FUN):
                return self.function()
            if self.match(TokenKind.VAR):
                return self.var_declaration()
            return self.statement()

        except ParseError:
            self.synchronize()
            return None

    def function(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect function name.")
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after function name.")

        params = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(TokenKind.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenKind.COMMA):
                    break

        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenKind.LEFT_BRACE, "Expect '{' before function body.")
        return FuncStmt(name, tuple(params), tuple(self.block()))

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenKind.EQUAL):
            initializer = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration.")
        return VarStmt(name, initializer)

    def statement(self):
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.PRINT):
            return self.print_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.LEFT_BRACE):
            return Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self):
        """There is no for node: the loop is desugared into a while loop, wrapped in a block if there is an initializer
        so that the loop variable is scoped to the loop.
        """
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenKind.SEMICOLON):
            condition = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenKind.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = Block((body, ExpressionStmt(increment)))
        if condition is None:
            condition = Literal(True)
        body = WhileStmt(condition, body)
        if initializer is not None:
            body = Block((initializer, body))

        return body

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenKind.ELSE) else None  # dangling else binds to nearest if
        return IfStmt(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after value.")
        return PrintStmt(value)

    def return_statement(self):
        keyword = self.previous()

        value = None
        if not self.check(TokenKind.SEMICOLON):
            value = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after return value.")
        return ReturnStmt(keyword, value)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after condition.")
        return WhileStmt(condition, self.statement())

    def block(self):
        """Parses declarations up to the closing brace. Assumes the opening brace has been consumed."""
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStmt(expr)

    # ---------------------------------------- expressions ----------------------------------------

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)

            self.error(equals, "Invalid assignment target.")  # not fatal: nothing to synchronize past

        return expr

    def logic_or(self):
        expr = self.logic_and()
        while self.match(TokenKind.OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self):
        expr = self.equality()
        while self.match(TokenKind.AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.equality())
        return expr

    def equality(self):
        return self._binary(self.comparison, TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL)

    def comparison(self):
        return self._binary(self.term, TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS,
                            TokenKind.LESS_EQUAL)

    def term(self):
        return self._binary(self.factor, TokenKind.MINUS, TokenKind.PLUS)

    def factor(self):
        return self._binary(self.unary, TokenKind.SLASH, TokenKind.STAR)

    def _binary(self, operand, *kinds):
        """Left-associative binary rule: operand ( <kinds> operand )*."""
        expr = operand()
        while self.match(*kinds):
            operator = self.previous()
            expr = Binary(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenKind.BANG, TokenKind.MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()
        while self.match(TokenKind.LEFT_PAREN):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break

        paren = self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenKind.FALSE):
            return Literal(False)
        if self.match(TokenKind.TRUE):
            return Literal(True)
        if self.match(TokenKind.NIL):
            return Literal(None)

        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return Literal(self.previous().literal)

        if self.match(TokenKind.IDENTIFIER):
            return Variable(self.previous())

        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # ---------------------------------------- helpers ----------------------------------------

    def match(self, *kinds):
        """Consumes the next token if it is any of kinds."""
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind, message):
        """Consumes and returns the next token, which must be of kind: otherwise raises a ParseError with message."""
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), message)

    def check(self, kind):
        if self.is_at_end():
            return False
        return self.peek().kind is kind

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().kind is TokenKind.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Reports message at token and returns (does not raise) the matching ParseError. Callers decide whether the
        error is fatal.
        """
        self.error_handler.token_error(token, message)
        return ParseError(token, message)

    def synchronize(self):
        """Discards tokens until a statement boundary: just past a ";" or just before a statement keyword."""
        self.advance()

        while not self.is_at_end():
            if self.previous().kind is TokenKind.SEMICOLON:
                return
            if self.peek().kind in Parser.STATEMENT_STARTS:
                return
            self.advance()
