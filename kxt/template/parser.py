"""
Построитель синтаксического дерева шаблона.

Преобразует плоскую последовательность токенов в дерево узлов,
используя явный стек открытых блоков. Нарушения вложенности блоков
являются ошибками компиляции, без попыток восстановления.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .nodes import (
    ArgumentExpression, PathExpression, LiteralExpression, HashPairs,
    TemplateNode, TemplateAST, TextNode, ExpressionNode, HelperBlockNode, PartialNode,
)
from .resolver import parse_path
from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError

_QUOTED = r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\''
_BARE = r'(?:\[[^\]]*\]|[^\s\[])+'

_WORD_RE = re.compile(
    rf'(?P<key>[A-Za-z_][\w\-]*)=(?P<value>{_QUOTED}|{_BARE})'
    rf'|(?P<quoted>{_QUOTED})'
    rf'|(?P<bare>{_BARE})'
)

_NAME_RE = re.compile(r'^[A-Za-z_][\w\-]*$')
_NUMBER_RE = re.compile(r'^-?\d+(\.\d+)?$')
_ESCAPE_RE = re.compile(r'\\(.)')

_KEYWORD_LITERALS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}


@dataclass
class _Word:
    """Слово тела тега: позиционный аргумент или пара key=value."""
    text: str
    key: Optional[str] = None
    quoted: bool = False


@dataclass
class _BlockFrame:
    """Открытый блок на стеке построителя."""
    token: Token
    name: str
    arguments: Tuple[ArgumentExpression, ...]
    hash: HashPairs
    primary: List[TemplateNode] = field(default_factory=list)
    inverse: List[TemplateNode] = field(default_factory=list)
    inverse_token: Optional[Token] = None

    @property
    def children(self) -> List[TemplateNode]:
        """Список, в который сейчас собираются дочерние узлы."""
        return self.inverse if self.inverse_token is not None else self.primary

    def to_node(self) -> HelperBlockNode:
        return HelperBlockNode(
            name=self.name,
            arguments=self.arguments,
            hash=self.hash,
            primary_children=tuple(self.primary),
            inverse_children=tuple(self.inverse),
            line=self.token.line,
            column=self.token.column,
        )


class SyntaxTreeBuilder:
    """
    Строит AST из токенов.

    Поддерживает стек открытых блоков: {{#name}} открывает кадр,
    {{else}} переключает кадр на сбор inverse-секции, {{/name}}
    закрывает кадр и проверяет совпадение имён.
    """

    def __init__(self, template_id: Optional[str], tokens: Sequence[Token]):
        self.template_id = template_id
        self.tokens = tokens

    def build(self) -> TemplateAST:
        """
        Строит дерево узлов.

        Raises:
            TemplateSyntaxError: При нарушении вложенности блоков или некорректном теге
        """
        root: List[TemplateNode] = []
        stack: List[_BlockFrame] = []

        for token in self.tokens:
            target = stack[-1].children if stack else root

            if token.type == TokenType.TEXT:
                if token.value:
                    target.append(TextNode(text=token.value))

            elif token.type == TokenType.COMMENT:
                continue

            elif token.type == TokenType.EXPRESSION:
                target.append(self._parse_expression(token))

            elif token.type == TokenType.PARTIAL:
                target.append(self._parse_partial(token))

            elif token.type == TokenType.BLOCK_OPEN:
                stack.append(self._open_block(token))

            elif token.type == TokenType.BLOCK_INVERSE:
                self._mark_inverse(stack, token)

            elif token.type == TokenType.BLOCK_CLOSE:
                node = self._close_block(stack, token)
                (stack[-1].children if stack else root).append(node)

            else:
                raise self._error(f"Unexpected token {token.type.name}", token)

        if stack:
            frame = stack[-1]
            raise self._error(
                f"Unterminated block '{frame.name}' opened at {frame.token.line}:{frame.token.column}",
                frame.token
            )

        return root

    # ======= Блоки =======

    def _open_block(self, token: Token) -> _BlockFrame:
        words = self._split_words(token)
        head = words[0]
        if head.key is not None or head.quoted or not _NAME_RE.match(head.text):
            raise self._error(f"Invalid block helper name: {head.text!r}", token)

        arguments, hash_pairs = self._parse_arguments(words[1:], token)
        return _BlockFrame(token=token, name=head.text, arguments=arguments, hash=hash_pairs)

    def _mark_inverse(self, stack: List[_BlockFrame], token: Token) -> None:
        if not stack:
            raise self._error("{{else}} outside of a block", token)

        frame = stack[-1]
        if frame.inverse_token is not None:
            first = frame.inverse_token
            raise self._error(
                f"Duplicate {{{{else}}}} in block '{frame.name}' "
                f"(first {{{{else}}}} at {first.line}:{first.column})",
                token
            )
        frame.inverse_token = token

    def _close_block(self, stack: List[_BlockFrame], token: Token) -> HelperBlockNode:
        name = token.value
        if not _NAME_RE.match(name):
            raise self._error(f"Invalid closing tag: {{{{/{name}}}}}", token)

        if not stack:
            raise self._error(f"Unexpected closing tag '{name}' without an open block", token)

        frame = stack.pop()
        if frame.name != name:
            opened = frame.token
            raise self._error(
                f"Mismatched closing tag: block '{frame.name}' opened at {opened.line}:{opened.column} "
                f"closed by '{name}' at {token.line}:{token.column}",
                token
            )

        return frame.to_node()

    # ======= Листовые узлы =======

    def _parse_expression(self, token: Token) -> ExpressionNode:
        words = self._split_words(token)
        head = words[0]
        if head.key is not None or head.quoted:
            raise self._error(f"Expected a path or helper name, got {head.text!r}", token)

        path = self._parse_path(head.text, token)
        arguments, hash_pairs = self._parse_arguments(words[1:], token)

        if (arguments or hash_pairs) and not path.is_simple_name:
            raise self._error(f"Invalid helper name: {head.text!r}", token)

        return ExpressionNode(
            path=path,
            raw=token.raw,
            arguments=arguments,
            hash=hash_pairs,
            line=token.line,
            column=token.column,
        )

    def _parse_partial(self, token: Token) -> PartialNode:
        words = self._split_words(token)
        head = words[0]
        if head.key is not None:
            raise self._error(f"Invalid partial name: {head.text!r}", token)
        name = _unquote(head.text) if head.quoted else head.text

        context_path: Optional[PathExpression] = None
        if len(words) > 2:
            raise self._error(f"Too many arguments for partial '{name}'", token)
        if len(words) == 2:
            word = words[1]
            if word.key is not None or word.quoted:
                raise self._error(f"Expected a context path for partial '{name}', got {word.text!r}", token)
            context_path = self._parse_path(word.text, token)

        return PartialNode(name=name, context_path=context_path, line=token.line, column=token.column)

    # ======= Аргументы =======

    def _split_words(self, token: Token) -> List[_Word]:
        """Разбивает тело тега на слова с учётом кавычек и key=value."""
        text = token.value
        words: List[_Word] = []
        pos = 0
        length = len(text)

        while pos < length:
            if text[pos].isspace():
                pos += 1
                continue

            match = _WORD_RE.match(text, pos)
            if not match:
                raise self._error(f"Malformed tag content: {text!r}", token)

            if match.group("key") is not None:
                words.append(_Word(text=match.group("value"), key=match.group("key")))
            elif match.group("quoted") is not None:
                words.append(_Word(text=match.group("quoted"), quoted=True))
            else:
                words.append(_Word(text=match.group("bare")))
            pos = match.end()

            if pos < length and not text[pos].isspace():
                raise self._error(f"Malformed tag content: {text!r}", token)

        if not words:
            raise self._error("Empty tag", token)

        return words

    def _parse_arguments(
        self, words: Sequence[_Word], token: Token
    ) -> Tuple[Tuple[ArgumentExpression, ...], HashPairs]:
        arguments: List[ArgumentExpression] = []
        hash_pairs: List[Tuple[str, ArgumentExpression]] = []

        for word in words:
            if word.key is not None:
                hash_pairs.append((word.key, self._parse_argument(word.text, token)))
            elif hash_pairs:
                raise self._error(f"Positional argument {word.text!r} after hash arguments", token)
            else:
                arguments.append(self._parse_argument(word.text, token))

        return tuple(arguments), tuple(hash_pairs)

    def _parse_argument(self, text: str, token: Token) -> ArgumentExpression:
        if text[0] in "\"'":
            if len(text) < 2 or text[-1] != text[0]:
                raise self._error(f"Unterminated string literal: {text}", token)
            return LiteralExpression(value=_unquote(text))

        if _NUMBER_RE.match(text):
            return LiteralExpression(value=float(text) if "." in text else int(text))

        if text in _KEYWORD_LITERALS:
            return LiteralExpression(value=_KEYWORD_LITERALS[text])

        return self._parse_path(text, token)

    def _parse_path(self, text: str, token: Token) -> PathExpression:
        try:
            return parse_path(text)
        except ValueError as e:
            raise self._error(str(e), token) from e

    def _error(self, message: str, token: Token) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, self.template_id, token.line, token.column, token.position)


def _unquote(text: str) -> str:
    return _ESCAPE_RE.sub(r"\1", text[1:-1])


def build_syntax_tree(template_id: Optional[str], tokens: Sequence[Token]) -> TemplateAST:
    """
    Удобная функция для построения AST.

    Raises:
        TemplateSyntaxError: При ошибке синтаксического анализа
    """
    return SyntaxTreeBuilder(template_id, tokens).build()


__all__ = ["SyntaxTreeBuilder", "build_syntax_tree"]
