"""
AST-узлы шаблона.

Определяет иерархию неизменяемых классов узлов для представления
структуры шаблона, а также выражения аргументов хелперов.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


# ---------- Выражения аргументов ----------

@dataclass(frozen=True)
class ArgumentExpression:
    """Базовый класс для аргументов тегов (путей и литералов)."""
    pass


@dataclass(frozen=True)
class PathExpression(ArgumentExpression):
    """
    Путь в контексте рендеринга.

    Примеры: name, user.name, items.[0], items[0], this, @index, @root.title
    """
    original: str
    segments: Tuple[str, ...]
    data: bool = False    # Путь по данным фрейма (@index, @root, ...)

    @property
    def head(self) -> str:
        """Первый сегмент пути (имя хелпера для вызовов)."""
        return self.segments[0] if self.segments else ""

    @property
    def is_simple_name(self) -> bool:
        """Одиночный идентификатор без точек и скобок."""
        return not self.data and len(self.segments) == 1 and self.original == self.segments[0]


@dataclass(frozen=True)
class LiteralExpression(ArgumentExpression):
    """Литерал: строка, число, true/false/null."""
    value: Any


HashPairs = Tuple[Tuple[str, ArgumentExpression], ...]


# ---------- Узлы дерева ----------

@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть, без интерполяции.
    """
    text: str


@dataclass(frozen=True)
class ExpressionNode(TemplateNode):
    """
    Выражение {{ path }}.

    Если заданы arguments или hash, выражение является вызовом
    хелпера с именем path.head.
    """
    path: PathExpression
    raw: bool = False
    arguments: Tuple[ArgumentExpression, ...] = ()
    hash: HashPairs = ()
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    @property
    def is_helper_call(self) -> bool:
        return bool(self.arguments or self.hash)


@dataclass(frozen=True)
class HelperBlockNode(TemplateNode):
    """
    Блок хелпера {{#name args}} ... {{else}} ... {{/name}}.

    Хелпер сам решает, какую из секций (и с каким контекстом) рендерить.
    """
    name: str
    arguments: Tuple[ArgumentExpression, ...] = ()
    hash: HashPairs = ()
    primary_children: Tuple[TemplateNode, ...] = ()
    inverse_children: Tuple[TemplateNode, ...] = ()
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class PartialNode(TemplateNode):
    """Ссылка на партиал {{> name [context_path]}}."""
    name: str
    context_path: Optional[PathExpression] = None
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)


# Алиас для списка узлов (AST)
TemplateAST = List[TemplateNode]


__all__ = [
    "ArgumentExpression",
    "PathExpression",
    "LiteralExpression",
    "HashPairs",
    "TemplateNode",
    "TextNode",
    "ExpressionNode",
    "HelperBlockNode",
    "PartialNode",
    "TemplateAST",
]
