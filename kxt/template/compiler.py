"""
Компилятор дерева шаблона в функцию рендеринга.

Дерево обходится один раз, во время компиляции, и превращается во вложенные
замыкания вида (context, frame) -> str. Имена хелперов и партиалов
разрешаются здесь же: неизвестное имя - ошибка компиляции, а не рендеринга.

Протокол хелперов: helper(context, options, *args) -> str, где options
(HelperOptions) предоставляет render_primary/render_inverse. Компилятор
никогда не рендерит тела блоков сам - это решает хелпер.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .nodes import (
    ArgumentExpression, PathExpression, LiteralExpression, HashPairs,
    TemplateNode, TextNode, ExpressionNode, HelperBlockNode, PartialNode,
)
from .resolver import resolve_path
from .safe import escape_html, to_display_string
from ..errors import RenderError, TemplateError, UnknownHelperError, UnknownPartialError

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTIAL_DEPTH = 32

# Цепочка партиалов, рендерящихся в текущем потоке/задаче
_partial_chain: ContextVar[Tuple[str, ...]] = ContextVar("kxt_partial_chain", default=())


@dataclass(frozen=True)
class RenderFrame:
    """
    Данные рендеринга, доступные через @-пути (@index, @key, @root, ...).

    Неизменяем: хелперы получают новый фрейм через extend().
    """
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def root(cls, context: Any) -> "RenderFrame":
        return cls(MappingProxyType({"root": context}))

    def extend(self, extra: Optional[Mapping[str, Any]]) -> "RenderFrame":
        if not extra:
            return self
        merged = dict(self.data)
        merged.update(extra)
        return RenderFrame(MappingProxyType(merged))


RenderFn = Callable[[Any, RenderFrame], str]
Helper = Callable[..., Any]
HelperMap = Mapping[str, Helper]
PartialMap = Mapping[str, Callable[[Any], str]]


def _render_nothing(context: Any, frame: RenderFrame) -> str:
    return ""


class HelperOptions:
    """
    Объект возможностей, передаваемый хелперу вторым аргументом.

    Attributes:
        name: Имя, под которым хелпер вызван в шаблоне
        hash: Вычисленные именованные аргументы (key=value)
        data: Данные фрейма (@index, @root, ...)
    """

    __slots__ = ("name", "hash", "_frame", "_primary", "_inverse")

    def __init__(self, name: str, hash: Dict[str, Any], frame: RenderFrame,
                 primary: RenderFn, inverse: RenderFn):
        self.name = name
        self.hash = hash
        self._frame = frame
        self._primary = primary
        self._inverse = inverse

    @property
    def data(self) -> Mapping[str, Any]:
        return self._frame.data

    def render_primary(self, context: Any, data: Optional[Mapping[str, Any]] = None) -> str:
        """Рендерит основную секцию блока с указанным контекстом."""
        return self._primary(context, self._frame.extend(data))

    def render_inverse(self, context: Any, data: Optional[Mapping[str, Any]] = None) -> str:
        """Рендерит секцию {{else}} (пустая строка, если её нет)."""
        return self._inverse(context, self._frame.extend(data))

    def __repr__(self) -> str:
        return f"HelperOptions({self.name!r}, hash={self.hash!r})"


class CompiledTemplate:
    """
    Скомпилированный шаблон: вызывается с контекстом и возвращает строку.

    Неизменяем и не хранит состояния между вызовами, поэтому безопасен
    для повторного и параллельного использования.
    """

    __slots__ = ("template_id", "_render")

    def __init__(self, template_id: Optional[str], render: RenderFn):
        self.template_id = template_id
        self._render = render

    def __call__(self, context: Any = None) -> str:
        return self._render(context, RenderFrame.root(context))

    def render(self, context: Any, frame: RenderFrame) -> str:
        """Рендерит шаблон в рамках уже существующего фрейма (для партиалов)."""
        return self._render(context, frame)

    def __repr__(self) -> str:
        return f"CompiledTemplate({self.template_id!r})"


class RenderCompiler:
    """
    Компилирует AST в CompiledTemplate.
    """

    def __init__(
        self,
        template_id: Optional[str],
        helpers: HelperMap,
        partials: PartialMap,
        max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH,
    ):
        self.template_id = template_id
        self.helpers = helpers
        self.partials = partials
        self.max_partial_depth = max_partial_depth

    def compile(self, tree: Sequence[TemplateNode]) -> CompiledTemplate:
        """
        Компилирует дерево узлов.

        Raises:
            UnknownHelperError: Хелпер не найден в карте хелперов
            UnknownPartialError: Партиал не найден в карте партиалов
        """
        render = self._compile_nodes(tree)
        logger.debug(f"Compiled template '{self.template_id}' from {len(tree)} root nodes")
        return CompiledTemplate(self.template_id, render)

    def _compile_nodes(self, nodes: Sequence[TemplateNode]) -> RenderFn:
        parts = [self._compile_node(node) for node in nodes]

        if not parts:
            return _render_nothing
        if len(parts) == 1:
            return parts[0]

        def render_sequence(context: Any, frame: RenderFrame) -> str:
            return "".join([part(context, frame) for part in parts])

        return render_sequence

    def _compile_node(self, node: TemplateNode) -> RenderFn:
        if isinstance(node, TextNode):
            return self._compile_text(node)
        if isinstance(node, ExpressionNode):
            return self._compile_expression(node)
        if isinstance(node, HelperBlockNode):
            return self._compile_block(node)
        if isinstance(node, PartialNode):
            return self._compile_partial(node)
        raise TypeError(f"Unsupported node type: {type(node).__name__}")

    # ======= Узлы =======

    def _compile_text(self, node: TextNode) -> RenderFn:
        text = node.text

        def render_text(context: Any, frame: RenderFrame) -> str:
            return text

        return render_text

    def _compile_expression(self, node: ExpressionNode) -> RenderFn:
        path = node.path
        emit = to_display_string if node.raw else escape_html

        if node.is_helper_call or (path.is_simple_name and path.head in self.helpers):
            call = self._compile_helper_call(
                path.head, node.arguments, node.hash,
                _render_nothing, _render_nothing, node.line, node.column
            )

            def render_helper_expression(context: Any, frame: RenderFrame) -> str:
                return emit(call(context, frame))

            return render_helper_expression

        def render_expression(context: Any, frame: RenderFrame) -> str:
            return emit(resolve_path(context, path, frame.data))

        return render_expression

    def _compile_block(self, node: HelperBlockNode) -> RenderFn:
        primary = self._compile_nodes(node.primary_children)
        inverse = self._compile_nodes(node.inverse_children)
        call = self._compile_helper_call(
            node.name, node.arguments, node.hash, primary, inverse, node.line, node.column
        )

        def render_block(context: Any, frame: RenderFrame) -> str:
            return to_display_string(call(context, frame))

        return render_block

    def _compile_partial(self, node: PartialNode) -> RenderFn:
        name = node.name
        partial = self.partials.get(name)
        if partial is None:
            raise UnknownPartialError(name, self.template_id, node.line, node.column)

        context_path = node.context_path
        max_depth = self.max_partial_depth
        template_id = self.template_id

        def render_partial(context: Any, frame: RenderFrame) -> str:
            scope = resolve_path(context, context_path, frame.data) if context_path else context

            chain = _partial_chain.get()
            if len(chain) >= max_depth:
                raise RenderError(
                    f"Partial nesting deeper than {max_depth} levels: {' > '.join(chain + (name,))}",
                    template_id, partial_name=name
                )

            reset_token = _partial_chain.set(chain + (name,))
            try:
                if isinstance(partial, CompiledTemplate):
                    return partial.render(scope, frame)
                return to_display_string(partial(scope))
            except TemplateError:
                raise
            except Exception as e:
                raise RenderError(
                    f"Partial '{name}' failed: {e}", template_id, partial_name=name, cause=e
                ) from e
            finally:
                _partial_chain.reset(reset_token)

        return render_partial

    # ======= Хелперы =======

    def _lookup_helper(self, name: str, line: int, column: int) -> Helper:
        helper = self.helpers.get(name)
        if helper is None:
            raise UnknownHelperError(name, self.template_id, line, column)
        return helper

    def _compile_helper_call(
        self,
        name: str,
        arguments: Sequence[ArgumentExpression],
        hash_pairs: HashPairs,
        primary: RenderFn,
        inverse: RenderFn,
        line: int,
        column: int,
    ) -> Callable[[Any, RenderFrame], Any]:
        helper = self._lookup_helper(name, line, column)
        argument_fns = [self._compile_argument(arg) for arg in arguments]
        hash_fns = [(key, self._compile_argument(arg)) for key, arg in hash_pairs]
        template_id = self.template_id

        def call_helper(context: Any, frame: RenderFrame) -> Any:
            values = [fn(context, frame) for fn in argument_fns]
            hash_values = {key: fn(context, frame) for key, fn in hash_fns}
            options = HelperOptions(name, hash_values, frame, primary, inverse)
            try:
                return helper(context, options, *values)
            except TemplateError:
                raise
            except Exception as e:
                raise RenderError(
                    f"Helper '{name}' failed at {line}:{column}: {e}",
                    template_id, helper_name=name, cause=e
                ) from e

        return call_helper

    def _compile_argument(self, arg: ArgumentExpression) -> Callable[[Any, RenderFrame], Any]:
        if isinstance(arg, LiteralExpression):
            value = arg.value
            return lambda context, frame: value

        if isinstance(arg, PathExpression):
            return lambda context, frame: resolve_path(context, arg, frame.data)

        raise TypeError(f"Unsupported argument type: {type(arg).__name__}")


def create_render_function(
    template_id: Optional[str],
    helpers: HelperMap,
    partials: Optional[PartialMap],
    tree: Sequence[TemplateNode],
    max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH,
) -> CompiledTemplate:
    """
    Создаёт функцию рендеринга из дерева узлов.

    Args:
        template_id: Идентификатор шаблона для диагностики
        helpers: Карта хелперов (уже объединённая со встроенными)
        partials: Карта скомпилированных партиалов
        tree: Корневые узлы AST
        max_partial_depth: Предельная глубина вложенности партиалов

    Returns:
        Скомпилированный шаблон
    """
    compiler = RenderCompiler(template_id, helpers, partials or {}, max_partial_depth)
    return compiler.compile(tree)


__all__ = [
    "DEFAULT_MAX_PARTIAL_DEPTH",
    "RenderFrame",
    "RenderFn",
    "Helper",
    "HelperMap",
    "PartialMap",
    "HelperOptions",
    "CompiledTemplate",
    "RenderCompiler",
    "create_render_function",
]
