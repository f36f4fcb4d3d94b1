from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from kxt.template import compile_template

from tests.infrastructure.project_builders import create_project


@pytest.fixture
def render() -> Callable[..., str]:
    """Компилирует шаблон и сразу рендерит его с контекстом."""
    def _render(
        source: str,
        context: Any = None,
        helpers: Optional[Dict[str, Callable[..., Any]]] = None,
        partials: Optional[Dict[str, Callable[[Any], str]]] = None,
    ) -> str:
        template = compile_template("test", source, helpers, partials)
        return template(context)

    return _render


@pytest.fixture
def blog_project(tmp_path: Path) -> Path:
    """Проект с шаблоном страницы, вложенными партиалами и хелпером на диске."""
    return create_project(
        tmp_path,
        config="""
        templates: templates
        partials: partials
        helpers: helpers
        max_partial_depth: 8
        """,
        templates={
            "post.html": "{{> header.html}}<p>{{shout body}}</p>",
            "blog/index.html": "<ul>{{#each posts}}{{> cards/card.html}}{{/each}}</ul>",
        },
        partials={
            "header.html": "<h1>{{title}}</h1>",
            "cards/card.html": "<li>{{title}}</li>",
        },
        helpers={
            "shout.py": '''
            name = "shout"


            def helper(context, options, value):
                return str(value).upper()
            ''',
        },
    )
