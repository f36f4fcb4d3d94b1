from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .config import load_config
from .errors import KxtUserError
from .template import tokenize
from .version import tool_version
from .view import PageTemplateEngine


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="kxt",
        description="kixx-templates: compile and render templates",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="подробный лог в stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы для render/check
    def add_project(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--root",
            default=None,
            help="корень проекта (по умолчанию текущий каталог)",
        )
        sp.add_argument(
            "--config",
            default=None,
            help="путь к kxt.yaml (по умолчанию <root>/kxt.yaml)",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон в stdout")
    sp_render.add_argument("template", help="идентификатор шаблона, например blog/post.html")
    sp_render.add_argument(
        "--data",
        metavar="FILE",
        help="контекст рендеринга: YAML или JSON файл",
    )
    add_project(sp_render)

    sp_check = sub.add_parser("check", help="Скомпилировать шаблоны и сообщить об ошибках")
    sp_check.add_argument("templates", nargs="+", help="идентификаторы шаблонов")
    add_project(sp_check)

    sp_tokens = sub.add_parser("tokens", help="Токены файла шаблона (JSON)")
    sp_tokens.add_argument("file", help="путь к файлу шаблона")

    return p


def _project_engine(ns: argparse.Namespace) -> PageTemplateEngine:
    root = Path(ns.root) if ns.root else Path.cwd()
    config = load_config(root, Path(ns.config) if ns.config else None)
    engine = PageTemplateEngine.from_config(root, config)
    engine.load_helpers()
    engine.load_partials()
    return engine


def _load_data(path: Optional[str]) -> Any:
    """Читает контекст рендеринга из YAML/JSON файла."""
    if not path:
        return {}

    file_path = Path(path)
    if not file_path.is_file():
        raise ValueError(f"Data file not found: {file_path}")

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix == ".json":
            return json.loads(text)
        return YAML(typ="safe").load(text)
    except (ValueError, YAMLError) as e:
        raise ValueError(f"Failed to parse data file {file_path}: {e}")


def _run_check(engine: PageTemplateEngine, template_ids: List[str]) -> int:
    failed = 0
    for template_id in template_ids:
        try:
            engine.get_template(template_id)
            sys.stdout.write(f"ok: {template_id}\n")
        except KxtUserError as e:
            failed += 1
            sys.stdout.write(f"error: {template_id}: {e}\n")
    return 2 if failed else 0


def _run_tokens(path: str) -> List[dict]:
    file_path = Path(path)
    if not file_path.is_file():
        raise ValueError(f"Template file not found: {file_path}")

    tokens = tokenize(file_path.name, file_path.read_text(encoding="utf-8"))
    return [
        {
            "type": token.type.value,
            "value": token.value,
            "line": token.line,
            "column": token.column,
            "raw": token.raw,
        }
        for token in tokens
    ]


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    if ns.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if ns.cmd == "render":
            engine = _project_engine(ns)
            template = engine.get_template(ns.template)
            sys.stdout.write(template(_load_data(ns.data)))
            return 0

        if ns.cmd == "check":
            return _run_check(_project_engine(ns), ns.templates)

        if ns.cmd == "tokens":
            sys.stdout.write(json.dumps(_run_tokens(ns.file), ensure_ascii=False, indent=2) + "\n")
            return 0

    except KxtUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
