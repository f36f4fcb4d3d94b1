"""
Тесты файлового хранилища шаблонов.
"""

import pytest

from kxt.config import load_config
from kxt.errors import TemplateNotFoundError, TemplateStoreError
from kxt.view import TemplateStore

from tests.infrastructure import create_project, write


@pytest.fixture
def store(blog_project):
    return TemplateStore.from_config(blog_project, load_config(blog_project))


class TestBaseTemplates:

    def test_reads_nested_template(self, store):
        source_file = store.get_base_template("blog/index.html")

        assert source_file.filename == "blog/index.html"
        assert "{{#each posts}}" in source_file.source

    def test_missing_template(self, store):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            store.get_base_template("nope.html")

        assert exc_info.value.template_id == "nope.html"

    @pytest.mark.parametrize("template_id", ["", "/", "../secret.html", "blog/../post.html", "./post.html"])
    def test_invalid_ids(self, store, template_id):
        with pytest.raises(TemplateStoreError):
            store.get_base_template(template_id)


class TestPartialFiles:

    def test_walks_recursively_with_relative_names(self, store):
        files = store.load_partial_files()

        assert [f.filename for f in files] == ["cards/card.html", "header.html"]
        assert files[1].source == "<h1>{{title}}</h1>"

    def test_missing_directory(self, tmp_path):
        store = TemplateStore(tmp_path / "t", tmp_path / "p", tmp_path / "h")

        assert store.load_partial_files() == []
        assert store.load_helper_files() == []


class TestHelperFiles:

    def test_loads_helper_module(self, store):
        files = store.load_helper_files()

        assert [f.name for f in files] == ["shout"]
        assert files[0].helper(None, None, "hey") == "HEY"

    def test_skips_private_and_non_python_files(self, tmp_path, caplog):
        root = create_project(tmp_path, helpers={
            "_shared.py": "raise RuntimeError('must not be imported')\n",
            "notes.txt": "not a helper\n",
            "ok.py": "name = 'ok'\n\ndef helper(context, options):\n    return 'ok'\n",
        })
        store = TemplateStore(root / "templates", root / "partials", root / "helpers")

        files = store.load_helper_files()

        assert [f.name for f in files] == ["ok"]
        assert "notes.txt" in caplog.text

    def test_module_without_name(self, tmp_path):
        write(tmp_path / "helpers" / "bad.py", "def helper(context, options):\n    return ''\n")
        store = TemplateStore(tmp_path / "templates", tmp_path / "partials", tmp_path / "helpers")

        with pytest.raises(TemplateStoreError, match="name"):
            store.load_helper_files()

    def test_module_without_helper(self, tmp_path):
        write(tmp_path / "helpers" / "bad.py", "name = 'bad'\n")
        store = TemplateStore(tmp_path / "templates", tmp_path / "partials", tmp_path / "helpers")

        with pytest.raises(TemplateStoreError, match="helper function"):
            store.load_helper_files()

    def test_module_that_fails_to_import(self, tmp_path):
        write(tmp_path / "helpers" / "bad.py", "import not_a_real_module_xyz\n")
        store = TemplateStore(tmp_path / "templates", tmp_path / "partials", tmp_path / "helpers")

        with pytest.raises(TemplateStoreError) as exc_info:
            store.load_helper_files()

        assert isinstance(exc_info.value.cause, ImportError)
