"""Tests for perch.view and perch.templating.compiler — setup and dispatch."""

from pathlib import Path

import pytest

from perch.errors import ConfigurationError, TemplateUndefinedError
from perch.templating.compiler import compile_templates, resolve_options
from perch.templating.engines import KidaEngine
from perch.templating.registry import Registry
from perch.view import View, renders, setup_view

TEMPLATES_DIR = Path(__file__).parent / "templates"


class AppView(View, root=TEMPLATES_DIR, namespace=__name__):
    pass


class UserView(AppView):
    @renders("existing.html")
    def existing(cls, assigns):
        return "rendered existing"

    @renders("render_template.html")
    def shout(cls, assigns):
        return cls.render_template("render_template.html", {"name": assigns["name"].upper()})


class RootView(AppView, path=""):
    pass


class NestedView(AppView, path="user", pattern="**/*"):
    pass


class CustomEngineView(AppView, path="custom", template_engines={"foo": KidaEngine()}):
    pass


class TestSetup:
    def test_path_derived_from_view_name(self) -> None:
        root, pattern, names = UserView.templates()

        assert root == str(TEMPLATES_DIR / "user")
        assert pattern == "*"
        assert "index.html" in names
        assert "show.json" in names

    def test_base_view_with_missing_directory_compiles_nothing(self) -> None:
        assert AppView.templates()[2] == ()

    def test_blank_path_uses_root(self) -> None:
        assert RootView.templates()[0] == str(TEMPLATES_DIR)
        assert set(RootView.templates()[2]) == {"show.html", "safe.html"}

    def test_pattern_reaches_subdirectories(self) -> None:
        assert "profiles/admin.html" in NestedView.templates()[2]

    def test_resource_name(self) -> None:
        assert UserView.__resource__ == "user"
        assert NestedView.__resource__ == "nested"

    def test_introspection_attributes(self) -> None:
        assert UserView.__templates_root__ == str(TEMPLATES_DIR / "user")
        assert UserView.__templates_pattern__ == "*"

    def test_custom_engine(self) -> None:
        assert CustomEngineView.templates()[2] == ("edit.html",)
        assert CustomEngineView.render("edit.html", {"message": "foo"}) == "from foo"

    def test_missing_root(self) -> None:
        with pytest.raises(ConfigurationError, match="expected 'root'"):

            class NoRootView(View):
                pass

    def test_empty_root(self) -> None:
        with pytest.raises(ConfigurationError, match="expected 'root'"):

            class EmptyRootView(View, root=""):
                pass

    def test_duplicate_setup(self) -> None:
        with pytest.raises(ConfigurationError, match="called twice"):
            setup_view(UserView, root=TEMPLATES_DIR)

    def test_subclass_inherits_options(self) -> None:
        class PathView(AppView, path="path"):
            pass

        assert PathView.__view_options__.namespace == __name__
        assert PathView.templates()[2] == ("path.html",)

    def test_clauses_are_not_inherited(self) -> None:
        class ChildView(UserView, path="user"):
            pass

        assert "existing.html" not in ChildView.__render_clauses__


class TestCompiler:
    def test_resolve_options_defaults(self) -> None:
        options = resolve_options("app.admin.UserView", root="/srv/templates")

        assert options.namespace == "app"
        assert options.path == "admin/user"
        assert options.root_path == "/srv/templates/admin/user"
        assert options.pattern == "*"

    def test_resolve_options_explicit_namespace(self) -> None:
        options = resolve_options("app.admin.UserView", root="/t", namespace="app.admin")
        assert options.root_path == "/t/user"

    def test_name_collision_fails(self, tmp_path) -> None:
        (tmp_path / "show.json.kida").write_text("{{ 1 }}")
        (tmp_path / "show.json.pyt").write_text("1")
        options = resolve_options("app.View", root=tmp_path, path="")

        with pytest.raises(ConfigurationError, match="both compile to 'show.json'"):
            compile_templates(options, Registry.build())

    def test_disabled_engine_is_not_compiled(self, tmp_path) -> None:
        (tmp_path / "show.json.pyt").write_text("1")
        options = resolve_options("app.View", root=tmp_path, path="", template_engines={"pyt": None})

        compiled = compile_templates(options, Registry.build())
        assert compiled.names == ()

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            UserView.__templates__.table["x"] = lambda assigns: None  # type: ignore[index]

    def test_needs_recompile(self, tmp_path) -> None:
        (tmp_path / "a.html.kida").write_text("a")

        class ScratchView(View, root=tmp_path, path=""):
            pass

        assert ScratchView.needs_recompile() is False
        (tmp_path / "a.html.kida").write_text("edited")
        assert ScratchView.needs_recompile() is False
        (tmp_path / "b.html.kida").write_text("b")
        assert ScratchView.needs_recompile() is True


class TestLocalRender:
    def test_renders_compiled_template(self) -> None:
        assert UserView.render("edit.html", {"title": "Test"}) == "EDIT - Test"

    def test_accepts_pairs(self) -> None:
        assert UserView.render("edit.html", [("title", "Test")]) == "EDIT - Test"

    def test_renders_without_assigns(self) -> None:
        assert UserView.render("show.json") == {"foo": "bar"}

    def test_explicit_clause_wins(self) -> None:
        assert UserView.render("existing.html") == "rendered existing"

    def test_clause_can_delegate_to_compiled_template(self) -> None:
        assert UserView.render("render_template.html", {"name": "eric"}) == (
            "rendered template for ERIC"
        )

    def test_render_template_bypasses_clauses(self) -> None:
        assert UserView.render_template("render_template.html", {"name": "eric"}) == (
            "rendered template for eric"
        )

    def test_template_name_must_be_string(self) -> None:
        with pytest.raises(TypeError, match="expects template to be a string"):
            UserView.render(UserView, {})  # type: ignore[arg-type]

    def test_does_not_mutate_assigns(self) -> None:
        assigns = {"title": "Test"}
        UserView.render("edit.html", assigns)
        assert assigns == {"title": "Test"}


class TestNotFound:
    def test_undefined_error_lists_compiled_templates(self) -> None:
        with pytest.raises(TemplateUndefinedError, match='Could not render "not-exists.html"') as info:
            RootView.render("not-exists.html")

        err = info.value
        assert err.template == "not-exists.html"
        assert err.root == str(TEMPLATES_DIR)
        assert err.pattern == "*"
        assert set(err.available) == {"show.html", "safe.html"}
        assert "* show.html" in str(err)

    def test_custom_hook(self, tmp_path) -> None:
        class OtherView(View, root=tmp_path, path="not-exists"):
            @classmethod
            def template_not_found(cls, template, assigns):
                return f"Not found: {template}"

        assert OtherView.render("foo") == "Not found: foo"

    def test_hook_rendering_the_same_name_does_not_recurse(self, tmp_path) -> None:
        calls: list[str] = []

        class InfiniteView(View, root=tmp_path, path="not-exists"):
            @classmethod
            def template_not_found(cls, template, assigns):
                calls.append(template)
                return cls.render_template("this-does-not-exist.html", assigns)

        with pytest.raises(TemplateUndefinedError, match='Could not render "this-does-not-exist.html"'):
            InfiniteView.render("this-does-not-exist.html")
        assert calls == ["this-does-not-exist.html"]

    def test_hook_runs_once_per_distinct_name(self, tmp_path) -> None:
        calls: list[str] = []

        class ChainView(View, root=tmp_path, path="not-exists"):
            @classmethod
            def template_not_found(cls, template, assigns):
                calls.append(template)
                return cls.render_template("fallback.html", assigns)

        with pytest.raises(TemplateUndefinedError, match='"fallback.html"'):
            ChainView.render("missing.html")
        assert calls == ["missing.html", "fallback.html"]

    def test_guard_is_released_after_the_call(self, tmp_path) -> None:
        class OtherView(View, root=tmp_path, path="not-exists"):
            @classmethod
            def template_not_found(cls, template, assigns):
                return "fallback"

        assert OtherView.render("a.html") == "fallback"
        assert OtherView.render("a.html") == "fallback"
