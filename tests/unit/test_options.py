"""
Exposure Option Unit Tests

Validation, aliases and normalization of exposure options
"""

import pytest

from entitykit import Entity
from entitykit.errors import InvalidOptionError
from entitykit.options import (
    ExposureOptions,
    build_options,
    check_option_names,
    normalize_options,
    pop_func,
)


class TestNormalizeOptions:
    """Tests for alias rewriting"""

    def test_with_is_alias_for_using(self):
        """Test `with` becomes `using`"""
        assert normalize_options({"with": Entity}) == {"using": Entity}

    def test_keyword_aliases(self):
        """Test `as_` and `if_` keyword spellings"""
        options = normalize_options({"as_": "label", "if_": "admin"})
        assert options == {"as": "label", "if": "admin"}

    def test_explicit_null_attr_path(self):
        """Test attr_path None is kept as 'drop this level'"""
        assert normalize_options({"attr_path": None}) == {"attr_path": False}

    def test_none_is_empty(self):
        """Test missing options"""
        assert normalize_options(None) == {}

    def test_non_mapping_rejected(self):
        """Test options must be a mapping"""
        with pytest.raises(InvalidOptionError):
            normalize_options(["safe"])


class TestPopFunc:
    """Tests for the `func` option"""

    def test_pop_func(self):
        """Test func is removed from the options"""
        func = lambda obj: 1
        options = {"func": func, "safe": True}
        assert pop_func(options) is func
        assert options == {"safe": True}

    def test_pop_func_absent(self):
        """Test no func"""
        assert pop_func({"safe": True}) is None

    def test_non_callable_func(self):
        """Test func must be callable"""
        with pytest.raises(InvalidOptionError):
            pop_func({"func": "path"})


class TestBuildOptions:
    """Tests for option validation"""

    def test_defaults(self):
        """Test nothing is set by default"""
        options = build_options({})
        assert options.as_ is None
        assert options.safe is False
        assert options.override is False
        assert options.to_dict() == {}

    def test_public_names(self):
        """Test options are accepted under their public names"""
        options = build_options({"as": "label", "if": {"role": "admin"}, "safe": True})
        assert options.as_ == "label"
        assert options.if_ == {"role": "admin"}
        assert options.is_set("as")
        assert options.is_set("safe")
        assert not options.is_set("default")

    def test_to_dict_only_explicit(self):
        """Test to_dict returns explicit options by public name"""
        options = build_options({"safe": True, "documentation": {"desc": "foo"}})
        assert options.to_dict() == {"safe": True, "documentation": {"desc": "foo"}}

    def test_unknown_option(self):
        """Test unknown options are not silently ignored"""
        with pytest.raises(InvalidOptionError) as exc_info:
            build_options({"unknown": None})
        assert "unknown" in exc_info.value.message

    def test_invalid_condition(self):
        """Test `if` must be callable, string or mapping"""
        with pytest.raises(InvalidOptionError) as exc_info:
            build_options({"if": 42})
        assert exc_info.value.details["option"] == "if"

    def test_using_instance_becomes_type(self):
        """Test `using` accepts an entity instance"""

        class ChildEntity(Entity):
            pass

        options = build_options({"using": ChildEntity(None)})
        assert options.using is ChildEntity

    def test_using_requires_represent(self):
        """Test `using` must be an entity type"""
        with pytest.raises(InvalidOptionError):
            build_options({"using": dict})

    def test_options_are_frozen(self):
        """Test options cannot be mutated after validation"""
        options = build_options({"safe": True})
        with pytest.raises(Exception):
            options.safe = False


class TestCheckOptionNames:
    """Tests for the name check"""

    def test_known_names(self):
        """Test every recognized option passes"""
        check_option_names({"as": 1, "func": 2, "merge": 3, "attr_path": 4})

    def test_unknown_name(self):
        """Test unknown name fails fast"""
        with pytest.raises(InvalidOptionError):
            check_option_names({"bogus": True})


def test_exposure_options_model_fields():
    """Test the option model covers the full option set"""
    assert set(ExposureOptions.model_fields) == {
        "as_",
        "default",
        "expose_null",
        "using",
        "override",
        "if_",
        "safe",
        "merge",
        "format_with",
        "attr_path",
        "documentation",
    }
