"""
Resolution Context Unit Tests

Tests for projection flattening, narrowing and attr path tracking
"""

from entitykit.context import ResolutionContext, flatten_projection, narrow_options


class TestFlattenProjection:
    """Tests for the per-level projection view"""

    def test_plain_list(self):
        """Test a flat list of names"""
        assert flatten_projection(["id", "name"], True) == {"id": True, "name": True}

    def test_single_name(self):
        """Test a bare name"""
        assert flatten_projection("id", True) == {"id": True}

    def test_nested_entry_for_only(self):
        """Test nested entries name their key for `only`"""
        flat = flatten_projection(["id", {"user": ["name"]}], True)
        assert flat == {"id": True, "user": True}

    def test_nested_entry_for_except(self):
        """Test nested entries exclude nothing at this level"""
        flat = flatten_projection(["id", {"user": ["name"]}], False)
        assert flat == {"id": True}


class TestNarrowOptions:
    """Tests for descending into a sub-representation"""

    def test_descends(self):
        """Test the nested projection becomes the child projection"""
        options = {"only": ["id", {"user": ["name"]}], "except": [{"user": ["id"]}], "x": 1}
        narrowed = narrow_options(options, "user")
        assert narrowed["only"] == ["name"]
        assert narrowed["except"] == ["id"]
        assert narrowed["x"] == 1

    def test_drops_unrelated(self):
        """Test projections without an entry for the key are dropped"""
        narrowed = narrow_options({"only": ["id", "user"], "except": ["phone"]}, "user")
        assert "only" not in narrowed
        assert "except" not in narrowed

    def test_mapping_projection(self):
        """Test a projection given as a single mapping"""
        narrowed = narrow_options({"only": {"user": ["name"]}}, "user")
        assert narrowed["only"] == ["name"]

    def test_does_not_mutate(self):
        """Test the parent options stay untouched"""
        options = {"only": [{"user": ["name"]}], "attr_path": ["a"]}
        narrowed = narrow_options(options, "user")
        narrowed["attr_path"].append("b")
        assert options == {"only": [{"user": ["name"]}], "attr_path": ["a"]}


class TestResolutionContext:
    """Tests for per-render state"""

    def test_includes(self):
        """Test `except` wins over `only`"""
        context = ResolutionContext({}, {"only": ["a", "b"], "except": ["b"]})
        assert context.includes("a")
        assert not context.includes("b")
        assert not context.includes("c")

    def test_includes_everything_by_default(self):
        """Test no projection"""
        assert ResolutionContext({}, {}).includes("anything")

    def test_enter(self):
        """Test path segments"""
        context = ResolutionContext({}, {"attr_path": ["root"]})
        context.enter("name")
        assert context.attr_path == ["root", "name"]
        context.enter(["a", "b"])
        assert context.attr_path == ["root", "a", "b"]
        context.enter(None)
        assert context.attr_path == ["root"]
        context.enter(False)
        assert context.attr_path == ["root"]

    def test_narrowed(self):
        """Test nested contexts start from the current path"""
        context = ResolutionContext({"x": 1}, {"only": [{"info": ["a"]}]})
        context.enter("info")
        child = context.narrowed("info")
        assert child.value == {"x": 1}
        assert child.base_path == ["info"]
        assert child.includes("a")
        assert not child.includes("b")

    def test_child_options(self):
        """Test options handed to delegated entities"""
        context = ResolutionContext({}, {"collection": True, "root": "things", "flag": 1})
        context.enter("friends")
        options = context.child_options("friends")
        assert "collection" not in options
        assert options["root"] is None
        assert options["flag"] == 1
        assert options["attr_path"] == ["friends"]

    def test_options_copied(self):
        """Test caller options are not mutated"""
        options = {"flag": 1}
        ResolutionContext({}, options).enter("x")
        assert options == {"flag": 1}
