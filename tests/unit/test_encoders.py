"""
Encoder Unit Tests

Tests for turning representations into JSON and YAML
"""

import json
from datetime import date
from decimal import Decimal
from enum import Enum

import pytest
import yaml

from entitykit import Entity
from entitykit.encoders import json_default, to_json, to_plain, to_yaml
from entitykit.entity import SupportsRepresentation


class Color(Enum):
    RED = "red"


class AnyAttribute:
    def __getattr__(self, name):
        return f"dyn-{name}"


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def as_list(self):
        return [self.x, self.y]


class SerializablePoint(Point):
    def serializable_array(self):
        return self.as_list()


class NameEntity(Entity):
    @classmethod
    def initialize(cls):
        cls.expose("name")


class TestToPlain:
    """Tests for converting handles to plain data"""

    def test_nested_handles(self):
        """Test lazy handles anywhere in the structure are resolved"""
        handles = NameEntity.represent([{"name": "a"}, {"name": "b"}])
        data = {"people": handles, "lead": NameEntity.represent({"name": "c"})}
        assert to_plain(data) == {
            "people": [{"name": "a"}, {"name": "b"}],
            "lead": {"name": "c"},
        }

    def test_tuples_and_enums(self):
        """Test tuples become lists and enums their values"""
        assert to_plain({"t": (1, Color.RED)}) == {"t": [1, "red"]}

    def test_dynamic_attributes_kept(self):
        """Test objects answering any attribute are left untouched"""
        value = AnyAttribute()
        assert to_plain(value) is value
        assert to_plain({"v": [value]}) == {"v": [value]}

    def test_self_serializing_value(self):
        """Test values defining `serializable_array` are expanded"""
        assert to_plain({"p": SerializablePoint(1, 2)}) == {"p": [1, 2]}
        assert isinstance(SerializablePoint(1, 2), SupportsRepresentation)
        assert not isinstance(Point(1, 2), SupportsRepresentation)


class TestJsonDefault:
    """Tests for the json.dumps hook"""

    def test_known_types(self):
        """Test dates, decimals and sets"""
        assert json_default(date(2024, 1, 2)) == "2024-01-02"
        assert json_default(Decimal("1.50")) == "1.50"
        assert sorted(json_default({2, 1})) == [1, 2]

    def test_unknown_type(self):
        """Test other objects are rejected"""
        with pytest.raises(TypeError):
            json_default(object())

    def test_dynamic_attributes_rejected(self):
        """Test `__getattr__` objects are not mistaken for entity handles"""
        with pytest.raises(TypeError):
            json_default(AnyAttribute())


class TestEncode:
    """Tests for JSON and YAML output"""

    def test_to_json(self):
        """Test JSON keeps order and non-ASCII text"""
        text = to_json(NameEntity.represent({"name": "Zoë"}))
        assert text == '{"name": "Zoë"}'

    def test_to_json_indent(self):
        """Test indentation"""
        assert json.loads(to_json({"a": [1]}, indent=2)) == {"a": [1]}

    def test_entity_to_json(self):
        """Test the entity shortcut"""
        assert NameEntity({"name": "a"}).to_json() == '{"name": "a"}'

    def test_to_yaml(self):
        """Test YAML output keeps key order"""
        text = to_yaml({"b": 1, "a": {"when": date(2024, 1, 2)}})
        assert text.splitlines()[0] == "b: 1"
        assert yaml.safe_load(text) == {"b": 1, "a": {"when": "2024-01-02"}}
