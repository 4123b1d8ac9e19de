"""
Entity types loaded by the CLI tests as `sample_entities:<Name>`
"""

from entitykit import Entity


class UserEntity(Entity):
    @classmethod
    def initialize(cls):
        cls.root("users", "user")
        cls.expose("id", documentation={"type": "integer", "desc": "User id"})
        cls.expose("name", documentation={"type": "string"})
        cls.expose("email", if_={"role": "admin"})
        cls.expose("created_at")


class StrictEntity(Entity):
    @classmethod
    def initialize(cls):
        cls.expose("id", "nickname")


class BrokenDocsEntity(Entity):
    @classmethod
    def initialize(cls):
        cls.expose("name", as_=lambda obj: "label", documentation={"desc": "x"})


NOT_AN_ENTITY = 42
