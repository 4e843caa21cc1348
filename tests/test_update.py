"""Update builder tests."""

import pytest

from pydataapi._errors import InvalidArgumentError
from pydataapi.query.update import Update


class TestUpdateOperators:
    def test_set_and_inc(self):
        assert Update().set("name", "x").inc("count", 1).to_dict() == {
            "$set": {"name": "x"},
            "$inc": {"count": 1},
        }

    def test_set_all(self):
        assert Update().set_all({"a": 1, "b.c": 2}).to_dict() == {"$set": {"a": 1, "b.c": 2}}

    def test_unset(self):
        assert Update().unset("a").unset("b").to_dict() == {"$unset": {"a": "", "b": ""}}

    def test_min_and_mul(self):
        assert Update().min("low", 3).mul("price", 1.5).to_dict() == {
            "$min": {"low": 3},
            "$mul": {"price": 1.5},
        }

    def test_push(self):
        assert Update().push("tags", "x").to_dict() == {"$push": {"tags": "x"}}

    def test_push_each_with_position(self):
        assert Update().push_each("tags", ["x", "y"], position=0).to_dict() == {
            "$push": {"tags": {"$each": ["x", "y"], "$position": 0}}
        }

    def test_push_each_without_position(self):
        assert Update().push_each("tags", ("x",)).to_dict() == {
            "$push": {"tags": {"$each": ["x"]}}
        }

    def test_pop(self):
        assert Update().pop("a").pop("b", first=True).to_dict() == {"$pop": {"a": 1, "b": -1}}

    def test_add_to_set(self):
        assert Update().add_to_set("tags", "z").to_dict() == {"$addToSet": {"tags": "z"}}

    def test_rename(self):
        assert Update().rename("old", "new").to_dict() == {"$rename": {"old": "new"}}

    def test_current_date(self):
        assert Update().current_date("updated", "seen").to_dict() == {
            "$currentDate": {"updated": True, "seen": True}
        }

    def test_set_on_insert(self):
        assert Update().set_on_insert({"created": 1}).to_dict() == {"$setOnInsert": {"created": 1}}

    def test_last_write_wins_per_field(self):
        assert Update().set("a", 1).set("a", 2).to_dict() == {"$set": {"a": 2}}


class TestUpdateValidation:
    def test_empty_field(self):
        with pytest.raises(InvalidArgumentError):
            Update().set("", 1)

    def test_rename_to_empty(self):
        with pytest.raises(InvalidArgumentError):
            Update().rename("a", "")

    def test_to_dict_is_a_copy(self):
        u = Update().set("a", 1)
        u.to_dict()["$set"]["b"] = 2
        assert u.to_dict() == {"$set": {"a": 1}}

    def test_equality(self):
        assert Update().set("a", 1) == Update().set("a", 1)
