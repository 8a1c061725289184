import unittest
from types import SimpleNamespace

from scrud_generator.exceptions import MalformedIdentifier
from scrud_generator.identifiers import (
    SPLIT_CHAR,
    CompositeIdentifier,
    IdentifierAdapter,
    check_arity,
    decode,
    encode,
)


def entity(id_value):
    return SimpleNamespace(id=id_value)


class TestEncode(unittest.TestCase):
    """Test cases for encode."""

    def test_joins_raw_ids_with_split_char(self):
        self.assertEqual(SPLIT_CHAR, "_")
        self.assertEqual(encode(["alice", "admins"]), "alice_admins")

    def test_uses_entity_ids(self):
        self.assertEqual(encode([entity("a"), entity(2), entity("c")]), "a_2_c")

    def test_empty_component_keeps_its_segment(self):
        """Positional meaning is preserved for partially populated composites."""
        self.assertEqual(encode(["a", None]), "a_")
        self.assertEqual(encode([None, entity("b"), entity(None)]), "_b_")

    def test_all_empty_returns_none(self):
        self.assertIsNone(encode([None, entity(None)]))
        self.assertIsNone(encode(["", ""]))

    def test_invalid_arity_is_a_programming_error(self):
        with self.assertRaises(ValueError):
            encode(["a"])
        with self.assertRaises(ValueError):
            encode(["a", "b", "c", "d", "e"])


class TestDecode(unittest.TestCase):
    """Test cases for decode."""

    def test_round_trip_for_every_arity(self):
        for components in (("a", "b"), ("a", "b", "c"), ("1", "two", "3", "four")):
            with self.subTest(components=components):
                decoded = decode(encode(components), len(components))
                self.assertEqual(decoded.ids, components)
                self.assertEqual(decoded, CompositeIdentifier(components))

    def test_arity_four_accepts_four_parts(self):
        self.assertEqual(decode("a_b_c_d", 4).ids, ("a", "b", "c", "d"))

    def test_arity_four_rejects_three_parts(self):
        with self.assertRaises(MalformedIdentifier) as ctx:
            decode("a_b_c", 4)
        self.assertEqual(ctx.exception.error_code, "MALFORMED_IDENTIFIER")
        self.assertEqual(ctx.exception.context["arity"], 4)

    def test_rejects_too_many_parts(self):
        with self.assertRaises(MalformedIdentifier):
            decode("a_b_c", 2)

    def test_rejects_blank_parts(self):
        for value in ("a__c", "_b_c", "a_b_ ", ""):
            with self.subTest(value=value):
                with self.assertRaises(MalformedIdentifier):
                    decode(value, 3)

    def test_encode_decode_emptiness_asymmetry(self):
        """encode tolerates empty segments, decode rejects them."""
        encoded = encode(["a", None])
        self.assertEqual(encoded, "a_")
        with self.assertRaises(MalformedIdentifier):
            decode(encoded, 2)

    def test_malformed_identifier_is_a_value_error(self):
        with self.assertRaises(ValueError):
            decode("abc", 2)

    def test_builders_resolve_each_slot(self):
        decoded = decode("7_x", 2, [lambda part: entity(int(part)), entity])
        self.assertEqual(decoded.components[0].id, 7)
        self.assertEqual(decoded.components[1].id, "x")
        self.assertEqual(decoded.ids, ("7", "x"))

    def test_builder_count_must_match_arity(self):
        with self.assertRaises(ValueError):
            decode("a_b", 2, [str])

    def test_invalid_arity(self):
        with self.assertRaises(ValueError):
            decode("a", 1)
        with self.assertRaises(ValueError):
            check_arity(5)


class TestCompositeIdentifier(unittest.TestCase):
    """Test cases for CompositeIdentifier equality and hashing."""

    def test_equality_uses_component_ids_only(self):
        left = CompositeIdentifier([entity("a"), entity("b")])
        right = CompositeIdentifier([SimpleNamespace(id="a", name="other"), "b"])
        self.assertEqual(left, right)
        self.assertEqual(hash(left), hash(right))

    def test_independently_decoded_values_are_equal(self):
        first = decode("u1_g1", 2, [entity, entity])
        second = decode("u1_g1", 2, [entity, entity])
        self.assertIsNot(first.components[0], second.components[0])
        self.assertEqual(first, second)
        self.assertEqual(len({first, second}), 1)

    def test_different_ids_are_not_equal(self):
        self.assertNotEqual(CompositeIdentifier(["a", "b"]), CompositeIdentifier(["b", "a"]))

    def test_not_equal_to_other_types(self):
        self.assertNotEqual(CompositeIdentifier(["a", "b"]), "a_b")

    def test_string_form(self):
        identifier = CompositeIdentifier(["a", "b", "c"])
        self.assertEqual(str(identifier), "a_b_c")
        self.assertEqual(identifier.to_string(), "a_b_c")
        self.assertEqual(identifier.arity, 3)
        self.assertEqual(list(identifier), ["a", "b", "c"])

    def test_from_string(self):
        self.assertEqual(CompositeIdentifier.from_string("x_y", 2).ids, ("x", "y"))


class TestIdentifierAdapter(unittest.TestCase):
    """Test cases for the IdentifierAdapter runtime base."""

    def test_scalar_defaults_pass_through(self):
        adapter = IdentifierAdapter()
        self.assertEqual(adapter.read_id(entity(5)), 5)
        self.assertEqual(adapter.build_id("5"), "5")
        self.assertEqual(list(adapter.builders()), [])

    def test_builders_follow_arity(self):
        class PairAdapter(IdentifierAdapter):
            arity = 2

            def build_id(self, value):
                return decode(value, self.arity, self.builders())

        adapter = PairAdapter()
        self.assertEqual(len(adapter.builders()), 2)
        self.assertEqual(adapter.build_id("a_b"), CompositeIdentifier(["a", "b"]))


if __name__ == "__main__":
    unittest.main()
