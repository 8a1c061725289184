import unittest

from scrud_generator.domain.models import RelationKind
from scrud_generator.domain.relationships import ModelGraph, classify_relation

from model_bags import resolve_all, shop_bags


class TestClassifyRelation(unittest.TestCase):
    """Test cases for classify_relation."""

    def test_annotations(self):
        self.assertEqual(classify_relation("many_to_one"), (RelationKind.TO_ONE, False))
        self.assertEqual(classify_relation("one_to_one"), (RelationKind.TO_ONE, True))
        self.assertEqual(classify_relation("one_to_many"), (RelationKind.TO_MANY, False))
        self.assertEqual(classify_relation("many_to_many"), (RelationKind.TO_MANY, False))
        self.assertEqual(classify_relation("embedded"), (RelationKind.EMBEDDED, False))
        self.assertEqual(classify_relation("scalar"), (RelationKind.SCALAR, False))

    def test_unknown_annotation(self):
        with self.assertRaises(ValueError):
            classify_relation("list")


class TestModelGraph(unittest.TestCase):
    """Test cases for reachability over the shop model graph."""

    def setUp(self):
        self.graph = ModelGraph(resolve_all(shop_bags()).values())

    def test_embedded_fields_are_not_edges(self):
        self.assertNotIn("shop.model.Address", self.graph.edges["shop.model.Customer"])

    def test_membership(self):
        self.assertIn("shop.model.Order", self.graph)
        self.assertNotIn("shop.model.Address", self.graph)

    def test_reachable_from(self):
        self.assertEqual(
            self.graph.reachable_from("shop.model.OrderLine"),
            {"shop.model.Order", "shop.model.Product", "shop.model.Customer", "shop.model.OrderLine"},
        )
        self.assertEqual(self.graph.reachable_from("shop.model.Product"), set())

    def test_closes_cycle(self):
        self.assertTrue(self.graph.closes_cycle("shop.model.Customer", "shop.model.Order"))
        self.assertTrue(self.graph.closes_cycle("shop.model.Order", "shop.model.Customer"))
        self.assertTrue(self.graph.closes_cycle("shop.model.OrderLine", "shop.model.Order"))
        self.assertFalse(self.graph.closes_cycle("shop.model.OrderLine", "shop.model.Product"))

    def test_self_reference_closes_cycle(self):
        self.assertTrue(self.graph.closes_cycle("shop.model.Product", "shop.model.Product"))

    def test_cyclic_edges(self):
        self.assertEqual(self.graph.cyclic_edges(), [
            ("shop.model.Customer", "shop.model.Order"),
            ("shop.model.Order", "shop.model.Customer"),
            ("shop.model.Order", "shop.model.OrderLine"),
            ("shop.model.OrderLine", "shop.model.Order"),
        ])


if __name__ == "__main__":
    unittest.main()
