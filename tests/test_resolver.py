import unittest

from scrud_generator.domain.metadata import ModelMetadata
from scrud_generator.domain.models import RelationKind
from scrud_generator.domain.resolver import ModelDescriptorResolver, parent_package_of
from scrud_generator.exceptions import UnresolvableModel

from model_bags import customer_bag, make_resolver, order_bag, order_line_bag, product_bag, shop_bags


class TestModelDescriptorResolver(unittest.TestCase):
    """Test cases for resolving metadata bags into descriptors."""

    def setUp(self):
        self.resolver = make_resolver(shop_bags())

    def test_resolves_scalar_identifier_and_names(self):
        descriptor = self.resolver.resolve(customer_bag())
        self.assertEqual(descriptor.simple_name, "Customer")
        self.assertEqual(descriptor.package_name, "shop.model")
        self.assertEqual(descriptor.parent_package_name, "shop")
        self.assertEqual(descriptor.qualified_name, "shop.model.Customer")
        self.assertEqual(descriptor.identifier.id_type, "int")
        self.assertFalse(descriptor.identifier.is_composite)

    def test_resolves_composite_identifier(self):
        descriptor = self.resolver.resolve(order_line_bag())
        shape = descriptor.identifier
        self.assertTrue(shape.is_composite)
        self.assertEqual(shape.arity, 2)
        self.assertEqual([slot.entity for slot in shape.components], ["shop.model.Order", "shop.model.Product"])
        self.assertEqual(shape.reference_type, "str")

    def test_classifies_relations_by_annotation(self):
        descriptor = self.resolver.resolve(customer_bag())
        kinds = {f.name: f.relation_kind for f in descriptor.fields}
        self.assertEqual(kinds, {
            "name": RelationKind.SCALAR,
            "email": RelationKind.SCALAR,
            "address": RelationKind.EMBEDDED,
            "orders": RelationKind.TO_MANY,
        })

    def test_mapped_by_alias_sets_reverse_field(self):
        descriptor = self.resolver.resolve(customer_bag())
        self.assertEqual(descriptor.get_field("orders").reverse_field, "customer")

    def test_reverse_field_requires_bidirectional(self):
        bag = order_bag()
        bag["fields"][1]["bidirectional"] = False
        descriptor = self.resolver.resolve(bag)
        self.assertIsNone(descriptor.get_field("customer").reverse_field)

    def test_default_dto_comes_first(self):
        descriptor = self.resolver.resolve(order_bag())
        names = [variant.qualified_name for variant in descriptor.dto_variants]
        self.assertEqual(names, ["shop.dto.OrderDto", "shop.dto.OrderSummaryDto"])
        self.assertFalse(descriptor.default_dto.declared)
        summary = descriptor.dto_variants[1]
        self.assertTrue(summary.declared)
        self.assertTrue(summary.has_field("reference"))
        self.assertFalse(summary.has_field("lines"))

    def test_flags_and_attribute_paths(self):
        descriptor = self.resolver.resolve(order_bag())
        self.assertTrue(descriptor.flags.disableable)
        self.assertTrue(descriptor.flags.service)
        self.assertEqual(descriptor.attribute_paths, ("customer", "lines", "lines.product"))
        self.assertFalse(self.resolver.resolve(product_bag()).flags.controller)

    def test_explicit_parent_package(self):
        descriptor = self.resolver.resolve(customer_bag(parent_package="shop.api"))
        self.assertEqual(descriptor.parent_package_name, "shop.api")

    def test_missing_identifier_fails(self):
        bag = customer_bag()
        del bag["identifier"]
        with self.assertRaises(UnresolvableModel) as ctx:
            self.resolver.resolve(bag)
        self.assertEqual(ctx.exception.error_code, "UNRESOLVABLE_MODEL")
        self.assertEqual(ctx.exception.context["model"], "shop.model.Customer")

    def test_composite_arity_out_of_range_fails(self):
        for count in (1, 5):
            with self.subTest(count=count):
                bag = order_line_bag(identifier={
                    "components": [{"entity": f"shop.model.Part{i}"} for i in range(count)]
                })
                with self.assertRaises(UnresolvableModel):
                    self.resolver.resolve(bag)

    def test_to_one_with_unknown_target_fails(self):
        bag = order_line_bag()
        bag["fields"][1]["type"] = "shop.model.Warehouse"
        with self.assertRaises(UnresolvableModel) as ctx:
            self.resolver.resolve(bag)
        self.assertEqual(ctx.exception.context["field"], "product")

    def test_to_one_without_type_fails(self):
        bag = order_line_bag()
        del bag["fields"][0]["type"]
        with self.assertRaises(UnresolvableModel):
            self.resolver.resolve(bag)

    def test_to_many_with_unknown_target_only_warns(self):
        resolver = make_resolver([customer_bag()], known_types=())
        with self.assertLogs("scrud_generator.domain.resolver", level="WARNING") as logs:
            descriptor = resolver.resolve(customer_bag())
        self.assertEqual(descriptor.get_field("orders").declared_type, "shop.model.Order")
        self.assertTrue(any("shop.model.Order" in line for line in logs.output))

    def test_unknown_declared_dto_fails(self):
        resolver = make_resolver(shop_bags(), known_types=())
        with self.assertRaises(UnresolvableModel) as ctx:
            resolver.resolve(order_bag())
        self.assertIn("shop.dto.OrderSummaryDto", ctx.exception.message)

    def test_malformed_bag_fails(self):
        for bag in ({"package": "shop.model"}, customer_bag(name="not valid"), customer_bag(fields="nope")):
            with self.subTest(bag=bag):
                with self.assertRaises(UnresolvableModel):
                    self.resolver.resolve(bag)

    def test_duplicate_field_names_fail(self):
        bag = customer_bag()
        bag["fields"].append({"name": "email", "type": "str"})
        with self.assertRaises(UnresolvableModel):
            self.resolver.resolve(bag)

    def test_unknown_relation_annotation_fails(self):
        bag = customer_bag()
        bag["fields"][0]["relation"] = "several"
        with self.assertRaises(UnresolvableModel):
            self.resolver.resolve(bag)

    def test_accepts_validated_metadata(self):
        metadata = ModelMetadata.model_validate(product_bag())
        self.assertEqual(self.resolver.resolve(metadata).simple_name, "Product")

    def test_without_existence_oracle_every_to_one_fails(self):
        with self.assertRaises(UnresolvableModel):
            ModelDescriptorResolver().resolve(order_line_bag())


class TestParentPackage(unittest.TestCase):

    def test_parent_package_of(self):
        self.assertEqual(parent_package_of("shop.model"), "shop")
        self.assertEqual(parent_package_of("a.b.c"), "a.b")
        self.assertEqual(parent_package_of("model"), "")


if __name__ == "__main__":
    unittest.main()
