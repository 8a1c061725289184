import ast
import unittest
from unittest.mock import patch

from scrud_generator.config_validation import ToolConfigSchema
from scrud_generator.domain.models import ArtifactKind, EmissionOutcome, ModelStatus
from scrud_generator.emitter import InMemoryArtifactStore
from scrud_generator.orchestrator import Orchestrator, bag_label

from model_bags import KNOWN_TYPES, customer_bag, order_bag, product_bag, shop_bags


def stub_renderer(spec):
    return f"# {spec.qualified_name}\n"


class FlakyStore(InMemoryArtifactStore):
    """In-memory store failing to write some artifacts."""

    def __init__(self, failing):
        super().__init__()
        self.failing = set(failing)

    def write(self, qualified_name, content):
        if qualified_name in self.failing:
            raise OSError(28, "No space left on device")
        return super().write(qualified_name, content)


class OrchestratorTestCase(unittest.TestCase):

    def setUp(self):
        self.config = ToolConfigSchema(known_types=KNOWN_TYPES)
        self.store = InMemoryArtifactStore()

    def make_orchestrator(self, config=None, store=None, renderer=stub_renderer):
        return Orchestrator(config or self.config, store=store or self.store, renderer=renderer)


class TestOrchestratorRun(OrchestratorTestCase):
    """Test cases for a complete generation run."""

    def test_every_model_gets_an_entry_in_order(self):
        report = self.make_orchestrator().run(shop_bags())
        self.assertEqual([entry.model for entry in report.models], [
            "shop.model.Customer", "shop.model.Order", "shop.model.OrderLine", "shop.model.Product",
        ])
        self.assertFalse(report.has_failures)
        self.assertTrue(all(entry.status == ModelStatus.SUCCESS for entry in report.models))

    def test_artifact_counts(self):
        report = self.make_orchestrator().run(shop_bags())
        self.assertEqual(report.summary(), {
            "models": 4,
            "failed_models": 0,
            "written": 36,
            "skipped_existing": 1,
            "failed_artifacts": 0,
        })
        self.assertEqual(len(self.store.writes), 36)
        self.assertIsNotNone(report.started_at)
        self.assertIsNotNone(report.finished_at)

    def test_declared_dto_is_not_generated(self):
        report = self.make_orchestrator().run(shop_bags())
        summary_dto = [r for r in report.artifacts if r.qualified_name == "shop.dto.OrderSummaryDto"]
        self.assertEqual(len(summary_dto), 1)
        self.assertEqual(summary_dto[0].outcome, EmissionOutcome.SKIPPED_EXISTING)
        self.assertNotIn("shop.dto.OrderSummaryDto", self.store.files)
        self.assertIn("shop.mapper.OrderSummaryDtoMapper", self.store.files)

    def test_predicate_factories_come_first(self):
        self.make_orchestrator().run(shop_bags())
        predicate_writes = self.store.writes[:4]
        self.assertTrue(all(".specification." in name for name in predicate_writes))
        self.assertNotIn(".specification.", " ".join(self.store.writes[4:]))

    def test_per_model_order(self):
        report = self.make_orchestrator().run(shop_bags())
        kinds = [r.kind for r in report.get("shop.model.Customer").artifacts]
        self.assertEqual(kinds, [
            ArtifactKind.PREDICATE_FACTORY,
            ArtifactKind.MAPPER,
            ArtifactKind.DTO,
            ArtifactKind.ID_ADAPTER,
            ArtifactKind.ID_ADAPTER,
            ArtifactKind.REPOSITORY,
            ArtifactKind.SERVICE_INTERFACE,
            ArtifactKind.SERVICE_IMPL,
            ArtifactKind.CONTROLLER,
        ])

    def test_second_run_over_populated_store_writes_nothing(self):
        self.make_orchestrator().run(shop_bags())
        writes_after_first_run = list(self.store.writes)

        report = self.make_orchestrator().run(shop_bags())

        self.assertEqual(self.store.writes, writes_after_first_run)
        self.assertTrue(report.artifacts)
        self.assertTrue(all(r.outcome == EmissionOutcome.SKIPPED_EXISTING for r in report.artifacts))
        self.assertTrue(all(e.status == ModelStatus.SKIPPED_ALL_EXISTING for e in report.models))
        self.assertEqual(report.summary()["written"], 0)
        self.assertFalse(report.has_failures)

    def test_reentry_returns_first_report(self):
        orchestrator = self.make_orchestrator()
        first = orchestrator.run(shop_bags())
        writes = len(self.store.writes)

        with self.assertLogs("scrud_generator.orchestrator", level="WARNING"):
            second = orchestrator.run(shop_bags())

        self.assertIs(second, first)
        self.assertTrue(orchestrator.complete)
        self.assertEqual(len(self.store.writes), writes)

    def test_renders_with_default_renderer(self):
        self.make_orchestrator(renderer=None).run([product_bag()])
        source = self.store.files["shop.repository.ProductRepository"]
        self.assertIn("DO NOT EDIT", source)
        ast.parse(source)

    def test_parallel_run_produces_the_same_artifacts(self):
        sequential_store = InMemoryArtifactStore()
        self.make_orchestrator(store=sequential_store).run(shop_bags())

        config = ToolConfigSchema(known_types=KNOWN_TYPES, max_workers=4)
        report = self.make_orchestrator(config=config).run(shop_bags())

        self.assertFalse(report.has_failures)
        self.assertEqual(set(self.store.files), set(sequential_store.files))

    def test_non_scrud_models_only_get_predicate_factories(self):
        report = self.make_orchestrator().run([product_bag(scrud=False)])
        self.assertEqual(
            [r.qualified_name for r in report.get("shop.model.Product").artifacts],
            ["shop.specification.ProductPredicateFactory"],
        )

    def test_naming_properties_apply(self):
        config = ToolConfigSchema(properties={"naming.repository.suffix": "Dao"})
        self.make_orchestrator(config=config).run([product_bag()])
        self.assertIn("shop.repository.ProductDao", self.store.files)
        self.assertNotIn("shop.repository.ProductRepository", self.store.files)


class TestOrchestratorFailureIsolation(OrchestratorTestCase):
    """Test cases for per-model failure isolation."""

    def test_duplicate_models(self):
        report = self.make_orchestrator().run([customer_bag(), customer_bag(), product_bag()])

        first, second, product = report.models
        self.assertEqual(first.status, ModelStatus.SUCCESS)
        self.assertEqual(second.status, ModelStatus.FAILED)
        self.assertEqual(second.error_code, "DUPLICATE_ARTIFACT_NAME")
        self.assertEqual(second.artifacts, [])
        self.assertEqual(product.status, ModelStatus.SUCCESS)
        self.assertEqual(len(report.failed_models), 1)

    def test_controller_suppression_affects_only_the_controller(self):
        report = self.make_orchestrator().run([
            customer_bag(flags={"controller": False}),
            product_bag(flags={"controller_superclass": "NONE"}),
        ])
        for entry in report.models:
            kinds = [r.kind for r in entry.artifacts]
            self.assertEqual(entry.status, ModelStatus.SUCCESS)
            self.assertNotIn(ArtifactKind.CONTROLLER, kinds)
            self.assertIn(ArtifactKind.SERVICE_IMPL, kinds)
            self.assertIn(ArtifactKind.REPOSITORY, kinds)

    def test_suppressed_service_also_drops_the_controller(self):
        report = self.make_orchestrator().run([customer_bag(flags={"service": False})])

        entry = report.get("shop.model.Customer")
        kinds = [r.kind for r in entry.artifacts]
        self.assertEqual(entry.status, ModelStatus.SUCCESS)
        self.assertNotIn(ArtifactKind.SERVICE_INTERFACE, kinds)
        self.assertNotIn(ArtifactKind.SERVICE_IMPL, kinds)
        self.assertNotIn(ArtifactKind.CONTROLLER, kinds)
        self.assertIn(ArtifactKind.REPOSITORY, kinds)
        self.assertFalse(any(".service." in name for name in self.store.files))

    def test_hand_written_service_keeps_the_controller(self):
        config = ToolConfigSchema(known_types=KNOWN_TYPES + ["shop.service.CustomerService"])
        report = self.make_orchestrator(config=config).run([customer_bag(flags={"service": False})])

        kinds = [r.kind for r in report.get("shop.model.Customer").artifacts]
        self.assertIn(ArtifactKind.CONTROLLER, kinds)
        self.assertNotIn(ArtifactKind.SERVICE_IMPL, kinds)

    def test_unresolvable_models_are_isolated(self):
        broken = {"name": "Broken", "package": "shop.model"}
        report = self.make_orchestrator().run(shop_bags() + [broken, "not a mapping"])

        self.assertEqual(len(report.models), 6)
        self.assertEqual(report.get("shop.model.Broken").error_code, "UNRESOLVABLE_MODEL")
        self.assertEqual(report.get("<model #5>").status, ModelStatus.FAILED)
        self.assertEqual(len(report.failed_models), 2)
        self.assertEqual(report.get("shop.model.Order").status, ModelStatus.SUCCESS)

    def test_spec_build_error_stops_only_that_model(self):
        bags = shop_bags()
        bags[1] = order_bag(attribute_paths=["reference"])
        report = self.make_orchestrator().run(bags)

        order = report.get("shop.model.Order")
        self.assertEqual(order.status, ModelStatus.FAILED)
        self.assertEqual(order.error_code, "SPEC_BUILD_ERROR")
        self.assertIn("shop.specification.OrderPredicateFactory", self.store.files)
        self.assertNotIn("shop.mapper.OrderMapper", self.store.files)
        self.assertEqual(report.get("shop.model.Customer").status, ModelStatus.SUCCESS)

    def test_unexpected_errors_are_isolated(self):
        def renderer(spec):
            if spec.qualified_name == "shop.dto.ProductDto":
                raise RuntimeError("renderer exploded")
            return stub_renderer(spec)

        report = self.make_orchestrator(renderer=renderer).run(shop_bags())

        product = report.get("shop.model.Product")
        self.assertEqual(product.status, ModelStatus.FAILED)
        self.assertEqual(product.error_code, "UNEXPECTED_ERROR")
        self.assertIn("renderer exploded", product.reason)
        self.assertEqual(report.get("shop.model.OrderLine").status, ModelStatus.SUCCESS)

    def test_io_failures_are_reported_per_artifact(self):
        store = FlakyStore(failing=["shop.dto.CustomerDto"])
        report = self.make_orchestrator(store=store).run(shop_bags())

        customer = report.get("shop.model.Customer")
        failed = [r for r in customer.artifacts if r.outcome == EmissionOutcome.FAILED]
        self.assertEqual([r.qualified_name for r in failed], ["shop.dto.CustomerDto"])
        self.assertIn("shop.model.Customer", [e.model for e in report.models])
        self.assertIn("shop.controller.CustomerController", store.files)
        self.assertEqual(report.summary()["failed_artifacts"], 1)

    def test_discovery_is_used_when_no_bags_are_given(self):
        config = ToolConfigSchema(models=["models"], known_types=KNOWN_TYPES)
        with patch("scrud_generator.orchestrator.discover_models", return_value=shop_bags()) as mock_discover:
            report = self.make_orchestrator(config=config).run()
        mock_discover.assert_called_once_with(["models"], include=None, exclude=None)
        self.assertEqual(len(report.models), 4)


class TestBagLabel(unittest.TestCase):

    def test_labels(self):
        self.assertEqual(bag_label({"name": "Order", "package": "shop.model"}, 0), "shop.model.Order")
        self.assertEqual(bag_label({"name": "Order"}, 0), "Order")
        self.assertEqual(bag_label({}, 3), "<model #3>")
        self.assertEqual(bag_label(None, 1), "<model #1>")


if __name__ == "__main__":
    unittest.main()
