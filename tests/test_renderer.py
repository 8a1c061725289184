import ast
import unittest
from unittest.mock import patch

from black import NothingChanged

from scrud_generator.ast_codegen import PythonRenderer, build_module, render_artifact, render_header
from scrud_generator.builders import SpecPipeline
from scrud_generator.codegen_utils import format_python_code_using_black
from scrud_generator.constants import GENERATED_FILE_HEADER
from scrud_generator.domain.models import ArtifactKind
from scrud_generator.domain.specs import ArtifactSpec

from model_bags import shop_context


class TestRenderHeader(unittest.TestCase):

    def test_header_is_a_comment_block(self):
        lines = render_header().splitlines()
        self.assertEqual(len(lines), len(GENERATED_FILE_HEADER))
        self.assertTrue(all(line.startswith("#") for line in lines))
        self.assertIn("DO NOT EDIT", lines[0])


class TestRenderArtifact(unittest.TestCase):
    """Test cases for rendering specs to Python source."""

    def setUp(self):
        self.descriptors, context = shop_context()
        pipeline = SpecPipeline(context)
        self.specs = {}
        for descriptor in self.descriptors.values():
            for spec in pipeline.build_predicate_specs(descriptor) + pipeline.build_model_specs(descriptor):
                self.specs[spec.qualified_name] = spec

    def test_every_artifact_renders_valid_python(self):
        for name, spec in self.specs.items():
            with self.subTest(artifact=name):
                source = render_artifact(spec)
                self.assertTrue(source.startswith(render_header()))
                ast.parse(source)

    def test_dto_source(self):
        source = render_artifact(self.specs["shop.dto.OrderLineDto"])
        self.assertIn("@dataclass", source)
        self.assertIn("class OrderLineDto:", source)
        self.assertIn("id: Optional[str] = None", source)
        self.assertIn("product: Optional[ProductDto] = None", source)
        self.assertIn("from shop.dto.product_dto import ProductDto", source)
        self.assertEqual(source.count("from typing import"), 1)

    def test_repository_source(self):
        source = render_artifact(self.specs["shop.repository.OrderRepository"])
        self.assertIn("class OrderRepository(ModelRepository):", source)
        self.assertIn("from scrud_runtime.repository import ModelRepository", source)
        self.assertIn("def find_customer_by_owner_id(self, id: int) -> Optional[Customer]:", source)
        self.assertIn('return self.find_one_by(Customer, "orders.id", id)', source)
        self.assertIn("return self.soft_delete(id)", source)

    def test_service_interface_is_abstract(self):
        source = render_artifact(self.specs["shop.service.OrderService"])
        self.assertIn("class OrderService(ABC):", source)
        self.assertIn("@abstractmethod", source)
        self.assertNotIn("return ", source)

    def test_id_adapter_source(self):
        source = render_artifact(self.specs["shop.dto.OrderLineIdAdapter"])
        self.assertIn("class OrderLineIdAdapter(IdentifierAdapter):", source)
        self.assertIn("return encode(model.id.components)", source)
        self.assertIn("return decode(value, 2, self.builders())", source)

    def test_predicate_default_operator(self):
        source = render_artifact(self.specs["shop.specification.CustomerPredicateFactory"])
        self.assertIn('def by_email(self, value: Any, operator: str = "eq") -> Any:', source)

    def test_unformatted_output(self):
        spec = self.specs["shop.mapper.ProductMapper"]
        source = render_artifact(spec, format_code=False)
        self.assertEqual(source, render_header() + "\n" + ast.unparse(build_module(spec)) + "\n")

    def test_empty_class_gets_a_pass_body(self):
        spec = ArtifactSpec(qualified_name="shop.dto.EmptyDto", kind=ArtifactKind.DTO)
        source = render_artifact(spec)
        self.assertIn("class EmptyDto:", source)
        self.assertIn("pass", source)

    def test_python_renderer_is_callable(self):
        spec = self.specs["shop.dto.ProductDto"]
        with patch("scrud_generator.ast_codegen.renderer.format_python_code_using_black") as mock_format:
            mock_format.side_effect = lambda label, code: code
            source = PythonRenderer()(spec)
        mock_format.assert_called_once()
        self.assertEqual(mock_format.call_args[0][0], "shop.dto.ProductDto")
        self.assertIn("class ProductDto:", source)
        self.assertNotIn("class", PythonRenderer(format_code=False)(spec).split("\n")[0])


class TestBlackFormatting(unittest.TestCase):
    """Test cases for format_python_code_using_black."""

    def test_formats_code(self):
        self.assertEqual(format_python_code_using_black("x", "x = [1,2]\n"), "x = [1, 2]\n")

    def test_nothing_changed_returns_input(self):
        with patch("scrud_generator.codegen_utils.black_format_str", side_effect=NothingChanged):
            self.assertEqual(format_python_code_using_black("x", "x = 1\n"), "x = 1\n")

    def test_formatting_errors_keep_unformatted_code(self):
        with patch("scrud_generator.codegen_utils.black_format_str", side_effect=ValueError("boom")):
            with self.assertLogs("scrud_generator.codegen_utils", level="ERROR"):
                self.assertEqual(format_python_code_using_black("x", "x=( 1 )\n"), "x=( 1 )\n")


if __name__ == "__main__":
    unittest.main()
