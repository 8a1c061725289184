"""
Python renderer for artifact specifications.

Builds an ``ast.Module`` for one ArtifactSpec, unparses it, formats it with
black and prefixes the generated-file header.
"""

import ast
import logging
from typing import Dict, List

from scrud_generator.ast_codegen.base import (
    create_arg,
    create_ann_assign,
    create_assign,
    create_class_def,
    create_docstring,
    create_dotted_name,
    create_expression,
    create_function_def,
    create_import,
)
from scrud_generator.codegen_utils import format_python_code_using_black
from scrud_generator.constants import GENERATED_FILE_HEADER
from scrud_generator.domain.specs import ArtifactSpec, OperationSpec


logger = logging.getLogger(__name__)


def render_header() -> str:
    return "\n".join(f"#{line}" for line in GENERATED_FILE_HEADER) + "\n"


def _import_nodes(imports) -> List[ast.stmt]:
    """``from`` imports grouped per module, in first-seen order."""
    from_imports: Dict[str, List[str]] = {}
    plain_imports: List[str] = []
    for spec in imports:
        if spec.name is None:
            if spec.module not in plain_imports:
                plain_imports.append(spec.module)
            continue
        names = from_imports.setdefault(spec.module, [])
        if spec.name not in names:
            names.append(spec.name)

    nodes: List[ast.stmt] = [create_import(module) for module in plain_imports]
    nodes.extend(create_import(module, names) for module, names in from_imports.items())
    return nodes


def _operation_node(operation: OperationSpec) -> ast.FunctionDef:
    args = [create_arg(param.name, param.type_name) for param in operation.parameters]
    defaults = [create_expression(param.default) for param in operation.parameters if param.default is not None]

    body: List[ast.stmt] = []
    if operation.docstring:
        body.append(create_docstring(operation.docstring))

    decorators = []
    if operation.is_abstract:
        decorators.append(create_dotted_name("abstractmethod"))
        if not body:
            body.append(ast.Expr(value=ast.Constant(value=Ellipsis)))
    else:
        body.append(ast.Return(value=create_expression(operation.body)))

    return create_function_def(
        name=operation.name,
        args=args,
        body=body,
        defaults=defaults,
        returns=operation.returns,
        decorator_list=decorators,
    )


def build_module(spec: ArtifactSpec) -> ast.Module:
    """Build the AST of the module holding one artifact."""
    class_body: List[ast.stmt] = []
    if spec.docstring:
        class_body.append(create_docstring(spec.docstring))

    for attribute in spec.attributes:
        class_body.append(create_assign(attribute.name, create_expression(attribute.value)))

    for member in spec.fields:
        value = create_expression(member.default) if member.default is not None else None
        class_body.append(create_ann_assign(member.name, member.type_name, value))

    for operation in spec.operations:
        class_body.append(_operation_node(operation))

    class_def = create_class_def(
        name=spec.simple_name,
        bases=list(spec.bases),
        body=class_body,
        decorator_list=[create_dotted_name(decorator) for decorator in spec.decorators],
    )

    module = ast.Module(body=_import_nodes(spec.imports) + [class_def], type_ignores=[])
    return ast.fix_missing_locations(module)


def render_artifact(spec: ArtifactSpec, format_code: bool = True) -> str:
    """
    Render an artifact spec to Python source.

    The returned source always starts with the generated-file header.
    """
    code = ast.unparse(build_module(spec)) + "\n"
    if format_code:
        code = format_python_code_using_black(spec.qualified_name, code)
    return render_header() + "\n" + code


class PythonRenderer:
    """Callable renderer handed to the emitter."""

    def __init__(self, format_code: bool = True):
        self.format_code = format_code

    def __call__(self, spec: ArtifactSpec) -> str:
        return render_artifact(spec, format_code=self.format_code)
