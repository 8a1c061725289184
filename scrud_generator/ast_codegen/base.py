import ast
import logging
from typing import Any, List, Optional

from scrud_generator.domain.specs import Call, Expression, Literal, Ref


logger = logging.getLogger(__name__)


def create_docstring(content: str) -> ast.Expr:
    """Creates an AST node for a docstring."""
    return ast.Expr(value=ast.Constant(value=content))


def create_import(module: str, names: Optional[List[str]] = None) -> ast.Import | ast.ImportFrom:
    """Creates an AST node for an import statement."""
    if names:
        return ast.ImportFrom(
            module=module,
            names=[ast.alias(name=name) for name in names],
            level=0
        )
    return ast.Import(names=[ast.alias(name=module)])


def create_dotted_name(dotted: str) -> ast.expr:
    """Creates a Name or nested Attribute node for ``a.b.c``."""
    parts = dotted.split(".")
    node: ast.expr = ast.Name(id=parts[0], ctx=ast.Load())
    for part in parts[1:]:
        node = ast.Attribute(value=node, attr=part, ctx=ast.Load())
    return node


def create_constant(value: Any) -> ast.expr:
    """Creates a Constant node, or a Tuple of constants for (nested) tuples."""
    if isinstance(value, (tuple, list)):
        return ast.Tuple(elts=[create_constant(item) for item in value], ctx=ast.Load())
    return ast.Constant(value=value)


def create_keyword(arg: str, value: ast.expr) -> ast.keyword:
    """Creates an AST keyword argument."""
    return ast.keyword(arg=arg, value=value)


def create_call(func_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a call of a (dotted) callable."""
    return ast.Call(
        func=create_dotted_name(func_name),
        args=args or [],
        keywords=keywords or []
    )


def create_expression(expression: Expression) -> ast.expr:
    """Converts a spec expression into an AST expression."""
    if isinstance(expression, Ref):
        return create_dotted_name(expression.name)
    if isinstance(expression, Literal):
        return create_constant(expression.value)
    if isinstance(expression, Call):
        return create_call(
            expression.func,
            args=[create_expression(arg) for arg in expression.args],
            keywords=[create_keyword(name, create_expression(value)) for name, value in expression.kwargs],
        )
    raise TypeError(f"Unsupported expression: {expression!r}")


def create_annotation(type_name: str) -> ast.expr:
    """Parses a type expression such as ``Optional[List[OrderDto]]``."""
    return ast.parse(type_name, mode="eval").body


def create_assign(target: str, value: ast.expr) -> ast.Assign:
    """Creates an AST node for an assignment."""
    return ast.Assign(
        targets=[ast.Name(id=target, ctx=ast.Store())],
        value=value
    )


def create_ann_assign(target: str, annotation: str, value: Optional[ast.expr] = None) -> ast.AnnAssign:
    """Creates an AST node for an annotated assignment."""
    return ast.AnnAssign(
        target=ast.Name(id=target, ctx=ast.Store()),
        annotation=create_annotation(annotation),
        value=value,
        simple=1
    )


def create_arg(name: str, annotation: Optional[str] = None) -> ast.arg:
    return ast.arg(arg=name, annotation=create_annotation(annotation) if annotation else None)


def create_function_def(
    name: str,
    args: List[ast.arg],
    body: List[ast.stmt],
    defaults: Optional[List[ast.expr]] = None,
    returns: Optional[str] = None,
    decorator_list: Optional[List[ast.expr]] = None
) -> ast.FunctionDef:
    """Creates an AST node for a method definition (``self`` is prepended)."""
    return ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg="self")] + args,
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults or []
        ),
        body=body,
        decorator_list=decorator_list or [],
        returns=create_annotation(returns) if returns else None,
        type_comment=None,
        type_params=[]
    )


def create_class_def(name: str, bases: List[str], body: List[ast.stmt], decorator_list: Optional[List[ast.expr]] = None) -> ast.ClassDef:
    """Creates an AST node for a class definition."""
    return ast.ClassDef(
        name=name,
        bases=[create_dotted_name(base) for base in bases],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=decorator_list or [],
        type_params=[]
    )
