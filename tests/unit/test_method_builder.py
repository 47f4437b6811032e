"""Unit tests for building OpenRPC methods from handlers."""

import contextvars
from typing import Optional

import pytest

from openrpc_document.callback import Callback
from openrpc_document.declarations import DeclarationInfo, FieldGroup, NamedField
from openrpc_document.exceptions import (
    ArityMismatchError,
    DeclarationError,
    MethodBuildError,
    NonDocumentableHandlerError,
    SchemaMutationError,
)
from openrpc_document.method_builder import (
    bounded_zip,
    build_content_descriptor,
    build_method,
    make_method,
    signature_description,
)
from openrpc_document.options import ParseOptions, ethereum_parse_options


def add(ctx: contextvars.Context, a: int, b: int) -> tuple[int, Optional[Exception]]:
    """Add two integers.

    Args:
        ctx: request context
        a: left operand
        b: right operand

    Returns:
        the sum
    """
    return a + b, None


def scale(value: float, factor: int, label: str) -> str:
    """Scale a value and label it."""
    return f"{label}={value * factor}"


def notify(message: str) -> None:
    """Fire and forget."""


def split(text: str) -> tuple[str, str]:
    head, _, tail = text.partition(" ")
    return head, tail


def legacy_sum(a: int, b: int) -> int:
    """Old addition.

    Deprecated: use add instead.
    """
    return a + b


def broken(x: "MissingType") -> int:  # noqa: F821
    return 0


def _callback(handler, name=None):
    return Callback(name=name or handler.__name__, handler=handler)


class TestBuildMethodShape:
    def test_params_follow_positional_order_without_skip(self):
        method = build_method(ParseOptions(), "scale", _callback(scale))

        assert [p.name for p in method.params] == ["value", "factor", "label"]
        assert [p.description for p in method.params] == ["float", "int", "str"]
        assert all(p.required for p in method.params)
        assert method.result.description == "str"
        assert method.result.schema_ == {"type": "string"}

    def test_result_is_first_return_value(self):
        method = build_method(ParseOptions(), "split", _callback(split))

        assert method.result.name == "str"
        assert method.result.schema_ == {"type": "string"}
        assert method.description == "`(str) -> (str, str)`"

    def test_zero_returns_gives_null_result(self):
        method = build_method(ParseOptions(), "notify", _callback(notify))

        assert method.result.name == "Null"
        assert method.result.schema_ == {"type": "null"}
        assert method.description == "`(str) -> None`"

    def test_summary_external_docs_and_deprecation(self):
        method = build_method(ParseOptions(), "scale", _callback(scale))

        assert method.name == "scale"
        assert method.summary == "Scale a value and label it."
        assert method.external_docs.url.startswith("file://")
        assert method.external_docs.url.endswith("test_method_builder.py")
        assert (
            method.external_docs.description
            == f"line={scale.__code__.co_firstlineno}"
        )
        assert method.deprecated is False

    def test_deprecated_marker_in_docstring(self):
        method = build_method(ParseOptions(), "legacy_sum", _callback(legacy_sum))

        assert method.deprecated is True
        assert method.summary == "Old addition."

    def test_serialized_shape(self):
        method = build_method(ParseOptions(), "scale", _callback(scale))
        payload = method.model_dump(by_alias=True)

        assert set(payload) == {
            "name",
            "summary",
            "description",
            "externalDocs",
            "params",
            "result",
            "deprecated",
        }
        assert set(payload["externalDocs"]) == {"description", "url"}
        assert set(payload["params"][0]) == {
            "name",
            "summary",
            "description",
            "required",
            "schema",
        }
        assert payload["params"][1]["schema"] == {"type": "integer"}


class TestSkipAndMutators:
    def test_skip_first_parameter_only(self):
        options = ParseOptions(skip=lambda is_param, index, cd: is_param and index == 0)

        method = build_method(options, "scale", _callback(scale))

        assert [p.name for p in method.params] == ["factor", "label"]
        assert method.result.description == "str"

    def test_skipping_every_result_substitutes_null(self):
        options = ParseOptions(skip=lambda is_param, index, cd: not is_param)

        method = build_method(options, "split", _callback(split))

        assert len(method.params) == 1
        assert method.result.schema_ == {"type": "null"}

    def test_mutators_compose_in_order(self):
        def first(is_param, index, descriptor):
            descriptor.description += "[one]"

        def second(is_param, index, descriptor):
            assert descriptor.description.endswith("[one]")
            descriptor.description += "[two]"

        options = ParseOptions(content_descriptor_mutators=[first, second])
        method = build_method(options, "scale", _callback(scale))

        assert [p.description for p in method.params] == [
            "float[one][two]",
            "int[one][two]",
            "str[one][two]",
        ]
        assert method.result.description == "str[one][two]"

    def test_mutators_see_every_return_position(self):
        seen = []

        def record(is_param, index, descriptor):
            seen.append((is_param, index, descriptor.name))

        options = ParseOptions(content_descriptor_mutators=[record])
        build_method(options, "split", _callback(split))

        assert seen == [(True, 0, "text"), (False, 0, "str"), (False, 1, "str")]

    def test_skipped_positions_are_not_mutated(self):
        seen = []
        options = ParseOptions(
            skip=lambda is_param, index, cd: is_param and index == 1,
            content_descriptor_mutators=[lambda p, i, cd: seen.append((p, i))],
        )

        build_method(options, "scale", _callback(scale))

        assert (True, 1) not in seen
        assert (True, 0) in seen and (True, 2) in seen

    def test_schema_mutators_run_before_skip(self):
        order = []

        def tag_schema(schema):
            order.append("schema")
            schema["x-tagged"] = True

        def skip(is_param, index, descriptor):
            order.append("skip")
            assert descriptor.schema_["x-tagged"] is True
            return False

        options = ParseOptions(skip=skip, schema_mutators=[tag_schema])
        build_method(options, "notify", _callback(notify))

        assert order == ["schema", "skip"]

    def test_failing_schema_mutator_aborts_build(self):
        def reject(schema):
            raise ValueError("unsupported schema")

        options = ParseOptions(schema_mutators=[reject])

        with pytest.raises(MethodBuildError) as exc_info:
            build_method(options, "scale", _callback(scale))

        assert isinstance(exc_info.value.cause, SchemaMutationError)
        assert "unsupported schema" in exc_info.value.message
        assert exc_info.value.method == "scale"

    def test_failing_mutator_leaves_no_descriptor(self):
        def partial_then_fail(schema):
            schema["type"] = "mutated"
            raise RuntimeError("halfway")

        options = ParseOptions(schema_mutators=[partial_then_fail])
        field = NamedField("value", "", FieldGroup(("value",)))

        with pytest.raises(SchemaMutationError):
            build_content_descriptor(options, int, field)

    def test_failing_descriptor_mutator_is_a_build_error(self):
        def lookup(is_param, index, descriptor):
            if descriptor.name == "factor":
                raise KeyError("x")

        options = ParseOptions(content_descriptor_mutators=[lookup])

        with pytest.raises(MethodBuildError) as exc_info:
            build_method(options, "scale", _callback(scale))

        assert isinstance(exc_info.value.cause, KeyError)
        assert exc_info.value.method == "scale"
        assert "scale" in exc_info.value.dump

    def test_failing_skip_predicate_is_a_build_error(self):
        def skip(is_param, index, descriptor):
            raise RuntimeError("bad predicate")

        with pytest.raises(MethodBuildError) as exc_info:
            build_method(ParseOptions(skip=skip), "notify", _callback(notify))

        assert "bad predicate" in exc_info.value.message


class TestEthereumScenario:
    def test_leading_context_is_skipped(self):
        method = build_method(ethereum_parse_options(), "eth_add", _callback(add))

        assert [p.name for p in method.params] == ["a", "b"]
        assert [p.summary for p in method.params] == ["left operand", "right operand"]
        assert method.result.description == "int"
        assert method.result.schema_ == {"type": "integer"}
        assert method.result.summary == "the sum"
        assert method.summary == "Add two integers."
        assert method.description.startswith(
            "`(contextvars.Context, int, int) -> (int, "
        )

    def test_builds_are_deterministic(self):
        callback = _callback(add)
        options = ethereum_parse_options()

        first = build_method(options, "eth_add", callback)
        second = build_method(options, "eth_add", callback)

        assert first == second
        assert first is not second
        assert first.model_dump(by_alias=True) == second.model_dump(by_alias=True)


class TestErrorClassification:
    def test_exec_generated_handler_is_not_documentable(self):
        namespace = {}
        exec("def generated(x: int) -> int:\n    return x\n", namespace)

        with pytest.raises(NonDocumentableHandlerError) as exc_info:
            build_method(ParseOptions(), "generated", _callback(namespace["generated"]))

        assert not isinstance(exc_info.value, MethodBuildError)
        assert exc_info.value.handler_name == "generated"

    def test_builtin_handler_is_not_documentable(self):
        with pytest.raises(NonDocumentableHandlerError):
            build_method(ParseOptions(), "len", Callback(name="len", handler=len))

    def test_auto_generated_declaration_is_not_documentable(self):
        callback = Callback(
            name="scale",
            handler=scale,
            declaration=DeclarationInfo(auto_generated=True),
        )

        with pytest.raises(NonDocumentableHandlerError):
            build_method(ParseOptions(), "scale", callback)

    def test_unresolvable_annotation_is_a_build_error(self):
        with pytest.raises(MethodBuildError) as exc_info:
            build_method(ParseOptions(), "broken", _callback(broken))

        assert isinstance(exc_info.value.cause, DeclarationError)
        assert "broken" in exc_info.value.dump

    def test_too_few_declared_fields_is_an_arity_error(self):
        callback = Callback(
            name="scale",
            handler=scale,
            declaration=DeclarationInfo(params=(FieldGroup(("value",)),)),
        )

        with pytest.raises(MethodBuildError) as exc_info:
            build_method(ParseOptions(), "scale", callback)

        cause = exc_info.value.cause
        assert isinstance(cause, ArityMismatchError)
        assert cause.kind == "parameter"
        assert cause.index == 1
        assert cause.available == 1


class TestMakeMethod:
    def test_explicit_declaration_and_types(self):
        declaration = DeclarationInfo(
            params=(FieldGroup(("a", "b"), "operands"),),
            results=(FieldGroup(("total",), "sum of operands"),),
            doc="Sum two numbers.\n\nLonger text.",
            file="/srv/api.py",
            line=12,
        )

        method = make_method(ParseOptions(), "sum", declaration, [int, int], [int])

        assert [p.name for p in method.params] == ["a", "b"]
        assert [p.summary for p in method.params] == ["operands", "operands"]
        assert method.result.name == "total"
        assert method.summary == "Sum two numbers."
        assert method.external_docs.url == "file:///srv/api.py"
        assert method.external_docs.description == "line=12"

    def test_extra_declared_fields_are_ignored(self):
        declaration = DeclarationInfo(
            params=(FieldGroup(("a", "b", "c")),),
            results=(FieldGroup(("x",)), FieldGroup(("y",))),
        )

        method = make_method(ParseOptions(), "m", declaration, [int], [])

        assert [p.name for p in method.params] == ["a"]
        assert method.result.name == "Null"


def test_bounded_zip_pairs_by_index():
    fields = [NamedField(n, "", FieldGroup((n,))) for n in ("a", "b", "c")]

    pairs = bounded_zip("parameter", [int, str], fields)

    assert [(i, tp, f.name) for i, tp, f in pairs] == [(0, int, "a"), (1, str, "b")]


def test_bounded_zip_reports_missing_field():
    fields = [NamedField("a", "", FieldGroup(("a",)))]

    with pytest.raises(ArityMismatchError) as exc_info:
        bounded_zip("result", [int, str, bool], fields)

    assert exc_info.value.to_dict()["data"] == {
        "kind": "result",
        "index": 1,
        "available": 1,
    }


def test_signature_description_single_return():
    assert signature_description([int, str], [bool]) == "`(int, str) -> bool`"
