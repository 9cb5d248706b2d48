"""Tests for the shallow Visual Basic and F# front ends."""

from coalesce.frontends.fsharp import FSharpFrontend
from coalesce.frontends.vb import VisualBasicFrontend
from coalesce.uir import annotations as ann
from coalesce.uir.models import ControlFlowKind, Language, NodeType

VB_SOURCE = """Imports System.IO

Module Program
    Function Add(ByVal a As Integer, ByVal b As Integer) As Integer
        Return a + b
    End Function

    Sub Main()
        Dim count As Integer = 5
        On Error GoTo Handler
        GoTo Finish
        GoSub Cleanup
    End Sub
End Module
"""

FSHARP_SOURCE = """namespace App.Core

open System

module Geometry =
    type Shape =
        | Circle of float

    let add (x: int) y = x + y
    let count = 10
"""


# --- Visual Basic ---


def test_vb_root_is_shallow():
    root = VisualBasicFrontend().parse(VB_SOURCE)
    assert root.node_type == NodeType.module()
    assert root.name == "vb_program"
    assert root.metadata.source_language == Language.VISUAL_BASIC
    assert root.metadata.annotations[ann.FIDELITY] == "shallow"
    assert root.metadata.dependencies == ["System.IO"]


def test_vb_constructs_in_source_order():
    root = VisualBasicFrontend().parse(VB_SOURCE)
    names = [n.name for n in root.children]
    assert names == ["Program", "Add", "Main", "count", "Handler", "Finish", "Cleanup"]
    # Flat tree
    assert all(not c.children for c in root.children if c.node_type != NodeType.function())


def test_vb_function_parameters():
    root = VisualBasicFrontend().parse(VB_SOURCE)
    add = next(n for n in root.children if n.name == "Add")
    assert add.node_type == NodeType.function()
    assert add.metadata.annotations[ann.DECLARED_TYPE] == "Integer"
    assert [(p.name, p.metadata.annotations[ann.DECLARED_TYPE]) for p in add.children] == [
        ("a", "Integer"),
        ("b", "Integer"),
    ]
    assert add.source_location.start_line == 4
    assert add.source_location.start_column == 4


def test_vb_dim_keeps_type_and_value():
    root = VisualBasicFrontend().parse(VB_SOURCE)
    count = next(n for n in root.children if n.name == "count")
    assert count.node_type == NodeType.variable()
    assert count.metadata.annotations[ann.DECLARED_TYPE] == "Integer"
    assert count.metadata.annotations[ann.VALUE] == "5"


def test_vb_unstructured_jumps_are_legacy():
    root = VisualBasicFrontend().parse(VB_SOURCE)
    jumps = [n for n in root.children if n.node_type == NodeType.control_flow(ControlFlowKind.GOTO)]
    kinds = [n.metadata.legacy_patterns[0].pattern_type for n in jumps]
    assert kinds == ["on_error_goto", "goto", "gosub"]

    goto = jumps[1].metadata.legacy_patterns[0]
    assert goto.original_construct == "GoTo Finish"
    assert goto.preserve_exactly is False
    assert "structured" in goto.modernization_hint


def test_vb_is_case_insensitive():
    root = VisualBasicFrontend().parse("public class Widget\nend class\n")
    assert root.children[0].node_type == NodeType.klass()
    assert root.children[0].name == "Widget"


# --- F# ---


def test_fsharp_root_and_opens():
    root = FSharpFrontend().parse(FSHARP_SOURCE)
    assert root.name == "fsharp_program"
    assert root.metadata.annotations[ann.FIDELITY] == "shallow"
    assert root.metadata.dependencies == ["System"]


def test_fsharp_declarations():
    root = FSharpFrontend().parse(FSHARP_SOURCE)
    by_name = {n.name: n for n in root.children}
    assert by_name["App.Core"].node_type == NodeType.module()
    assert by_name["Geometry"].node_type == NodeType.module()
    assert by_name["Shape"].node_type == NodeType.klass()
    assert by_name["add"].node_type == NodeType.function()
    assert by_name["count"].node_type == NodeType.variable()
    assert by_name["count"].metadata.annotations[ann.VALUE] == "10"


def test_fsharp_function_parameters():
    root = FSharpFrontend().parse(FSHARP_SOURCE)
    add = next(n for n in root.children if n.name == "add")
    params = [(p.name, p.metadata.annotations.get(ann.DECLARED_TYPE)) for p in add.children]
    assert params == [("x", "int"), ("y", None)]
    assert all("parameter" in p.metadata.semantic_tags for p in add.children)


def test_fsharp_typed_binding_is_not_a_function():
    root = FSharpFrontend().parse("let limit : int = 3\n")
    assert not any(n.node_type == NodeType.function() for n in root.children)
