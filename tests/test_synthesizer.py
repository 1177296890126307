from dsc_helpgen.models import (
    FieldDescriptor,
    FunctionExtractionResult,
    ParameterDescriptor,
)
from dsc_helpgen.synthesizer import build_blocks, index_fields, synthesize


def make_extraction(**functions):
    return FunctionExtractionResult(
        functions={
            name.replace("_", "-"): tuple(
                ParameterDescriptor(p, "System.String", name.replace("_", "-"), i)
                for i, p in enumerate(params)
            )
            for name, params in functions.items()
        }
    )


def test_synthesize_matched_and_unmatched_parameters():
    """Test a described parameter followed by one absent from the schema."""
    extraction = make_extraction(Get_TargetResource=["A", "B"])
    fields = [FieldDescriptor("A", "String", "desc A")]

    text = synthesize(extraction, fields)["Get-TargetResource"]

    assert ".PARAMETER A\n        desc A\n" in text
    assert ".PARAMETER B\n\n" in text
    assert text.index(".PARAMETER A") < text.index(".PARAMETER B")
    assert text.startswith("<#\n    .SYNOPSIS\n        Synopsis here\n")
    assert text.endswith("#>\n")


def test_synthesize_is_idempotent():
    extraction = make_extraction(Get_TargetResource=["A"], Set_TargetResource=["A", "C"])
    fields = [FieldDescriptor("A", "String", "desc A"), FieldDescriptor("C", "UInt32", "")]

    assert synthesize(extraction, fields) == synthesize(extraction, fields)


def test_synthesize_preserves_function_order():
    extraction = make_extraction(Set_TargetResource=[], Get_TargetResource=["A"])
    assert list(synthesize(extraction, [])) == ["Set-TargetResource", "Get-TargetResource"]


def test_synthesize_matching_is_case_sensitive():
    extraction = make_extraction(Get_TargetResource=["name"])
    fields = [FieldDescriptor("Name", "String", "Widget name.")]

    text = synthesize(extraction, fields)["Get-TargetResource"]
    assert "Widget name." not in text


def test_duplicate_field_names_first_wins():
    fields = [
        FieldDescriptor("Name", "String", "First."),
        FieldDescriptor("Name", "String", "Second."),
    ]
    assert index_fields(fields)["Name"].description == "First."

    blocks = build_blocks(make_extraction(Get_TargetResource=["Name"]), fields)
    assert blocks["Get-TargetResource"].entries == (("Name", "First."),)


def test_synthesize_empty_extraction():
    assert synthesize(FunctionExtractionResult(), []) == {}
