import pytest

from dsc_helpgen.models import (
    CommentBlock,
    FunctionExtractionResult,
    ParameterDescriptor,
)

# --- Tests for CommentBlock ---


def test_comment_block_layout():
    """Test the exact text of a block with a described and an undescribed parameter."""
    block = CommentBlock("Get-TargetResource", (("Name", "Widget name."), ("Id", "")))

    expected = (
        "<#\n"
        "    .SYNOPSIS\n"
        "        Synopsis here\n"
        "\n"
        "    .PARAMETER Name\n"
        "        Widget name.\n"
        "\n"
        "    .PARAMETER Id\n"
        "\n"
        "\n"
        "#>\n"
    )
    assert block.text == expected


def test_comment_block_without_parameters():
    """Test that a parameterless function still gets the synopsis section."""
    block = CommentBlock("Get-TargetResource")
    assert block.text == "<#\n    .SYNOPSIS\n        Synopsis here\n\n#>\n"


def test_comment_block_lines_have_no_trailing_whitespace():
    block = CommentBlock("Set-TargetResource", (("Ensure", ""), ("Tags", "Tags.")))
    assert all(line == line.rstrip() for line in block.lines)


# --- Tests for FunctionExtractionResult ---


def test_extraction_result_distinguishes_parameterless_from_missing():
    """A found function without parameters is a key; a missing one is not."""
    param = ParameterDescriptor("Name", "System.String", "Get-TargetResource", 0)
    result = FunctionExtractionResult(
        functions={"Get-TargetResource": (param,), "Set-TargetResource": ()}
    )

    assert list(result) == ["Get-TargetResource", "Set-TargetResource"]
    assert len(result) == 2
    assert result.is_parameterless("Set-TargetResource") is True
    assert result.is_parameterless("Get-TargetResource") is False
    assert "Test-TargetResource" not in result
    assert result.is_parameterless("Test-TargetResource") is False
    with pytest.raises(KeyError):
        result.parameters("Test-TargetResource")
