import pytest

from dsc_helpgen.syntax import (
    FunctionDefinitionNode,
    ParamBlockNode,
    ScriptBlockNode,
    find_all,
    is_function_named,
    parse,
)
from conftest import WIDGET_MODULE


def functions_in(source):
    tree, errors = parse(source)
    assert errors == []
    return [n for n in find_all(tree, lambda n: isinstance(n, FunctionDefinitionNode))]


# --- Function discovery ---


def test_parse_finds_functions_in_document_order():
    """Test that all lifecycle functions of a typical module are found in order."""
    names = [f.name for f in functions_in(WIDGET_MODULE)]
    assert names == ["Get-TargetResource", "Set-TargetResource", "Test-TargetResource"]


def test_param_block_types_attributes_and_defaults():
    """Test parameter extraction from a param() block with attributes."""
    set_fn = functions_in(WIDGET_MODULE)[1]
    params = set_fn.param_block.parameters

    assert [(p.name, p.declared_type) for p in params] == [
        ("Name", "System.String"),
        ("Ensure", "System.String"),
        ("Tags", "System.String[]"),
    ]
    assert params[0].attributes == ("Parameter(Mandatory = $true)",)
    assert params[1].attributes == ("Parameter()", "ValidateSet('Present', 'Absent')")
    assert params[1].default == "'Present'"
    assert params[2].attributes == ()
    assert params[2].default is None


def test_inline_parameter_list():
    """Test the `function Name($a, [int] $b = 2) {}` form."""
    (fn,) = functions_in("function Get-Thing($Path, [int] $Depth = 2) { }\n")

    assert fn.inline_parameters is not None
    assert [(p.name, p.declared_type, p.default) for p in fn.param_block.parameters] == [
        ("Path", "Object", None),
        ("Depth", "int", "2"),
    ]


def test_function_without_param_block():
    (fn,) = functions_in("function Get-TargetResource\n{\n    'nothing'\n}\n")
    assert fn.param_block is None


def test_function_with_empty_param_block():
    (fn,) = functions_in("function Get-TargetResource { param() }")
    assert isinstance(fn.param_block, ParamBlockNode)
    assert fn.param_block.parameters == []


def test_keywords_in_comments_and_strings_are_ignored():
    """Test that `function` inside comments, strings and here-strings is not a definition."""
    source = (
        "# function Fake-Comment {\n"
        "$text = 'function Fake-String {'\n"
        '$here = @"\n'
        "function Fake-HereString {\n"
        '"@\n'
        "function Real-One { }\n"
    )
    (fn,) = functions_in(source)
    assert fn.name == "Real-One"
    assert (fn.line, fn.column) == (6, 1)


def test_subexpression_inside_double_quoted_string():
    source = 'function Get-X { Write-Verbose "Value: $("inner") and }" }\n'
    (fn,) = functions_in(source)
    assert fn.name == "Get-X"


def test_nested_functions_and_script_blocks():
    """Test document-order traversal and that nested param blocks are not borrowed."""
    source = (
        "function Outer {\n"
        "    function Inner { param($a) }\n"
        "    $sb = { param($b) }\n"
        "}\n"
        "function After { }\n"
    )
    fns = functions_in(source)
    assert [f.name for f in fns] == ["Outer", "Inner", "After"]
    assert (fns[1].line, fns[1].column) == (2, 5)
    assert fns[0].param_block is None

    tree, _ = parse(source)
    blocks = list(find_all(tree, lambda n: isinstance(n, ParamBlockNode)))
    assert [b.parameters[0].name for b in blocks] == ["a", "b"]


def test_hashtable_key_named_function_is_not_a_definition():
    source = "$h = @{\n    function = 'x'\n}\n"
    tree, errors = parse(source)
    assert errors == []
    assert list(find_all(tree, lambda n: isinstance(n, FunctionDefinitionNode))) == []


def test_filter_keyword_and_scope_prefix():
    fns = functions_in("filter Get-Even { param($n) }\nfunction script:Get-Helper { }\n")
    assert [(f.keyword, f.name) for f in fns] == [("filter", "Get-Even"), ("function", "Get-Helper")]


def test_backtick_line_continuation_in_param_block():
    source = "function Get-TargetResource\n{\n    param ($Name, `\n        $Id)\n}\n"
    (fn,) = functions_in(source)
    assert [p.name for p in fn.param_block.parameters] == ["Name", "Id"]


def test_find_all_with_name_predicate():
    tree, _ = parse(WIDGET_MODULE)
    found = list(find_all(tree, is_function_named({"Test-TargetResource", "Nope"})))
    assert [f.name for f in found] == ["Test-TargetResource"]


def test_root_is_script_block_and_keeps_comments():
    tree, _ = parse(WIDGET_MODULE)
    assert isinstance(tree, ScriptBlockNode)
    assert tree.kind == "script_block"
    assert any(c.text.startswith("<#") for c in tree.comments)


# --- Parse errors ---


@pytest.mark.parametrize(
    "source, fragment",
    [
        ("function Get-TargetResource { $x = 'open }\n", "Missing closing quote"),
        ("function Get-TargetResource { param($Name)\n", "Missing closing '}'"),
        ("function Get-TargetResource ( ]\n", "Missing closing ')'"),
        ("function { }\n", "Missing name after 'function'"),
        ("function Get-TargetResource\n", "Missing function body"),
        ("function F { param([string]) }\n", "Missing parameter name"),
        ("function F { param($a,) }\n", "Missing parameter declaration"),
        ("<# never closed\nfunction F { }\n", "Missing closing '#>'"),
        ('$s = @"\nno terminator\n', "Missing here-string terminator"),
        ("}\n", "Unexpected token '}'"),
    ],
)
def test_parse_errors(source, fragment):
    """Test that malformed sources report a descriptive error."""
    _, errors = parse(source)
    assert errors, f"expected a parse error for {source!r}"
    assert any(fragment in error.message for error in errors)


def test_parse_error_str_includes_position():
    _, errors = parse("function F { $x = 'open }\n")
    assert str(errors[0]).startswith("line 1, column 19:")
