import pytest
import sys
import os

# Ensure src is in path so we can import dsc_helpgen
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from dsc_helpgen.messages import get_messages  # noqa: E402

WIDGET_MODULE = """\
$script:localizedData = Get-LocalizedData -ResourceName 'Widget'

<#
    .SYNOPSIS
        Outdated synopsis.
#>
function Get-TargetResource
{
    [CmdletBinding()]
    [OutputType([System.Collections.Hashtable])]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name,

        [Parameter()]
        [System.UInt32]
        $Id
    )

    Write-Verbose -Message ($script:localizedData.GetWidget -f $Name)

    return @{
        Name = $Name
        Id   = $Id
    }
}

function Set-TargetResource
{
    [CmdletBinding()]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name,

        [Parameter()]
        [ValidateSet('Present', 'Absent')]
        [System.String]
        $Ensure = 'Present',

        [System.String[]]
        $Tags
    )

    Write-Verbose -Message "Setting widget '$Name' to $($Ensure) { not a block"
}

function Test-TargetResource
{
    [CmdletBinding()]
    [OutputType([System.Boolean])]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name,

        [Parameter()]
        [ValidateSet('Present', 'Absent')]
        [System.String]
        $Ensure = 'Present',

        [System.String[]]
        $Tags
    )

    $state = Get-TargetResource -Name $Name
    return ($state.Name -eq $Name)
}

Export-ModuleMember -Function *-TargetResource
"""

WIDGET_SCHEMA = """\
[ClassVersion("1.0.0.0"), FriendlyName("Widget")]
class MSFT_Widget : OMI_BaseResource
{
    [Key, Description("Widget name.")] String Name;
    [Write, Description("Widget id.")] UInt32 Id;
    [Write, Description("Whether the widget should exist."), ValueMap{"Present","Absent"}, Values{"Present","Absent"}] String Ensure;
    [Write, Description("Tags applied to the widget.")] String Tags[];
};
"""


@pytest.fixture
def messages():
    """The default (en-US) message table."""
    return get_messages()


@pytest.fixture
def write_resource(tmp_path):
    """
    Factory writing a <name>.psm1 / <name>.schema.mof pair into its own folder.
    Pass None for either text to skip that file.
    """

    def _write(name="Widget", module=WIDGET_MODULE, schema=WIDGET_SCHEMA, folder=None):
        directory = tmp_path / (folder or name)
        directory.mkdir(parents=True, exist_ok=True)
        if module is not None:
            (directory / f"{name}.psm1").write_text(module, encoding="utf-8")
        if schema is not None:
            (directory / f"{name}.schema.mof").write_text(schema, encoding="utf-8")
        return directory

    return _write


@pytest.fixture
def widget_dir(write_resource):
    """A folder holding the Widget module and schema."""
    return write_resource()
