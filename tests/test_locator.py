import pytest
from pathlib import Path
from unittest.mock import MagicMock

from dsc_helpgen.catalog import CatalogEntry, ResourceCatalog
from dsc_helpgen.errors import AmbiguousOrMissingPairError, NotFoundError
from dsc_helpgen.locator import resolve


def assert_pair(files, directory, name="Widget"):
    assert Path(files.module_path) == directory / f"{name}.psm1"
    assert Path(files.schema_path) == directory / f"{name}.schema.mof"
    assert Path(files.module_path).is_file()
    assert Path(files.schema_path).is_file()


# --- Direct paths ---


def test_resolve_module_path(widget_dir):
    files = resolve(str(widget_dir / "Widget.psm1"))
    assert_pair(files, widget_dir)


def test_resolve_schema_path(widget_dir):
    files = resolve(str(widget_dir / "Widget.schema.mof"))
    assert_pair(files, widget_dir)


def test_resolve_missing_file_path(tmp_path):
    with pytest.raises(NotFoundError, match="does not exist"):
        resolve(str(tmp_path / "Ghost.psm1"))


def test_resolve_module_without_schema(write_resource):
    directory = write_resource(schema=None)
    with pytest.raises(AmbiguousOrMissingPairError):
        resolve(str(directory / "Widget.psm1"))


# --- Directories ---


def test_resolve_directory(widget_dir):
    assert_pair(resolve(str(widget_dir)), widget_dir)


def test_resolve_directory_with_two_schemas(widget_dir):
    """Test that a second schema file makes the directory ambiguous."""
    (widget_dir / "Other.schema.mof").write_text("class X { };", encoding="utf-8")
    with pytest.raises(AmbiguousOrMissingPairError, match="found 2 and 1"):
        resolve(str(widget_dir))


def test_resolve_directory_without_module(write_resource):
    directory = write_resource(module=None)
    with pytest.raises(AmbiguousOrMissingPairError, match="found 1 and 0"):
        resolve(str(directory))


# --- Catalog names ---


def test_resolve_catalog_name_uses_catalog():
    catalog = MagicMock()
    catalog.lookup.return_value = None
    with pytest.raises(NotFoundError, match="Could not find"):
        resolve("NoSuchResource", catalog=catalog)
    catalog.lookup.assert_called_once_with("NoSuchResource")


def test_resolve_catalog_name_derives_schema(widget_dir):
    catalog = MagicMock()
    catalog.lookup.return_value = CatalogEntry("Widget", str(widget_dir / "Widget.psm1"))

    assert_pair(resolve("Widget", catalog=catalog), widget_dir)


def test_resolve_catalog_entry_without_schema(write_resource):
    directory = write_resource(schema=None)
    catalog = MagicMock()
    catalog.lookup.return_value = CatalogEntry("Widget", str(directory / "Widget.psm1"))

    with pytest.raises(AmbiguousOrMissingPairError, match="is registered at"):
        resolve("Widget", catalog=catalog)


def test_catalog_finds_module_embedded_resource(tmp_path, write_resource):
    """Test the <module>/DSCResources/<Name> layout."""
    directory = write_resource(folder="WidgetDsc/1.0.0/DSCResources/Widget")

    entry = ResourceCatalog([str(tmp_path)]).lookup("Widget")

    assert entry is not None
    assert Path(entry.module_path) == (directory / "Widget.psm1").resolve()


def test_catalog_finds_direct_child_folder(tmp_path, widget_dir):
    entry = ResourceCatalog([str(tmp_path), str(tmp_path / "missing")]).lookup("Widget")
    assert Path(entry.module_path) == (widget_dir / "Widget.psm1").resolve()


def test_catalog_unknown_name(tmp_path, widget_dir):
    assert ResourceCatalog([str(tmp_path)]).lookup("Gadget") is None


def test_catalog_ambiguous_name(tmp_path, write_resource):
    write_resource(folder="ModA/DSCResources/Widget")
    write_resource(folder="ModB/DSCResources/Widget")

    with pytest.raises(AmbiguousOrMissingPairError, match="more than one module"):
        ResourceCatalog([str(tmp_path)]).lookup("Widget")


def test_catalog_defaults_to_environment(monkeypatch, tmp_path, widget_dir):
    monkeypatch.setenv("DSC_RESOURCE_PATH", str(tmp_path))
    files = resolve("Widget")
    assert_pair(files, widget_dir.resolve())


@pytest.mark.parametrize("identifier", ["", "   "])
def test_resolve_blank_identifier(identifier, monkeypatch, widget_dir):
    """A blank identifier never falls back to the working directory."""
    monkeypatch.chdir(widget_dir)
    with pytest.raises(NotFoundError, match="Could not find"):
        resolve(identifier, catalog=ResourceCatalog(search_paths=[]))
