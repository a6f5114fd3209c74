from dataclasses import dataclass
from typing import Optional

import pytest

from rest_resource.resource import (
    DecoratorDriver, FileCache, MemoryCache, MetadataNotFoundError, ResourceError,
    ResourceMetadataFactory, resource,
)

from assets import Tag, User, Widget


def test_builds_metadata_from_decorator(factory):
    metadata = factory.get_metadata_for_class(Widget)

    assert metadata.get_controller_name() == "WidgetController"
    assert metadata.get_input_filter_name() == "WidgetFilter"
    assert metadata.get_hydrator_name() == "WidgetHydrator"
    assert metadata.get_class_metadata().get_identifier() == ["id"]
    assert metadata.get_reflection_class().get_class() is Widget


def test_returns_same_instance(factory):
    assert factory.get_metadata_for_class(Widget) is factory.get_metadata_for_class("assets.Widget")


def test_collection_metadata_inherits_unset_options(factory):
    collection = factory.get_metadata_for_class(Widget).get_collection_metadata()

    assert collection.get_controller_name() == "WidgetListController"
    assert collection.get_hydrator_name() == "WidgetHydrator"
    assert collection.get_input_filter_name() == "WidgetFilter"
    assert collection.get_class_metadata() is factory.get_metadata_for_class(Widget).get_class_metadata()


def test_routable_association_gets_target_metadata(factory):
    metadata = factory.get_metadata_for_class(Widget)

    assert metadata.has_association_metadata("owner")
    assert metadata.get_association_metadata("owner") is factory.get_metadata_for_class(User)


def test_non_routable_association_is_absent(factory):
    metadata = factory.get_metadata_for_class(Widget)

    assert metadata.has_association_metadata("tags") is False
    assert metadata.get_association_metadata("tags") is None
    assert "tags" in metadata.property_metadata["associations"]


def test_cyclic_associations_share_instances(factory):
    widget = factory.get_metadata_for_class(Widget)
    user = widget.get_association_metadata("owner")

    assert user.get_association_metadata("widgets") is widget


def test_unmapped_class_raises(factory):
    with pytest.raises(MetadataNotFoundError):
        factory.get_metadata_for_class(Tag)

    assert factory.has_metadata_for_class(Tag) is False
    assert factory.has_metadata_for_class(Widget) is True


def test_unknown_association_raises(factory):
    @resource(controller="BrokenController", associations={"nothing": {}})
    @dataclass
    class Broken:
        id: int = 0
        owner: Optional[User] = None

    with pytest.raises(ResourceError):
        factory.get_metadata_for_class(Broken)

    with pytest.raises(ResourceError):
        factory.get_metadata_for_class(Broken)


def test_built_graph_is_cached_once_complete():
    cache = MemoryCache()
    factory = ResourceMetadataFactory(DecoratorDriver(), cache=cache)

    widget = factory.get_metadata_for_class(Widget)

    assert cache.load("assets.Widget") is widget
    assert cache.load("assets.User") is widget.get_association_metadata("owner")


def test_file_cache_shared_between_factories(tmp_path):
    ResourceMetadataFactory(DecoratorDriver(), cache=FileCache(tmp_path)).get_metadata_for_class(Widget)
    factory = ResourceMetadataFactory(DecoratorDriver(), cache=FileCache(tmp_path))

    widget = factory.get_metadata_for_class(Widget)

    assert widget.get_controller_name() == "WidgetController"
    assert widget.get_class_metadata().get_reflection_class().get_class() is Widget
    assert widget.get_association_metadata("owner") is factory.get_metadata_for_class(User)
    assert widget.get_association_metadata("owner").get_association_metadata("widgets") is widget


def test_debug_rebuilds_stale_cache_entries(tmp_path):
    cache = FileCache(tmp_path)
    ResourceMetadataFactory(DecoratorDriver(), cache=cache).get_metadata_for_class(Widget)

    cached = cache.load("assets.Widget")
    assert cached.file_resources[0].endswith("assets.py")
    # Pretend the entry was built before the source file was last modified
    cached.created_at = 0.0
    cache.save(cached)

    factory = ResourceMetadataFactory(DecoratorDriver(), cache=cache, debug=True)
    widget = factory.get_metadata_for_class(Widget)

    assert widget.created_at > 0.0
    assert cache.load("assets.Widget").created_at > 0.0
    assert widget.get_controller_name() == "WidgetController"


def test_rebuilt_parent_replaces_cached_copy_in_nested_graph(tmp_path):
    ResourceMetadataFactory(DecoratorDriver(), cache=FileCache(tmp_path)).get_metadata_for_class(Widget)
    (tmp_path / "assets.Widget.cache.pkl").unlink()

    factory = ResourceMetadataFactory(DecoratorDriver(), cache=FileCache(tmp_path))
    widget = factory.get_metadata_for_class(Widget)
    user = widget.get_association_metadata("owner")

    assert user is factory.get_metadata_for_class(User)
    assert user.get_association_metadata("widgets") is widget

    # The graph written back is consistent too
    reloaded = ResourceMetadataFactory(DecoratorDriver(), cache=FileCache(tmp_path)).get_metadata_for_class(Widget)
    assert reloaded.get_association_metadata("owner").get_association_metadata("widgets") is reloaded


def test_debug_rebuilds_graph_with_stale_nested_entry(tmp_path):
    cache = FileCache(tmp_path)
    ResourceMetadataFactory(DecoratorDriver(), cache=cache).get_metadata_for_class(Widget)

    cached_user = cache.load("assets.User")
    cached_user.created_at = 0.0
    cache.save(cached_user)
    # The Widget entry embeds its own copy of User; make that one stale as well
    cached_widget = cache.load("assets.Widget")
    cached_widget.get_association_metadata("owner").created_at = 0.0
    cache.save(cached_widget)

    factory = ResourceMetadataFactory(DecoratorDriver(), cache=cache, debug=True)
    widget = factory.get_metadata_for_class(Widget)

    user = widget.get_association_metadata("owner")
    assert user.created_at > 0.0
    assert user.get_association_metadata("widgets") is widget


def test_has_metadata_for_unresolvable_name(factory):
    assert factory.has_metadata_for_class("assets.Missing") is False
    assert factory.has_metadata_for_class("no_such_module.Thing") is False
