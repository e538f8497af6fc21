from docfence.utils.slug import AnchorAllocator, slugify


def test_slugify_matches_heading_style():
    assert slugify("Foo") == "foo"
    assert slugify("Re-Entrancy & `call()`") == "re-entrancy--call"
    assert slugify("Using `tx.origin` for auth") == "using-txorigin-for-auth"
    assert slugify("See [the docs](http://x.y)") == "see-the-docs"
    assert slugify("snake_case names") == "snake_case-names"


def test_allocator_suffixes_repeats_in_order():
    anchors = AnchorAllocator()
    assert [anchors.allocate(t) for t in ["Foo", "Foo", "Foo"]] == ["foo", "foo-1", "foo-2"]


def test_allocator_avoids_collision_with_literal_suffix():
    anchors = AnchorAllocator()
    assert anchors.allocate("Foo 1") == "foo-1"
    assert anchors.allocate("Foo") == "foo"
    assert anchors.allocate("Foo") == "foo-2"
