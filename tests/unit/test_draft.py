"""Unit tests for the Draft buffer."""

from notionedit.editing.draft import Draft


def test_new_draft_is_clean():
    draft = Draft("hello")
    assert draft.get_text() == "hello"
    assert draft.baseline == "hello"
    assert not draft.is_dirty()


def test_set_text_makes_dirty():
    draft = Draft("hello")
    draft.set_text("hello world")
    assert draft.is_dirty()
    assert draft.baseline == "hello"


def test_reverting_text_is_clean():
    draft = Draft("hello")
    draft.set_text("hello world")
    draft.set_text("hello")
    assert not draft.is_dirty()


def test_mark_clean_adopts_text_and_is_idempotent():
    draft = Draft("hello")
    draft.set_text("bye")
    draft.mark_clean()
    draft.mark_clean()
    assert not draft.is_dirty()
    assert draft.baseline == "bye"


def test_reset_replaces_text_and_baseline():
    draft = Draft("hello")
    draft.set_text("local")
    draft.reset("remote")
    assert draft.get_text() == "remote"
    assert not draft.is_dirty()
