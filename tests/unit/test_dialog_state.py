from src.components.dialog_state import DialogStateStore


def test_mode_follows_record():
    store = DialogStateStore()

    assert store.open("a").mode == "add"
    assert store.open("b", {"id": 1}).mode == "edit"
    assert store.get("b").backing_record == {"id": 1}


def test_state_exists_only_while_open():
    store = DialogStateStore()
    store.open("a")
    assert store.is_open("a")

    closed = store.close("a")
    assert closed is not None and closed.is_open is False
    assert store.get("a") is None
    assert store.close("a") is None


def test_dirty_marks_ignored_when_closed():
    store = DialogStateStore()
    assert store.mark_dirty("a") is False
    assert store.is_dirty("a") is False

    store.open("a")
    assert store.mark_dirty("a") is True
    assert store.is_dirty("a")
    assert store.has_unsaved_changes()

    store.mark_clean("a")
    assert not store.has_unsaved_changes()


def test_reopen_starts_clean():
    store = DialogStateStore()
    store.open("a")
    store.mark_dirty("a")

    store.open("a", {"id": 2})
    assert store.is_dirty("a") is False
    assert store.get("a").mode == "edit"


def test_top_is_most_recently_opened():
    store = DialogStateStore()
    assert store.top() is None

    store.open("a")
    store.open("b")
    assert store.top() == "b"
    assert store.open_dialogs() == ["a", "b"]

    store.close("b")
    assert store.top() == "a"
