"""Tests for the operator working set."""

from conftest import make_message

from replydesk.session.working_set import WorkingSet


def _ids(working_set: WorkingSet) -> list[str]:
    return working_set.ids()


class TestMerge:
    """Tests for merging poll batches."""

    def test_merge_appends_new_messages_in_batch_order(self) -> None:
        """New IDs go to the end in the order they arrived."""
        ws = WorkingSet([make_message("1"), make_message("2")])

        added = ws.merge([make_message("3"), make_message("4")])

        assert added == 2
        assert _ids(ws) == ["1", "2", "3", "4"]

    def test_merge_with_itself_is_identity(self) -> None:
        """merge(S, S) == S."""
        messages = [make_message("1"), make_message("2"), make_message("3")]
        ws = WorkingSet(messages)

        added = ws.merge(messages)

        assert added == 0
        assert ws.messages == messages

    def test_merge_keeps_position_and_takes_latest_content(self) -> None:
        """A re-seen ID stays where it was but carries the new content."""
        ws = WorkingSet([make_message("1"), make_message("2"), make_message("3")])

        ws.merge([make_message("2", reply="Updated"), make_message("4")])

        assert _ids(ws) == ["1", "2", "3", "4"]
        assert ws.get("2").reply == "Updated"

    def test_duplicates_inside_one_batch_collapse(self) -> None:
        """A batch repeating an ID yields one entry with the last content."""
        ws = WorkingSet()

        added = ws.merge([make_message("1", reply="a"), make_message("1", reply="b")])

        assert added == 1
        assert len(ws) == 1
        assert ws.get("1").reply == "b"

    def test_replace_all_resets_contents(self) -> None:
        """The initial seed replaces whatever was there."""
        ws = WorkingSet([make_message("1")])

        ws.replace_all([make_message("5"), make_message("6")])

        assert _ids(ws) == ["5", "6"]


class TestRemoveRestore:
    """Tests for optimistic removal and rollback."""

    def test_remove_unknown_returns_none(self) -> None:
        """Removing an absent ID changes nothing."""
        ws = WorkingSet([make_message("1")])

        assert ws.remove("missing") is None
        assert _ids(ws) == ["1"]

    def test_restore_without_interim_changes_is_exact(self) -> None:
        """Rollback returns the set to exactly its previous state."""
        messages = [make_message("1"), make_message("2"), make_message("3")]
        ws = WorkingSet(messages)

        removal = ws.remove("2")
        assert _ids(ws) == ["1", "3"]
        position = ws.restore(removal)

        assert position == 1
        assert ws.messages == messages

    def test_restore_after_poll_appends_keeps_relative_order(self) -> None:
        """Messages merged in meanwhile do not displace the restored one."""
        ws = WorkingSet([make_message("1"), make_message("2")])

        removal = ws.remove("1")
        ws.merge([make_message("9")])
        ws.restore(removal)

        assert _ids(ws) == ["1", "2", "9"]

    def test_restore_when_predecessor_was_removed(self) -> None:
        """If earlier neighbours are gone it anchors on the nearest survivor."""
        ws = WorkingSet([make_message("1"), make_message("2"), make_message("3"), make_message("4")])

        removal = ws.remove("3")
        ws.remove("2")
        ws.restore(removal)

        assert _ids(ws) == ["1", "3", "4"]

    def test_restore_goes_to_front_when_no_predecessor_survives(self) -> None:
        """With every predecessor gone it goes first."""
        ws = WorkingSet([make_message("1"), make_message("2"), make_message("3")])

        removal = ws.remove("2")
        ws.remove("1")
        ws.restore(removal)

        assert _ids(ws) == ["2", "3"]

    def test_restore_is_idempotent(self) -> None:
        """Restoring twice never duplicates an ID."""
        ws = WorkingSet([make_message("1"), make_message("2")])

        removal = ws.remove("2")
        ws.restore(removal)
        ws.restore(removal)

        assert _ids(ws) == ["1", "2"]


class TestUpdateReply:
    """Tests for draft updates."""

    def test_update_reply_replaces_draft_in_place(self) -> None:
        ws = WorkingSet([make_message("1"), make_message("2")])

        assert ws.update_reply("2", "New draft") is True
        assert ws.get("2").reply == "New draft"
        assert _ids(ws) == ["1", "2"]

    def test_update_reply_unknown_id(self) -> None:
        ws = WorkingSet([make_message("1")])

        assert ws.update_reply("missing", "x") is False
