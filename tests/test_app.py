from datetime import datetime, timedelta
from unittest.mock import patch

from edustream.app import (
    COMMANDS, cmd_add_topic, cmd_delete_area, cmd_delete_resource, cmd_delete_topic, cmd_move,
    cmd_move_area, cmd_quiz, cmd_review, cmd_time, cmd_video_notes, cmd_watched, level_bar,
)
from edustream.store import (
    add_resource, create_area, create_topic, create_topics, get_area, get_topic, list_areas,
    list_topics, update_topic,
)


def _past(days):
    return datetime.now() - timedelta(days=days)


def test_level_bar_has_one_cell_per_level():
    assert level_bar(0).count("□") == 6
    assert level_bar(4).count("■") == 4
    assert level_bar(6).count("□") == 0


def test_every_menu_command_is_wired():
    assert {"review", "quiz", "due", "dashboard", "add-topic"} <= set(COMMANDS)


def test_cmd_add_topic(ready_db):
    area = create_area(ready_db, "Music")
    with patch("edustream.app.IntPrompt.ask", return_value=1), \
            patch("edustream.app.Prompt.ask", side_effect=["Scales", "major and minor"]):
        cmd_add_topic(ready_db)
    topics = list_topics(ready_db, area.id)
    assert [t.title for t in topics] == ["Scales"]
    assert topics[0].review_level == 0


def test_cmd_review_nothing_due(ready_db):
    with patch("edustream.app.Confirm.ask") as confirm:
        cmd_review(ready_db)
    confirm.assert_not_called()


def test_cmd_review_rates_due_topics(ready_db):
    area = create_area(ready_db, "Music")
    remembered = create_topic(ready_db, area.id, "Scales")
    forgotten = create_topic(ready_db, area.id, "Modes")
    update_topic(ready_db, remembered.id, review_level=2, next_review_at=_past(2))
    update_topic(ready_db, forgotten.id, review_level=2, next_review_at=_past(1))
    # most overdue first: Scales, then Modes
    with patch("edustream.app.Confirm.ask", side_effect=[True, False]):
        cmd_review(ready_db)
    assert get_topic(ready_db, remembered.id).review_level == 3
    assert get_topic(ready_db, forgotten.id).review_level == 1


def test_cmd_quiz_pass(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 5, 4]):
        cmd_quiz(ready_db)
    assert get_topic(ready_db, topic.id).review_level == 1


def test_cmd_quiz_fail(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    update_topic(ready_db, topic.id, review_level=3)
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 5, 3]):
        cmd_quiz(ready_db)
    assert get_topic(ready_db, topic.id).review_level == 2


def test_cmd_time(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 30]):
        cmd_time(ready_db)
    stored = get_topic(ready_db, topic.id)
    assert stored.time_spent == 1800
    assert stored.review_level == 0


def test_cmd_quiz_limits_correct_answers_to_question_count(ready_db):
    area = create_area(ready_db, "Music")
    create_topic(ready_db, area.id, "Scales")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 5, 5]) as ask:
        cmd_quiz(ready_db)
    assert ask.call_args.kwargs["choices"] == ["0", "1", "2", "3", "4", "5"]


def test_menu_lists_board_and_cleanup_commands():
    assert {
        "move", "move-area", "watched", "video-notes",
        "delete-topic", "delete-area", "delete-resource",
    } <= set(COMMANDS)


def test_cmd_watched_toggles(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    add_resource(ready_db, topic.id, "video", "Lesson", "https://example.com/v")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 1]):
        cmd_watched(ready_db)
    assert get_topic(ready_db, topic.id).resources[0].watched is True
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 1]):
        cmd_watched(ready_db)
    assert get_topic(ready_db, topic.id).resources[0].watched is False


def test_cmd_video_notes_only_offers_videos(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    add_resource(ready_db, topic.id, "book", "Theory book", "https://example.com/b")
    add_resource(ready_db, topic.id, "video", "Lesson", "https://example.com/v")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 1]), \
            patch("edustream.app.Prompt.ask", return_value="3:10 pentatonic"):
        cmd_video_notes(ready_db)
    resources = {r.type: r for r in get_topic(ready_db, topic.id).resources}
    assert resources["video"].video_notes == "3:10 pentatonic"
    assert resources["book"].video_notes == ""


def test_cmd_delete_resource_needs_confirmation(ready_db):
    area = create_area(ready_db, "Music")
    topic = create_topic(ready_db, area.id, "Scales")
    add_resource(ready_db, topic.id, "link", "Docs", "https://example.com")
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 1]), \
            patch("edustream.app.Confirm.ask", return_value=False):
        cmd_delete_resource(ready_db)
    assert len(get_topic(ready_db, topic.id).resources) == 1
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 1, 1]), \
            patch("edustream.app.Confirm.ask", return_value=True):
        cmd_delete_resource(ready_db)
    assert get_topic(ready_db, topic.id).resources == []


def test_cmd_move(ready_db):
    area = create_area(ready_db, "Music")
    create_topics(ready_db, area.id, [("Scales", ""), ("Chords", ""), ("Rhythm", "")])
    # area 1, topic 3, new position 1
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 3, 1]):
        cmd_move(ready_db)
    assert [t.title for t in list_topics(ready_db, area.id)] == ["Rhythm", "Scales", "Chords"]


def test_cmd_move_area(ready_db):
    create_area(ready_db, "Music")
    create_area(ready_db, "Art")
    with patch("edustream.app.IntPrompt.ask", side_effect=[2, 1]):
        cmd_move_area(ready_db)
    assert [a.name for a in list_areas(ready_db)] == ["Art", "Music"]


def test_cmd_delete_topic(ready_db):
    area = create_area(ready_db, "Music")
    keep, drop = create_topics(ready_db, area.id, [("Scales", ""), ("Chords", "")])
    with patch("edustream.app.IntPrompt.ask", side_effect=[1, 2]), \
            patch("edustream.app.Confirm.ask", return_value=True):
        cmd_delete_topic(ready_db)
    assert [t.id for t in list_topics(ready_db, area.id)] == [keep.id]


def test_cmd_delete_area(ready_db):
    area = create_area(ready_db, "Music")
    create_topic(ready_db, area.id, "Scales")
    with patch("edustream.app.IntPrompt.ask", return_value=1), \
            patch("edustream.app.Confirm.ask", return_value=True):
        cmd_delete_area(ready_db)
    assert get_area(ready_db, area.id) is None
    assert list_topics(ready_db) == []
