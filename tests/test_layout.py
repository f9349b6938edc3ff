import pytest

from wordfall.text.layout import BACKSPACE
from wordfall.text.layout import ENTER
from wordfall.text.layout import SPACE
from wordfall.text.layout import TAB
from wordfall.text.layout import KeyEvent
from wordfall.text.layout import KeyKind
from wordfall.text.layout import LayoutState
from wordfall.text.layout import Region
from wordfall.text.layout import Word
from wordfall.text.layout import append_text
from wordfall.text.layout import font_size_for_height
from wordfall.text.layout import key_for_char
from wordfall.text.layout import region_bounds
from wordfall.text.layout import replace_text


def fixed_width(text):
    return 10 * len(text)


def make_region(width=400, height=100, measure=fixed_width, **kwargs):
    return Region(0, 0, width, height, measure=measure, line_height=30, space_width=10, **kwargs)


def texts(region):
    return [word.text for word in region.words]


def test_word_geometry_is_derived_from_origin_and_size():
    word = Word.create("hello", 12, 40, 30, fixed_width)
    assert word.width == 50
    assert word.x_max == word.origin_x + word.width == 62
    assert word.y_max == word.origin_y + word.height == 70


def test_word_from_empty_text_fails_fast():
    with pytest.raises(ValueError):
        Word.create("", 0, 0, 30, fixed_width)


def test_region_defaults_follow_width():
    region = make_region()
    assert region.x_max == 400
    assert region.y_max == 100
    assert region.overflow_allowance == 20
    assert region.tab_width == 50
    assert region.word_height == 30
    assert (region.cursor_x, region.cursor_y) == (0, 0)
    assert region.state is LayoutState.EDITING


def test_space_commits_word_and_advances_cursor():
    region = append_text(make_region(), "hi ")
    assert region.words == [Word(text="hi", origin_x=0, origin_y=0, width=20, height=30)]
    assert region.edit_buffer == ""
    assert region.cursor_x == 10 + fixed_width("hi")
    assert region.cursor_y == 0


def test_word_as_wide_as_region_is_force_committed():
    region = make_region(measure=lambda text: 450 if text == "W" else fixed_width(text))
    region.handle_key(KeyEvent.printable("W"))
    assert texts(region) == ["W"]
    assert region.words[0].origin_x == 0
    assert region.words[0].origin_y == 0
    assert region.edit_buffer == ""
    assert (region.cursor_x, region.cursor_y) == (0, 30)
    assert region.accepting_input


def test_long_word_commits_when_buffer_reaches_full_width():
    region = append_text(make_region(), "x" * 42)
    assert texts(region) == ["x" * 42]
    assert region.cursor_y == 30


def test_full_width_word_without_room_disables_input():
    region = make_region(height=20, measure=lambda text: 450 if text == "W" else fixed_width(text))
    region.handle_key(KeyEvent.printable("W"))
    assert texts(region) == ["W"]
    assert not region.accepting_input
    assert region.state is LayoutState.REGION_FULL


def test_backspace_on_empty_buffer_rewinds_last_word():
    region = append_text(make_region(), "hi there ")
    assert texts(region) == ["hi", "there"]

    region.handle_key(BACKSPACE)
    assert texts(region) == ["hi"]
    assert region.edit_buffer == "there"
    assert (region.cursor_x, region.cursor_y) == (30, 0)
    assert region.accepting_input


def test_backspace_with_text_only_trims_buffer():
    region = append_text(make_region(), "hi th")
    region.handle_key(BACKSPACE)
    assert region.edit_buffer == "t"
    assert texts(region) == ["hi"]


def test_backspace_on_empty_region_is_harmless():
    region = make_region()
    region.handle_key(BACKSPACE)
    assert region.words == []
    assert region.edit_buffer == ""
    assert region.accepting_input


def test_rewind_rejects_invalid_calls():
    region = make_region()
    with pytest.raises(RuntimeError):
        region.rewind()

    append_text(region, "hi x")
    with pytest.raises(RuntimeError):
        region.rewind()


def test_rewind_then_retype_recommits_same_word():
    region = append_text(make_region(), "hi there ")
    region.handle_key(BACKSPACE)
    region.handle_key(SPACE)
    assert texts(region) == ["hi", "there"]
    assert region.words[1].origin_x == 30


def test_right_margin_overflow_moves_word_to_next_line():
    region = append_text(make_region(width=100), "aaaaa bbbbb")
    assert texts(region) == ["aaaaa"]
    assert region.edit_buffer == "bbbbb"
    assert (region.cursor_x, region.cursor_y) == (0, 30)

    region.handle_key(SPACE)
    assert region.words[-1].origin_x == 0
    assert region.words[-1].origin_y == 30


def test_right_margin_overflow_on_last_line_commits_and_disables():
    region = append_text(make_region(width=100, height=50), "aaaaa bbbbb ccccc")
    assert texts(region) == ["aaaaa", "bbbbb", "ccccc"]
    last = region.words[-1]
    assert (last.origin_x, last.origin_y) == (60, 30)
    assert region.edit_buffer == ""
    assert not region.accepting_input

    append_text(region, "dd ")
    assert texts(region) == ["aaaaa", "bbbbb", "ccccc"]
    assert region.edit_buffer == ""

    region.handle_key(BACKSPACE)
    assert region.accepting_input
    assert region.edit_buffer == "ccccc"
    assert (region.cursor_x, region.cursor_y) == (60, 30)


def test_space_at_right_edge_wraps_to_new_line():
    region = append_text(make_region(width=100), "aaaaaaaaa ")
    assert region.cursor_x == 100
    region.handle_key(SPACE)
    assert (region.cursor_x, region.cursor_y) == (0, 30)


def test_space_without_room_disables_input():
    region = append_text(make_region(width=100, height=20), "aaaaaaaaa  ")
    assert not region.accepting_input
    assert texts(region) == ["aaaaaaaaa"]


def test_tab_advances_by_tab_width():
    region = make_region()
    region.handle_key(TAB)
    assert region.cursor_x == 50
    region.handle_key(KeyEvent.printable("a"))
    region.handle_key(TAB)
    assert region.words[0].origin_x == 50
    assert region.cursor_x == 110


def test_enter_starts_new_line():
    region = append_text(make_region(), "a\nb")
    assert texts(region) == ["a"]
    assert (region.cursor_x, region.cursor_y) == (0, 30)


def test_enter_on_last_of_three_lines_disables_until_backspace():
    region = append_text(make_region(width=100, height=80), "a\nb\n" + "c" * 10)
    assert region.cursor_y == 60

    region.handle_key(ENTER)
    assert not region.accepting_input
    assert texts(region) == ["a", "b", "c" * 10]
    assert region.words[-1].x_max == region.x_max

    region.handle_key(BACKSPACE)
    assert region.accepting_input


def test_enter_on_last_line_with_room_advances_in_place():
    region = append_text(make_region(height=80), "a\nb\n")
    assert region.cursor_y == 60
    region.handle_key(ENTER)
    assert region.accepting_input
    assert (region.cursor_x, region.cursor_y) == (10, 60)


def test_disabled_region_ignores_everything_but_backspace():
    region = append_text(make_region(width=100, height=20), "aaaaaaaaa  ")
    cursor = (region.cursor_x, region.cursor_y)
    for event in (KeyEvent.printable("z"), SPACE, TAB, ENTER):
        region.handle_key(event)
        assert not region.accepting_input
    assert (region.cursor_x, region.cursor_y) == cursor
    assert region.edit_buffer == ""


def test_no_characters_lost_while_accepting_input():
    text = "the quick brown fox\tjumps over\nthe lazy dog " * 5 + "supercalifragilisticexpialidocious"
    region = append_text(make_region(width=200, height=3000), text)
    assert region.accepting_input
    typed = "".join(word.text for word in region.words) + region.edit_buffer
    assert typed == "".join(text.split())


def test_cursor_only_moves_down_in_line_steps():
    region = make_region(width=120, height=600)
    seen = [region.cursor_y]
    for char in "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod":
        region.handle_key(key_for_char(char))
        seen.append(region.cursor_y)
    assert seen == sorted(seen)
    assert all(y % region.line_height == 0 for y in seen)
    assert seen[-1] > 0


def test_commit_count_matches_words_and_rewind_pops_one():
    region = append_text(make_region(), "one two three ")
    assert len(region.words) == 3
    region.handle_key(BACKSPACE)
    assert len(region.words) == 2
    assert region.edit_buffer == "three"


def test_idle_ticks_reset_on_keystroke():
    region = make_region()
    assert region.tick() == 1
    assert region.tick() == 2
    region.handle_key(KeyEvent.printable("a"))
    assert region.idle_ticks == 0
    region.handle_key(BACKSPACE)
    assert region.idle_ticks == 0


def test_snapshot_is_not_affected_by_later_rewind():
    region = append_text(make_region(), "hi there ")
    snapshot = region.snapshot()
    region.handle_key(BACKSPACE)
    assert [word.text for word in snapshot] == ["hi", "there"]


def test_key_for_char_classifies_characters():
    assert key_for_char(" ") == SPACE
    assert key_for_char("\t") == TAB
    assert key_for_char("\n") == ENTER
    assert key_for_char("\b") == BACKSPACE
    assert key_for_char("q") == KeyEvent(kind=KeyKind.PRINTABLE, char="q")
    assert key_for_char("\x07") is None


def test_append_text_handles_backspace_characters():
    region = append_text(make_region(), "hello wq\borld")
    assert texts(region) == ["hello"]
    assert region.edit_buffer == "world"


def test_replace_text_starts_from_empty_region():
    region = append_text(make_region(), "old words ")
    replaced = replace_text(region, "new")
    assert replaced is not region
    assert replaced.words == []
    assert replaced.edit_buffer == "new"
    assert (replaced.x_max, replaced.y_max) == (region.x_max, region.y_max)
    assert texts(region) == ["old", "words"]


def test_from_font_derives_metrics():
    region = Region.from_font(10, 20, 400, 300, fixed_width, 20)
    assert region.line_height == 25
    assert region.space_width == pytest.approx(6.8)
    assert region.tab_width == pytest.approx(34)
    assert region.overflow_allowance == 20
    assert region.word_height == 25
    assert (region.cursor_x, region.cursor_y) == (10, 20)


def test_region_bounds_centers_region():
    assert region_bounds(1000, 800) == (187, 150, 625, 500)


def test_font_size_is_clamped():
    assert font_size_for_height(800) == 17
    assert font_size_for_height(300) == 14
    assert font_size_for_height(2000) == 24


def test_first_character_at_right_margin_wraps_to_next_line():
    region = append_text(make_region(), "a" * 39 + " ")
    assert region.cursor_x == region.x_max

    region.handle_key(KeyEvent.printable("b"))
    assert region.edit_buffer == "b"
    assert (region.cursor_x, region.cursor_y) == (0, 30)

    region.handle_key(SPACE)
    assert region.words[-1].origin_x < region.x_max
    assert (region.words[-1].origin_x, region.words[-1].origin_y) == (0, 30)


def test_first_character_at_right_margin_of_last_line_fills_region():
    region = append_text(make_region(height=20), "a" * 39 + " b")
    assert texts(region) == ["a" * 39, "b"]
    assert region.words[-1].origin_x == 400
    assert not region.accepting_input


def test_tab_past_right_edge_wraps_to_new_line():
    region = append_text(make_region(width=100), "aaaaaa\t")
    assert texts(region) == ["aaaaaa"]
    assert (region.cursor_x, region.cursor_y) == (0, 30)


def test_tab_past_right_edge_on_last_line_disables_input():
    region = append_text(make_region(width=100, height=20), "aaaaaa\t")
    assert texts(region) == ["aaaaaa"]
    assert not region.accepting_input
    assert region.cursor_y == 0


def test_enter_on_last_line_with_pending_word_advances_in_place():
    region = append_text(make_region(height=80), "a\nb\ncc")
    region.handle_key(ENTER)
    assert region.accepting_input
    assert texts(region) == ["a", "b", "cc"]
    assert (region.cursor_x, region.cursor_y) == (30, 60)


def test_enter_advance_stays_within_overflow_allowance():
    region = Region(0, 0, 100, 20, measure=fixed_width, line_height=30, space_width=40)
    for expected in (40, 80, 105):
        region.handle_key(ENTER)
        assert region.cursor_x == expected
    assert region.accepting_input

    region.handle_key(ENTER)
    assert not region.accepting_input
    assert region.cursor_x == 105
