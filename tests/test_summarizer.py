from app.summarizer import NO_RESULTS, build_result, project_hit, summarize
from tests.conftest import make_hit


def test_zero_hits_renders_fixed_sentence():
    assert summarize([], 0) == NO_RESULTS == "未找到匹配的日志记录。"


def test_thousand_hits_render_fifty_entries_with_note():
    hits = [make_hit(f"2026-02-13T00:00:{i % 60:02d}Z", f"line {i}", "INFO")
            for i in range(1000)]
    text = summarize(hits, 1000)
    header, _, rest = text.partition("\n\n")
    assert header == "共找到 1000 条日志记录（以下展示最近 50 条）："
    blocks = rest.split("\n\n")
    assert len(blocks) == 50
    assert blocks[0].startswith("[1] ")
    assert blocks[-1].startswith("[50] ")
    assert "line 50" not in text


def test_no_truncation_note_at_or_below_cap():
    text = summarize([make_hit(message="only")], 50)
    assert text.startswith("共找到 50 条日志记录：\n\n")


def test_long_message_is_cut_to_limit_with_ellipsis():
    entry = project_hit(make_hit(message="a" * 600), 500)
    assert entry.message == "a" * 500 + "..."
    assert len(entry.message) == 503


def test_message_at_limit_is_untouched():
    entry = project_hit(make_hit(message="b" * 500), 500)
    assert entry.message == "b" * 500


def test_entry_layout():
    hit = make_hit("2026-02-13T11:59:00.000Z", "boom", "ERROR")
    text = summarize([hit], 1)
    assert text == (
        "共找到 1 条日志记录：\n\n"
        "[1] 时间: 2026-02-13T11:59:00.000Z | 内容: boom | 级别: ERROR")


def test_level_falls_back_to_log_level():
    entry = project_hit(make_hit(message="m", log_level="WARN"), 500)
    assert entry.level == "WARN"


def test_missing_fields_are_omitted():
    text = summarize([make_hit(message="no time no level"), {"_id": "bare"}], 2)
    blocks = text.split("\n\n")[1:]
    assert blocks[0] == "[1] 内容: no time no level"
    assert blocks[1] == "[2] "


def test_non_string_values_are_rendered_as_json():
    hit = {"fields": {"message": [{"nested": 1}], "level": [3]}}
    entry = project_hit(hit, 500)
    assert entry.level == "3"
    assert entry.message == '{"nested": 1}'


def test_null_and_boolean_values_keep_json_spelling():
    hit = {"fields": {"message": [None], "level": [True]}}
    entry = project_hit(hit, 500)
    assert entry.message == "null"
    assert entry.level == "true"


def test_build_result_keeps_order():
    hits = [make_hit(message=str(i)) for i in range(5)]
    result = build_result(hits, 5, max_entries=3)
    assert [entry.message for entry in result.entries] == ["0", "1", "2"]
    assert result.truncated
