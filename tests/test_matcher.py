import logging

import pytest

from handgesture.models.records import GestureMatch, GestureTemplate
from handgesture.services.matcher import GestureMatcher

from conftest import make_hand, open_palm, thumbs_up


def template(name, frames, id=None):
    return GestureTemplate(name=name, frames=frames, id=id)


def test_no_templates_no_match():
    assert GestureMatcher().match(thumbs_up(), []) is None


def test_picks_closest_template():
    library = [
        template("hello", [open_palm() for _ in range(30)]),
        template("thumbs_up", [thumbs_up(jitter=j % 3) for j in range(30)]),
    ]
    match = GestureMatcher().match(thumbs_up(wrist=(400.0, 120.0, 0.0), jitter=2.0), library)

    assert match.name == "thumbs_up"
    assert match.score == pytest.approx(1 - ((2.0 - 1.0) ** 2) / 50000)


def test_below_threshold_is_no_match_even_when_best():
    library = [template("thumbs_up", [thumbs_up()])]
    matcher = GestureMatcher()

    assert matcher.match(thumbs_up(jitter=160.0), library) is None  # 0.488
    assert matcher.match(thumbs_up(jitter=150.0), library).score == pytest.approx(0.55)


def test_threshold_applies_to_best_score():
    library = [template("thumbs_up", [thumbs_up()])]
    live = thumbs_up(jitter=100.0)  # 1 - 10000/50000 = 0.8
    assert GestureMatcher(threshold=0.79).match(live, library) is not None
    assert GestureMatcher(threshold=0.81).match(live, library) is None


def test_tie_keeps_first_template():
    frames = [thumbs_up()]
    library = [template("first", frames), template("second", list(frames))]
    assert GestureMatcher().match(thumbs_up(), library).name == "first"


def test_templates_without_frames_are_skipped():
    library = [template("empty", []), template("none", None), template("thumbs_up", [thumbs_up()])]
    assert GestureMatcher().match(thumbs_up(), library) == GestureMatch("thumbs_up", 1.0)


def test_only_empty_templates_is_no_match():
    assert GestureMatcher().match(thumbs_up(), [template("empty", [])]) is None


def test_malformed_template_is_skipped_and_logged(caplog):
    broken = template("broken", [make_hand(), make_hand()[:15]])
    library = [broken, template("thumbs_up", [thumbs_up()])]

    with caplog.at_level(logging.WARNING, logger="handgesture.services.matcher"):
        match = GestureMatcher().match(thumbs_up(), library)

    assert match.name == "thumbs_up"
    assert "broken" in caplog.text


def test_missing_live_hand_is_no_match():
    assert GestureMatcher().match(None, [template("thumbs_up", [thumbs_up()])]) is None


def test_score_all_reports_every_eligible_template_in_order():
    library = [template("hello", [open_palm()]), template("empty", []), template("thumbs_up", [thumbs_up()])]
    scores = GestureMatcher().score_all(thumbs_up(), library)
    assert [name for name, _ in scores] == ["hello", "thumbs_up"]
    assert scores[1][1] == 1.0


def test_averages_are_cached_per_template_identity():
    matcher = GestureMatcher()
    stored = template("thumbs_up", [thumbs_up()], id=7)
    matcher.match(thumbs_up(), [stored])
    assert len(matcher._average_cache) == 1

    # same identity and frame count, reference comes from the cache
    matcher.match(thumbs_up(), [stored])
    assert len(matcher._average_cache) == 1

    matcher.forget(keep_ids=[])
    assert matcher._average_cache == {}


def test_score_exactly_at_threshold_matches():
    library = [template("thumbs_up", [thumbs_up()])]
    live = thumbs_up()
    live[4][0] += 150.0  # 22500
    live[8][1] += 50.0   # 2500
    match = GestureMatcher().match(live, library)
    assert match is not None
    assert match.score == 0.5


@pytest.mark.parametrize("frames", [
    [thumbs_up(), 5],
    [thumbs_up(), "thumbs_up"],
    7,
    {"0": thumbs_up()},
], ids=["scalar-frame", "text-frame", "scalar-frames", "mapping-frames"])
def test_template_with_non_landmark_frames_is_skipped_and_logged(caplog, frames):
    library = [template("broken", frames, id="x"), template("thumbs_up", [thumbs_up()], id="y")]

    with caplog.at_level(logging.WARNING, logger="handgesture.services.matcher"):
        match = GestureMatcher().match(thumbs_up(), library)

    assert match == GestureMatch("thumbs_up", 1.0)
    assert "broken" in caplog.text


def test_template_of_partial_hands_is_skipped_and_logged(caplog):
    partial = template("partial", [thumbs_up()[:20]] * 3)

    with caplog.at_level(logging.WARNING, logger="handgesture.services.matcher"):
        scores = GestureMatcher().score_all(thumbs_up(), [partial, template("thumbs_up", [thumbs_up()])])

    assert scores == [("thumbs_up", 1.0)]
    assert "partial" in caplog.text
    assert "20 points" in caplog.text
