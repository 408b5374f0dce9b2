import pytest

from gridmon.models import FieldPosition, GameStatus, League, Snapshot

SPOT = FieldPosition(yard_line=40, down=2, distance=5)


@pytest.mark.parametrize("status", [GameStatus.SCHEDULED, GameStatus.HALFTIME, GameStatus.FINAL])
def test_field_position_dropped_unless_in_progress(make_game, status):
    game = make_game(status=status, possession="home", field_position=SPOT)

    assert game.field_position is None


def test_field_position_dropped_without_possession(make_game):
    game = make_game(possession=None, field_position=SPOT)

    assert game.field_position is None


def test_field_position_kept_for_live_game_with_possession(make_game):
    assert make_game(possession="away", field_position=SPOT).field_position is SPOT


def test_possession_may_come_without_field_position(make_game):
    # between plays ESPN has a team on offense but no usable down
    game = make_game(possession="home", field_position=None)

    assert game.possession == "home"
    assert game.field_position is None


def test_negative_scores_are_rejected(make_game):
    with pytest.raises(ValueError):
        make_game(home_score=-1)


def test_unknown_possession_is_rejected(make_game):
    with pytest.raises(ValueError):
        make_game(possession="neutral", yard_line=None)


def test_live_games_include_halftime(make_game):
    games = (
        make_game("1"),
        make_game("2", status=GameStatus.HALFTIME, possession=None),
        make_game("3", status=GameStatus.FINAL, possession=None),
    )

    live = Snapshot(league=League.NFL, games=games).live_games()

    assert [g.id for g in live] == ["1", "2"]
