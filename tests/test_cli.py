from maze_rl.__main__ import main


def test_cli_trains_and_prints_summary(capsys):
    code = main(["--size", "7", "--episodes", "30", "--max-steps", "200",
                 "--seed", "1", "--show-maze", "--log-interval", "10"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Maze: 7x7" in out
    assert "Training summary:" in out
    assert "Episodes: 30" in out
    assert "S" in out and "G" in out


def test_cli_rejects_invalid_configuration(capsys):
    code = main(["--density", "1.5"])

    assert code == 2
    assert "Invalid configuration" in capsys.readouterr().err
