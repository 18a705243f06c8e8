import numpy as np
import pytest
from PIL import Image

from stipplify.cli import main


def _gradient(path, size=(40, 30)):
    W, H = size
    arr = np.zeros((H, W, 3), dtype=np.uint8)
    arr[...] = (np.arange(W) * 255 // (W - 1))[None, :, None]
    Image.fromarray(arr).save(path)


def test_cli_saves_a_stipple_image(tmp_path, capsys):
    src = tmp_path / "in.png"
    out = tmp_path / "out.png"
    _gradient(src)

    code = main([str(src), "--out", str(out), "--points", "25", "--iterations", "3", "--seed", "0"])

    assert code == 0
    assert "saved:" in capsys.readouterr().out
    with Image.open(out) as im:
        assert im.size == (40, 30)


def test_cli_kdtree_and_scale(tmp_path):
    src = tmp_path / "in.png"
    out = tmp_path / "out.png"
    _gradient(src)

    code = main(
        [str(src), "--out", str(out), "--points", "10", "--iterations", "1", "--index", "kdtree", "--scale", "2"]
    )

    assert code == 0
    with Image.open(out) as im:
        assert im.size == (80, 60)


def test_cli_missing_image_fails(tmp_path):
    assert main([str(tmp_path / "nope.png"), "--out", str(tmp_path / "out.png")]) == 1


def test_cli_rejects_non_positive_point_count(tmp_path):
    src = tmp_path / "in.png"
    _gradient(src)
    assert main([str(src), "--out", str(tmp_path / "out.png"), "--points", "0"]) == 1


def test_cli_help_describes_the_cold_index(capsys):
    with pytest.raises(SystemExit):
        main(["--help"])
    assert "kdtree ignores the previous answer" in " ".join(capsys.readouterr().out.split())
