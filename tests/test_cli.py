# MIT License (see LICENSE)
import logging

import pytest
from matplotlib import image as mpimg
from magpen.cli import build_parser, main
from magpen.config import SimulationConfig
from magpen.io import save_setup
from magpen.logging_config import setup_logging
from magpen.types import Magnet


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("magpen")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_trace_prints_final_position(capsys):
    rc = main(["trace", "--x", "0.05", "--y", "0.02", "--duration", "0.2",
               "--micro-step", "1e-3", "--every", "50"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "final (" in out
    assert "nearest magnet" in out


def test_trace_outside_tether_fails(capsys):
    rc = main(["trace", "--x", "1.0", "--duration", "0.1"])
    assert rc == 2
    assert "tether length" in capsys.readouterr().out


def test_invalid_override_fails():
    assert main(["trace", "--micro-step", "0", "--duration", "0.1"]) == 2


def test_basins_writes_image(tmp_path):
    out = tmp_path / "b.png"
    rc = main(["basins", "--width", "3", "--height", "2", "--spacing", "0.01",
               "--settle", "0.1", "--micro-step", "1e-3", "-o", str(out)])
    assert rc == 0
    assert mpimg.imread(str(out)).shape[:2] == (2, 3)


def test_basins_with_setup_file(tmp_path):
    setup = tmp_path / "setup.json"
    save_setup(str(setup), SimulationConfig(micro_step=1e-3),
               [Magnet((0.03, 0.0, 0.04)), Magnet((-0.03, 0.0, 0.04))])
    out = tmp_path / "two.png"
    rc = main(["basins", "--setup", str(setup), "--width", "2", "--height", "2",
               "--spacing", "0.02", "--settle", "0.1", "-o", str(out)])
    assert rc == 0
    assert out.exists()

    # Palette shorter than the magnet set
    rc = main(["basins", "--setup", str(setup), "--width", "2", "--height", "2",
               "--spacing", "0.02", "--settle", "0.1", "--palette", "red", "-o", str(out)])
    assert rc == 2


def test_parser_defaults():
    a = build_parser().parse_args(["basins"])
    assert a.width == 400 and a.height == 400
    assert a.settle == 30.0
    assert a.spacing is None
    assert a.palette == ["red", "yellow", "blue"]


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging(logging.INFO)
    setup_logging(logging.DEBUG, str(log_file))
    logger = logging.getLogger("magpen")
    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG

    logging.getLogger("magpen.batch").info("hello")
    for h in logger.handlers:
        h.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
